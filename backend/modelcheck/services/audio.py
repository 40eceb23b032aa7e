from __future__ import annotations

import io
import wave


def silent_wav(duration_ms: int = 100, sample_rate: int = 16000) -> bytes:
    """A silent mono 16-bit PCM WAV clip, the smallest input transcription accepts."""
    frames = sample_rate * duration_ms // 1000
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as writer:
        writer.setnchannels(1)
        writer.setsampwidth(2)
        writer.setframerate(sample_rate)
        writer.writeframes(b"\x00\x00" * frames)
    return buffer.getvalue()
