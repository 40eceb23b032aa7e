from enum import Enum


class Provider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OPENROUTER = "openrouter"

    @property
    def label(self) -> str:
        return _PROVIDER_LABELS[self]


_PROVIDER_LABELS = {
    Provider.OPENAI: "OpenAI",
    Provider.ANTHROPIC: "Anthropic",
    Provider.GEMINI: "Gemini",
    Provider.OPENROUTER: "OpenRouter",
}


class ModelType(str, Enum):
    CHAT = "chat"
    RESPONSES = "responses"
    IMAGE = "image"
    EMBEDDING = "embedding"
    AUDIO = "audio"
    TTS = "tts"
    REALTIME = "realtime"
    UNKNOWN = "unknown"


class Modality(str, Enum):
    CHAT = "chat"
    RESPONSES = "responses"
    IMAGE = "image"
    EMBEDDING = "embedding"
    AUDIO = "audio"
    TTS = "tts"
    REALTIME = "realtime"

    @classmethod
    def from_type(cls, value: str | None) -> "Modality":
        """Map a loosely-typed model type (as sent by callers or reported by
        discovery) to the modality a probe exercises. Unrecognised values fall
        back to chat, which every provider supports."""
        key = (value or "").strip().lower()
        try:
            return cls(key)
        except ValueError:
            return _MODALITY_ALIASES.get(key, cls.CHAT)


_MODALITY_ALIASES = {
    "text": Modality.CHAT,
    "chat-completion": Modality.CHAT,
    "unknown": Modality.CHAT,
    "response": Modality.RESPONSES,
    "stt": Modality.AUDIO,
    "transcription": Modality.AUDIO,
    "speech": Modality.TTS,
}


class TestStatus(str, Enum):
    __test__ = False

    SUCCESS = "success"
    FAILED = "failed"
    UNTESTED = "untested"
    SKIPPED = "skipped"


class TestMode(str, Enum):
    __test__ = False

    QUICK = "quick"
    FULL = "full"
    INDIVIDUAL = "individual"
