from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from modelcheck.models.enums import Provider


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "modelcheck API"
    app_env: str = "development"
    api_prefix: str = "/v1"
    frontend_origin: str = "http://localhost:3000"
    frontend_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    sentry_dsn: str = ""
    log_level: str = "INFO"

    redis_url: str = "redis://localhost:6379/0"

    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""
    openrouter_api_key: str = ""

    openai_base_url: str = "https://api.openai.com/v1"
    openai_realtime_url: str = "wss://api.openai.com/v1/realtime"
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    anthropic_version: str = "2023-06-01"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    catalog_cache_backend: str = "memory"
    catalog_cache_seconds: int = Field(default=3600, ge=0)
    discovery_timeout_seconds: float = 15.0
    discovery_page_size: int = Field(default=100, ge=1, le=1000)

    validation_concurrency: int = Field(default=3, ge=1, le=16)
    probe_timeout_seconds: float = 30.0
    realtime_handshake_timeout_seconds: float = 10.0
    realtime_probe_timeout_seconds: float = 15.0
    # One cheap model per provider for quick sweeps; JSON object in the environment.
    quick_test_models: dict[str, str] = Field(
        default_factory=lambda: {
            "openai": "gpt-4o-mini",
            "anthropic": "claude-3-5-haiku-20241022",
            "gemini": "gemini-2.0-flash",
            "openrouter": "openai/gpt-4o-mini",
        }
    )

    @property
    def api_keys(self) -> dict[Provider, str]:
        keys = {
            Provider.OPENAI: self.openai_api_key,
            Provider.ANTHROPIC: self.anthropic_api_key,
            Provider.GEMINI: self.gemini_api_key,
            Provider.OPENROUTER: self.openrouter_api_key,
        }
        return {provider: key.strip() for provider, key in keys.items() if key and key.strip()}

    @property
    def quick_models(self) -> dict[Provider, str]:
        valid = {provider.value for provider in Provider}
        return {
            Provider(name): model
            for name, model in self.quick_test_models.items()
            if name in valid and model
        }

    @property
    def cors_origins(self) -> list[str]:
        origins: list[str] = []
        if self.frontend_origin:
            origins.append(self.frontend_origin.strip())
        if self.frontend_origins:
            origins.extend(
                [origin.strip() for origin in self.frontend_origins.split(",") if origin.strip()]
            )

        deduped: list[str] = []
        seen: set[str] = set()
        for origin in origins:
            if origin in seen:
                continue
            seen.add(origin)
            deduped.append(origin)
        return deduped


@lru_cache
def get_settings() -> Settings:
    return Settings()
