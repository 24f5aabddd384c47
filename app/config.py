from dataclasses import dataclass, field

from pydantic_settings import BaseSettings

from app.providers.base import ProviderKind


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    environment: str = "development"
    version: str = "1.0.0"

    anthropic_api_key: str = ""
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    anthropic_version: str = "2023-06-01"
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"

    default_llm_model: str = "claude-3-sonnet-20240229"
    provider_timeout_seconds: float = 120.0

    # Static bearer token accepted only when environment == "development".
    server_token: str = ""
    secret_key: str = "change-me-to-a-random-secret-key"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    allowed_origins: list[str] = ["http://localhost:5678"]

    log_level: str = "INFO"
    log_json: bool = True


@dataclass(frozen=True)
class BackendProfile:
    kind: ProviderKind
    api_key: str = field(default="", repr=False)
    base_url: str = ""
    timeout: float = 120.0
    api_version: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class ProviderProfile:
    """Process-wide backend configuration, built once at startup and read-only after."""
    anthropic: BackendProfile
    openai: BackendProfile
    default_model: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderProfile":
        return cls(
            anthropic=BackendProfile(
                kind=ProviderKind.ANTHROPIC,
                api_key=settings.anthropic_api_key,
                base_url=settings.anthropic_base_url,
                timeout=settings.provider_timeout_seconds,
                api_version=settings.anthropic_version,
            ),
            openai=BackendProfile(
                kind=ProviderKind.OPENAI,
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                timeout=settings.provider_timeout_seconds,
            ),
            default_model=settings.default_llm_model,
        )

    def backend(self, kind: ProviderKind) -> BackendProfile:
        if kind is ProviderKind.ANTHROPIC:
            return self.anthropic
        return self.openai

    def is_enabled(self, kind: ProviderKind) -> bool:
        return self.backend(kind).enabled

    def enabled_kinds(self) -> list[ProviderKind]:
        return [kind for kind in ProviderKind if self.is_enabled(kind)]


settings = Settings()
