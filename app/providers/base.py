import enum
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class ProviderKind(str, enum.Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


class ProviderHint(str, enum.Enum):
    AUTO = "auto"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


@dataclass(frozen=True)
class GenerationRequest:
    """A caller's generation request. ``None`` fields were omitted by the caller."""
    prompt: str
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    system_prompt: str | None = None
    provider_hint: ProviderHint = ProviderHint.AUTO


@dataclass(frozen=True)
class ProviderCall:
    """Fully resolved parameters for one backend invocation."""
    model: str
    prompt: str
    max_tokens: int
    temperature: float
    system_prompt: str | None = None


@dataclass(frozen=True)
class GenerationResult:
    """Standardized response from any AI provider."""
    content: str
    model_used: str
    provider_used: ProviderKind
    usage: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "model_used": self.model_used,
            "usage": dict(self.usage),
            "provider_used": self.provider_used.value,
        }


class BaseProvider(ABC):
    """Abstract interface for AI providers."""

    @property
    @abstractmethod
    def kind(self) -> ProviderKind:
        ...

    @abstractmethod
    async def invoke(self, call: ProviderCall) -> GenerationResult:
        """
        Call the provider and return a standardized response.
        Business logic NEVER sees raw provider details.
        """
        ...

    async def close(self) -> None:
        """Cleanup resources (e.g., httpx client)."""
        pass
