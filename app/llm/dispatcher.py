"""
Provider dispatcher: routes one generation request to one backend.

Selection precedence:
  1. No backend configured          -> NoProviderConfiguredError
  2. Explicit hint                  -> that backend, or ProviderUnavailableError
  3. auto + model family substring  -> the matching backend, or ProviderUnavailableError
  4. auto + unknown model           -> anthropic if enabled, else openai

A request is sent to exactly one backend, once. Backend exceptions are wrapped
in UpstreamFailureError; cancellation propagates unchanged.
"""
import asyncio
import logging
from collections.abc import Mapping

from app.config import ProviderProfile
from app.core.exceptions import (
    InvalidRequestError,
    NoProviderConfiguredError,
    ProviderUnavailableError,
    UpstreamFailureError,
)
from app.providers.base import (
    BaseProvider,
    GenerationRequest,
    GenerationResult,
    ProviderCall,
    ProviderHint,
    ProviderKind,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.7

MODEL_FAMILIES: dict[ProviderKind, tuple[str, ...]] = {
    ProviderKind.ANTHROPIC: ("claude", "anthropic"),
    ProviderKind.OPENAI: ("gpt", "openai"),
}


def infer_provider(model: str) -> ProviderKind | None:
    """Infer provider from model name."""
    for kind, fragments in MODEL_FAMILIES.items():
        if any(fragment in model for fragment in fragments):
            return kind
    return None


def select_provider(
    hint: ProviderHint,
    model: str,
    profile: ProviderProfile,
) -> ProviderKind:
    hint = ProviderHint(hint)
    enabled = profile.enabled_kinds()
    if not enabled:
        raise NoProviderConfiguredError()

    if hint is not ProviderHint.AUTO:
        kind = ProviderKind(hint.value)
    else:
        kind = infer_provider(model)
        if kind is None:
            # Fallback order follows ProviderKind declaration: anthropic first
            return enabled[0]

    if kind not in enabled:
        raise ProviderUnavailableError(kind.value)
    return kind


def resolve_call(request: GenerationRequest, default_model: str) -> ProviderCall:
    """Validate the request and fill omitted fields with defaults."""
    if not request.prompt or not request.prompt.strip():
        raise InvalidRequestError("prompt must not be empty")

    model = default_model if request.model is None else request.model
    if not model:
        raise InvalidRequestError("model must not be empty")

    max_tokens = DEFAULT_MAX_TOKENS if request.max_tokens is None else request.max_tokens
    if max_tokens <= 0:
        raise InvalidRequestError(f"max_tokens must be positive, got {max_tokens}")

    temperature = DEFAULT_TEMPERATURE if request.temperature is None else request.temperature
    if not 0.0 <= temperature <= 1.0:
        raise InvalidRequestError(f"temperature must be within [0, 1], got {temperature}")

    return ProviderCall(
        model=model,
        prompt=request.prompt,
        max_tokens=max_tokens,
        temperature=float(temperature),
        system_prompt=request.system_prompt or None,
    )


class ProviderDispatcher:
    def __init__(
        self,
        profile: ProviderProfile,
        providers: Mapping[ProviderKind, BaseProvider],
    ) -> None:
        self._profile = profile
        self._providers = dict(providers)

    @property
    def profile(self) -> ProviderProfile:
        return self._profile

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        model = self._profile.default_model if request.model is None else request.model
        kind = select_provider(request.provider_hint, model, self._profile)
        call = resolve_call(request, self._profile.default_model)

        provider = self._providers.get(kind)
        if provider is None:
            raise ProviderUnavailableError(kind.value)

        logger.info(
            "Generating LLM response",
            extra={"provider": kind.value, "model": call.model, "prompt_length": len(call.prompt)},
        )
        try:
            result = await provider.invoke(call)
        except asyncio.CancelledError:
            logger.info("LLM generation cancelled", extra={"provider": kind.value, "model": call.model})
            raise
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            logger.warning(
                "LLM generation failed",
                extra={"provider": kind.value, "model": call.model, "error": reason},
            )
            raise UpstreamFailureError(kind.value, reason) from exc

        logger.info(
            "LLM response generated",
            extra={"provider": result.provider_used.value, "usage": dict(result.usage)},
        )
        return result
