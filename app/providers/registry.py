"""Provider registry.

One provider per enabled backend, built from the ProviderProfile at startup.
"""
import httpx

from app.config import ProviderProfile
from app.providers.anthropic import AnthropicProvider
from app.providers.base import BaseProvider, ProviderKind
from app.providers.openai import OpenAIProvider

_PROVIDER_CLASSES: dict[ProviderKind, type[AnthropicProvider] | type[OpenAIProvider]] = {
    ProviderKind.ANTHROPIC: AnthropicProvider,
    ProviderKind.OPENAI: OpenAIProvider,
}


def build_providers(
    profile: ProviderProfile,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[ProviderKind, BaseProvider]:
    """Create a provider for every backend that has a credential configured."""
    providers: dict[ProviderKind, BaseProvider] = {}
    for kind in profile.enabled_kinds():
        provider_cls = _PROVIDER_CLASSES[kind]
        providers[kind] = provider_cls(profile.backend(kind), transport=transport)
    return providers


async def close_providers(providers: dict[ProviderKind, BaseProvider]) -> None:
    for provider in providers.values():
        await provider.close()
    providers.clear()
