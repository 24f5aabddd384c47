"""
Test fixtures: in-process fake backends via httpx.MockTransport.
No network access or real provider credentials required.
"""
import json
from typing import Any

import httpx
import pytest
import pytest_asyncio

from app.config import BackendProfile, ProviderProfile
from app.llm.dispatcher import ProviderDispatcher
from app.providers.base import ProviderKind
from app.providers.registry import build_providers, close_providers

DEFAULT_MODEL = "claude-3-sonnet-20240229"


def make_profile(
    anthropic: bool = True,
    openai: bool = True,
    default_model: str = DEFAULT_MODEL,
) -> ProviderProfile:
    return ProviderProfile(
        anthropic=BackendProfile(
            kind=ProviderKind.ANTHROPIC,
            api_key="test-anthropic-key" if anthropic else "",
            base_url="https://anthropic.test/v1",
            timeout=5.0,
            api_version="2023-06-01",
        ),
        openai=BackendProfile(
            kind=ProviderKind.OPENAI,
            api_key="test-openai-key" if openai else "",
            base_url="https://openai.test/v1",
            timeout=5.0,
        ),
        default_model=default_model,
    )


class FakeBackends:
    """Records every outbound request and answers like the real APIs."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.anthropic_text = "anthropic says hi"
        self.openai_text: str | None = "openai says hi"
        self.status_code = 200

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]

    def calls_to(self, host: str) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.url.host == host]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "upstream exploded"}})
        if request.url.host == "anthropic.test":
            return httpx.Response(
                200,
                json={
                    "id": "msg_1",
                    "type": "message",
                    "content": [{"type": "text", "text": self.anthropic_text}],
                    "usage": {"input_tokens": 12, "output_tokens": 7},
                },
            )
        return httpx.Response(
            200,
            json={
                "id": "chatcmpl-1",
                "choices": [{"index": 0, "message": {"role": "assistant", "content": self.openai_text}}],
                "usage": {"prompt_tokens": 9, "completion_tokens": 4, "total_tokens": 13},
            },
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def backends() -> FakeBackends:
    return FakeBackends()


@pytest_asyncio.fixture
async def dispatcher_factory(backends: FakeBackends):
    built: list[dict[ProviderKind, Any]] = []

    def _make(anthropic: bool = True, openai: bool = True, default_model: str = DEFAULT_MODEL):
        profile = make_profile(anthropic=anthropic, openai=openai, default_model=default_model)
        providers = build_providers(profile, transport=backends.transport)
        built.append(providers)
        return ProviderDispatcher(profile, providers)

    yield _make

    for providers in built:
        await close_providers(providers)


@pytest.fixture
def profile_factory():
    return make_profile
