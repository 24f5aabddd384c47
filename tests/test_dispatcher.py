"""
Tests for provider selection, defaults, and error wrapping in the dispatcher.

Backends are faked at the HTTP layer, so payload assertions check exactly
what would be sent over the wire.
"""
import asyncio

import httpx
import pytest

from app.core.exceptions import (
    InvalidRequestError,
    NoProviderConfiguredError,
    ProviderUnavailableError,
    UpstreamFailureError,
)
from app.llm.dispatcher import ProviderDispatcher, infer_provider, resolve_call, select_provider
from app.providers.base import GenerationRequest, ProviderHint, ProviderKind
from app.providers.registry import build_providers


@pytest.mark.parametrize(
    "model,expected",
    [
        ("claude-3-sonnet-20240229", ProviderKind.ANTHROPIC),
        ("anthropic/claude-instant", ProviderKind.ANTHROPIC),
        ("gpt-4", ProviderKind.OPENAI),
        ("openai-custom", ProviderKind.OPENAI),
        ("llama-3-70b", None),
    ],
)
def test_infer_provider_uses_family_substrings(model, expected):
    assert infer_provider(model) == expected


@pytest.mark.parametrize("hint", list(ProviderHint))
def test_no_backend_enabled_fails_for_every_hint(profile_factory, hint):
    profile = profile_factory(anthropic=False, openai=False)
    with pytest.raises(NoProviderConfiguredError):
        select_provider(hint, "claude-3-opus", profile)


def test_explicit_hint_for_disabled_backend_is_unavailable(profile_factory):
    profile = profile_factory(anthropic=False, openai=True)
    with pytest.raises(ProviderUnavailableError) as exc_info:
        select_provider(ProviderHint.ANTHROPIC, "gpt-4", profile)
    assert exc_info.value.provider == "anthropic"


def test_explicit_hint_overrides_model_family(profile_factory):
    profile = profile_factory()
    assert select_provider(ProviderHint.OPENAI, "claude-3-opus", profile) is ProviderKind.OPENAI


def test_auto_with_inferred_backend_disabled_does_not_substitute(profile_factory):
    profile = profile_factory(anthropic=True, openai=False)
    with pytest.raises(ProviderUnavailableError):
        select_provider(ProviderHint.AUTO, "gpt-4", profile)


def test_auto_unknown_model_prefers_anthropic(profile_factory):
    profile = profile_factory()
    assert select_provider(ProviderHint.AUTO, "mistral-large", profile) is ProviderKind.ANTHROPIC


def test_auto_unknown_model_falls_back_to_openai_when_only_enabled(profile_factory):
    profile = profile_factory(anthropic=False, openai=True)
    assert select_provider(ProviderHint.AUTO, "mistral-large", profile) is ProviderKind.OPENAI


def test_resolve_call_applies_defaults():
    call = resolve_call(GenerationRequest(prompt="hello"), "claude-3-haiku")
    assert call.model == "claude-3-haiku"
    assert call.max_tokens == 4000
    assert call.temperature == 0.7
    assert call.system_prompt is None


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {"prompt": ""},
        {"prompt": "   "},
        {"prompt": "x", "max_tokens": 0},
        {"prompt": "x", "temperature": 1.5},
        {"prompt": "x", "temperature": -0.1},
        {"prompt": "x", "model": ""},
    ],
)
def test_resolve_call_rejects_invalid_requests(request_kwargs):
    with pytest.raises(InvalidRequestError):
        resolve_call(GenerationRequest(**request_kwargs), "claude-3-haiku")


@pytest.mark.asyncio
async def test_claude_model_with_only_anthropic_enabled(dispatcher_factory, backends):
    dispatcher = dispatcher_factory(anthropic=True, openai=False)

    result = await dispatcher.generate(
        GenerationRequest(prompt="hello", model="claude-3-sonnet-20240229")
    )

    assert result.provider_used is ProviderKind.ANTHROPIC
    assert result.content == "anthropic says hi"
    assert result.usage == {"input_tokens": 12, "output_tokens": 7}
    [payload] = backends.calls_to("anthropic.test")
    assert payload["max_tokens"] == 4000
    assert payload["temperature"] == 0.7
    assert payload["model"] == "claude-3-sonnet-20240229"
    assert payload["messages"] == [{"role": "user", "content": "hello"}]
    assert "system" not in payload


@pytest.mark.asyncio
async def test_gpt_model_with_openai_hint(dispatcher_factory, backends):
    dispatcher = dispatcher_factory()

    result = await dispatcher.generate(
        GenerationRequest(prompt="hello", model="gpt-4", provider_hint=ProviderHint.OPENAI)
    )

    assert result.provider_used is ProviderKind.OPENAI
    assert result.model_used == "gpt-4"
    assert result.content == "openai says hi"
    [payload] = backends.payloads
    assert backends.requests[0].url.path == "/v1/chat/completions"
    assert payload["messages"] == [{"role": "user", "content": "hello"}]


@pytest.mark.asyncio
async def test_disabled_hint_makes_no_network_call(dispatcher_factory, backends):
    dispatcher = dispatcher_factory(anthropic=False, openai=True)

    with pytest.raises(ProviderUnavailableError):
        await dispatcher.generate(
            GenerationRequest(prompt="x", provider_hint=ProviderHint.ANTHROPIC)
        )

    assert backends.requests == []


@pytest.mark.asyncio
async def test_no_provider_configured_on_generate(dispatcher_factory, backends):
    dispatcher = dispatcher_factory(anthropic=False, openai=False)

    with pytest.raises(NoProviderConfiguredError):
        await dispatcher.generate(GenerationRequest(prompt="hello"))

    assert backends.requests == []


@pytest.mark.asyncio
async def test_model_used_is_resolved_default(dispatcher_factory, backends):
    dispatcher = dispatcher_factory(default_model="claude-3-haiku-20240307")

    result = await dispatcher.generate(GenerationRequest(prompt="hello"))

    assert result.model_used == "claude-3-haiku-20240307"
    assert backends.payloads[0]["model"] == "claude-3-haiku-20240307"


@pytest.mark.asyncio
async def test_default_model_drives_auto_selection(dispatcher_factory, backends):
    dispatcher = dispatcher_factory(default_model="gpt-4o")

    result = await dispatcher.generate(GenerationRequest(prompt="hello"))

    assert result.provider_used is ProviderKind.OPENAI
    assert result.model_used == "gpt-4o"


@pytest.mark.asyncio
async def test_explicit_defaults_match_omitted_defaults(dispatcher_factory, backends):
    dispatcher = dispatcher_factory()

    await dispatcher.generate(GenerationRequest(prompt="hello", model="gpt-4"))
    await dispatcher.generate(
        GenerationRequest(prompt="hello", model="gpt-4", max_tokens=4000, temperature=0.7)
    )

    first, second = backends.payloads
    assert first == second


@pytest.mark.asyncio
async def test_upstream_status_error_is_wrapped(dispatcher_factory, backends):
    backends.status_code = 500
    dispatcher = dispatcher_factory()

    with pytest.raises(UpstreamFailureError) as exc_info:
        await dispatcher.generate(GenerationRequest(prompt="hello", model="claude-3-opus"))

    assert exc_info.value.provider == "anthropic"
    assert exc_info.value.status_code == 502
    assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
    assert len(backends.requests) == 1


@pytest.mark.asyncio
async def test_timeout_is_wrapped(profile_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    profile = profile_factory()
    dispatcher = ProviderDispatcher(
        profile, build_providers(profile, transport=httpx.MockTransport(handler))
    )

    with pytest.raises(UpstreamFailureError, match="timed out"):
        await dispatcher.generate(GenerationRequest(prompt="hello", model="gpt-4"))


@pytest.mark.asyncio
async def test_malformed_backend_body_is_wrapped(profile_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    profile = profile_factory()
    dispatcher = ProviderDispatcher(
        profile, build_providers(profile, transport=httpx.MockTransport(handler))
    )

    with pytest.raises(UpstreamFailureError) as exc_info:
        await dispatcher.generate(GenerationRequest(prompt="hello", model="gpt-4"))

    assert exc_info.value.provider == "openai"


@pytest.mark.asyncio
async def test_cancellation_aborts_in_flight_call(profile_factory):
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(60)
        return httpx.Response(200, json={})

    profile = profile_factory()
    dispatcher = ProviderDispatcher(
        profile, build_providers(profile, transport=httpx.MockTransport(handler))
    )

    task = asyncio.create_task(dispatcher.generate(GenerationRequest(prompt="hello")))
    await asyncio.wait_for(started.wait(), timeout=1)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert task.cancelled()


@pytest.mark.asyncio
async def test_concurrent_generate_keeps_results_separate(dispatcher_factory, backends):
    dispatcher = dispatcher_factory()
    models = [
        f"claude-3-haiku-{i}" if i % 2 == 0 else f"gpt-4o-{i}"
        for i in range(20)
    ]

    results = await asyncio.gather(
        *(dispatcher.generate(GenerationRequest(prompt=f"prompt {i}", model=m)) for i, m in enumerate(models))
    )

    for model, result in zip(models, results):
        expected = ProviderKind.ANTHROPIC if model.startswith("claude") else ProviderKind.OPENAI
        assert result.provider_used is expected
        assert result.model_used == model
    assert len(backends.requests) == 20
    sent = sorted(p["model"] for p in backends.payloads)
    assert sent == sorted(models)
