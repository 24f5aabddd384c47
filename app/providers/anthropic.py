"""Anthropic Claude provider via httpx."""
from typing import Any

import httpx

from app.config import BackendProfile
from app.providers.base import BaseProvider, GenerationResult, ProviderCall, ProviderKind


class AnthropicProvider(BaseProvider):
    def __init__(
        self,
        profile: BackendProfile,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=profile.base_url,
            headers={
                "x-api-key": profile.api_key,
                "anthropic-version": profile.api_version or "2023-06-01",
                "content-type": "application/json",
            },
            timeout=profile.timeout,
            transport=transport,
        )

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.ANTHROPIC

    @staticmethod
    def build_payload(call: ProviderCall) -> dict[str, Any]:
        # System prompt is a top-level field, never a message
        payload: dict[str, Any] = {
            "model": call.model,
            "max_tokens": call.max_tokens,
            "temperature": call.temperature,
            "messages": [{"role": "user", "content": call.prompt}],
        }
        if call.system_prompt:
            payload["system"] = call.system_prompt
        return payload

    async def invoke(self, call: ProviderCall) -> GenerationResult:
        response = await self._client.post("/messages", json=self.build_payload(call))
        response.raise_for_status()
        data = response.json()

        content_blocks = data.get("content", [])
        text = "".join(b.get("text", "") for b in content_blocks if b.get("type") == "text")

        return GenerationResult(
            content=text,
            model_used=call.model,
            provider_used=self.kind,
            usage=data.get("usage") or {},
        )

    async def close(self) -> None:
        await self._client.aclose()
