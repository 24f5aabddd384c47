from typing import Any

import httpx

from app.config import BackendProfile
from app.providers.base import BaseProvider, GenerationResult, ProviderCall, ProviderKind


class OpenAIProvider(BaseProvider):
    def __init__(
        self,
        profile: BackendProfile,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=profile.base_url,
            headers={"Authorization": f"Bearer {profile.api_key}"},
            timeout=profile.timeout,
            transport=transport,
        )

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.OPENAI

    @staticmethod
    def build_payload(call: ProviderCall) -> dict[str, Any]:
        messages: list[dict[str, str]] = []
        if call.system_prompt:
            messages.append({"role": "system", "content": call.system_prompt})
        messages.append({"role": "user", "content": call.prompt})
        return {
            "model": call.model,
            "messages": messages,
            "max_tokens": call.max_tokens,
            "temperature": call.temperature,
        }

    async def invoke(self, call: ProviderCall) -> GenerationResult:
        response = await self._client.post("/chat/completions", json=self.build_payload(call))
        response.raise_for_status()
        data = response.json()

        return GenerationResult(
            content=data["choices"][0]["message"]["content"] or "",
            model_used=call.model,
            provider_used=self.kind,
            usage=data.get("usage") or {},
        )

    async def close(self) -> None:
        await self._client.aclose()
