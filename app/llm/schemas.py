from typing import Any

from pydantic import BaseModel, Field

from app.providers.base import GenerationRequest, ProviderHint


class LLMOptions(BaseModel):
    """Per-call model/provider overrides shared by the task endpoints."""
    llm_model: str | None = None
    provider: ProviderHint = ProviderHint.AUTO

    def overrides(self) -> dict[str, Any]:
        return {"model": self.llm_model, "provider_hint": self.provider}


class GenerateRequest(BaseModel):
    prompt: str
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None
    system_prompt: str | None = None
    provider: ProviderHint = ProviderHint.AUTO

    def to_generation_request(self) -> GenerationRequest:
        return GenerationRequest(
            prompt=self.prompt,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system_prompt=self.system_prompt,
            provider_hint=self.provider,
        )


class GenerationResponse(BaseModel):
    model_config = {"protected_namespaces": ()}

    content: str
    model_used: str
    usage: dict[str, Any]
    provider_used: str


class IntentAnalysisRequest(LLMOptions):
    user_message: str = Field(min_length=1)
    context: dict[str, Any] = Field(default_factory=dict)


class ResponseGenerationRequest(LLMOptions):
    agent_response: Any
    user_message: str = Field(min_length=1)
    original_intent: str | None = None
    response_style: str | None = None


class ResponseGenerationResponse(BaseModel):
    model_config = {"protected_namespaces": ()}

    generated_response: str
    model_used: str
    usage: dict[str, Any]
    agent_type: str = "conversational_llm"
    # Milliseconds spent generating the response
    execution_time: int
    suggested_actions: list[str] = Field(default_factory=list)


class SecurityReportRequest(LLMOptions):
    vulnerability_data: Any = None
    compliance_data: Any = None
    cost_analysis: Any = None
    sre_assessment: Any = None
    report_format: str | None = None


class SecurityReportResponse(BaseModel):
    model_config = {"protected_namespaces": ()}

    report_content: str
    report_url: str
    key_recommendations: list[str]
    model_used: str
    usage: dict[str, Any]


class CodeAnalysisRequest(LLMOptions):
    code: str = Field(min_length=1)
    analysis_type: str = "general"


class GenerateTestsRequest(LLMOptions):
    code: str = Field(min_length=1)
    test_framework: str = "pytest"


class BuildPredictionRequest(LLMOptions):
    changes: Any
    build_history: list[Any] = Field(default_factory=list)
    dependency_analysis: Any = None


class RepositoryFile(BaseModel):
    name: str
    path: str
    content: str = ""


class VulnerabilityScanRequest(LLMOptions):
    files: list[RepositoryFile] = Field(min_length=1)
    scan_type: str = "comprehensive"
