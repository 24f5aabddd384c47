import time
from typing import Any

from fastapi import APIRouter

from app.core.dependencies import CurrentPrincipal, Dispatcher
from app.llm import service as llm_service
from app.llm.schemas import (
    BuildPredictionRequest,
    CodeAnalysisRequest,
    GenerateRequest,
    GenerateTestsRequest,
    GenerationResponse,
    IntentAnalysisRequest,
    ResponseGenerationRequest,
    ResponseGenerationResponse,
    SecurityReportRequest,
    SecurityReportResponse,
    VulnerabilityScanRequest,
)

router = APIRouter(prefix="/llm", tags=["llm"])

SECURITY_REPORT_RECOMMENDATIONS = [
    "Immediate security patches required",
    "Compliance gaps identified",
    "Cost optimization opportunities available",
]


@router.post("/generate", response_model=GenerationResponse)
async def generate(body: GenerateRequest, user: CurrentPrincipal, dispatcher: Dispatcher) -> dict[str, Any]:
    result = await dispatcher.generate(body.to_generation_request())
    return result.to_dict()


@router.post("/intent-analysis")
async def intent_analysis(
    body: IntentAnalysisRequest, user: CurrentPrincipal, dispatcher: Dispatcher
) -> dict[str, Any]:
    result = await llm_service.analyze_intent(
        dispatcher, body.user_message, body.context, **body.overrides()
    )
    return {
        **llm_service.parse_intent(result.content),
        "model_used": result.model_used,
        "usage": dict(result.usage),
    }


@router.post("/response-generation", response_model=ResponseGenerationResponse)
async def response_generation(
    body: ResponseGenerationRequest, user: CurrentPrincipal, dispatcher: Dispatcher
) -> ResponseGenerationResponse:
    start = time.perf_counter()
    result = await llm_service.generate_conversational_response(
        dispatcher,
        body.agent_response,
        body.original_intent,
        body.user_message,
        **body.overrides(),
    )
    return ResponseGenerationResponse(
        generated_response=result.content,
        model_used=result.model_used,
        usage=dict(result.usage),
        execution_time=int((time.perf_counter() - start) * 1000),
    )


@router.post("/security-report", response_model=SecurityReportResponse)
async def security_report(
    body: SecurityReportRequest, user: CurrentPrincipal, dispatcher: Dispatcher
) -> SecurityReportResponse:
    result = await llm_service.generate_security_report(
        dispatcher,
        vulnerability_data=body.vulnerability_data,
        compliance_data=body.compliance_data,
        cost_analysis=body.cost_analysis,
        sre_assessment=body.sre_assessment,
        report_format=body.report_format,
        **body.overrides(),
    )
    return SecurityReportResponse(
        report_content=result.content,
        report_url=f"/reports/security-{int(time.time() * 1000)}.html",
        key_recommendations=SECURITY_REPORT_RECOMMENDATIONS,
        model_used=result.model_used,
        usage=dict(result.usage),
    )


@router.post("/code-analysis", response_model=GenerationResponse)
async def code_analysis(
    body: CodeAnalysisRequest, user: CurrentPrincipal, dispatcher: Dispatcher
) -> dict[str, Any]:
    result = await llm_service.analyze_code(
        dispatcher, body.code, body.analysis_type, **body.overrides()
    )
    return result.to_dict()


@router.post("/test-generation", response_model=GenerationResponse)
async def test_generation(
    body: GenerateTestsRequest, user: CurrentPrincipal, dispatcher: Dispatcher
) -> dict[str, Any]:
    result = await llm_service.generate_tests(
        dispatcher, body.code, body.test_framework, **body.overrides()
    )
    return result.to_dict()


@router.post("/build-prediction", response_model=GenerationResponse)
async def build_prediction(
    body: BuildPredictionRequest, user: CurrentPrincipal, dispatcher: Dispatcher
) -> dict[str, Any]:
    result = await llm_service.predict_build_outcome(
        dispatcher,
        body.changes,
        body.build_history,
        body.dependency_analysis,
        **body.overrides(),
    )
    return result.to_dict()


@router.post("/vulnerability-scan", response_model=GenerationResponse)
async def vulnerability_scan(
    body: VulnerabilityScanRequest, user: CurrentPrincipal, dispatcher: Dispatcher
) -> dict[str, Any]:
    files = [f.model_dump() for f in body.files]
    result = await llm_service.analyze_vulnerabilities(
        dispatcher, files, body.scan_type, **body.overrides()
    )
    return result.to_dict()
