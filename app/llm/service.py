"""
DevOps task helpers built on the provider dispatcher.

Each helper turns a task (code review, test generation, build prediction,
vulnerability scan, intent analysis, conversational rewrite, security report)
into a GenerationRequest with its own system prompt and token/temperature
defaults. Callers may override the model and provider hint per call.
The model's text is returned untouched; only intent analysis parses it.
"""
import json
from typing import Any

from app.llm.dispatcher import ProviderDispatcher
from app.providers.base import GenerationRequest, GenerationResult, ProviderHint

CODE_ANALYSIS_PROMPTS = {
    "security": "You are a security expert. Analyze the provided code for security vulnerabilities, potential exploits, and security best practices.",
    "performance": "You are a performance optimization expert. Analyze the code for performance issues, bottlenecks, and optimization opportunities.",
    "quality": "You are a code quality expert. Review the code for maintainability, readability, design patterns, and best practices.",
    "testing": "You are a testing expert. Analyze the code and suggest comprehensive test cases, edge cases, and testing strategies.",
    "general": "You are a senior software engineer. Provide a comprehensive code review covering security, performance, quality, and testing aspects.",
    "comprehensive": "You are a senior software engineer and security expert. Provide a detailed analysis covering security vulnerabilities, performance issues, code quality, maintainability, and testing recommendations.",
}

BUILD_PREDICTION_PROMPT = "You are a DevOps expert specializing in build prediction and CI/CD optimization. Analyze code changes and build history to predict build outcomes and suggest optimizations."
VULNERABILITY_PROMPT = "You are a cybersecurity expert specializing in code vulnerability analysis. Analyze the provided code for security vulnerabilities, potential exploits, and security best practices."
INTENT_PROMPT = "You are an intent analysis expert for DevOps operations. Analyze user messages to determine their intent and extract relevant entities for automation workflows."
CONVERSATIONAL_PROMPT = "You are a helpful DevOps assistant. Convert technical agent responses into natural, conversational language that is easy to understand while maintaining technical accuracy."
SECURITY_REPORT_PROMPT = "You are a cybersecurity expert generating executive security reports. Create comprehensive, actionable reports that are suitable for both technical and executive audiences."

MAX_SCAN_FILES = 10
MAX_SCAN_FILE_CHARS = 2000
MAX_BUILD_HISTORY = 10

INTENT_FALLBACK: dict[str, Any] = {
    "intent": "general",
    "confidence": 0.5,
    "entities": {},
    "parameters": {},
    "suggested_workflow": "manual_review",
}


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


async def _run(
    dispatcher: ProviderDispatcher,
    prompt: str,
    *,
    system_prompt: str,
    max_tokens: int,
    temperature: float | None = None,
    model: str | None = None,
    provider_hint: ProviderHint = ProviderHint.AUTO,
) -> GenerationResult:
    return await dispatcher.generate(
        GenerationRequest(
            prompt=prompt,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            system_prompt=system_prompt,
            provider_hint=provider_hint,
        )
    )


async def analyze_code(
    dispatcher: ProviderDispatcher,
    code: str,
    analysis_type: str = "general",
    **overrides: Any,
) -> GenerationResult:
    prompt = (
        "Please analyze the following code:\n\n"
        f"```\n{code}\n```\n\n"
        "Provide detailed analysis and recommendations."
    )
    system_prompt = CODE_ANALYSIS_PROMPTS.get(analysis_type, CODE_ANALYSIS_PROMPTS["general"])
    return await _run(dispatcher, prompt, system_prompt=system_prompt, max_tokens=3000, **overrides)


async def generate_tests(
    dispatcher: ProviderDispatcher,
    code: str,
    test_framework: str = "pytest",
    **overrides: Any,
) -> GenerationResult:
    system_prompt = (
        "You are a test automation expert. Generate comprehensive unit tests for the provided code "
        f"using {test_framework}. Include edge cases, error scenarios, and integration test suggestions."
    )
    prompt = (
        "Generate comprehensive tests for this code:\n\n"
        f"```\n{code}\n```\n\n"
        "Requirements:\n"
        f"- Use {test_framework} framework\n"
        "- Include unit tests with good coverage\n"
        "- Test edge cases and error scenarios\n"
        "- Provide clear test descriptions\n"
        "- Include setup and teardown if needed"
    )
    return await _run(dispatcher, prompt, system_prompt=system_prompt, max_tokens=3000, **overrides)


async def predict_build_outcome(
    dispatcher: ProviderDispatcher,
    changes: Any,
    build_history: list[Any] | None = None,
    dependency_analysis: Any = None,
    **overrides: Any,
) -> GenerationResult:
    recent = (build_history or [])[-MAX_BUILD_HISTORY:]
    prompt = (
        "Analyze these code changes and predict the build outcome:\n\n"
        f"Changes:\n{_to_json(changes)}\n\n"
        f"Recent build history:\n{_to_json(recent)}"
    )
    if dependency_analysis:
        prompt += f"\n\nDependency Analysis:\n{_to_json(dependency_analysis)}"
    prompt += (
        "\n\nProvide:\n"
        "1. Build success probability (0-100%)\n"
        "2. Potential failure points\n"
        "3. Estimated build time\n"
        "4. Resource requirements\n"
        "5. Optimization suggestions\n"
        "6. Confidence score (0.0-1.0)\n\n"
        "Respond in JSON format."
    )
    return await _run(
        dispatcher, prompt, system_prompt=BUILD_PREDICTION_PROMPT, max_tokens=2000, **overrides
    )


def summarize_files(files: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Keep the first files of a repository, each truncated for prompt size."""
    return [
        {
            "name": str(f.get("name", "")),
            "path": str(f.get("path", "")),
            "content": str(f.get("content", ""))[:MAX_SCAN_FILE_CHARS],
        }
        for f in files[:MAX_SCAN_FILES]
    ]


async def analyze_vulnerabilities(
    dispatcher: ProviderDispatcher,
    files: list[dict[str, Any]],
    scan_type: str = "comprehensive",
    **overrides: Any,
) -> GenerationResult:
    prompt = (
        f"Perform a {scan_type} security vulnerability scan on this repository content:\n\n"
        f"{_to_json(summarize_files(files))}\n\n"
        "Analyze for:\n"
        "1. SQL injection vulnerabilities\n"
        "2. Cross-site scripting (XSS) issues\n"
        "3. Authentication and authorization flaws\n"
        "4. Insecure data handling\n"
        "5. Dependency vulnerabilities\n"
        "6. Configuration security issues\n"
        "7. Input validation problems\n"
        "8. Cryptographic issues\n\n"
        "Respond in JSON format with:\n"
        "{\n"
        '  "risk_level": "low|medium|high|critical",\n'
        '  "vulnerabilities": [\n'
        "    {\n"
        '      "title": "Vulnerability name",\n'
        '      "severity": "low|medium|high|critical",\n'
        '      "description": "Description",\n'
        '      "file": "affected file",\n'
        '      "line": "line number if applicable",\n'
        '      "recommendation": "how to fix"\n'
        "    }\n"
        "  ],\n"
        '  "summary": "Overall security assessment"\n'
        "}"
    )
    return await _run(
        dispatcher, prompt, system_prompt=VULNERABILITY_PROMPT, max_tokens=4000, **overrides
    )


async def analyze_intent(
    dispatcher: ProviderDispatcher,
    user_message: str,
    context: dict[str, Any] | None = None,
    **overrides: Any,
) -> GenerationResult:
    prompt = (
        "Analyze this user message and extract intent and entities:\n\n"
        f'Message: "{user_message}"\n'
        f"Context: {json.dumps(context or {}, default=str)}\n\n"
        "Return a JSON response with:\n"
        "{\n"
        '  "intent": "deploy|monitor|rollback|build|test|security|general",\n'
        '  "confidence": 0.0-1.0,\n'
        '  "entities": {\n'
        '    "repository": "repo name if mentioned",\n'
        '    "environment": "staging|production|development",\n'
        '    "service": "service name if mentioned",\n'
        '    "branch": "branch name if mentioned",\n'
        '    "action": "specific action requested"\n'
        "  },\n"
        '  "parameters": {},\n'
        '  "suggested_workflow": "workflow recommendation"\n'
        "}"
    )
    return await _run(
        dispatcher, prompt, system_prompt=INTENT_PROMPT, max_tokens=1000, temperature=0.3, **overrides
    )


def parse_intent(content: str) -> dict[str, Any]:
    """Parse an intent answer, falling back to a manual-review shape on non-JSON output."""
    try:
        parsed = json.loads(content)
    except (TypeError, ValueError):
        parsed = None
    if isinstance(parsed, dict):
        return parsed
    return {**INTENT_FALLBACK, "raw_response": content}


async def generate_conversational_response(
    dispatcher: ProviderDispatcher,
    agent_response: Any,
    original_intent: str | None,
    user_message: str,
    **overrides: Any,
) -> GenerationResult:
    prompt = (
        "Convert this technical response into a conversational format:\n\n"
        f'Original user message: "{user_message}"\n'
        f"Intent: {original_intent}\n"
        f"Agent response: {json.dumps(agent_response, default=str)}\n\n"
        "Generate a natural, helpful response that:\n"
        "1. Acknowledges the user's request\n"
        "2. Explains what was done in simple terms\n"
        "3. Provides key results or status\n"
        "4. Suggests next steps if applicable\n"
        "5. Maintains a friendly, professional tone"
    )
    return await _run(
        dispatcher,
        prompt,
        system_prompt=CONVERSATIONAL_PROMPT,
        max_tokens=1500,
        temperature=0.8,
        **overrides,
    )


async def generate_security_report(
    dispatcher: ProviderDispatcher,
    vulnerability_data: Any = None,
    compliance_data: Any = None,
    cost_analysis: Any = None,
    sre_assessment: Any = None,
    report_format: str | None = None,
    **overrides: Any,
) -> GenerationResult:
    prompt = (
        "Generate a comprehensive security report based on this data:\n\n"
        f"Vulnerability Assessment:\n{_to_json(vulnerability_data)}\n\n"
        f"Compliance Analysis:\n{_to_json(compliance_data)}\n\n"
        f"Cost Analysis:\n{_to_json(cost_analysis)}\n\n"
        f"SRE Assessment:\n{_to_json(sre_assessment)}\n\n"
        f"Format: {report_format or 'executive_summary'}\n\n"
        "Include:\n"
        "1. Executive Summary\n"
        "2. Risk Assessment\n"
        "3. Key Findings\n"
        "4. Recommendations\n"
        "5. Action Items with priorities\n"
        "6. Cost implications\n"
        "7. Compliance status"
    )
    return await _run(
        dispatcher, prompt, system_prompt=SECURITY_REPORT_PROMPT, max_tokens=4000, **overrides
    )
