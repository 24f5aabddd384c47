class AppError(Exception):
    code = "error"

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(AppError):
    code = "unauthorized"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, status_code=401)


class LLMError(AppError):
    """Base for every failure surfaced by the provider dispatcher."""


class InvalidRequestError(LLMError):
    code = "invalid_request"

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class ProviderUnavailableError(LLMError):
    code = "provider_unavailable"

    def __init__(self, provider: str):
        super().__init__(
            f"Provider '{provider}' is not available or not configured",
            status_code=503,
        )
        self.provider = provider


class NoProviderConfiguredError(LLMError):
    code = "no_provider_configured"

    def __init__(self, message: str = "No LLM provider is configured"):
        super().__init__(message, status_code=503)


class UpstreamFailureError(LLMError):
    code = "upstream_failure"

    def __init__(self, provider: str, reason: str):
        super().__init__(f"LLM generation failed ({provider}): {reason}", status_code=502)
        self.provider = provider
        self.reason = reason
