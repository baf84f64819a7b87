from __future__ import annotations

from typing import Any


class AnalysisError(RuntimeError):
    kind: str = "unknown"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.diagnostic: str | None = None


class AnalysisConfigError(AnalysisError):
    kind = "config"


class AnalysisInputError(AnalysisError):
    kind = "input"


class AnalysisValidationError(AnalysisError):
    kind = "validation"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ProviderTransportError(AnalysisError):
    kind = "transport"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ProviderHTTPError(AnalysisError):
    """Non-2xx response from the chat-completion endpoint."""

    def __init__(
        self,
        *,
        status_code: int,
        detail: str,
        error_body: Any = None,
    ) -> None:
        super().__init__(f"Provider request failed ({status_code}): {detail}")
        self.status_code = status_code
        self.detail = detail
        self.error_body = error_body


class ProviderAuthError(ProviderHTTPError):
    kind = "auth"


class ProviderRateLimitError(ProviderHTTPError):
    kind = "rate_limit"


class ProviderBadRequestError(ProviderHTTPError):
    kind = "bad_request"


class ProviderNotFoundError(ProviderHTTPError):
    kind = "not_found"


class ProviderUnknownError(ProviderHTTPError):
    kind = "unknown"


_STATUS_ERRORS: dict[int, type[ProviderHTTPError]] = {
    400: ProviderBadRequestError,
    401: ProviderAuthError,
    404: ProviderNotFoundError,
    429: ProviderRateLimitError,
}


def classify_http_error(
    *,
    status_code: int,
    detail: str,
    error_body: Any = None,
) -> ProviderHTTPError:
    error_cls = _STATUS_ERRORS.get(status_code, ProviderUnknownError)
    return error_cls(status_code=status_code, detail=detail, error_body=error_body)
