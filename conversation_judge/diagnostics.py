from __future__ import annotations

import json

from .errors import (
    AnalysisError,
    AnalysisValidationError,
    ProviderAuthError,
    ProviderBadRequestError,
    ProviderHTTPError,
    ProviderNotFoundError,
    ProviderRateLimitError,
    ProviderTransportError,
)


def describe_error(error: AnalysisError) -> str:
    """Multi-line, user-facing explanation of an analysis failure."""
    if isinstance(error, ProviderAuthError):
        return (
            "Invalid API key (401 Unauthorized). This means:\n"
            "• The API key is invalid or expired\n"
            "• The API key was revoked\n"
            "• The API key doesn't have the right permissions\n\n"
            "Please:\n"
            "1. Verify API_KEY (or OPENAI_API_KEY) is set to the correct key\n"
            "2. Make sure the key is complete (not truncated)\n"
            "3. Check that your API provider account is active\n"
            "4. Remove any quotes or spaces around the key\n"
            "5. Restart the server after updating the environment"
        )
    if isinstance(error, ProviderRateLimitError):
        return (
            "Rate limit exceeded. This usually means:\n"
            "• You've made too many requests in a short time (wait a few minutes)\n"
            "• Your API account has hit its usage limit\n"
            "• You're on a free tier with limited requests\n\n"
            "Please check your API provider's usage page or add billing information."
        )
    if isinstance(error, ProviderBadRequestError):
        return (
            f"Invalid request (400 Bad Request): {error.detail or 'Invalid request'}\n\n"
            "This could mean:\n"
            "• The image format is not supported by your API provider\n"
            "• The request format is incompatible with your API provider\n"
            "• The model doesn't support vision/image inputs\n"
            "• The response_format (JSON schema) is not supported "
            "(set USE_JSON_SCHEMA=false)\n\n"
            "Check the server log for more details."
        )
    if isinstance(error, ProviderNotFoundError):
        return "API endpoint not found. Please check API_BASE_URL."
    if isinstance(error, ProviderHTTPError):
        details = ""
        if error.error_body:
            details = f"\n\nDetails: {json.dumps(error.error_body, indent=2, ensure_ascii=False)}"
        return f"API error ({error.status_code}): {error.detail}{details}"
    if isinstance(error, AnalysisValidationError):
        return f"Invalid response format: {error.detail}"
    if isinstance(error, ProviderTransportError):
        return f"Analysis failed: {error.detail}"
    return error.message


def attach_diagnostic(error: AnalysisError) -> AnalysisError:
    error.diagnostic = describe_error(error)
    return error
