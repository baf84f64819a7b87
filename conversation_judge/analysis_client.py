from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

import httpx

from .analysis_result import AnalysisResult, validate_analysis_result
from .config import ProviderConfig
from .errors import (
    ProviderHTTPError,
    ProviderRateLimitError,
    ProviderTransportError,
    classify_http_error,
)
from .response_formats import parse_message_content

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
BASE_DELAY_SECONDS = 2.0
USER_AGENT = "ConversationJudge/1.0"


class AnalysisClient:
    """Posts chat-completion payloads and turns replies into AnalysisResult values.

    Only rate-limit (429) responses are retried: up to ``max_retries`` more
    attempts, waiting ``base_delay_seconds * 2 ** n`` before retry ``n``.
    Every other failure is terminal.
    """

    def __init__(
        self,
        *,
        config: ProviderConfig,
        max_retries: int = MAX_RETRIES,
        base_delay_seconds: float = BASE_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self.config = config
        self.max_retries = max_retries
        self.base_delay_seconds = base_delay_seconds
        self.transport = transport
        self._sleep = sleep or asyncio.sleep

    @property
    def endpoint(self) -> str:
        return self.config.chat_completions_url

    def retry_delay(self, retry_index: int) -> float:
        return self.base_delay_seconds * (2**retry_index)

    async def send(self, payload: dict[str, Any]) -> AnalysisResult:
        retry_index = 0
        while True:
            try:
                body = await self._post(payload)
            except ProviderRateLimitError:
                if retry_index >= self.max_retries:
                    raise
                delay = self.retry_delay(retry_index)
                logger.warning(
                    "Rate limit hit. Retrying in %.1fs (attempt %s/%s)",
                    delay,
                    retry_index + 1,
                    self.max_retries,
                )
                await self._sleep(delay)
                retry_index += 1
                continue
            return validate_analysis_result(parse_message_content(body))

    async def _post(self, payload: dict[str, Any]) -> Any:
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        logger.info(
            "Requesting analysis from %s (model=%s)",
            self.endpoint,
            payload.get("model"),
        )
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.post(self.endpoint, headers=headers, json=payload)
        except Exception as exc:
            raise ProviderTransportError(f"HTTP request failed: {exc}") from exc

        if not response.is_success:
            raise self._error_from_response(response)

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderTransportError(f"Provider response was not valid JSON: {exc}") from exc

    def _error_from_response(self, response: httpx.Response) -> ProviderHTTPError:
        detail, error_body = _extract_error_detail(response)
        logger.error(
            "API error response: status=%s message=%s endpoint=%s",
            response.status_code,
            detail,
            self.endpoint,
        )
        return classify_http_error(
            status_code=response.status_code,
            detail=detail,
            error_body=error_body,
        )


def _extract_error_detail(response: httpx.Response) -> tuple[str, Any]:
    error_body: Any = None
    text = response.text.strip()
    if text:
        try:
            error_body = json.loads(text)
        except ValueError:
            error_body = None

    if isinstance(error_body, dict):
        error = error_body.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message:
                return message, error_body
        message = error_body.get("message")
        if isinstance(message, str) and message:
            return message, error_body
        if isinstance(error, str) and error:
            return error, error_body

    return response.reason_phrase or f"HTTP {response.status_code}", error_body
