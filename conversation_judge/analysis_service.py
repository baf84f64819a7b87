from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

import httpx

from .analysis_client import AnalysisClient
from .analysis_result import AnalysisResult
from .config import ProviderConfig
from .diagnostics import attach_diagnostic
from .errors import AnalysisError, AnalysisInputError
from .request_builder import AnalysisRequest, ImageInput, TextInput, build_chat_payload
from .response_formats import strategy_for_config

logger = logging.getLogger(__name__)


class ConversationAnalysisService:
    def __init__(
        self,
        *,
        config: ProviderConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.sleep = sleep

    async def analyze_screenshot(self, image_bytes: bytes | None, mime_type: str | None) -> AnalysisResult:
        mime_type = (mime_type or "").strip().lower()
        if not image_bytes or not mime_type:
            raise attach_diagnostic(AnalysisInputError("Either text content or image must be provided"))
        if not mime_type.startswith("image/"):
            raise attach_diagnostic(
                AnalysisInputError(f"Unsupported file type '{mime_type}'. Please upload an image file.")
            )
        return await self.analyze(ImageInput(data=image_bytes, mime_type=mime_type))

    async def analyze_text(self, text: str | None) -> AnalysisResult:
        content = (text or "").strip()
        if not content:
            raise attach_diagnostic(AnalysisInputError("Please paste or type the conversation text"))
        return await self.analyze(TextInput(content=content))

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        try:
            config = self.config or ProviderConfig.from_env()
            strategy = strategy_for_config(config)
            payload = build_chat_payload(request, model=config.model, strategy=strategy)
            client = AnalysisClient(config=config, transport=self.transport, sleep=self.sleep)
            logger.info("Analyzing %s input using %s responses", _input_kind(request), strategy.name)
            return await client.send(payload)
        except AnalysisError as exc:
            logger.error("Error analyzing conversation: %s", exc)
            attach_diagnostic(exc)
            raise


def _input_kind(request: AnalysisRequest) -> str:
    return "image" if isinstance(request, ImageInput) else "text"


async def analyze_screenshot(image_bytes: bytes | None, mime_type: str | None) -> AnalysisResult:
    return await ConversationAnalysisService().analyze_screenshot(image_bytes, mime_type)


async def analyze_text(text: str | None) -> AnalysisResult:
    return await ConversationAnalysisService().analyze_text(text)
