from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any

from .errors import AnalysisInputError
from .prompts import CONVERSATION_TEXT_HEADER, SCREENSHOT_PREFIX, SYSTEM_PROMPT
from .response_formats import ResponseFormatStrategy

TEMPERATURE = 0.3


@dataclass(frozen=True)
class TextInput:
    content: str


@dataclass(frozen=True)
class ImageInput:
    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


AnalysisRequest = TextInput | ImageInput


def build_user_content(
    request: AnalysisRequest,
    *,
    strategy: ResponseFormatStrategy,
) -> list[dict[str, Any]]:
    prompt = strategy.user_prompt()
    if isinstance(request, TextInput) and request.content:
        return [
            {
                "type": "text",
                "text": f"{prompt}\n\n{CONVERSATION_TEXT_HEADER}\n{request.content}",
            }
        ]
    if isinstance(request, ImageInput) and request.data and request.mime_type:
        return [
            {"type": "text", "text": f"{SCREENSHOT_PREFIX}{prompt}"},
            {"type": "image_url", "image_url": {"url": request.to_data_url()}},
        ]
    raise AnalysisInputError("Either text content or image must be provided")


def build_chat_payload(
    request: AnalysisRequest,
    *,
    model: str,
    strategy: ResponseFormatStrategy,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_content(request, strategy=strategy)},
        ],
        "temperature": TEMPERATURE,
    }
    return strategy.apply(payload)
