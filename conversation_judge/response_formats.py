from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

from .analysis_result import build_result_schema
from .errors import AnalysisValidationError
from .prompts import FREEFORM_PROMPT, STRUCTURED_PROMPT

if TYPE_CHECKING:
    from .config import ProviderConfig

SCHEMA_NAME = "conversation_analysis"
_EMBEDDED_OBJECT_RE = re.compile(r"\{.*\}", flags=re.DOTALL)


class ResponseFormatStrategy:
    """How the model is asked to shape its answer."""

    name: str = ""

    def user_prompt(self) -> str:
        raise NotImplementedError

    def apply(self, payload: dict[str, Any]) -> dict[str, Any]:
        return payload


class StructuredSchemaFormat(ResponseFormatStrategy):
    name = "json_schema"

    def user_prompt(self) -> str:
        return STRUCTURED_PROMPT

    def apply(self, payload: dict[str, Any]) -> dict[str, Any]:
        payload["response_format"] = {
            "type": "json_schema",
            "json_schema": {
                "name": SCHEMA_NAME,
                "strict": True,
                "schema": build_result_schema(forbid_extra_keys=True),
            },
        }
        return payload


class FreeformJsonFormat(ResponseFormatStrategy):
    name = "freeform_json"

    def user_prompt(self) -> str:
        return FREEFORM_PROMPT


def strategy_for_config(config: "ProviderConfig") -> ResponseFormatStrategy:
    if config.use_json_schema:
        return StructuredSchemaFormat()
    return FreeformJsonFormat()


def parse_message_content(body: Any) -> dict[str, Any]:
    """Pull the candidate result object out of a chat-completion body."""
    content = _extract_message_content(body)
    if isinstance(content, dict):
        return content
    if isinstance(content, list):
        content = _join_text_parts(content)
    if not isinstance(content, str):
        raise AnalysisValidationError(
            f"Unexpected response content type: {type(content).__name__}"
        )
    return _parse_json_text(content)


def _extract_message_content(body: Any) -> Any:
    content = None
    if isinstance(body, dict):
        choices = body.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict):
                content = message.get("content")
    if not content:
        raise AnalysisValidationError("No response content from API")
    return content


def _join_text_parts(parts: list[Any]) -> str:
    chunks: list[str] = []
    for item in parts:
        if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str):
            chunks.append(item["text"])
    if not chunks:
        raise AnalysisValidationError("No response content from API")
    return "\n".join(chunks)


def _parse_json_text(text: str) -> dict[str, Any]:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        match = _EMBEDDED_OBJECT_RE.search(text)
        if not match:
            raise AnalysisValidationError("Could not parse JSON from API response") from None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise AnalysisValidationError(f"Could not parse JSON from API response: {exc}") from exc

    if not isinstance(parsed, dict):
        raise AnalysisValidationError(
            f"Expected a JSON object in API response, got {type(parsed).__name__}"
        )
    return parsed
