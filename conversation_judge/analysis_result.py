from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jsonschema

from .errors import AnalysisValidationError

RESULT_PROPERTIES: dict[str, dict[str, Any]] = {
    "wrong": {
        "type": "array",
        "items": {"type": "string"},
        "description": "List of people who were wrong in the conversation",
    },
    "unsolicitedAdvice": {
        "type": "array",
        "items": {"type": "string"},
        "description": "List of people who gave unsolicited advice",
    },
    "rude": {
        "type": "array",
        "items": {"type": "string"},
        "description": "List of people who were being rude",
    },
    "summary": {
        "type": "string",
        "description": "A brief summary of the conversation analysis",
    },
}
REQUIRED_FIELDS = ["wrong", "unsolicitedAdvice", "rude", "summary"]


def build_result_schema(*, forbid_extra_keys: bool) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {name: dict(definition) for name, definition in RESULT_PROPERTIES.items()},
        "required": list(REQUIRED_FIELDS),
        "additionalProperties": not forbid_extra_keys,
    }


# Extra keys are tolerated on the way in; the strict copy is what providers enforce.
_RESULT_VALIDATOR = jsonschema.Draft202012Validator(build_result_schema(forbid_extra_keys=False))


@dataclass(frozen=True)
class AnalysisResult:
    wrong: tuple[str, ...]
    unsolicited_advice: tuple[str, ...]
    rude: tuple[str, ...]
    summary: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "wrong": list(self.wrong),
            "unsolicitedAdvice": list(self.unsolicited_advice),
            "rude": list(self.rude),
            "summary": self.summary,
        }


def validate_analysis_result(candidate: Any) -> AnalysisResult:
    """Check ``candidate`` against the result shape and build an AnalysisResult.

    Values are never repaired: a ``null`` where a list is expected fails
    validation instead of becoming an empty list. The error names the first
    violated constraint.
    """
    error = next(iter(_RESULT_VALIDATOR.iter_errors(candidate)), None)
    if error is not None:
        location = ".".join(str(part) for part in error.absolute_path)
        prefix = f"{location}: " if location else ""
        raise AnalysisValidationError(f"{prefix}{error.message}")

    return AnalysisResult(
        wrong=tuple(candidate["wrong"]),
        unsolicited_advice=tuple(candidate["unsolicitedAdvice"]),
        rude=tuple(candidate["rude"]),
        summary=candidate["summary"],
    )
