from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from .errors import AnalysisConfigError

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_TIMEOUT_SECONDS = 90.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ProviderConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    use_json_schema: bool = True
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        api_key = _env_str("API_KEY") or _env_str("OPENAI_API_KEY")
        if not api_key:
            raise AnalysisConfigError(
                "API_KEY or OPENAI_API_KEY is not set. "
                "Please add your API key to the environment and restart the server."
            )

        base_url = _env_str("API_BASE_URL") or DEFAULT_BASE_URL
        if not base_url.lower().startswith(("http://", "https://")):
            raise AnalysisConfigError(
                f"API_BASE_URL must be an http(s) URL, got '{base_url}'."
            )

        return cls(
            api_key=api_key,
            base_url=base_url,
            model=_env_str("API_MODEL") or DEFAULT_MODEL,
            use_json_schema=_parse_bool_env("USE_JSON_SCHEMA", default=True),
            timeout_seconds=_parse_timeout_seconds(
                os.getenv("REQUEST_TIMEOUT_SECONDS"),
                fallback=DEFAULT_TIMEOUT_SECONDS,
            ),
        )

    @property
    def chat_completions_url(self) -> str:
        return f"{self.base_url.strip().rstrip('/')}/chat/completions"

    def availability(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "model": self.model,
            "use_json_schema": self.use_json_schema,
            "configured": bool(self.api_key),
        }


def describe_env_config() -> dict[str, Any]:
    """Summary of the environment configuration that never raises."""
    try:
        return ProviderConfig.from_env().availability()
    except AnalysisConfigError as exc:
        return {
            "base_url": _env_str("API_BASE_URL") or DEFAULT_BASE_URL,
            "model": _env_str("API_MODEL") or DEFAULT_MODEL,
            "use_json_schema": _env_str("USE_JSON_SCHEMA").lower() not in _FALSE_VALUES,
            "configured": False,
            "error": str(exc),
        }


def _env_str(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _parse_bool_env(name: str, *, default: bool) -> bool:
    """Read a boolean flag from the environment.

    Besides the literal ``"false"``, the spellings ``0``, ``no`` and ``off``
    (any case) also switch a flag off, and ``1/true/yes/on`` switch it on.
    Unset or empty means ``default``; any other value is a configuration error.
    """
    value = _env_str(name).lower()
    if not value:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise AnalysisConfigError(
        f"{name} must be one of true/false (got '{value}')."
    )


def _parse_timeout_seconds(raw_value: str | None, *, fallback: float) -> float:
    if raw_value is None:
        return fallback
    try:
        parsed = float(raw_value)
    except ValueError:
        return fallback
    if parsed <= 0:
        return fallback
    return parsed
