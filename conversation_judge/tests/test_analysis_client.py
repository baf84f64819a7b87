from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from conversation_judge.analysis_client import AnalysisClient  # noqa: E402
from conversation_judge.config import ProviderConfig  # noqa: E402
from conversation_judge.errors import (  # noqa: E402
    AnalysisValidationError,
    ProviderAuthError,
    ProviderBadRequestError,
    ProviderNotFoundError,
    ProviderRateLimitError,
    ProviderTransportError,
    ProviderUnknownError,
)

VALID_RESULT = {
    "wrong": ["Alex"],
    "unsolicitedAdvice": [],
    "rude": ["Jordan"],
    "summary": "Alex misremembered the date; Jordan was curt.",
}


class _ScriptedProvider:
    def __init__(self, responses: list[httpx.Response]) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


class _RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _success(content) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _rate_limited() -> httpx.Response:
    return httpx.Response(429, json={"error": {"message": "Rate limit reached for gpt-4o"}})


def _client(provider: _ScriptedProvider, sleep: _RecordingSleep | None = None, **config_overrides) -> AnalysisClient:
    config = ProviderConfig(api_key="sk-test", **config_overrides)
    return AnalysisClient(
        config=config,
        transport=httpx.MockTransport(provider),
        sleep=sleep or _RecordingSleep(),
    )


def test_send_posts_payload_with_bearer_auth():
    provider = _ScriptedProvider([_success(json.dumps(VALID_RESULT))])
    client = _client(provider, base_url="https://llm.example.com/v1/")

    result = asyncio.run(client.send({"model": "gpt-4o", "messages": []}))

    assert result.wrong == ("Alex",)
    assert result.rude == ("Jordan",)
    request = provider.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://llm.example.com/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {"model": "gpt-4o", "messages": []}


def test_send_retries_rate_limit_with_exponential_backoff():
    provider = _ScriptedProvider([_rate_limited(), _rate_limited(), _rate_limited(), _success(VALID_RESULT)])
    sleep = _RecordingSleep()

    result = asyncio.run(_client(provider, sleep).send({"model": "gpt-4o"}))

    assert result.summary == VALID_RESULT["summary"]
    assert len(provider.requests) == 4
    assert sleep.delays == [2.0, 4.0, 8.0]
    assert sum(sleep.delays) == 14.0


def test_send_surfaces_rate_limit_after_exhausting_retries():
    provider = _ScriptedProvider([_rate_limited() for _ in range(5)])
    sleep = _RecordingSleep()

    with pytest.raises(ProviderRateLimitError) as excinfo:
        asyncio.run(_client(provider, sleep).send({"model": "gpt-4o"}))

    assert len(provider.requests) == 4
    assert len(provider.responses) == 1
    assert sleep.delays == [2.0, 4.0, 8.0]
    assert excinfo.value.status_code == 429
    assert excinfo.value.detail == "Rate limit reached for gpt-4o"


@pytest.mark.parametrize(
    ("status_code", "error_cls"),
    [
        (400, ProviderBadRequestError),
        (401, ProviderAuthError),
        (404, ProviderNotFoundError),
        (500, ProviderUnknownError),
    ],
)
def test_send_does_not_retry_other_error_statuses(status_code, error_cls):
    provider = _ScriptedProvider([httpx.Response(status_code, json={"message": "nope"}), _success(VALID_RESULT)])
    sleep = _RecordingSleep()

    with pytest.raises(error_cls) as excinfo:
        asyncio.run(_client(provider, sleep).send({"model": "gpt-4o"}))

    assert len(provider.requests) == 1
    assert sleep.delays == []
    assert excinfo.value.status_code == status_code
    assert excinfo.value.detail == "nope"


def test_error_detail_prefers_nested_error_message():
    body = {"error": {"message": "model does not support images"}, "message": "outer"}
    provider = _ScriptedProvider([httpx.Response(400, json=body)])

    with pytest.raises(ProviderBadRequestError) as excinfo:
        asyncio.run(_client(provider).send({}))

    assert excinfo.value.detail == "model does not support images"
    assert excinfo.value.error_body == body


def test_error_detail_accepts_plain_string_error():
    provider = _ScriptedProvider([httpx.Response(503, json={"error": "upstream overloaded"})])

    with pytest.raises(ProviderUnknownError) as excinfo:
        asyncio.run(_client(provider).send({}))

    assert excinfo.value.detail == "upstream overloaded"


def test_error_detail_falls_back_to_reason_phrase_for_undecodable_body():
    provider = _ScriptedProvider([httpx.Response(404, text="<html>missing</html>")])

    with pytest.raises(ProviderNotFoundError) as excinfo:
        asyncio.run(_client(provider).send({}))

    assert excinfo.value.detail == "Not Found"
    assert excinfo.value.error_body is None


def test_network_failure_is_transport_error_and_not_retried():
    calls: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = AnalysisClient(
        config=ProviderConfig(api_key="sk-test"),
        transport=httpx.MockTransport(_handler),
        sleep=_RecordingSleep(),
    )

    with pytest.raises(ProviderTransportError, match="connection refused"):
        asyncio.run(client.send({}))
    assert len(calls) == 1


@pytest.mark.parametrize(
    "config_overrides",
    [
        {"api_key": "sk-tést"},
        {"api_key": "sk-test", "base_url": "http://[::1/v1"},
    ],
)
def test_unsendable_request_is_transport_error(config_overrides):
    provider = _ScriptedProvider([_success(VALID_RESULT)])
    client = AnalysisClient(
        config=ProviderConfig(**config_overrides),
        transport=httpx.MockTransport(provider),
        sleep=_RecordingSleep(),
    )

    with pytest.raises(ProviderTransportError, match="HTTP request failed"):
        asyncio.run(client.send({}))
    assert provider.requests == []


def test_undecodable_success_body_is_transport_error():
    provider = _ScriptedProvider([httpx.Response(200, text="not json")])

    with pytest.raises(ProviderTransportError, match="not valid JSON"):
        asyncio.run(_client(provider).send({}))


def test_success_with_invalid_shape_is_validation_error():
    broken = dict(VALID_RESULT)
    broken["rude"] = None
    provider = _ScriptedProvider([_success(json.dumps(broken))])

    with pytest.raises(AnalysisValidationError, match="rude"):
        asyncio.run(_client(provider).send({}))


def test_retry_delay_doubles_from_base():
    client = AnalysisClient(config=ProviderConfig(api_key="sk-test"))

    assert [client.retry_delay(index) for index in range(3)] == [2.0, 4.0, 8.0]
