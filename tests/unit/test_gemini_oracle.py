"""
Unit tests for the Gemini oracle and its circuit breaker.
"""
import asyncio
from types import SimpleNamespace

import pytest

from chat_companion.core.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState
from chat_companion.core.config import OracleConfig
from chat_companion.core.errors import AuthenticationError
from chat_companion.domain.models.oracle import OracleFailure, OracleSuccess
from chat_companion.infrastructure.oracle.gemini import GeminiOracle

pytestmark = pytest.mark.asyncio


class StubClient:
    """Mimics ``client.aio.models.generate_content`` of the genai client."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []
        self.calls = []
        self.aio = SimpleNamespace(models=self)

    async def generate_content(self, *, model, contents, config=None):
        self.calls.append((model, config))
        self.prompts.append(contents)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if response == "hang":
            await asyncio.sleep(10)
        return response


def _no_parts(finish_reason="SAFETY"):
    return SimpleNamespace(
        text=None,
        prompt_feedback=None,
        candidates=[SimpleNamespace(finish_reason=finish_reason)],
    )


def _text(value):
    return SimpleNamespace(text=value, prompt_feedback=SimpleNamespace(block_reason=None))


def _oracle(client, **config):
    return GeminiOracle(api_key="", model_name="gemini-test", config=OracleConfig(**config), client=client)


async def test_success_returns_text():
    client = StubClient(_text("Hello there"))
    result = await _oracle(client).generate("say hi")
    assert result == OracleSuccess(text="Hello there")
    assert client.prompts == ["say hi"]
    model, config = client.calls[0]
    assert model == "gemini-test"
    assert len(config.safety_settings) == 4


async def test_exception_becomes_failure():
    result = await _oracle(StubClient(RuntimeError("quota"))).generate("p")
    assert isinstance(result, OracleFailure)
    assert result.error_type == "error"
    assert "quota" in result.reason


async def test_timeout_becomes_failure():
    result = await _oracle(StubClient("hang"), timeout_seconds=0.01).generate("p")
    assert isinstance(result, OracleFailure)
    assert result.error_type == "timeout"


async def test_blocked_prompt_becomes_failure():
    blocked = SimpleNamespace(text="", prompt_feedback=SimpleNamespace(block_reason="SAFETY"))
    result = await _oracle(StubClient(blocked)).generate("p")
    assert result.error_type == "blocked"


async def test_response_without_parts_becomes_failure():
    result = await _oracle(StubClient(_no_parts())).generate("p")
    assert result.error_type == "blocked"


async def test_open_circuit_short_circuits_calls():
    client = StubClient(RuntimeError("down"), RuntimeError("down"), _text("never"))
    oracle = _oracle(client, failure_threshold=2, recovery_timeout=60)

    await oracle.generate("p")
    await oracle.generate("p")
    result = await oracle.generate("p")

    assert result.error_type == "circuit_open"
    assert len(client.prompts) == 2


def test_missing_api_key_without_client_is_rejected():
    with pytest.raises(AuthenticationError):
        GeminiOracle(api_key="", model_name="gemini-test")


async def test_circuit_breaker_recovers_after_timeout():
    now = [0.0]
    breaker = CircuitBreaker(name="t", failure_threshold=1, recovery_timeout=5, clock=lambda: now[0])

    async def fail():
        raise RuntimeError("x")

    async def ok():
        return "fine"

    with pytest.raises(RuntimeError):
        await breaker.call_async(fail)
    assert breaker.state == CircuitState.OPEN

    with pytest.raises(CircuitOpenError):
        await breaker.call_async(ok)

    now[0] = 6.0
    assert await breaker.call_async(ok) == "fine"
    assert breaker.state == CircuitState.CLOSED
    assert breaker.get_state()["failure_count"] == 0


async def test_half_open_failure_reopens():
    now = [0.0]
    breaker = CircuitBreaker(name="t", failure_threshold=1, recovery_timeout=5, clock=lambda: now[0])

    async def fail():
        raise RuntimeError("x")

    with pytest.raises(RuntimeError):
        await breaker.call_async(fail)
    now[0] = 6.0
    with pytest.raises(RuntimeError):
        await breaker.call_async(fail)
    assert breaker.state == CircuitState.OPEN
