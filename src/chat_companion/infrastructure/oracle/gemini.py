"""Gemini text oracle."""

import asyncio
import time
from typing import Any

from google import genai
from google.genai import types

from chat_companion.core.base import AIServiceErrorDetails, ApplicationError, ErrorCode
from chat_companion.core.circuit_breaker import CircuitBreaker, CircuitOpenError
from chat_companion.core.config import OracleConfig
from chat_companion.core.errors import AuthenticationError, OracleError, TimeoutError
from chat_companion.core.logging import get_logger
from chat_companion.domain.models.oracle import OracleFailure, OracleSuccess

logger = get_logger(__name__)

SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_ONLY_HIGH)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
    )
]


class GeminiOracle:
    """Gemini-backed implementation of the TextOracle protocol.

    Calls run under a timeout and behind a circuit breaker. Every failure,
    including refusals and an open circuit, comes back as an ``OracleFailure``
    so callers can fall back to their degraded default.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str,
        config: OracleConfig | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize the oracle.

        Args:
            api_key: Gemini API key
            model_name: Gemini model to call
            config: Timeout and circuit breaker settings
            client: Pre-built client exposing ``aio.models.generate_content``

        Raises:
            AuthenticationError: If no API key is configured and no client is given
        """
        self.config = config or OracleConfig()
        self.model_name = model_name

        if client is None:
            if not api_key:
                raise AuthenticationError(
                    message="Gemini API key not found in settings",
                    details=AIServiceErrorDetails(
                        source="GeminiOracle",
                        operation="initialization",
                        service_name="gemini",
                        model_name=model_name,
                    ),
                )
            client = genai.Client(api_key=api_key)
        self.client = client
        self._generation_config = types.GenerateContentConfig(safety_settings=SAFETY_SETTINGS)

        self._circuit_breaker: CircuitBreaker[str] = CircuitBreaker(
            name="gemini_api",
            failure_threshold=self.config.failure_threshold,
            recovery_timeout=self.config.recovery_timeout,
        )

    def _details(self, operation: str, prompt: str, **extra: Any) -> AIServiceErrorDetails:
        return AIServiceErrorDetails(
            source="GeminiOracle",
            operation=operation,
            service_name="gemini",
            model_name=self.model_name,
            prompt_chars=len(prompt),
            **extra,
        )

    async def _call_model(self, prompt: str) -> str:
        """Single model call; wrapped by the circuit breaker."""
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(
                    model=self.model_name,
                    contents=prompt,
                    config=self._generation_config,
                ),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Gemini did not answer within {self.config.timeout_seconds}s",
                details=self._details("generate_content", prompt),
            ) from e

        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None)
        if block_reason:
            raise OracleError(
                "Gemini blocked the prompt",
                details=self._details("generate_content", prompt, block_reason=str(block_reason)),
                code=ErrorCode.MODEL_BLOCKED,
            )

        text = response.text
        if text is None:
            # No text parts, e.g. the candidate was stopped for safety
            candidates = getattr(response, "candidates", None) or []
            finish_reason = getattr(candidates[0], "finish_reason", None) if candidates else None
            raise OracleError(
                f"Gemini returned no text (finish reason: {finish_reason})",
                details=self._details("read_response", prompt, block_reason=str(finish_reason)),
                code=ErrorCode.MODEL_BLOCKED,
            )
        return text

    async def generate(self, prompt: str) -> OracleSuccess | OracleFailure:
        started = time.perf_counter()
        try:
            text = await self._circuit_breaker.call_async(self._call_model, prompt)
        except CircuitOpenError as e:
            return self._failure(e, "circuit_open")
        except TimeoutError as e:
            return self._failure(e, "timeout")
        except OracleError as e:
            error_type = "blocked" if e.code == ErrorCode.MODEL_BLOCKED else "error"
            return self._failure(e, error_type)
        except Exception as e:
            return self._failure(e, "error")

        logger.debug(
            "Gemini call succeeded",
            extra={"model": self.model_name, "latency_ms": round((time.perf_counter() - started) * 1000, 1)},
        )
        return OracleSuccess(text=text or "")

    def _failure(self, error: Exception, error_type: str) -> OracleFailure:
        code = error.code.value if isinstance(error, ApplicationError) else None
        logger.warning(
            "Gemini call failed",
            extra={
                "model": self.model_name,
                "error_type": error_type,
                "error_code": code,
                "error": str(error),
                "circuit": self._circuit_breaker.get_state()["state"],
            },
        )
        return OracleFailure(reason=str(error), error_type=error_type)
