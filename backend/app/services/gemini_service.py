"""
Selah Backend — Gemini Annotator Backend
=========================================

What:  LLMService implementation that asks Google Gemini to annotate sermon
       transcripts and hands back the model's raw JSON answer.
Who:   `gemini_service` is the process-wide instance used by
       AnnotationService and probed by GET /health.

Call path for one annotation:

    generate(prompt)
      ├─ no API key?              → LLMServiceError(reason=missing_api_key)
      ├─ breaker.can_execute()    → CircuitBreakerOpenError while open
      ├─ _call_gemini_with_retry  → tenacity AsyncRetrying, jittered backoff
      └─ breaker.record_success() / record_failure()

Retry attempts, waits and breaker thresholds come from settings and are read
per call, so tests and config reloads see the current values.
"""

import asyncio
import logging
import time
import uuid
from typing import Callable, Optional

import google.generativeai as genai
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import settings
from app.exceptions import CircuitBreakerOpenError, LLMServiceError
from app.services.llm_base import LLMService

logger = logging.getLogger(__name__)

# Transcripts are short prose; the annotator only needs a small JSON object back
GENERATION_CONFIG = {
    "temperature": 0.2,
    "response_mime_type": "application/json",
}


class CircuitBreaker:
    """
    Three-state breaker guarding the Gemini client.

        closed ──(failure_threshold consecutive failures)──▶ open
        open ──(recovery_timeout elapsed, next call)──▶ half_open
        half_open ──success──▶ closed
        half_open ──failure──▶ open

    One instance per worker process; state lives in plain attributes because
    every request of a worker runs on the same event loop.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.clock = clock
        self.state = self.CLOSED
        self.failure_count = 0
        self.opened_at: Optional[float] = None

    def _seconds_open(self) -> float:
        return self.clock() - (self.opened_at or 0.0)

    def can_execute(self) -> bool:
        """True when a call may go out; raises while the breaker is open."""
        if self.state != self.OPEN:
            return True

        waited = self._seconds_open()
        if waited < self.recovery_timeout:
            raise CircuitBreakerOpenError(recovery_time=max(int(self.recovery_timeout - waited), 1))

        logger.info("Gemini breaker half-open after %.1fs, letting one call through", waited)
        self.state = self.HALF_OPEN
        return True

    def record_success(self) -> None:
        if self.state != self.CLOSED:
            logger.info("Gemini breaker closed again")
        self.state = self.CLOSED
        self.failure_count = 0
        self.opened_at = None

    def record_failure(self) -> None:
        self.failure_count += 1
        trip = self.state == self.HALF_OPEN or self.failure_count >= self.failure_threshold
        if not trip:
            return
        if self.state != self.OPEN:
            logger.warning("Gemini breaker open (%d consecutive failures)", self.failure_count)
        self.state = self.OPEN
        self.opened_at = self.clock()


class GeminiService(LLMService):

    def __init__(self):
        if settings.gemini_configured:
            genai.configure(api_key=settings.gemini_api_key)
        self.model = genai.GenerativeModel(
            settings.gemini_model, generation_config=GENERATION_CONFIG
        )
        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )
        logger.debug(
            "Gemini annotator ready (model=%s, configured=%s)",
            settings.gemini_model,
            settings.gemini_configured,
        )

    async def generate(self, prompt: str) -> str:
        """
        Raises:
            LLMServiceError: No API key, or every attempt failed
            CircuitBreakerOpenError: Too many recent failures
        """
        if not settings.gemini_configured:
            raise LLMServiceError(
                message="AI annotation is not configured on this server.",
                context={"reason": "missing_api_key"},
            )

        self.circuit_breaker.can_execute()
        call_id = uuid.uuid4().hex[:8]

        try:
            answer = await self._call_gemini_with_retry(prompt, call_id)
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Gemini annotation failed (%s): %s", call_id, type(e).__name__, str(e)
            )
            raise LLMServiceError(
                message="AI annotation is temporarily unavailable. Please try again later.",
                retry_after=self.circuit_breaker.recovery_timeout,
                context={"call_id": call_id, "error_type": type(e).__name__},
            )

        self.circuit_breaker.record_success()
        return answer

    async def _call_gemini_with_retry(self, prompt: str, call_id: str) -> str:
        retrying = AsyncRetrying(
            # The SDK surfaces API and transport errors as assorted exception types
            retry=retry_if_exception_type(Exception),
            stop=stop_after_attempt(settings.retry_max_attempts),
            wait=wait_exponential_jitter(
                initial=settings.retry_min_wait, max=settings.retry_max_wait, jitter=1
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                started = time.perf_counter()
                response = await self.model.generate_content_async(
                    prompt, request_options={"timeout": settings.gemini_timeout}
                )
                text = (response.text or "").strip()
                logger.info(
                    "[%s] Gemini answered in %.0fms (attempt %d, %d chars in, %d out)",
                    call_id,
                    (time.perf_counter() - started) * 1000,
                    attempt.retry_state.attempt_number,
                    len(prompt),
                    len(text),
                )
                return text

    async def health_check(self) -> bool:
        """Lists models (free) to prove the key works; False when unconfigured."""
        if not settings.gemini_configured:
            return False
        try:
            models = await asyncio.to_thread(lambda: [m.name for m in genai.list_models()])
        except Exception as e:
            logger.warning("Gemini health probe failed: %s", str(e))
            return False
        if f"models/{settings.gemini_model}" not in models:
            logger.warning("Gemini model %s is not offered to this key", settings.gemini_model)
        return True


gemini_service = GeminiService()
