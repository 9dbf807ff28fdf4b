"""
Selah Backend — Gemini Service Tests
=====================================

The breaker runs on an injected clock; GeminiService runs with the
google.generativeai module and `settings` patched, so nothing leaves the
process.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.exceptions import CircuitBreakerOpenError, LLMServiceError
from app.services.gemini_service import CircuitBreaker, GeminiService


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def _tripped(clock, threshold=3, timeout=60):
    breaker = CircuitBreaker(failure_threshold=threshold, recovery_timeout=timeout, clock=clock)
    for _ in range(threshold):
        breaker.record_failure()
    return breaker


def test_breaker_starts_closed(clock):
    breaker = CircuitBreaker(clock=clock)
    assert (breaker.state, breaker.failure_count) == ("closed", 0)
    assert breaker.can_execute() is True


def test_failures_below_threshold_keep_it_closed(clock):
    breaker = CircuitBreaker(failure_threshold=5, clock=clock)
    for _ in range(4):
        breaker.record_failure()
    assert breaker.state == "closed"
    assert breaker.can_execute() is True


def test_threshold_opens_and_reports_remaining_time(clock):
    breaker = _tripped(clock, timeout=60)
    assert breaker.state == "open"

    clock.now += 15
    with pytest.raises(CircuitBreakerOpenError) as exc_info:
        breaker.can_execute()
    assert exc_info.value.recovery_time == 45


def test_success_clears_failures(clock):
    breaker = CircuitBreaker(failure_threshold=5, clock=clock)
    breaker.record_failure()
    breaker.record_failure()
    breaker.record_success()
    assert (breaker.state, breaker.failure_count) == ("closed", 0)


@pytest.mark.parametrize("probe_succeeds, final_state", [(True, "closed"), (False, "open")])
def test_half_open_probe(clock, probe_succeeds, final_state):
    breaker = _tripped(clock, timeout=60)
    clock.now += 60

    assert breaker.can_execute() is True
    assert breaker.state == "half_open"

    if probe_succeeds:
        breaker.record_success()
    else:
        breaker.record_failure()
    assert breaker.state == final_state


def test_reopened_breaker_restarts_its_timer(clock):
    breaker = _tripped(clock, timeout=60)
    clock.now += 60
    breaker.can_execute()
    breaker.record_failure()

    clock.now += 30
    with pytest.raises(CircuitBreakerOpenError):
        breaker.can_execute()


def _settings(configured: bool) -> MagicMock:
    return MagicMock(
        gemini_configured=configured,
        gemini_api_key="test-key" if configured else "",
        gemini_model="gemini-test",
        gemini_timeout=30,
        cb_failure_threshold=2,
        cb_recovery_timeout=60,
        retry_max_attempts=1,
        retry_min_wait=1,
        retry_max_wait=5,
    )


@pytest.fixture
def genai():
    with patch("app.services.gemini_service.genai") as fake:
        fake.GenerativeModel.return_value.generate_content_async = AsyncMock()
        yield fake


@pytest.fixture
def configured():
    with patch("app.services.gemini_service.settings", new=_settings(True)):
        yield


@pytest.fixture
def unconfigured():
    with patch("app.services.gemini_service.settings", new=_settings(False)):
        yield


@pytest.mark.asyncio
async def test_generate_returns_stripped_answer(genai, configured):
    genai.GenerativeModel.return_value.generate_content_async.return_value = MagicMock(
        text='  {"bibleReferences": []}  '
    )
    service = GeminiService()

    assert await service.generate("prompt") == '{"bibleReferences": []}'
    assert service.circuit_breaker.state == "closed"
    genai.configure.assert_called_once_with(api_key="test-key")


@pytest.mark.asyncio
async def test_missing_key_fails_without_calling_gemini(genai, unconfigured):
    with pytest.raises(LLMServiceError) as exc_info:
        await GeminiService().generate("prompt")

    assert exc_info.value.context["reason"] == "missing_api_key"
    genai.GenerativeModel.return_value.generate_content_async.assert_not_awaited()


@pytest.mark.asyncio
async def test_open_breaker_short_circuits(genai, configured):
    service = GeminiService()
    service.circuit_breaker.record_failure()
    service.circuit_breaker.record_failure()

    with pytest.raises(CircuitBreakerOpenError):
        await service.generate("prompt")
    genai.GenerativeModel.return_value.generate_content_async.assert_not_awaited()


@pytest.mark.asyncio
async def test_api_error_becomes_llm_error_and_counts(genai, configured):
    genai.GenerativeModel.return_value.generate_content_async.side_effect = RuntimeError("quota exceeded")
    service = GeminiService()

    with pytest.raises(LLMServiceError) as exc_info:
        await service.generate("prompt")

    assert exc_info.value.context["error_type"] == "RuntimeError"
    assert service.circuit_breaker.failure_count == 1


@pytest.mark.asyncio
async def test_health_check_unconfigured(genai, unconfigured):
    assert await GeminiService().health_check() is False
    genai.list_models.assert_not_called()


@pytest.mark.asyncio
async def test_health_check_lists_models(genai, configured):
    model = MagicMock()
    model.name = "models/gemini-test"
    genai.list_models.return_value = [model]

    assert await GeminiService().health_check() is True
