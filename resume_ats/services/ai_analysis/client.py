"""
AI Analysis Client

Builds the ATS prompt, sends it to the generative-text provider with
timeout, exponential backoff and API-key rotation, and parses the response
into an AnalysisResult.

Per request cycle:
    Sending -> Success
            -> quota error, untried key left -> rotate, retry immediately
            -> retriable error -> backoff, retry
            -> credential error -> ServiceUnavailable, no retry
After the attempt budget is spent the client raises ServiceUnavailable.
"""
import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional, Set

from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from resume_ats.exceptions import ParseError, ServiceUnavailable
from resume_ats.schemas import AnalysisResult
from resume_ats.services.ai_analysis.api_key_pool import APIKeyPool
from resume_ats.services.ai_analysis.prompt_builder import PROMPT_VERSION, build_ats_prompt
from resume_ats.services.ai_analysis.providers import TextGenerationProvider
from resume_ats.services.ai_analysis.request_log import RequestLog
from resume_ats.services.ai_analysis.response_parser import parse_ats_response
from resume_ats.services.result_cache import TwoTierCache
from resume_ats.utils.circuit_breaker import CircuitBreaker, CircuitBreakerError

logger = logging.getLogger(__name__)


CACHE_PREFIX = "ats_v2"
OPERATION = "atsAnalysis"


class ProviderErrorKind(Enum):
    """Classification of a provider failure."""
    QUOTA = "quota"
    TIMEOUT = "timeout"
    CREDENTIAL = "credential"
    TRANSIENT = "transient"


_QUOTA_MARKERS = (
    "quota", "rate limit", "rate-limit", "ratelimit", "429",
    "resource exhausted", "resource_exhausted", "resourceexhausted", "too many requests",
)
_CREDENTIAL_MARKERS = (
    "api key", "api_key", "apikey", "permission denied", "permission_denied", "permissiondenied",
    "unauthenticated", "unauthorized", "401", "403", "billing",
)
_TIMEOUT_MARKERS = ("timeout", "timed out", "deadline exceeded", "deadline_exceeded", "deadlineexceeded")


def classify_error(error: BaseException) -> ProviderErrorKind:
    """
    Classify a provider exception from its type and message.

    Quota markers win over credential markers, so "quota exceeded for
    API key" rotates instead of aborting.
    """
    if isinstance(error, TimeoutError):
        return ProviderErrorKind.TIMEOUT
    message = f"{type(error).__name__} {error}".lower()
    if any(marker in message for marker in _QUOTA_MARKERS):
        return ProviderErrorKind.QUOTA
    if any(marker in message for marker in _CREDENTIAL_MARKERS):
        return ProviderErrorKind.CREDENTIAL
    if any(marker in message for marker in _TIMEOUT_MARKERS):
        return ProviderErrorKind.TIMEOUT
    return ProviderErrorKind.TRANSIENT


class RetriableAIError(Exception):
    """An attempt failed in a way another attempt may fix."""

    def __init__(self, message: str, kind: Optional[ProviderErrorKind] = None):
        super().__init__(message)
        self.kind = kind


class FatalAIError(Exception):
    """An attempt failed in a way no retry can fix."""
    pass


class _Cycle:
    """Mutable bookkeeping for one request cycle."""

    def __init__(self):
        self.attempts = 0
        self.rotations = 0
        self.rotated_last = False
        self.tried: Set[int] = set()


class AIAnalysisClient:
    """
    Client for AI-powered ATS analysis.

    Shared state (key pool, request log, circuit breaker, cache) is passed
    in by the caller; each of those objects is thread-safe on its own.
    """

    def __init__(
        self,
        key_pool: Optional[APIKeyPool],
        provider: TextGenerationProvider,
        cache: Optional[TwoTierCache] = None,
        request_log: Optional[RequestLog] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        timeout: float = 45.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            key_pool: Credentials; None means the AI path is not configured
            provider: Generative-text provider
            cache: Result cache; None disables caching
            request_log: Request ring buffer for health reporting
            circuit_breaker: Breaker around whole request cycles
            max_attempts: Attempt budget per request cycle
            base_delay: First backoff delay in seconds (doubles per attempt)
            max_delay: Backoff cap in seconds
            timeout: Per-request timeout in seconds
            sleep: Sleep function used between attempts
        """
        self.key_pool = key_pool
        self.provider = provider
        self.cache = cache
        self.request_log = request_log or RequestLog()
        self.circuit_breaker = circuit_breaker
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.timeout = timeout
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(self, resume_text: str, job_description: str = "") -> AnalysisResult:
        """
        Analyze normalized resume text, optionally against a job description.

        Args:
            resume_text: Normalized resume text
            job_description: Normalized job description, may be empty

        Returns:
            AnalysisResult with metadata.source == "ai"

        Raises:
            ServiceUnavailable: Provider unusable after the retry policy
        """
        if self.cache is None:
            return self._analyze_uncached(resume_text, job_description)

        key = TwoTierCache.generate_key(CACHE_PREFIX, resume_text, job_description)
        computed_by = set()

        def produce():
            computed_by.add(threading.get_ident())
            return self._analyze_uncached(resume_text, job_description).model_dump(mode="json")

        payload = self.cache.get_or_compute(key, produce)
        try:
            result = AnalysisResult.model_validate(payload)
        except PydanticValidationError as e:
            # Written by an older schema or corrupted; drop it and recompute
            logger.warning(f"Discarding invalid cached AI analysis {key}: {e.error_count()} errors")
            self.cache.delete(key)
            result = self._analyze_uncached(resume_text, job_description)
            self.cache.set(key, result.model_dump(mode="json"))
            return result

        if threading.get_ident() not in computed_by:
            logger.info("AI analysis served from cache")
            result = result.model_copy(update={'metadata': result.metadata.model_copy(update={'cached': True})})
        return result

    def get_health_status(self) -> dict:
        """Key, request and circuit breaker health."""
        status = {
            'initialized': self.key_pool is not None,
            'model': getattr(self.provider, 'model_name', type(self.provider).__name__),
            'api_keys_configured': len(self.key_pool) if self.key_pool else 0,
            'current_key_index': self.key_pool.current_index if self.key_pool else None,
        }
        status.update(self.request_log.summary())
        status['circuit_breaker'] = self.circuit_breaker.get_status() if self.circuit_breaker else None
        status['keys'] = self.usage_stats()
        return status

    def usage_stats(self) -> list:
        return self.key_pool.usage_stats() if self.key_pool else []

    # ------------------------------------------------------------------
    # Request cycle
    # ------------------------------------------------------------------

    def _analyze_uncached(self, resume_text: str, job_description: str) -> AnalysisResult:
        if self.key_pool is None:
            raise ServiceUnavailable("AI analysis is not configured (no API keys)")

        run_cycle = self._run_cycle
        if self.circuit_breaker is not None:
            run_cycle = self.circuit_breaker(run_cycle)

        try:
            return run_cycle(build_ats_prompt(resume_text, job_description), bool(job_description))
        except CircuitBreakerError as e:
            raise ServiceUnavailable(str(e)) from e

    def _run_cycle(self, prompt: str, has_job_description: bool) -> AnalysisResult:
        cycle = _Cycle()
        backoff = wait_exponential(multiplier=self.base_delay, max=self.max_delay)

        def wait_strategy(retry_state: RetryCallState) -> float:
            # A rotation is its own recovery; no delay before the next key
            if cycle.rotated_last:
                return 0
            return backoff(retry_state)

        def log_retry(retry_state: RetryCallState):
            error = retry_state.outcome.exception()
            logger.warning(
                f"AI attempt {retry_state.attempt_number}/{self.max_attempts} failed: {error}; "
                f"retrying in {retry_state.next_action.sleep:.1f}s",
                extra={'attempt': retry_state.attempt_number, 'rotated': cycle.rotated_last},
            )

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_strategy,
            retry=retry_if_exception_type(RetriableAIError),
            before_sleep=log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            return retrying(self._attempt, cycle, prompt, has_job_description)
        except FatalAIError as e:
            logger.error(f"AI analysis aborted: {e}", extra={'attempt': cycle.attempts})
            raise ServiceUnavailable(str(e), attempts=cycle.attempts, key_rotations=cycle.rotations) from e
        except RetriableAIError as e:
            logger.error(
                f"All {cycle.attempts} AI attempts failed: {e}",
                extra={'attempt': cycle.attempts, 'key_rotations': cycle.rotations},
            )
            raise ServiceUnavailable(
                "AI service temporarily unavailable",
                attempts=cycle.attempts,
                key_rotations=cycle.rotations,
            ) from e

    def _attempt(self, cycle: _Cycle, prompt: str, has_job_description: bool) -> AnalysisResult:
        cycle.attempts += 1
        cycle.rotated_last = False
        index, api_key = self.key_pool.current()
        cycle.tried.add(index)
        key_label = f"{index + 1}/{len(self.key_pool)}"
        started = time.monotonic()

        try:
            text = self.provider.generate(prompt, api_key, self.timeout)
        except Exception as e:
            kind = classify_error(e)
            self.key_pool.record_failure(index, f"{kind.value}: {e}")
            self.request_log.record(
                OPERATION, cycle.attempts, index, success=False,
                duration_ms=(time.monotonic() - started) * 1000,
                error=f"{kind.value}: {e}"[:200], prompt_length=len(prompt),
            )
            logger.warning(
                f"AI request failed ({kind.value}) on key {key_label}",
                extra={'attempt': cycle.attempts, 'key': key_label, 'error_kind': kind.value},
            )

            if kind is ProviderErrorKind.CREDENTIAL:
                raise FatalAIError(f"Invalid API configuration for key {key_label}") from e

            if kind is ProviderErrorKind.QUOTA and len(self.key_pool) > 1:
                new_index = self.key_pool.rotate(index, cycle.tried)
                if new_index is not None:
                    cycle.rotations += 1
                    cycle.rotated_last = True

            raise RetriableAIError(str(e), kind) from e

        duration_ms = (time.monotonic() - started) * 1000
        self.key_pool.record_success(index)

        try:
            result = parse_ats_response(
                text,
                has_job_description=has_job_description,
                prompt_version=PROMPT_VERSION,
                attempts=cycle.attempts,
                key_rotations=cycle.rotations,
            )
        except ParseError as e:
            self.request_log.record(
                OPERATION, cycle.attempts, index, success=False, duration_ms=duration_ms,
                error=f"parse: {e.message}"[:200], prompt_length=len(prompt), response_length=len(text),
            )
            logger.warning(f"Unparseable AI response on key {key_label}: {e.message}", extra={'attempt': cycle.attempts})
            raise RetriableAIError(e.message) from e

        self.request_log.record(
            OPERATION, cycle.attempts, index, success=True, duration_ms=duration_ms,
            prompt_length=len(prompt), response_length=len(text),
        )
        logger.info(
            f"AI analysis succeeded on attempt {cycle.attempts} (key {key_label}, score {result.ats_score})",
            extra={'attempt': cycle.attempts, 'key': key_label, 'key_rotations': cycle.rotations},
        )
        return result
