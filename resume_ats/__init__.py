"""
Resume ATS analysis engine.

`create_engine` wires settings, logging, Redis, the API key pool, the AI
client, the result cache and the rule-based scorer into one explicitly
constructed HybridAnalysisEngine.
"""
import logging
import re
from typing import Optional

import redis

from config.settings import Settings
from resume_ats.exceptions import (
    ATSEngineError,
    CacheError,
    ParseError,
    ServiceUnavailable,
    ValidationError,
    ValidationReason,
)
from resume_ats.schemas import AnalysisResult, AnalysisSource
from resume_ats.services.ai_analysis import AIAnalysisClient, APIKeyPool, GeminiProvider, RequestLog
from resume_ats.services.ai_analysis.providers import TextGenerationProvider
from resume_ats.services.ats_scorer import RuleBasedScorer
from resume_ats.services.hybrid_engine import AnalysisTier, HybridAnalysisEngine, TieredResult
from resume_ats.services.result_cache import TwoTierCache
from resume_ats.utils.circuit_breaker import CircuitBreaker
from resume_ats.utils.redis_client import RedisClient

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

_URL_CREDENTIALS = re.compile(r"//[^@/]*@")


def setup_logging(settings: Settings) -> None:
    """Setup logging for the resume_ats logger tree."""
    package_logger = logging.getLogger("resume_ats")

    # Idempotent: repeated engine construction must not stack handlers
    for handler in list(package_logger.handlers):
        if getattr(handler, "_resume_ats_handler", False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._resume_ats_handler = True
    if settings.log_format == "json":
        from pythonjsonlogger import jsonlogger

        handler.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, settings.log_level))

    logger.info(
        "Resume ATS engine logging initialized",
        extra={
            "environment": settings.environment,
            "debug": settings.debug,
            "testing": settings.is_testing,
        },
    )


def setup_redis(settings: Settings) -> Optional[redis.Redis]:
    """Setup the Redis connection for the durable cache tier.

    Returns None (memory-only caching) when Redis is disabled or unreachable,
    except in production where an unreachable Redis is fatal.
    """
    redis_url = settings.redis_cache_url
    if not redis_url:
        logger.info("Redis cache disabled, using memory cache only")
        return None

    safe_url = _URL_CREDENTIALS.sub("//***@", redis_url)
    try:
        redis_conn = redis.from_url(redis_url, decode_responses=True)
        redis_conn.ping()
        logger.info(f"Redis connected: {safe_url}")
        return redis_conn
    except (redis.RedisError, ValueError) as e:
        logger.error(f"Failed to connect to Redis at {safe_url}: {e}")
        if settings.is_production:
            raise
        return None


def create_engine(
    settings: Optional[Settings] = None,
    *,
    redis_connection: Optional[redis.Redis] = None,
    provider: Optional[TextGenerationProvider] = None,
    configure_logging: bool = True,
) -> HybridAnalysisEngine:
    """
    Build a fully wired analysis engine.

    Args:
        settings: Engine settings; defaults to the environment-loaded settings
        redis_connection: Existing Redis connection; skips setup_redis
        provider: Text generation provider; defaults to Gemini
        configure_logging: Install the package log handler

    Returns:
        HybridAnalysisEngine. Without API keys the engine runs rules only.
    """
    if settings is None:
        from config.settings import settings as default_settings
        settings = default_settings

    if configure_logging:
        setup_logging(settings)

    scorer = RuleBasedScorer()

    api_keys = settings.api_key_list
    if not api_keys:
        logger.warning("No Gemini API keys configured, AI analysis disabled")
        return HybridAnalysisEngine(scorer=scorer, ai_client=None)

    if redis_connection is None:
        redis_connection = setup_redis(settings)

    cache = TwoTierCache(
        redis_client=RedisClient(redis_connection) if redis_connection is not None else None,
        memory_ttl=settings.cache_memory_ttl,
        redis_ttl=settings.cache_redis_ttl,
        max_entries=settings.cache_max_entries,
        refresh_threshold=settings.cache_refresh_threshold,
    )

    ai_client = AIAnalysisClient(
        key_pool=APIKeyPool(api_keys),
        provider=provider or GeminiProvider(
            model_name=settings.gemini_model,
            temperature=settings.ai_temperature,
            max_output_tokens=settings.ai_max_output_tokens,
        ),
        cache=cache,
        request_log=RequestLog(max_size=settings.request_log_size),
        circuit_breaker=CircuitBreaker(
            name="gemini_ats",
            fail_max=settings.circuit_fail_max,
            reset_timeout=settings.circuit_reset_timeout,
        ),
        max_attempts=settings.ai_max_attempts,
        base_delay=settings.ai_retry_base_delay,
        max_delay=settings.ai_retry_max_delay,
        timeout=settings.ai_request_timeout,
    )

    logger.info(f"Resume ATS engine created with {len(api_keys)} API key(s)")
    return HybridAnalysisEngine(scorer=scorer, ai_client=ai_client)


__all__ = [
    "ATSEngineError",
    "AnalysisResult",
    "AnalysisSource",
    "AnalysisTier",
    "CacheError",
    "HybridAnalysisEngine",
    "ParseError",
    "ServiceUnavailable",
    "TieredResult",
    "ValidationError",
    "ValidationReason",
    "create_engine",
    "setup_logging",
    "setup_redis",
]
