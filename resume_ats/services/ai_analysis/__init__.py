"""
AI Analysis Package

ATS analysis through an external generative-text provider.

Sub-modules:
- api_key_pool: credential rotation and per-key health
- prompt_builder: versioned ATS prompt with the JSON contract
- response_parser: parse, validate and default the model's JSON
- request_log: bounded request history for health reporting
- providers: provider protocol and the Gemini implementation
- client: retry, backoff, rotation and caching around the provider
"""

from resume_ats.services.ai_analysis.api_key_pool import APIKeyPool
from resume_ats.services.ai_analysis.client import AIAnalysisClient, ProviderErrorKind, classify_error
from resume_ats.services.ai_analysis.prompt_builder import PROMPT_VERSION, build_ats_prompt
from resume_ats.services.ai_analysis.providers import GeminiProvider, TextGenerationProvider
from resume_ats.services.ai_analysis.request_log import RequestLog
from resume_ats.services.ai_analysis.response_parser import parse_ats_response

__all__ = [
    'APIKeyPool',
    'AIAnalysisClient',
    'ProviderErrorKind',
    'classify_error',
    'PROMPT_VERSION',
    'build_ats_prompt',
    'GeminiProvider',
    'TextGenerationProvider',
    'RequestLog',
    'parse_ats_response',
]
