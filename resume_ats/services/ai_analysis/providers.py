"""
Generative-text providers.

A provider turns a prompt into free-form text using one credential. Retry,
rotation and parsing live in the analysis client, not here.
"""
import logging
from threading import Lock
from typing import Dict, Protocol, Tuple

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

logger = logging.getLogger(__name__)


class TextGenerationProvider(Protocol):
    """
    Anything that can answer a prompt with text.

    The client does not race ``generate`` against a timer. Implementations
    must enforce ``timeout`` themselves (for example at the transport) and
    raise ``TimeoutError`` or an error mentioning "timeout" when it expires,
    so the client treats it as a retriable failure.
    """

    def generate(self, prompt: str, api_key: str, timeout: float) -> str:
        ...


class GeminiProvider:
    """
    Google Gemini through LangChain.

    One chat model is created per (credential, timeout) and reused. The
    request timeout is enforced by the HTTP transport, so a timed-out call
    returns control with an exception instead of leaving a worker behind.
    LangChain's own retries are disabled; the analysis client owns retries.
    """

    def __init__(
        self,
        model_name: str = "gemini-2.5-flash",
        temperature: float = 0.2,
        max_output_tokens: int = 4000,
    ):
        self.model_name = model_name
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._models: Dict[Tuple[str, float], ChatGoogleGenerativeAI] = {}
        self._lock = Lock()

    def _model_for(self, api_key: str, timeout: float) -> ChatGoogleGenerativeAI:
        cache_key = (api_key, timeout)
        with self._lock:
            model = self._models.get(cache_key)
            if model is None:
                model = ChatGoogleGenerativeAI(
                    model=self.model_name,
                    google_api_key=api_key,
                    temperature=self.temperature,
                    max_output_tokens=self.max_output_tokens,
                    timeout=timeout,
                    max_retries=0,
                )
                self._models[cache_key] = model
                logger.debug(f"Created Gemini model handle ({self.model_name})")
            return model

    def generate(self, prompt: str, api_key: str, timeout: float) -> str:
        """
        Send one prompt.

        Args:
            prompt: Prompt text
            api_key: Credential to use for this call
            timeout: Seconds before the request is abandoned

        Returns:
            Response text
        """
        model = self._model_for(api_key, timeout)
        response = model.invoke([HumanMessage(content=prompt)])
        content = response.content
        if isinstance(content, list):
            # Multi-part responses: keep the text parts only
            content = "".join(
                part if isinstance(part, str) else part.get("text", "")
                for part in content
                if isinstance(part, (str, dict))
            )
        return content or ""
