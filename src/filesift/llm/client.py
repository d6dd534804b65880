# src/filesift/llm/client.py
"""LiteLLM-based backend client."""

import logging
import time
from typing import Protocol, runtime_checkable

from litellm import acompletion
from litellm.exceptions import (
    APIConnectionError,
    APIError,
    AuthenticationError,
    RateLimitError,
    Timeout,
)

from filesift import constants
from filesift.config import LLMConfig
from filesift.llm.prompts import SYSTEM_PROMPT, format_task_message
from filesift.models import AnalysisResult

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base exception for LLM client errors."""

    pass


class LLMConnectionError(LLMError):
    """Raised when unable to connect to the LLM provider."""

    pass


class LLMAuthenticationError(LLMError):
    """Raised when authentication with the LLM provider fails."""

    pass


class LLMRateLimitError(LLMError):
    """Raised when rate limited by the LLM provider."""

    pass


class LLMTimeoutError(LLMError):
    """Raised when a request exceeds its timeout."""

    pass


@runtime_checkable
class BackendClient(Protocol):
    """A single-shot analysis backend.

    One call takes a task and prepared content and returns the response with
    its token usage, or raises.
    """

    async def analyze(self, task: str, content: str, temperature: float) -> AnalysisResult:
        """Run one analysis request."""
        ...


class LLMClient:
    """Backend client supporting multiple providers via LiteLLM."""

    def __init__(
        self,
        provider: str,
        model: str,
        api_key: str | None = None,
        endpoint: str | None = None,
        max_tokens: int = constants.MAX_TOKENS,
        timeout: float = constants.REQUEST_TIMEOUT,
    ):
        """Initialize LLM client.

        Args:
            provider: LLM provider (openai, anthropic, google, ollama).
            model: Model name.
            api_key: Optional API key (uses env var if not provided).
            endpoint: Optional custom endpoint (for Ollama).
            max_tokens: Maximum response tokens.
            timeout: Per-request timeout in seconds.
        """
        self.provider = provider
        self.model = model
        self.api_key = api_key
        self.endpoint = endpoint
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: LLMConfig, api_key: str | None = None) -> "LLMClient":
        """Build a client from the [llm] config section."""
        return cls(
            provider=config.provider,
            model=config.model,
            api_key=api_key,
            endpoint=config.endpoint,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
        )

    def _get_model_string(self) -> str:
        """Get LiteLLM model string.

        Returns:
            Model string in provider/model format.
        """
        if self.provider == "openai":
            return self.model  # OpenAI is default
        elif self.provider == "ollama":
            return f"ollama/{self.model}"
        else:
            return f"{self.provider}/{self.model}"

    async def analyze(
        self, task: str, content: str, temperature: float = constants.DEFAULT_TEMPERATURE
    ) -> AnalysisResult:
        """Send prepared file content for analysis.

        Args:
            task: What the user wants done with the files.
            content: Rendered, redacted file content.
            temperature: Sampling temperature.

        Returns:
            AnalysisResult with the response text, model and token usage.

        Raises:
            LLMError: If the request fails (or a subclass for known causes).
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": format_task_message(task, content)},
        ]

        kwargs = {
            "model": self._get_model_string(),
            "messages": messages,
            "temperature": temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
        }

        if self.api_key:
            kwargs["api_key"] = self.api_key

        if self.endpoint and self.provider == "ollama":
            kwargs["api_base"] = self.endpoint

        start_time = time.perf_counter()
        try:
            response = await acompletion(**kwargs)
        except AuthenticationError as e:
            raise LLMAuthenticationError(f"Authentication failed: {e}") from e
        except RateLimitError as e:
            raise LLMRateLimitError(f"Rate limit exceeded: {e}") from e
        except Timeout as e:
            raise LLMTimeoutError(f"Request timed out after {self.timeout}s: {e}") from e
        except APIConnectionError as e:
            raise LLMConnectionError(f"Connection failed: {e}") from e
        except APIError as e:
            raise LLMError(f"LLM API error: {e}") from e
        duration = time.perf_counter() - start_time

        text = str(response.choices[0].message.content or "")
        usage = getattr(response, "usage", None)
        result = AnalysisResult(
            response=text,
            model=getattr(response, "model", None) or self.model,
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            duration=duration,
        )
        logger.debug(
            f"{result.model} answered in {duration:.2f}s "
            f"({result.prompt_tokens} prompt / {result.completion_tokens} completion tokens)"
        )
        return result
