"""Model client gateway.

This module defines the narrow ``complete(system, user, options) -> text``
contract the engine depends on, and its LiteLLM implementation.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from litellm import acompletion
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from ..models.prompt import CompletionOptions
from ...errors import ConfigurationError, ModelCallError

logger = logging.getLogger(__name__)


class ModelClient(ABC):
    """Opaque completion capability used by the translation pipeline."""

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get provider name."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Get default model identifier."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        options: CompletionOptions,
    ) -> str:
        """Run one completion and return the raw response text.

        Raises:
            ModelCallError: On any transport, vendor or timeout failure
        """

    async def health_check(self) -> bool:
        """Check if the provider is available."""
        return True


class LiteLLMGateway(ModelClient):
    """Model client for all providers using LiteLLM."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        provider_name: str = "deepseek",
        max_attempts: int = 1,
    ):
        """Initialize LiteLLM gateway.

        Args:
            api_key: API key for authentication
            model: Model identifier
            base_url: Optional custom base URL for compatible APIs
            provider_name: Provider name for routing and logging
            max_attempts: Transport-level attempts per completion
        """
        self._api_key = api_key
        self._model = model
        self._base_url = base_url
        self._provider = provider_name
        self._max_attempts = max(1, max_attempts)
        self._litellm_model = self._to_litellm_model(provider_name, model)

        logger.info(
            f"[LLM Gateway] Initialized: provider={provider_name}, model={model}, "
            f"litellm_model={self._litellm_model}, base_url={base_url}"
        )

    @staticmethod
    def _to_litellm_model(provider: str, model: str) -> str:
        """Get model string in LiteLLM format (provider/model)."""
        if "/" in model:
            return model
        if provider in ("openai", "qwen"):
            # Qwen uses OpenAI-compatible API
            return f"openai/{model}"
        if provider == "anthropic" and model.startswith("claude"):
            return model
        return f"{provider}/{model}"

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        options: CompletionOptions,
    ) -> str:
        model = options.model or self._model
        kwargs = {
            "model": self._to_litellm_model(self._provider, model),
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "timeout": options.timeout_seconds,
            "api_key": self._api_key,
        }
        if self._base_url:
            kwargs["api_base"] = self._base_url

        start_time = time.time()
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=10),
                reraise=True,
            ):
                with attempt:
                    response = await acompletion(**kwargs)
        except Exception as e:
            raise ModelCallError(f"{self._provider} completion failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)
        content = ""
        if response.choices and response.choices[0].message:
            content = response.choices[0].message.content or ""
        logger.info(
            "[LLM Gateway] %s responded in %dms (%d chars)",
            kwargs["model"], latency_ms, len(content),
        )
        return content or "[]"

    async def health_check(self) -> bool:
        """Check LLM API availability."""
        try:
            await self.complete(
                "Reply with OK.",
                "Hi",
                CompletionOptions(max_tokens=5, timeout_ms=15_000),
            )
            return True
        except ModelCallError:
            return False


class GatewayFactory:
    """Factory for creating model clients."""

    # Default API base per provider; None lets LiteLLM pick
    PROVIDER_BASE_URLS = {
        "openai": None,
        "anthropic": None,
        "deepseek": "https://api.deepseek.com",
        "qwen": "https://dashscope.aliyuncs.com/compatible-mode/v1",
        "gemini": None,
        "ollama": None,
        "openrouter": None,
    }

    @classmethod
    def create(
        cls,
        provider: str,
        api_key: Optional[str],
        model: str,
        **kwargs,
    ) -> ModelClient:
        """Create a model client for the specified provider.

        Args:
            provider: Provider name (deepseek, openai, anthropic, qwen, ...)
            api_key: API key for authentication
            model: Model identifier
            **kwargs: base_url override and max_attempts

        Returns:
            Configured ModelClient instance

        Raises:
            ConfigurationError: If no API key is configured
        """
        provider = provider.lower()
        if not api_key and provider != "ollama":
            raise ConfigurationError(f"{provider} API key not configured")

        base_url = kwargs.pop("base_url", None) or cls.PROVIDER_BASE_URLS.get(provider)
        return LiteLLMGateway(
            api_key=api_key or "",
            model=model,
            base_url=base_url,
            provider_name=provider,
            **kwargs,
        )
