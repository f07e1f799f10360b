import logging
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from academy_bot.llm.exceptions import ProviderUnavailable

logger = logging.getLogger(__name__)


class LLMClient:
    """Thin async wrapper around an OpenAI-compatible chat completions API.

    Created once at startup and passed to the services that need it. Without
    an API key no client is built and every call fails fast with
    ProviderUnavailable, so callers go straight to their fallback.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        timeout: float = 30.0,
        max_retries: int = 1,
    ):
        self.model = model
        if api_key:
            self._client: Optional[AsyncOpenAI] = AsyncOpenAI(
                api_key=api_key, base_url=base_url, timeout=timeout, max_retries=max_retries
            )
        else:
            logger.warning("LLM API key is not set, quizzes will use the fallback question")
            self._client = None

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def chat_completion(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        response_format: Optional[dict[str, Any]] = None,
    ) -> str:
        """Send a prompt and return the response text (possibly empty)."""
        if self._client is None:
            raise ProviderUnavailable("LLM API key is not configured")

        kwargs: dict[str, Any] = {}
        if response_format is not None:
            kwargs["response_format"] = response_format

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except OpenAIError as e:
            logger.error(f"LLM request failed: {e}")
            raise ProviderUnavailable(str(e)) from e

        if not response.choices:
            raise ProviderUnavailable("LLM returned no choices")
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
