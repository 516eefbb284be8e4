"""Ollama Client with configurable model"""

import logging

from ollama import AsyncClient

from medsim.config import settings
from medsim.core.data.models import LLMRequest, LLMResponse, LLMUsage
from medsim.core.resilience.retry import RetryOrchestrator

logger = logging.getLogger(__name__)


class OllamaClient:
    """Ollama Client with configurable model

    Every chat call goes through the shared retry orchestrator, so it waits for
    the provider rate limiter and retries transient failures. Provider errors
    (``ollama.ResponseError`` carries ``status_code``) propagate unwrapped.
    """

    provider = "ollama"

    def __init__(self, orchestrator: RetryOrchestrator, host: str | None = None):
        self.orchestrator = orchestrator
        self.default_model = settings.LLM_DEFAULT_MODEL
        self.default_temperature = settings.LLM_DEFAULT_TEMPERATURE
        self.host = host or settings.OLLAMA_BASE_URL

        self._client = AsyncClient(
            host=self.host,
            timeout=settings.LLM_TIMEOUT,
        )

    async def chat(
        self,
        request: LLMRequest,
        max_retries: int | None = None,
    ) -> LLMResponse:
        """
        Chat with Ollama
        """
        model = request.model or self.default_model
        temperature = (
            request.temperature
            if request.temperature is not None
            else self.default_temperature
        )

        chat_params = {
            "model": model,
            "messages": request.to_messages(),
            "options": {
                "temperature": temperature,
                "num_predict": request.max_tokens or settings.LLM_MAX_TOKENS,
            },
        }

        async def _send():
            return await self._client.chat(**chat_params)

        response = await self.orchestrator.call_with_retry(
            _send,
            max_retries=max_retries,
            label="ollama.chat",
            deadline=settings.RETRY_DEADLINE_SECONDS,
        )

        content = response.message.content or ""
        prompt_tokens = getattr(response, "prompt_eval_count", None) or 0
        completion_tokens = getattr(response, "eval_count", None) or 0

        logger.debug(
            "Ollama chat completed: model=%s, type=%s, prompt_tokens=%d, completion_tokens=%d",
            model,
            request.type,
            prompt_tokens,
            completion_tokens,
        )

        return LLMResponse(
            content=content,
            usage=LLMUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            model=model,
            provider="ollama",
            success=True,
            metadata={
                "total_duration": getattr(response, "total_duration", None),
                "load_duration": getattr(response, "load_duration", None),
            },
        )
