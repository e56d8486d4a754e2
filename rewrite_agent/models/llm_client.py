"""Async chat-completion client for the rewrite model."""

import asyncio
import time
from typing import Any, Dict, List, Optional, Union

import httpx
from openai import AsyncOpenAI
from pydantic import BaseModel

from ..config import LLMRoute, ModelSettings, Settings, get_model_config
from ..logging import get_logger

logger = get_logger(__name__)


class ChatMessage(BaseModel):
    """Chat message for LLM interaction."""
    role: str
    content: str


class LLMResponse(BaseModel):
    """LLM response wrapper."""
    content: str
    model: str
    usage: Optional[Dict[str, Any]] = None
    response_time: Optional[float] = None


class LLMError(Exception):
    """LLM-specific error."""
    pass


class LLMClient:
    """Chat client for an OpenAI-compatible inference endpoint.

    A single request per call: no retry and no fallback model. Any failure
    surfaces as ``LLMError``.
    """

    def __init__(
        self,
        settings: Settings,
        route: LLMRoute,
        model_settings: Optional[ModelSettings] = None,
        client: Optional[AsyncOpenAI] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize LLM client.

        Args:
            settings: Application settings (endpoint, key, model override)
            route: Route naming the model to call
            model_settings: Token budget and timeout
            client: Pre-built OpenAI client, mainly for tests
            http_client: Transport handed to the OpenAI SDK
        """
        self.settings = settings
        self.route = route
        self.model_settings = model_settings or settings.llm
        self.model = settings.llm_model_override or route.primary

        if client is not None:
            self._client = client
        elif settings.hf_api_key:
            self._client = AsyncOpenAI(
                base_url=settings.llm_base_url,
                api_key=settings.hf_api_key,
                max_retries=0,
                http_client=http_client,
            )
            logger.info("Inference client initialized", base_url=settings.llm_base_url)
        else:
            raise LLMError("HF_API_KEY is not set")

    async def chat(
        self,
        messages: Union[List[ChatMessage], List[Dict[str, str]], str],
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Send chat messages to the model.

        Args:
            messages: Chat messages (various formats accepted)
            max_tokens: Completion budget, defaults to the model settings

        Returns:
            LLM response

        Raises:
            LLMError: If the request fails or yields no content
        """
        normalized_messages = self._normalize_messages(messages)
        if not normalized_messages:
            raise LLMError("No messages provided")

        start_time = time.time()
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[msg.model_dump() for msg in normalized_messages],
                max_tokens=max_tokens or self.model_settings.max_tokens,
                timeout=self.model_settings.timeout_seconds,
            )
            content = response.choices[0].message.content
        except Exception as e:
            error_msg = f"Inference API error for model {self.model}: {e}"
            logger.error(error_msg)
            raise LLMError(error_msg) from e

        if not content:
            raise LLMError(f"Empty response content from model {self.model}")

        response_time = time.time() - start_time
        logger.info(
            "LLM request successful",
            model=self.model,
            response_time=response_time
        )

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=content,
            model=self.model,
            usage={
                "prompt_tokens": usage.prompt_tokens,
                "completion_tokens": usage.completion_tokens,
                "total_tokens": usage.total_tokens
            } if usage else None,
            response_time=response_time
        )

    def _normalize_messages(
        self,
        messages: Union[List[ChatMessage], List[Dict[str, str]], str]
    ) -> List[ChatMessage]:
        """Normalize messages to ChatMessage format."""
        if isinstance(messages, str):
            return [ChatMessage(role="user", content=messages)]

        elif isinstance(messages, list):
            normalized = []
            for msg in messages:
                if isinstance(msg, ChatMessage):
                    normalized.append(msg)
                elif isinstance(msg, dict):
                    if "role" in msg and "content" in msg:
                        normalized.append(ChatMessage(role=msg["role"], content=msg["content"]))
                    else:
                        raise LLMError(f"Invalid message format: {msg}")
                else:
                    raise LLMError(f"Unsupported message type: {type(msg)}")
            return normalized

        else:
            raise LLMError(f"Unsupported messages type: {type(messages)}")


class MockLLMClient(LLMClient):
    """Mock LLM client for dry runs and tests."""

    def __init__(self, response_text: Optional[str] = None):
        """Initialize mock client."""
        # Don't call parent __init__ to avoid API key requirements
        self.model = "mock-model"
        self.response_text = response_text
        self.calls: List[List[ChatMessage]] = []

    async def chat(
        self,
        messages: Union[List[ChatMessage], List[Dict[str, str]], str],
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Mock chat response in the TITLE/DESCRIPTION/CONTENT format."""
        normalized = self._normalize_messages(messages)
        self.calls.append(normalized)
        await asyncio.sleep(0)

        content = self.response_text
        if content is None:
            excerpt = normalized[-1].content[:60] if normalized else ""
            content = (
                "TITLE: Mock Rewritten Article\n"
                "DESCRIPTION: A mock rewrite produced without calling a model.\n"
                f"CONTENT: <h2>Mock Rewritten Article</h2><p>{excerpt}</p>"
            )

        return LLMResponse(
            content=content,
            model=self.model,
            usage={"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
            response_time=0.0
        )


def create_llm_client(settings: Settings, route_name: str = "rewriter") -> LLMClient:
    """Factory function to create LLM client.

    Args:
        settings: Application settings
        route_name: LLM route name

    Returns:
        LLM client instance
    """
    if settings.mock:
        return MockLLMClient()

    try:
        route = get_model_config().get_llm_route(route_name)
    except Exception as e:
        logger.error(f"Failed to load LLM route '{route_name}': {e}")
        raise LLMError(f"Invalid LLM route: {route_name}") from e

    return LLMClient(settings, route)
