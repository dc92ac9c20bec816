import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from fastapi import HTTPException, status
from langchain_core.messages import BaseMessage

from app.core.genai_client import get_chat_model
from app.models.llm import LLMMeta, LLMResult, TokenUsage

logger = logging.getLogger(__name__)

ChunkHandler = Callable[[str], Awaitable[None]]


def content_to_text(content: Any) -> str:
    """Flatten LangChain message content (str or content blocks) to plain text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        texts: List[str] = []
        for block in content:
            if isinstance(block, str):
                texts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                texts.append(block.get("text") or "")
        return "".join(texts)
    return str(content)


def token_usage_from(message: Any) -> TokenUsage:
    usage = getattr(message, "usage_metadata", None) or {}
    return TokenUsage(
        prompt=usage.get("input_tokens", 0) or 0,
        completion=usage.get("output_tokens", 0) or 0,
        total=usage.get("total_tokens", 0) or 0,
    )


def finish_reason_from(message: Any) -> Optional[str]:
    metadata = getattr(message, "response_metadata", None) or {}
    reason = metadata.get("finish_reason")
    if reason is None:
        return None
    return getattr(reason, "name", None) or str(reason)


class LLMGateway:
    """Single entry point to the chat model, with fixed sampling options per instance."""

    def __init__(
        self,
        model_name: str,
        temperature: float,
        max_tokens: int,
        model_factory: Callable[..., Any] = get_chat_model,
    ) -> None:
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._model_factory = model_factory
        self._model = None

    @property
    def model(self):
        if self._model is None:
            self._model = self._model_factory(
                model=self.model_name,
                temperature=self.temperature,
                max_output_tokens=self.max_tokens,
            )
        return self._model

    async def generate(
        self,
        messages: Sequence[BaseMessage],
        on_chunk: Optional[ChunkHandler] = None,
    ) -> LLMResult:
        """Run one completion; streams through ``on_chunk`` when it is given."""
        try:
            if on_chunk is None:
                response = await self.model.ainvoke(list(messages))
                content = content_to_text(response.content)
            else:
                response = None
                parts: List[str] = []
                async for chunk in self.model.astream(list(messages)):
                    response = chunk if response is None else response + chunk
                    text = content_to_text(chunk.content)
                    if text:
                        parts.append(text)
                        await on_chunk(text)
                content = "".join(parts)
        except HTTPException:
            raise
        except Exception as model_exc:
            logger.exception("Model invocation failed for model=%s", self.model_name)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="AI model could not generate a response. Please try again later.",
            ) from model_exc

        if not content.strip():
            logger.warning("Model %s returned an empty completion", self.model_name)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="AI model returned an empty response.",
            )

        return LLMResult(
            content=content,
            meta=LLMMeta(
                model=self.model_name,
                tokens=token_usage_from(response),
                finish_reason=finish_reason_from(response),
            ),
        )
