from typing import Optional

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    prompt: int = 0
    completion: int = 0
    total: int = 0


class LLMMeta(BaseModel):
    provider: str = "google"
    model: str
    tokens: TokenUsage = Field(default_factory=TokenUsage)
    finish_reason: Optional[str] = None


class LLMResult(BaseModel):
    content: str
    role: str = "assistant"
    meta: LLMMeta
