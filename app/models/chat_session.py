from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, Field, field_validator


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class MessageFileData(BaseModel):
    file_uri: str = Field(validation_alias=AliasChoices("file_uri", "fileUri"))
    mime_type: str = Field(
        default="image/jpeg",
        validation_alias=AliasChoices("mime_type", "mimeType"),
    )


class MessagePart(BaseModel):
    text: Optional[str] = Field(default=None)
    file_data: Optional[MessageFileData] = Field(
        default=None,
        validation_alias=AliasChoices("file_data", "fileData"),
    )


class MessageContent(BaseModel):
    role: Optional[str] = Field(default=None)
    parts: list[MessagePart] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(part.text for part in self.parts if part.text)


class Message(BaseModel):
    """One chat turn stored against a session in ``messages``."""

    id: str = Field(
        default_factory=lambda: uuid4().hex,
        validation_alias=AliasChoices("id", "_id"),
        serialization_alias="_id",
    )
    session_id: str = Field(
        ...,
        validation_alias=AliasChoices("session_id", "sessionId", "chat_id"),
    )
    user_id: Optional[str] = Field(default=None)
    content: MessageContent = Field(
        ...,
        description="Provider-agnostic content format with text/media parts.",
    )
    analysis_id: Optional[str] = Field(default=None)
    meta: Dict[str, Any] = Field(default_factory=dict)
    ts: float = Field(default_factory=lambda: datetime.now().timestamp())

    @field_validator("content", mode="before")
    @classmethod
    def _normalize_content(cls, value: Any) -> Any:
        # Older documents stored a bare string instead of parts.
        if isinstance(value, str):
            return {"role": None, "parts": [{"text": value}]}
        return value

    @property
    def role(self) -> Role:
        try:
            return Role(self.content.role)
        except ValueError:
            return Role.USER
