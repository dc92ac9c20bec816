from __future__ import annotations

from typing import Any, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from app.models.chat_session import Message, MessageContent, MessageFileData, MessagePart, Role


def coerce_message_content(
    value: Any, default_role: str | None = None
) -> MessageContent:
    if isinstance(value, MessageContent):
        if value.role is None and default_role is not None:
            value.role = default_role
        return value

    if isinstance(value, str):
        return MessageContent(role=default_role, parts=[MessagePart(text=value)])

    if not isinstance(value, dict):
        return MessageContent(role=default_role, parts=[])

    role = value.get("role") or default_role
    parts: list[MessagePart] = []

    for raw_part in value.get("parts") or []:
        if not isinstance(raw_part, dict):
            continue

        file_data = None
        raw_file = raw_part.get("file_data") or raw_part.get("fileData")
        if isinstance(raw_file, dict):
            file_uri = raw_file.get("file_uri") or raw_file.get("fileUri")
            if file_uri:
                file_data = MessageFileData(
                    file_uri=file_uri,
                    mime_type=raw_file.get("mime_type") or raw_file.get("mimeType") or "image/jpeg",
                )

        parts.append(MessagePart(text=raw_part.get("text"), file_data=file_data))

    return MessageContent(role=role, parts=parts)


def _file_block(file_data: MessageFileData) -> dict[str, Any]:
    if file_data.file_uri.startswith(("data:", "http://", "https://")):
        return {"type": "image_url", "image_url": file_data.file_uri}
    return {
        "type": "media",
        "file_uri": file_data.file_uri,
        "mime_type": file_data.mime_type,
    }


def message_content_to_langchain_content(
    content: MessageContent, include_files: bool = True
) -> str | list[dict[str, Any]]:
    texts = [part.text for part in content.parts if part.text]
    files = [part.file_data for part in content.parts if part.file_data is not None]

    if not include_files or not files:
        return "\n".join(texts)

    blocks: list[dict[str, Any]] = [{"type": "text", "text": text} for text in texts]
    blocks.extend(_file_block(file_data) for file_data in files)
    return blocks


def message_content_to_langchain_message(
    content: MessageContent,
    fallback_role: str = Role.USER,
    include_files: bool = True,
) -> BaseMessage:
    role = content.role or fallback_role
    lc_content = message_content_to_langchain_content(content, include_files=include_files)

    if role == Role.ASSISTANT:
        return AIMessage(content=lc_content)
    if role == Role.SYSTEM:
        return SystemMessage(content=lc_content)
    return HumanMessage(content=lc_content)


def chat_messages_to_langchain(
    messages: Sequence[Message], include_files: bool = False
) -> list[BaseMessage]:
    """Stored history as langchain messages; images are dropped unless asked for."""
    result: list[BaseMessage] = []
    for message in messages:
        content = coerce_message_content(message.content, default_role=Role.USER)
        lc_message = message_content_to_langchain_message(
            content, fallback_role=message.role, include_files=include_files
        )
        if lc_message.content:
            result.append(lc_message)
    return result


def text_to_message_content(text: str, role: str = Role.ASSISTANT) -> MessageContent:
    return MessageContent(role=role, parts=[MessagePart(text=text)])


def user_message_content(text: str | None, image_ref: str | None = None) -> MessageContent:
    parts: list[MessagePart] = []
    if text:
        parts.append(MessagePart(text=text))
    if image_ref:
        parts.append(MessagePart(file_data=MessageFileData(file_uri=image_ref)))
    return MessageContent(role=Role.USER, parts=parts)
