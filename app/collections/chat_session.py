from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorCollection

from app.core.mongodb import (
    get_chat_session_collection,
    get_message_collection,
)
from app.models.chat_session import Message

TITLE_MAX_LENGTH = 60


async def touch_chat_session(
    session_id: str,
    user_id: Optional[str] = None,
    title: Optional[str] = None,
    added_messages: int = 0,
) -> None:
    """Create the session on first use and bump its counters afterwards."""
    chat_collection: AsyncIOMotorCollection = get_chat_session_collection()
    now = datetime.now().timestamp()
    on_insert = {"created_at": now, "title": (title or "Cuộc trò chuyện mới")[:TITLE_MAX_LENGTH]}
    if user_id:
        on_insert["user_id"] = user_id
    try:
        await chat_collection.update_one(
            {"_id": session_id},
            {
                "$set": {"last_message_at": now},
                "$setOnInsert": on_insert,
                "$inc": {"message_count": added_messages},
            },
            upsert=True,
        )
    except Exception:
        raise HTTPException(status_code=500, detail="Internal Server Error")


async def get_recent_messages(session_id: str, limit: int = 10) -> List[Message]:
    """Last ``limit`` messages of a session, oldest first."""
    message_collection: AsyncIOMotorCollection = get_message_collection()
    try:
        cursor = message_collection.find({"session_id": session_id}).sort("ts", -1).limit(limit)
        messages = [Message.model_validate(message) async for message in cursor]
        messages.reverse()
        return messages
    except Exception:
        raise HTTPException(status_code=500, detail="Internal Server Error")


async def save_message(
    message: Message,
) -> Message:
    message_collection: AsyncIOMotorCollection = get_message_collection()
    try:
        payload = message.model_dump(mode="json", exclude_none=True, by_alias=True)
        await message_collection.replace_one({"_id": message.id}, payload, upsert=True)
        return message
    except Exception:
        raise HTTPException(status_code=500, detail="Internal Server Error")
