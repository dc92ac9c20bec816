import logging
from typing import Any, Awaitable, Callable, Optional

from app.collections.analysis import save_analysis
from app.collections.chat_session import save_message, touch_chat_session
from app.core.background import spawn_detached
from app.core.langchain_message_adapter import text_to_message_content, user_message_content
from app.models.advisory import ChatAnalyzeResult, InteractionRequest
from app.models.analysis import AnalysisRecord
from app.models.chat_session import Message

logger = logging.getLogger(__name__)

IMAGE_ONLY_TITLE = "Phân tích hình ảnh"

AnalysisSaver = Callable[[AnalysisRecord], Awaitable[Any]]
MessageSaver = Callable[[Message], Awaitable[Any]]
SessionToucher = Callable[..., Awaitable[Any]]


class PersistenceSync:
    """Writes a finished exchange to the session store after the response is sent.

    Each write is attempted on its own; a failed write is logged and the
    remaining ones still run.
    """

    def __init__(
        self,
        analysis_saver: AnalysisSaver = save_analysis,
        message_saver: MessageSaver = save_message,
        session_toucher: SessionToucher = touch_chat_session,
    ) -> None:
        self._save_analysis = analysis_saver
        self._save_message = message_saver
        self._touch_session = session_toucher

    def schedule(self, request: InteractionRequest, result: ChatAnalyzeResult):
        if not request.session_id:
            return None
        return spawn_detached(
            self.persist(request, result),
            name=f"persist-{request.session_id}",
        )

    async def _attempt(self, step: str, write: Awaitable[Any]) -> bool:
        try:
            await write
            return True
        except Exception:
            logger.exception("Persistence step '%s' failed", step)
            return False

    async def persist(self, request: InteractionRequest, result: ChatAnalyzeResult) -> int:
        """Run every write for one exchange and return how many succeeded."""
        session_id = request.session_id
        succeeded = 0

        analysis_id: Optional[str] = None
        if result.analysis is not None and result.analysis.identified:
            record = AnalysisRecord(
                user_id=request.user_id,
                session_id=session_id,
                input_images=[request.image_ref] if request.image_ref else [],
                result_top=result.analysis,
            )
            if await self._attempt("analysis", self._save_analysis(record)):
                analysis_id = record.id
                succeeded += 1

        user_message = Message(
            session_id=session_id,
            user_id=request.user_id,
            content=user_message_content(request.text, request.image_ref),
            analysis_id=analysis_id,
        )
        if await self._attempt("user message", self._save_message(user_message)):
            succeeded += 1

        assistant_message = Message(
            session_id=session_id,
            user_id=request.user_id,
            content=text_to_message_content(result.response),
            meta=result.meta.model_dump(mode="json") if result.meta else {},
        )
        if await self._attempt("assistant message", self._save_message(assistant_message)):
            succeeded += 1

        title = (request.text or IMAGE_ONLY_TITLE).strip()
        if await self._attempt(
            "session",
            self._touch_session(
                session_id,
                user_id=request.user_id,
                title=title,
                added_messages=2,
            ),
        ):
            succeeded += 1

        logger.debug("Persisted %d writes for session %s", succeeded, session_id)
        return succeeded
