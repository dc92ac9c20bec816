import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

RefreshJob = Callable[[], Awaitable[Any]]


def seconds_until(hour: int, now: datetime) -> float:
    """Seconds from ``now`` to the next occurrence of ``hour``:00 in now's timezone."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class ArticleRefreshScheduler:
    """Runs the article refresh job once a day at a fixed local hour."""

    def __init__(self, job: RefreshJob, hour: int = 2, timezone: str = "Asia/Ho_Chi_Minh") -> None:
        self.job = job
        self.hour = hour
        self.timezone = ZoneInfo(timezone)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._loop(), name="article-refresh-scheduler"
        )
        logger.info("Article refresh scheduled daily at %02d:00 %s", self.hour, self.timezone)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Article refresh scheduler stopped")

    async def run_once(self) -> Any:
        try:
            return await self.job()
        except Exception:
            logger.exception("Scheduled article refresh failed")
            return None

    async def _loop(self) -> None:
        while True:
            delay = seconds_until(self.hour, datetime.now(self.timezone))
            logger.debug("Next article refresh in %.0f seconds", delay)
            await asyncio.sleep(delay)
            await self.run_once()
