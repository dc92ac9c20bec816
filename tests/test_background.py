"""
Tests for fire-and-forget task handling
"""
import asyncio
import logging

from app.core.background import drain_detached, pending_tasks, spawn_detached


class TestSpawnDetached:

    async def test_task_is_tracked_until_done(self):
        gate = asyncio.Event()

        async def job():
            await gate.wait()
            return "done"

        task = spawn_detached(job(), name="tracked-job")
        assert task in pending_tasks()

        gate.set()
        await drain_detached(timeout=1)
        await asyncio.sleep(0)
        assert task.result() == "done"
        assert task not in pending_tasks()

    async def test_failure_is_logged_not_raised(self, caplog):
        async def job():
            raise RuntimeError("database unavailable")

        with caplog.at_level(logging.ERROR, logger="app.core.background"):
            task = spawn_detached(job(), name="failing-job")
            await drain_detached(timeout=1)
            # Let the done-callback run.
            await asyncio.sleep(0)

        assert task.done()
        assert "failing-job" in caplog.text
        assert task not in pending_tasks()

    async def test_drain_without_tasks_returns(self):
        await drain_detached(timeout=0.1)
