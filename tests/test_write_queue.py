"""Tests for the background write queue."""

from unittest.mock import AsyncMock, MagicMock

from sqlalchemy import delete, func, select

from homewatt.database import utc_now
from homewatt.models import EnergyLog
from homewatt.services.write_queue import WriteBatch, WriteQueue


class FlakySessionMaker:
    """Session factory whose first ``failures`` commits raise."""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0
        self.sessions = []

    def __call__(self):
        self.calls += 1
        session = AsyncMock()
        session.add_all = MagicMock()
        if self.calls <= self.failures:
            session.commit.side_effect = ConnectionError("connection reset")
        self.sessions.append(session)

        ctx = MagicMock()
        ctx.__aenter__ = AsyncMock(return_value=session)
        ctx.__aexit__ = AsyncMock(return_value=False)
        return ctx


def log_batch(user_id="u1", kwh=1.5) -> WriteBatch:
    batch = WriteBatch(label="flush")
    batch.add(EnergyLog, user_id=user_id, logged_at=utc_now(), consumption_kwh=kwh)
    return batch


class TestWriteRetry:
    async def test_retries_until_commit_succeeds(self):
        maker = FlakySessionMaker(failures=2)
        queue = WriteQueue(maxsize=10, max_retries=3, base_delay=0, session_maker=maker)

        assert await queue.write(log_batch()) is True
        assert maker.calls == 3
        assert queue.written == 1
        assert queue.dropped == 0

    async def test_fresh_rows_per_attempt(self):
        maker = FlakySessionMaker(failures=1)
        queue = WriteQueue(maxsize=10, max_retries=3, base_delay=0, session_maker=maker)
        await queue.write(log_batch())

        first = maker.sessions[0].add_all.call_args[0][0]
        second = maker.sessions[1].add_all.call_args[0][0]
        assert first[0] is not second[0]

    async def test_drops_after_max_retries(self):
        maker = FlakySessionMaker(failures=10)
        queue = WriteQueue(maxsize=10, max_retries=2, base_delay=0, session_maker=maker)

        assert await queue.write(log_batch()) is False
        assert maker.calls == 3
        assert queue.dropped == 1

    async def test_statements_and_rows_share_one_commit(self):
        maker = FlakySessionMaker(failures=0)
        queue = WriteQueue(maxsize=10, max_retries=0, base_delay=0, session_maker=maker)
        batch = log_batch()
        batch.statements.append(delete(EnergyLog).where(EnergyLog.user_id == "u1"))

        await queue.write(batch)
        session = maker.sessions[0]
        session.execute.assert_awaited_once()
        session.add_all.assert_called_once()
        session.commit.assert_awaited_once()


class TestEnqueue:
    def test_full_queue_drops_batch(self):
        queue = WriteQueue(maxsize=1, max_retries=0, base_delay=0)
        assert queue.enqueue(log_batch()) is True
        assert queue.enqueue(log_batch()) is False
        assert queue.pending == 1
        assert queue.dropped == 1

    def test_empty_batch_is_ignored(self):
        queue = WriteQueue(maxsize=1)
        assert queue.enqueue(WriteBatch(label="empty")) is True
        assert queue.pending == 0


class TestWorker:
    async def test_worker_drains_into_database(self, session_maker):
        queue = WriteQueue(maxsize=10, max_retries=0, base_delay=0, session_maker=session_maker)
        await queue.start()
        try:
            queue.enqueue(log_batch(kwh=1.0))
            queue.enqueue(log_batch(kwh=2.0))
            await queue.join()
        finally:
            await queue.stop()

        async with session_maker() as db:
            total = await db.scalar(select(func.sum(EnergyLog.consumption_kwh)))
        assert total == 3.0
        assert queue.written == 2
