"""Write-back of optimistic changes with bounded retry and compensation"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel

from planner.core.errors import PersistenceError
from planner.infra.store import DoTodayStore, RecordStore
from planner.models.do_today import DoTodayOffEntry

logger = logging.getLogger(__name__)

WriteFn = Callable[[], Awaitable[bool]]


@dataclass
class PendingWrite:
    """One store call plus the call that reverts it"""
    description: str
    run: WriteFn
    undo: Optional[WriteFn] = None


@dataclass
class WriteBatch:
    """Store writes produced by one logical operation, in execution order"""
    writes: List[PendingWrite] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.writes)

    def put(self, store: RecordStore, record: BaseModel, previous: Optional[BaseModel] = None) -> None:
        undo: WriteFn
        if previous is None:
            async def undo() -> bool:
                return await store.delete(record.id)
        else:
            async def undo() -> bool:
                return await store.put(previous)

        async def run() -> bool:
            return await store.put(record)

        self.writes.append(PendingWrite(f"put {type(record).__name__} {record.id}", run, undo))

    def delete(self, store: RecordStore, record: BaseModel) -> None:
        async def run() -> bool:
            return await store.delete(record.id)

        async def undo() -> bool:
            return await store.put(record)

        self.writes.append(PendingWrite(f"delete {type(record).__name__} {record.id}", run, undo))

    def switch_off(self, store: DoTodayStore, entry: DoTodayOffEntry) -> None:
        async def run() -> bool:
            return await store.add(entry)

        async def undo() -> bool:
            return await store.remove(entry)

        self.writes.append(PendingWrite(f"do-today off {entry.key}", run, undo))

    def switch_on(self, store: DoTodayStore, entry: DoTodayOffEntry) -> None:
        async def run() -> bool:
            return await store.remove(entry)

        async def undo() -> bool:
            return await store.add(entry)

        self.writes.append(PendingWrite(f"do-today on {entry.key}", run, undo))


class Persister:
    """Executes write batches, retrying each failed write before giving up"""

    def __init__(self, max_retries: int = 3, retry_delay: float = 0.2):
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def _attempt(self, write: WriteFn) -> bool:
        for attempt in range(self.max_retries + 1):
            if attempt:
                await asyncio.sleep(self.retry_delay)
            try:
                if await write():
                    return True
            except Exception as e:
                logger.warning(f"Store write raised on attempt {attempt + 1}: {e}")
        return False

    async def commit(self, batch: WriteBatch) -> None:
        """
        Run every write of the batch in order.

        Raises:
            PersistenceError: If a write still fails after the retry budget;
                writes already applied are reverted on a best-effort basis
        """
        done: List[PendingWrite] = []
        for write in batch.writes:
            if await self._attempt(write.run):
                done.append(write)
                continue

            logger.error(f"Giving up on '{write.description}' after {self.max_retries + 1} attempts")
            await self._compensate(done)
            raise PersistenceError("Could not save your changes. They have been reverted, please try again.")

    async def _compensate(self, done: List[PendingWrite]) -> None:
        for write in reversed(done):
            if write.undo is None:
                continue
            try:
                ok = await write.undo()
            except Exception as e:
                logger.error(f"Failed to revert '{write.description}': {e}")
                continue
            if not ok:
                logger.error(f"Failed to revert '{write.description}'")
