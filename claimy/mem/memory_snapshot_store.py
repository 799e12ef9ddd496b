from dataclasses import dataclass, field
from typing import Optional

from claimy.claimy_error import PersistenceError
from claimy.records import ClaimRecord, QueueRecord
from claimy.snapshot_store import SnapshotStore


@dataclass
class MemorySnapshotStore(SnapshotStore):
    """In-memory snapshot store. Records are copied on the way in and out so callers can
    not change what was saved. Set fail_writes to simulate a broken disk."""

    fail_writes: bool = False
    save_count: int = field(default=0, init=False)

    _claims: Optional[list[ClaimRecord]] = field(default=None, init=False)
    _queue: Optional[QueueRecord] = field(default=None, init=False)

    async def save_claims(self, records: list[ClaimRecord]) -> None:
        if self.fail_writes:
            raise PersistenceError("Snapshot writes are disabled")
        self._claims = [record.model_copy(deep=True) for record in records]
        self.save_count += 1

    async def save_queue(self, record: QueueRecord) -> None:
        if self.fail_writes:
            raise PersistenceError("Snapshot writes are disabled")
        self._queue = record.model_copy(deep=True)
        self.save_count += 1

    async def load_claims(self) -> list[ClaimRecord]:
        if self._claims is None:
            return []
        return [record.model_copy(deep=True) for record in self._claims]

    async def load_queue(self) -> QueueRecord:
        if self._queue is None:
            return QueueRecord()
        return self._queue.model_copy(deep=True)

    async def clear(self) -> None:
        self._claims = None
        self._queue = None

    def has_snapshot(self) -> bool:
        return self._claims is not None or self._queue is not None
