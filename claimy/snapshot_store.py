from abc import ABC, abstractmethod

from claimy.records import ClaimRecord, QueueRecord


class SnapshotStore(ABC):
    """Durable whole state snapshots used for crash recovery. Claims and queue state are two
    independent records, each overwritten in full on every save."""

    @abstractmethod
    async def save_claims(self, records: list[ClaimRecord]) -> None:
        """Overwrite the claims record

        Raises:
            PersistenceError: If the record could not be written
        """

    @abstractmethod
    async def save_queue(self, record: QueueRecord) -> None:
        """Overwrite the queue / offers record

        Raises:
            PersistenceError: If the record could not be written
        """

    @abstractmethod
    async def load_claims(self) -> list[ClaimRecord]:
        """Load the claims record. A missing or unparseable record loads as empty.

        Raises:
            PersistenceError: If the record exists but could not be read
        """

    @abstractmethod
    async def load_queue(self) -> QueueRecord:
        """Load the queue / offers record. A missing or unparseable record loads as empty.

        Raises:
            PersistenceError: If the record exists but could not be read
        """

    @abstractmethod
    async def clear(self) -> None:
        """Delete both records"""
