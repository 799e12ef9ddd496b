from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Callable, Dict, List, Optional, Union

from claimy.claim_registry import ClaimRegistry
from claimy.claimy_error import ConflictError, NotFoundError, ValidationError
from claimy.constants import MAX_CLAIM_MINUTES
from claimy.offer import Offer
from claimy.offer_manager import OfferManager
from claimy.queue_entry import QueueEntry
from claimy.respawn import normalize_code
from claimy.util import utc_now

_LOGGER = logging.getLogger(__name__)


@dataclass
class QueueManager:
    """Per respawn FIFO waiting lists.

    Queueing is only allowed while someone holds the respawn, and a holder may appear at
    most once per respawn across the claim, the queue and the pending offers.
    """

    claims: ClaimRegistry
    offers: OfferManager
    clock: Callable[[], datetime] = utc_now

    # Internal storage, keyed by resource code
    _queues: Dict[str, List[QueueEntry]] = field(default_factory=dict, init=False)

    def enqueue(
        self, holder_id: str, holder_name: str, resource_code: str, minutes: int
    ) -> QueueEntry:
        """Append the holder to the queue of a claimed respawn

        Raises:
            ConflictError: If the respawn is free, or the holder already has it, is already
                queued for it, or already has an offer for it
        """
        resource_code = normalize_code(resource_code)
        if minutes < 0 or minutes > MAX_CLAIM_MINUTES:
            raise ValidationError(
                f"Claims must last between 0 and {MAX_CLAIM_MINUTES} minutes"
            )
        claim = self.claims.get(resource_code)
        if claim is None:
            raise ConflictError(
                f"{resource_code.upper()} is free - claim it directly instead of queueing"
            )
        if claim.holder_id == holder_id:
            raise ConflictError(f"You already have an active claim on {resource_code.upper()}")
        if self.find(holder_id, resource_code):
            raise ConflictError(f"You are already in the queue for {resource_code.upper()}")
        if self.offers.get(holder_id, resource_code):
            raise ConflictError(
                f"You already have a pending offer for {resource_code.upper()}"
            )

        entry = QueueEntry(
            holder_id=holder_id,
            holder_name=holder_name,
            resource_code=resource_code,
            desired_minutes=minutes,
            enqueued_at=self.clock(),
        )
        self._queues.setdefault(resource_code, []).append(entry)
        _LOGGER.info(
            f"{holder_name} joined the queue for {resource_code} "
            f"(position {self.position(holder_id, resource_code)})"
        )
        return entry

    def dequeue(self, holder_id: str, resource_code: str) -> Union[QueueEntry, Offer]:
        """Remove the holder from the queue of a respawn, withdrawing any outstanding offer
        they hold for it.

        Raises:
            NotFoundError: If the holder is neither queued nor offered the respawn
        """
        resource_code = normalize_code(resource_code)
        entry = self.remove(holder_id, resource_code)
        offer = self.offers.withdraw(holder_id, resource_code)
        if entry is None and offer is None:
            raise NotFoundError(f"You are not in the queue for {resource_code.upper()}")
        if entry is not None:
            _LOGGER.info(f"{entry.holder_name} left the queue for {resource_code}")
        return entry or offer

    def remove(self, holder_id: str, resource_code: str) -> Optional[QueueEntry]:
        queue = self._queues.get(resource_code)
        if not queue:
            return None
        for index, entry in enumerate(queue):
            if entry.holder_id == holder_id:
                del queue[index]
                if not queue:
                    del self._queues[resource_code]
                return entry
        return None

    def peek_head(self, resource_code: str) -> Optional[QueueEntry]:
        queue = self._queues.get(normalize_code(resource_code))
        return queue[0] if queue else None

    def pop_head(self, resource_code: str) -> Optional[QueueEntry]:
        queue = self._queues.get(resource_code)
        if not queue:
            return None
        entry = queue.pop(0)
        if not queue:
            del self._queues[resource_code]
        return entry

    def promote_head(self, resource_code: str) -> Optional[Offer]:
        """Move the head of the queue into an offer. Returns None if the queue is empty."""
        entry = self.pop_head(resource_code)
        if entry is None:
            _LOGGER.info(f"Nobody waiting for {resource_code} - it is now free")
            return None
        return self.offers.create_offer(entry)

    def restore(self, entry: QueueEntry) -> None:
        """Append a recovered entry, preserving the order it was saved in"""
        if self.find(entry.holder_id, entry.resource_code):
            return
        self._queues.setdefault(entry.resource_code, []).append(entry)

    def find(self, holder_id: str, resource_code: str) -> Optional[QueueEntry]:
        for entry in self._queues.get(resource_code, ()):
            if entry.holder_id == holder_id:
                return entry
        return None

    def position(self, holder_id: str, resource_code: str) -> Optional[int]:
        """1 based position of the holder in the queue"""
        for index, entry in enumerate(self._queues.get(resource_code, ())):
            if entry.holder_id == holder_id:
                return index + 1
        return None

    def entries(self, resource_code: str) -> list[QueueEntry]:
        return list(self._queues.get(normalize_code(resource_code), ()))

    def list_entries(self) -> list[QueueEntry]:
        return [entry for queue in self._queues.values() for entry in queue]

    def heads(self) -> dict[str, QueueEntry]:
        return {code: queue[0] for code, queue in self._queues.items() if queue}

    def clear(self) -> None:
        self._queues.clear()
