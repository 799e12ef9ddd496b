from dataclasses import dataclass, field
from datetime import datetime, timedelta
import logging
from typing import Awaitable, Callable, Dict, Optional

from claimy.claimy_error import ConflictError, NotFoundError
from claimy.constants import DEFAULT_MINUTE_SECONDS, DEFAULT_OFFER_TTL_MINUTES
from claimy.offer import Offer
from claimy.queue_entry import QueueEntry
from claimy.timer_engine import TimerEngine, TimerKey
from claimy.util import as_utc, utc_now

_LOGGER = logging.getLogger(__name__)

OfferHook = Callable[[Offer], Awaitable[None]]


@dataclass
class OfferManager:
    """Pending accept offers, at most one per (holder, respawn).

    Each offer owns a one shot timeout in the timer engine. When it fires the offer is
    removed before on_expired is awaited.
    """

    timer_engine: TimerEngine
    ttl_minutes: int = DEFAULT_OFFER_TTL_MINUTES
    minute_seconds: float = DEFAULT_MINUTE_SECONDS
    clock: Callable[[], datetime] = utc_now
    on_expired: Optional[OfferHook] = None

    # Internal storage, in creation order
    _offers: Dict[TimerKey, Offer] = field(default_factory=dict, init=False)

    def create_offer(self, entry: QueueEntry) -> Offer:
        """Turn a queue entry (already removed from its queue) into an offer expiring
        ttl_minutes from now, each minute lasting minute_seconds"""
        if entry.key in self._offers:
            raise ConflictError(
                f"{entry.holder_name} already has an offer for {entry.resource_code.upper()}"
            )
        offer = Offer(
            holder_id=entry.holder_id,
            holder_name=entry.holder_name,
            resource_code=entry.resource_code,
            desired_minutes=entry.desired_minutes,
            expires_at=self.clock()
            + timedelta(seconds=self.ttl_minutes * self.minute_seconds),
        )
        self._insert(offer)
        _LOGGER.info(
            f"Offered {offer.resource_code} to {offer.holder_name} "
            f"({self.ttl_minutes} minutes to accept)"
        )
        return offer

    def restore(self, offer: Offer) -> bool:
        """Re-insert a recovered offer with the remainder of its time to live.

        Returns:
            bool: False if the offer had already expired (and was dropped)
        """
        if offer.key in self._offers:
            return True
        if as_utc(offer.expires_at) <= self.clock():
            _LOGGER.info(
                f"Offer of {offer.resource_code} to {offer.holder_name} expired while offline"
            )
            return False
        self._insert(offer)
        return True

    def accept(self, holder_id: str, resource_code: Optional[str] = None) -> Offer:
        """Remove and return the holder's oldest outstanding offer (or their offer on
        resource_code, if given), cancelling its timeout

        Raises:
            NotFoundError: If the holder has no matching offer
        """
        if resource_code is None:
            offer = self.find_for_holder(holder_id)
        else:
            offer = self.get(holder_id, resource_code)
        if offer is None:
            raise NotFoundError("You have no pending offer to accept")
        self._remove(offer.key)
        _LOGGER.info(f"{offer.holder_name} accepted offer of {offer.resource_code}")
        return offer

    def withdraw(self, holder_id: str, resource_code: str) -> Optional[Offer]:
        """Remove the holder's offer on a respawn, if any"""
        offer = self._remove((holder_id, resource_code))
        if offer:
            _LOGGER.info(f"{offer.holder_name} withdrew from offer of {resource_code}")
        return offer

    def get(self, holder_id: str, resource_code: str) -> Optional[Offer]:
        return self._offers.get((holder_id, resource_code))

    def find_for_holder(self, holder_id: str) -> Optional[Offer]:
        for offer in self._offers.values():
            if offer.holder_id == holder_id:
                return offer
        return None

    def find_for_resource(self, resource_code: str) -> Optional[Offer]:
        for offer in self._offers.values():
            if offer.resource_code == resource_code:
                return offer
        return None

    def list_offers(self) -> list[Offer]:
        return list(self._offers.values())

    def clear(self) -> None:
        """Drop every offer without expiring them"""
        for key in list(self._offers):
            self.timer_engine.cancel_timeout(key)
        self._offers.clear()

    def __len__(self) -> int:
        return len(self._offers)

    def _insert(self, offer: Offer) -> None:
        self._offers[offer.key] = offer
        delay = (as_utc(offer.expires_at) - self.clock()).total_seconds()
        self.timer_engine.start_timeout(offer.key, delay, self._on_timeout)

    def _remove(self, key: TimerKey) -> Optional[Offer]:
        offer = self._offers.pop(key, None)
        if offer is not None:
            self.timer_engine.cancel_timeout(key)
        return offer

    async def _on_timeout(self, key: TimerKey) -> None:
        offer = self._offers.pop(key, None)
        if offer is None:
            return
        _LOGGER.info(f"Offer of {offer.resource_code} to {offer.holder_name} expired")
        if self.on_expired:
            await self.on_expired(offer)
