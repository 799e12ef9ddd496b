import asyncio
from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Callable, Optional, Union

from claimy.claim import Claim
from claimy.claim_registry import ClaimRegistry
from claimy.claimy_error import (
    ConflictError,
    ExternalGatewayError,
    NotFoundError,
    PersistenceError,
)
from claimy.config import ClaimyConfig, get_config
from claimy.constants import (
    DEFAULT_MINUTE_SECONDS,
    DEFAULT_OFFER_TTL_MINUTES,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_RECONNECT_RETRY_DELAY,
)
from claimy.duration import parse_duration
from claimy.gateway.gateway import Gateway, get_default_gateway
from claimy.offer import Offer
from claimy.offer_manager import OfferManager
from claimy.presenter import (
    QueueStatus,
    claim_expired_message,
    offer_expired_message,
    offer_message,
    render_queue_status,
    render_state,
)
from claimy.queue_entry import QueueEntry
from claimy.queue_manager import QueueManager
from claimy.records import ClaimRecord, OfferRecord, QueueEntryRecord, QueueRecord
from claimy.recovery import recover_claims
from claimy.respawn import get_respawn, normalize_code
from claimy.snapshot_store import SnapshotStore
from claimy.timer_engine import TimerEngine
from claimy.util import utc_now

_LOGGER = logging.getLogger(__name__)


@dataclass
class Scheduler:
    """
    Composition root for claims, queues and offers.

    Every operation applies its registry mutations synchronously before its first await,
    then snapshots state and re-renders the display. Anything resuming after an await
    looks its claim / offer up again rather than trusting what it saw before.

    Must be entered using ``async with`` before use: entering connects the gateway and
    recovers the last snapshot, exiting snapshots state and cancels every timer.
    """

    gateway: Gateway
    store: SnapshotStore
    minute_seconds: float = DEFAULT_MINUTE_SECONDS
    offer_ttl_minutes: int = DEFAULT_OFFER_TTL_MINUTES
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY
    reconnect_retry_delay: float = DEFAULT_RECONNECT_RETRY_DELAY
    clock: Callable[[], datetime] = utc_now

    _timer_engine: TimerEngine = field(default_factory=TimerEngine, init=False)
    _registry: ClaimRegistry = field(init=False)
    _offers: OfferManager = field(init=False)
    _queues: QueueManager = field(init=False)
    _entered: bool = field(default=False, init=False)
    _reconnecting: bool = field(default=False, init=False)
    _suspended: bool = field(default=False, init=False)
    _reconnect_task: Optional[asyncio.Task] = field(default=None, init=False)

    def __post_init__(self):
        self._registry = ClaimRegistry(
            timer_engine=self._timer_engine,
            minute_seconds=self.minute_seconds,
            clock=self.clock,
            on_updated=self._on_claim_updated,
            on_expired=self._on_claim_expired,
        )
        self._offers = OfferManager(
            timer_engine=self._timer_engine,
            ttl_minutes=self.offer_ttl_minutes,
            minute_seconds=self.minute_seconds,
            clock=self.clock,
            on_expired=self._on_offer_expired,
        )
        self._queues = QueueManager(
            claims=self._registry, offers=self._offers, clock=self.clock
        )
        self.gateway.set_disconnect_handler(self._on_gateway_disconnect)

    async def __aenter__(self):
        self._entered = True
        try:
            await self.gateway.connect()
            connected = True
        except ExternalGatewayError as e:
            _LOGGER.error(f"Could not connect to gateway: {e}")
            connected = False
        await self.restore()
        if not connected:
            self._start_reconnect()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        self._entered = False
        if self._reconnect_task:
            self._reconnect_task.cancel()
            try:
                await self._reconnect_task
            except asyncio.CancelledError:
                pass
            self._reconnect_task = None
        if not self._suspended:
            await self._persist()
        await self._timer_engine.cancel_all()
        self._registry.clear()
        self._offers.clear()
        self._queues.clear()
        try:
            await self.gateway.close()
        except ExternalGatewayError as e:
            _LOGGER.warning(f"Error closing gateway: {e}")

    # -------------------- commands --------------------

    async def claim(
        self,
        holder_id: str,
        holder_name: str,
        resource_code: str,
        duration: Optional[str] = None,
    ) -> Claim:
        """Claim a respawn for the duration given (default 2:30). A holder with a pending
        offer on the respawn accepts it instead."""
        self._check_available()
        minutes = parse_duration(duration)
        respawn = get_respawn(resource_code)
        if self._offers.get(holder_id, respawn.code):
            return await self.accept_offer(holder_id, respawn.code)
        reserved = self._offers.find_for_resource(respawn.code)
        if reserved is not None:
            raise ConflictError(
                f"{respawn.name} ({respawn.code.upper()}) is being offered to "
                f"{reserved.holder_name}"
            )
        claim = self._registry.acquire(holder_id, holder_name, respawn, minutes)
        self._queues.remove(holder_id, respawn.code)
        await self._publish()
        return claim

    async def release(self, holder_id: str, resource_code: str) -> Claim:
        """Release the holder's claim, offering the respawn to the head of its queue"""
        self._check_available()
        claim = self._registry.release(holder_id, resource_code)
        offer = self._hand_off(claim.resource_code)
        await self._publish()
        if offer:
            await self._send_offer(offer)
        return claim

    async def enqueue(
        self,
        holder_id: str,
        holder_name: str,
        resource_code: str,
        duration: Optional[str] = None,
    ) -> QueueEntry:
        self._check_available()
        minutes = parse_duration(duration)
        entry = self._queues.enqueue(holder_id, holder_name, resource_code, minutes)
        await self._publish()
        return entry

    async def dequeue(
        self, holder_id: str, resource_code: str
    ) -> Union[QueueEntry, Offer]:
        """Leave the queue of a respawn. Leaving while holding an offer passes the offer
        on to the next holder in the queue."""
        self._check_available()
        removed = self._queues.dequeue(holder_id, resource_code)
        next_offer = None
        if isinstance(removed, Offer):
            next_offer = self._hand_off(removed.resource_code)
        await self._publish()
        if next_offer:
            await self._send_offer(next_offer)
        return removed

    async def accept_offer(
        self, holder_id: str, resource_code: Optional[str] = None
    ) -> Claim:
        """Accept the holder's pending offer, turning it into a claim for the minutes they
        asked for when queueing"""
        self._check_available()
        if resource_code is None:
            offer = self._offers.find_for_holder(holder_id)
        else:
            offer = self._offers.get(holder_id, normalize_code(resource_code))
        if offer is None:
            raise NotFoundError("You have no pending offer to accept")
        current = self._registry.get(offer.resource_code)
        if current is not None and current.holder_id != holder_id:
            raise ConflictError(
                f"{offer.resource_code.upper()} is already claimed by {current.holder_name}"
            )
        self._offers.accept(holder_id, offer.resource_code)
        claim = self._registry.acquire(
            offer.holder_id,
            offer.holder_name,
            get_respawn(offer.resource_code),
            offer.desired_minutes,
        )
        await self._publish()
        return claim

    def queue_status(self, resource_code: str) -> QueueStatus:
        respawn = get_respawn(resource_code)
        return QueueStatus(
            respawn=respawn,
            claim=self._registry.get(respawn.code),
            entries=self._queues.entries(respawn.code),
            offer=self._offers.find_for_resource(respawn.code),
        )

    def queue_status_text(self, resource_code: str) -> str:
        return render_queue_status(self.queue_status(resource_code))

    def queue_position(self, holder_id: str, resource_code: str) -> Optional[int]:
        return self._queues.position(holder_id, normalize_code(resource_code))

    def render_state(self) -> str:
        return render_state(self._registry.list_claims(), self._queues.heads())

    def list_claims(self) -> list[Claim]:
        return self._registry.list_claims()

    def list_queue_entries(self) -> list[QueueEntry]:
        return self._queues.list_entries()

    def list_offers(self) -> list[Offer]:
        return self._offers.list_offers()

    @property
    def reconnecting(self) -> bool:
        return self._reconnecting

    # -------------------- recovery --------------------

    async def restore(self) -> None:
        """Rebuild claims, queues and offers from the last snapshot, then delete it.

        Claims are reduced by the time that passed since they were saved. Claims and offers
        that ran out while the process was down are handed off to the next queued holder,
        after the queue has been reloaded.
        """
        now = self.clock()
        try:
            claim_records = await self.store.load_claims()
            queue_record = await self.store.load_queue()
        except PersistenceError as e:
            _LOGGER.error(f"Could not load snapshot, starting empty: {e}")
            await self._render()
            return

        recovered = recover_claims(claim_records, now, self.minute_seconds)
        for claim in recovered.live:
            try:
                self._registry.restore(claim)
            except ConflictError as e:
                _LOGGER.warning(f"Skipping recovered claim: {e}")
        for entry_record in queue_record.queue_entries:
            self._queues.restore(entry_record.to_entry())
        lapsed_offers = []
        for offer_record in queue_record.offers:
            offer = offer_record.to_offer()
            if not self._offers.restore(offer):
                lapsed_offers.append(offer)

        try:
            await self.store.clear()
        except PersistenceError as e:
            _LOGGER.error(f"Could not remove snapshot after recovery: {e}")

        new_offers = []
        for resource_code in [c.resource_code for c in recovered.expired] + [
            o.resource_code for o in lapsed_offers
        ]:
            offer = self._hand_off(resource_code)
            if offer:
                new_offers.append(offer)

        _LOGGER.info(
            f"Recovered {len(recovered.live)} claims ({len(recovered.expired)} expired), "
            f"{len(queue_record.queue_entries)} queue entries and "
            f"{len(queue_record.offers) - len(lapsed_offers)} offers "
            f"({len(lapsed_offers)} expired)"
        )

        if recovered.expired or lapsed_offers:
            await self._publish()
        else:
            await self._render()
        for claim in recovered.expired:
            await self._alert(claim.holder_id, claim_expired_message(claim))
        for offer in lapsed_offers:
            await self._notify(
                offer.holder_id, offer_expired_message(offer, get_respawn(offer.resource_code))
            )
        for offer in new_offers:
            await self._send_offer(offer)

    async def reconnect(self) -> bool:
        """Re-establish the gateway session after a disconnect.

        State is snapshotted and torn down, the gateway reconnected (retrying without bound),
        and the snapshot recovered. If the snapshot cannot be written the in-memory state is
        kept as is instead.

        Returns:
            bool: False if a reconnect was already in progress
        """
        if self._reconnecting:
            _LOGGER.info("Reconnect already in progress")
            return False
        self._reconnecting = True
        try:
            await asyncio.sleep(self.reconnect_delay)
            saved = await self._persist()
            if saved:
                await self._teardown()
            else:
                _LOGGER.warning("Snapshot failed - keeping in-memory state across reconnect")
            try:
                await self.gateway.close()
            except ExternalGatewayError as e:
                _LOGGER.debug(f"Error closing old gateway session: {e}")
            while True:
                _LOGGER.info("Reconnecting to gateway...")
                try:
                    await self.gateway.connect()
                    break
                except ExternalGatewayError as e:
                    _LOGGER.error(
                        f"Reconnect failed: {e} - retrying in {self.reconnect_retry_delay}s"
                    )
                    await asyncio.sleep(self.reconnect_retry_delay)
            if saved:
                self._suspended = False
                await self.restore()
            else:
                await self._render()
            _LOGGER.info("Reconnected to gateway")
            return True
        finally:
            self._reconnecting = False

    # -------------------- internals --------------------

    def _check_available(self) -> None:
        if self._suspended:
            raise ExternalGatewayError(
                "Reconnecting to the chat server - try again in a few seconds"
            )

    def _hand_off(self, resource_code: str) -> Optional[Offer]:
        """Offer a free respawn to the head of its queue"""
        if self._registry.get(resource_code) is not None:
            return None
        if self._offers.find_for_resource(resource_code) is not None:
            return None
        return self._queues.promote_head(resource_code)

    async def _teardown(self) -> None:
        self._suspended = True
        await self._timer_engine.cancel_all()
        self._registry.clear()
        self._offers.clear()
        self._queues.clear()

    async def _publish(self) -> None:
        await self._persist()
        await self._render()

    async def _persist(self) -> bool:
        now = self.clock()
        claim_records = [
            ClaimRecord.from_claim(claim, now) for claim in self._registry.list_claims()
        ]
        queue_record = QueueRecord(
            queue_entries=[
                QueueEntryRecord.from_entry(entry) for entry in self._queues.list_entries()
            ],
            offers=[OfferRecord.from_offer(offer) for offer in self._offers.list_offers()],
        )
        saved = True
        try:
            await self.store.save_claims(claim_records)
        except PersistenceError as e:
            _LOGGER.error(f"Failed to snapshot claims: {e}")
            saved = False
        try:
            await self.store.save_queue(queue_record)
        except PersistenceError as e:
            _LOGGER.error(f"Failed to snapshot queues: {e}")
            saved = False
        return saved

    async def _render(self) -> None:
        try:
            await self.gateway.render(self.render_state())
        except ExternalGatewayError as e:
            _LOGGER.warning(f"Could not update display: {e}")

    async def _notify(self, holder_id: str, text: str) -> None:
        try:
            await self.gateway.notify(holder_id, text)
        except ExternalGatewayError as e:
            _LOGGER.warning(f"Could not message {holder_id}: {e}")

    async def _alert(self, holder_id: str, text: str) -> None:
        try:
            await self.gateway.alert(holder_id, text)
        except ExternalGatewayError as e:
            _LOGGER.info(f"Alert to {holder_id} failed ({e}), sending a message instead")
            await self._notify(holder_id, text)

    async def _send_offer(self, offer: Offer) -> None:
        if self._offers.get(offer.holder_id, offer.resource_code) is None:
            return
        respawn = get_respawn(offer.resource_code)
        await self._alert(
            offer.holder_id, offer_message(offer, respawn, self.offer_ttl_minutes)
        )

    async def _on_claim_updated(self, claim: Claim) -> None:
        await self._publish()

    async def _on_claim_expired(self, claim: Claim) -> None:
        offer = self._hand_off(claim.resource_code)
        await self._publish()
        await self._alert(claim.holder_id, claim_expired_message(claim))
        if offer:
            await self._send_offer(offer)

    async def _on_offer_expired(self, offer: Offer) -> None:
        next_offer = self._hand_off(offer.resource_code)
        await self._publish()
        await self._notify(
            offer.holder_id, offer_expired_message(offer, get_respawn(offer.resource_code))
        )
        if next_offer:
            await self._send_offer(next_offer)

    async def _on_gateway_disconnect(self) -> None:
        self._start_reconnect()

    def _start_reconnect(self) -> None:
        if not self._entered or self._reconnecting:
            return
        self._reconnect_task = asyncio.create_task(self.reconnect())


def create_scheduler(
    config: Optional[ClaimyConfig] = None,
    gateway: Optional[Gateway] = None,
    store: Optional[SnapshotStore] = None,
) -> Scheduler:
    """Build a scheduler from config, defaulting to the global config, the default gateway
    and a file snapshot store under the configured root dir."""
    config = config or get_config()
    if gateway is None:
        gateway = get_default_gateway(config)
    if store is None:
        from claimy.fs.file_snapshot_store import FileSnapshotStore

        store = FileSnapshotStore(root_dir=config.root_dir)
    return Scheduler(
        gateway=gateway,
        store=store,
        minute_seconds=config.minute_seconds,
        offer_ttl_minutes=config.offer_ttl_minutes,
        reconnect_delay=config.reconnect_delay,
        reconnect_retry_delay=config.reconnect_retry_delay,
    )
