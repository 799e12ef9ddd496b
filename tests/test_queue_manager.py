"""Tests for QueueManager and OfferManager"""

import asyncio
from datetime import timedelta

import pytest

from claimy.claim_registry import ClaimRegistry
from claimy.claimy_error import ConflictError, NotFoundError, ValidationError
from claimy.offer import Offer
from claimy.offer_manager import OfferManager
from claimy.queue_entry import QueueEntry
from claimy.queue_manager import QueueManager
from claimy.respawn import get_respawn
from claimy.timer_engine import TimerEngine


class TestQueueManager:
    """Test cases for QueueManager"""

    def create_queue_manager(self, clock) -> QueueManager:
        engine = TimerEngine()
        claims = ClaimRegistry(timer_engine=engine, minute_seconds=3600, clock=clock)
        offers = OfferManager(timer_engine=engine, minute_seconds=60, clock=clock)
        return QueueManager(claims=claims, offers=offers, clock=clock)

    @pytest.mark.asyncio
    async def test_enqueue_on_free_respawn_is_rejected(self, clock):
        queues = self.create_queue_manager(clock)
        with pytest.raises(ConflictError):
            queues.enqueue("h2", "Bob", "f4", 45)
        assert queues.list_entries() == []

    @pytest.mark.asyncio
    async def test_enqueue_is_fifo(self, clock):
        queues = self.create_queue_manager(clock)
        queues.claims.acquire("h1", "Alice", get_respawn("f4"), 60)

        queues.enqueue("h2", "Bob", "F4", 45)
        clock.advance(1)
        queues.enqueue("h3", "Carol", "f4", 30)

        assert [e.holder_id for e in queues.entries("f4")] == ["h2", "h3"]
        assert queues.position("h3", "f4") == 2
        assert queues.peek_head("f4").holder_id == "h2"
        assert queues.heads()["f4"].holder_id == "h2"
        await queues.claims.timer_engine.cancel_all()

    @pytest.mark.asyncio
    async def test_enqueue_rejections(self, clock):
        queues = self.create_queue_manager(clock)
        queues.claims.acquire("h1", "Alice", get_respawn("f4"), 60)
        queues.enqueue("h2", "Bob", "f4", 45)

        with pytest.raises(ConflictError):
            queues.enqueue("h1", "Alice", "f4", 45)
        with pytest.raises(ConflictError):
            queues.enqueue("h2", "Bob", "f4", 30)
        with pytest.raises(ValidationError):
            queues.enqueue("h3", "Carol", "f4", 200)
        assert len(queues.entries("f4")) == 1
        await queues.claims.timer_engine.cancel_all()

    @pytest.mark.asyncio
    async def test_dequeue(self, clock):
        queues = self.create_queue_manager(clock)
        queues.claims.acquire("h1", "Alice", get_respawn("f4"), 60)
        queues.enqueue("h2", "Bob", "f4", 45)

        removed = queues.dequeue("h2", "f4")
        assert isinstance(removed, QueueEntry)
        assert queues.entries("f4") == []

        with pytest.raises(NotFoundError):
            queues.dequeue("h2", "f4")
        await queues.claims.timer_engine.cancel_all()

    @pytest.mark.asyncio
    async def test_promote_head_creates_offer(self, clock):
        queues = self.create_queue_manager(clock)
        queues.claims.acquire("h1", "Alice", get_respawn("f4"), 60)
        queues.enqueue("h2", "Bob", "f4", 45)
        queues.claims.release("h1", "f4")

        offer = queues.promote_head("f4")
        assert offer.holder_id == "h2"
        assert offer.desired_minutes == 45
        assert offer.expires_at == clock.now + timedelta(minutes=10)
        assert queues.entries("f4") == []
        assert queues.offers.timer_engine.has_timeout(("h2", "f4"))

        # Holding an offer counts as being queued
        queues.claims.acquire("h3", "Carol", get_respawn("f4"), 60)
        with pytest.raises(ConflictError):
            queues.enqueue("h2", "Bob", "f4", 45)

        withdrawn = queues.dequeue("h2", "f4")
        assert isinstance(withdrawn, Offer)
        assert not queues.offers.timer_engine.has_timeout(("h2", "f4"))
        await queues.claims.timer_engine.cancel_all()

    @pytest.mark.asyncio
    async def test_promote_head_on_empty_queue(self, clock):
        queues = self.create_queue_manager(clock)
        assert queues.promote_head("f4") is None


class TestOfferManager:
    """Test cases for OfferManager"""

    def create_entry(self, clock, holder_id="h2", resource_code="f4") -> QueueEntry:
        return QueueEntry(
            holder_id=holder_id,
            holder_name=holder_id.upper(),
            resource_code=resource_code,
            desired_minutes=45,
            enqueued_at=clock.now,
        )

    @pytest.mark.asyncio
    async def test_accept_takes_oldest_offer(self, clock):
        offers = OfferManager(timer_engine=TimerEngine(), minute_seconds=3600, clock=clock)
        offers.create_offer(self.create_entry(clock, resource_code="f4"))
        offers.create_offer(self.create_entry(clock, resource_code="a1"))

        assert offers.accept("h2").resource_code == "f4"
        assert offers.accept("h2", "a1").resource_code == "a1"
        with pytest.raises(NotFoundError):
            offers.accept("h2")

    @pytest.mark.asyncio
    async def test_duplicate_offer_is_rejected(self, clock):
        offers = OfferManager(timer_engine=TimerEngine(), minute_seconds=3600, clock=clock)
        offers.create_offer(self.create_entry(clock))
        with pytest.raises(ConflictError):
            offers.create_offer(self.create_entry(clock))
        assert len(offers) == 1
        offers.clear()

    @pytest.mark.asyncio
    async def test_expiry_follows_minute_seconds(self, clock):
        offers = OfferManager(
            timer_engine=TimerEngine(), ttl_minutes=10, minute_seconds=1, clock=clock
        )
        offer = offers.create_offer(self.create_entry(clock))

        assert offer.expires_at == clock.now + timedelta(seconds=10)
        offers.clear()

    @pytest.mark.asyncio
    async def test_restore_drops_expired_offer(self, clock):
        offers = OfferManager(timer_engine=TimerEngine(), minute_seconds=3600, clock=clock)
        offer = Offer(
            holder_id="h2",
            holder_name="Bob",
            resource_code="f4",
            desired_minutes=45,
            expires_at=clock.now - timedelta(minutes=1),
        )
        assert offers.restore(offer) is False
        assert len(offers) == 0

        live = Offer(
            holder_id="h2",
            holder_name="Bob",
            resource_code="f4",
            desired_minutes=45,
            expires_at=clock.now + timedelta(minutes=5),
        )
        assert offers.restore(live) is True
        assert offers.get("h2", "f4") == live
        offers.clear()

    @pytest.mark.asyncio
    async def test_timeout_removes_offer_then_notifies(self, clock):
        expired = []

        async def on_expired(offer):
            expired.append((offer.holder_id, offers.get(offer.holder_id, offer.resource_code)))

        offers = OfferManager(
            timer_engine=TimerEngine(),
            ttl_minutes=1,
            minute_seconds=0.01,
            clock=clock,
            on_expired=on_expired,
        )
        offers.create_offer(self.create_entry(clock))
        await asyncio.sleep(0.04)
        assert expired == [("h2", None)]
        assert len(offers) == 0
