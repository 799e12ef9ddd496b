"""Tests for elapsed time compensation on recovery"""

from datetime import timedelta

from claimy.records import ClaimRecord
from claimy.recovery import elapsed_minutes, recover_claims
from tests.conftest import T0


def create_record(**kwargs) -> ClaimRecord:
    defaults = {
        "holder_id": "h1",
        "holder_name": "Alice",
        "resource_code": "x7",
        "resource_name": "Demônio Ancião",
        "tier": "Tier 4",
        "remaining_minutes": 100,
        "started_at": T0,
        "saved_at": T0,
    }
    defaults.update(kwargs)
    return ClaimRecord(**defaults)


class TestRecovery:
    """Test cases for recover_claims"""

    def test_elapsed_minutes_are_floored(self):
        record = create_record()
        assert elapsed_minutes(record, T0 + timedelta(minutes=30, seconds=59)) == 30

    def test_clock_going_backwards_is_zero(self):
        assert elapsed_minutes(create_record(), T0 - timedelta(minutes=5)) == 0

    def test_saved_at_is_preferred(self):
        record = create_record(started_at=T0 - timedelta(minutes=50))
        assert elapsed_minutes(record, T0 + timedelta(minutes=10)) == 10

    def test_missing_saved_at_falls_back_to_started_at(self):
        record = create_record(saved_at=None, started_at=T0.replace(tzinfo=None))
        assert elapsed_minutes(record, T0 + timedelta(minutes=20)) == 20

    def test_live_and_expired(self):
        records = [
            create_record(),
            create_record(holder_id="h2", resource_code="f4", remaining_minutes=20),
        ]
        result = recover_claims(records, T0 + timedelta(minutes=30))

        assert [(c.holder_id, c.remaining_minutes) for c in result.live] == [("h1", 70)]
        assert [(c.holder_id, c.remaining_minutes) for c in result.expired] == [("h2", 0)]

    def test_exactly_zero_remaining_is_expired(self):
        result = recover_claims([create_record()], T0 + timedelta(minutes=100))
        assert result.live == []
        assert len(result.expired) == 1

    def test_elapsed_minutes_follow_minute_seconds(self):
        record = create_record()
        now = T0 + timedelta(seconds=30)
        assert elapsed_minutes(record, now, minute_seconds=1) == 30

        result = recover_claims([record], now, minute_seconds=1)
        assert [c.remaining_minutes for c in result.live] == [70]
