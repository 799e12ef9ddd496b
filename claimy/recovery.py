"""Elapsed time compensation for claims recovered from a snapshot.

A claim's remaining minutes are reduced by the whole minutes that passed since it was
saved, each minute lasting minute_seconds as the countdowns do. Snapshots from older
versions have no saved_at, in which case the claim's start time is used instead. That
fallback subtracts time measured from the start of the claim from a remaining value
that was already counting down, so it is only an approximation.
"""

from dataclasses import dataclass, field
from datetime import datetime
import logging

from claimy.claim import Claim
from claimy.constants import DEFAULT_MINUTE_SECONDS
from claimy.records import ClaimRecord
from claimy.util import as_utc

_LOGGER = logging.getLogger(__name__)


def elapsed_minutes(
    record: ClaimRecord, now: datetime, minute_seconds: float = DEFAULT_MINUTE_SECONDS
) -> int:
    saved = record.saved_at
    if saved is None:
        _LOGGER.warning(
            f"Claim of {record.holder_name} on {record.resource_code} has no saved_at, "
            "falling back to started_at"
        )
        saved = record.started_at
    seconds = (now - as_utc(saved)).total_seconds()
    return max(0, int(seconds // minute_seconds))


def remaining_minutes(
    record: ClaimRecord, now: datetime, minute_seconds: float = DEFAULT_MINUTE_SECONDS
) -> int:
    return record.remaining_minutes - elapsed_minutes(record, now, minute_seconds)


@dataclass
class RecoveredClaims:
    live: list[Claim] = field(default_factory=list)
    expired: list[Claim] = field(default_factory=list)


def recover_claims(
    records: list[ClaimRecord],
    now: datetime,
    minute_seconds: float = DEFAULT_MINUTE_SECONDS,
) -> RecoveredClaims:
    """Split saved claims into those still running (with their remaining time reduced) and
    those which ran out while the process was down"""
    result = RecoveredClaims()
    for record in records:
        remaining = remaining_minutes(record, now, minute_seconds)
        _LOGGER.info(
            f"Recovered claim of {record.holder_name} on {record.resource_code}: "
            f"{record.remaining_minutes} saved, {remaining} remaining"
        )
        if remaining <= 0:
            result.expired.append(record.to_claim(0))
        else:
            result.live.append(record.to_claim(remaining))
    return result
