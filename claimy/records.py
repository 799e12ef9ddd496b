"""Durable record shapes for the claims and queue snapshots.

Field names are written in camelCase (holderId, remainingMinutes, ...) so snapshot files
keep the layout of the files written by earlier deployments. Both spellings are accepted
on load.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from claimy.claim import Claim
from claimy.offer import Offer
from claimy.queue_entry import QueueEntry


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClaimRecord(Record):
    holder_id: str
    holder_name: str
    resource_code: str
    resource_name: str
    tier: str
    remaining_minutes: int
    started_at: datetime
    saved_at: datetime | None = None
    """Absent in snapshots written before saved_at was introduced"""

    @classmethod
    def from_claim(cls, claim: Claim, saved_at: datetime | None) -> "ClaimRecord":
        return cls(
            holder_id=claim.holder_id,
            holder_name=claim.holder_name,
            resource_code=claim.resource_code,
            resource_name=claim.resource_name,
            tier=claim.tier,
            remaining_minutes=claim.remaining_minutes,
            started_at=claim.started_at,
            saved_at=saved_at,
        )

    def to_claim(self, remaining_minutes: int) -> Claim:
        return Claim(
            holder_id=self.holder_id,
            holder_name=self.holder_name,
            resource_code=self.resource_code.lower(),
            resource_name=self.resource_name,
            tier=self.tier,
            remaining_minutes=remaining_minutes,
            started_at=self.started_at,
        )


class QueueEntryRecord(Record):
    holder_id: str
    holder_name: str
    resource_code: str
    desired_minutes: int
    enqueued_at: datetime

    @classmethod
    def from_entry(cls, entry: QueueEntry) -> "QueueEntryRecord":
        return cls(
            holder_id=entry.holder_id,
            holder_name=entry.holder_name,
            resource_code=entry.resource_code,
            desired_minutes=entry.desired_minutes,
            enqueued_at=entry.enqueued_at,
        )

    def to_entry(self) -> QueueEntry:
        return QueueEntry(
            holder_id=self.holder_id,
            holder_name=self.holder_name,
            resource_code=self.resource_code.lower(),
            desired_minutes=self.desired_minutes,
            enqueued_at=self.enqueued_at,
        )


class OfferRecord(Record):
    holder_id: str
    holder_name: str
    resource_code: str
    desired_minutes: int
    expires_at: datetime

    @classmethod
    def from_offer(cls, offer: Offer) -> "OfferRecord":
        return cls(
            holder_id=offer.holder_id,
            holder_name=offer.holder_name,
            resource_code=offer.resource_code,
            desired_minutes=offer.desired_minutes,
            expires_at=offer.expires_at,
        )

    def to_offer(self) -> Offer:
        return Offer(
            holder_id=self.holder_id,
            holder_name=self.holder_name,
            resource_code=self.resource_code.lower(),
            desired_minutes=self.desired_minutes,
            expires_at=self.expires_at,
        )


class QueueRecord(Record):
    queue_entries: list[QueueEntryRecord] = Field(default_factory=list)
    offers: list[OfferRecord] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.queue_entries and not self.offers
