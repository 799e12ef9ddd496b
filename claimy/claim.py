from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass
class Claim:
    """An exclusive, time boxed hold by one holder on one respawn. remaining_minutes is
    decremented once per minute by the countdown owned by the ClaimRegistry."""

    holder_id: str
    holder_name: str
    resource_code: str
    resource_name: str
    tier: str
    remaining_minutes: int
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> tuple[str, str]:
        return (self.holder_id, self.resource_code)
