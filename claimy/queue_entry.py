from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class QueueEntry:
    """A holder waiting for a currently claimed respawn"""

    holder_id: str
    holder_name: str
    resource_code: str
    desired_minutes: int
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> tuple[str, str]:
        return (self.holder_id, self.resource_code)
