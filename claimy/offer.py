from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Offer:
    """Time limited right of first refusal on a respawn, extended to the head of its queue"""

    holder_id: str
    holder_name: str
    resource_code: str
    desired_minutes: int
    expires_at: datetime

    @property
    def key(self) -> tuple[str, str]:
        return (self.holder_id, self.resource_code)
