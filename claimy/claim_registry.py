from dataclasses import dataclass, field, replace
from datetime import datetime
import logging
from typing import Awaitable, Callable, Dict, Optional

from claimy.claim import Claim
from claimy.claimy_error import ConflictError, NotFoundError, ValidationError
from claimy.constants import DEFAULT_MINUTE_SECONDS, MAX_CLAIM_MINUTES
from claimy.respawn import Respawn, normalize_code
from claimy.timer_engine import TimerEngine, TimerKey
from claimy.util import utc_now

_LOGGER = logging.getLogger(__name__)

ClaimHook = Callable[[Claim], Awaitable[None]]


@dataclass
class ClaimRegistry:
    """Authoritative map of active claims, at most one per respawn.

    Each claim owns a countdown in the timer engine which calls tick() once per minute.
    When a claim runs out it is removed before on_expired is awaited, so the hook always
    sees a respawn that is already free.
    """

    timer_engine: TimerEngine
    minute_seconds: float = DEFAULT_MINUTE_SECONDS
    clock: Callable[[], datetime] = utc_now
    on_updated: Optional[ClaimHook] = None
    on_expired: Optional[ClaimHook] = None

    # Internal storage, keyed by resource code
    _claims: Dict[str, Claim] = field(default_factory=dict, init=False)

    def acquire(
        self, holder_id: str, holder_name: str, respawn: Respawn, minutes: int
    ) -> Claim:
        """Create a claim, replacing any claim the same holder already has on the respawn.

        Raises:
            ConflictError: If a different holder has the respawn
            ValidationError: If minutes is out of range
        """
        if minutes < 0 or minutes > MAX_CLAIM_MINUTES:
            raise ValidationError(
                f"Claims must last between 0 and {MAX_CLAIM_MINUTES} minutes"
            )
        existing = self._claims.get(respawn.code)
        if existing is not None:
            if existing.holder_id != holder_id:
                raise ConflictError(
                    f"{respawn.name} ({respawn.code.upper()}) is already claimed by "
                    f"{existing.holder_name}"
                )
            self.timer_engine.cancel_countdown(existing.key)
            _LOGGER.info(f"Replacing claim of {holder_name} on {respawn.code}")

        claim = Claim(
            holder_id=holder_id,
            holder_name=holder_name,
            resource_code=respawn.code,
            resource_name=respawn.name,
            tier=respawn.tier,
            remaining_minutes=minutes,
            started_at=self.clock(),
        )
        self._insert(claim)
        _LOGGER.info(
            f"{holder_name} claimed {respawn.code} for {minutes} minutes"
        )
        return replace(claim)

    def restore(self, claim: Claim) -> Claim:
        """Re-insert a recovered claim and re-arm its countdown"""
        existing = self._claims.get(claim.resource_code)
        if existing is not None and existing.holder_id != claim.holder_id:
            raise ConflictError(
                f"Cannot restore claim of {claim.holder_name} on {claim.resource_code}: "
                f"already claimed by {existing.holder_name}"
            )
        if existing is not None:
            self.timer_engine.cancel_countdown(existing.key)
        claim = replace(claim)
        self._insert(claim)
        return replace(claim)

    def release(self, holder_id: str, resource_code: str) -> Claim:
        """Remove the holder's claim and cancel its countdown

        Raises:
            NotFoundError: If the holder has no claim on the respawn
        """
        resource_code = normalize_code(resource_code)
        claim = self._claims.get(resource_code)
        if claim is None or claim.holder_id != holder_id:
            raise NotFoundError(f"You have no claim on {resource_code.upper()}")
        del self._claims[resource_code]
        self.timer_engine.cancel_countdown(claim.key)
        _LOGGER.info(f"{claim.holder_name} released {resource_code}")
        return claim

    async def tick(self, key: TimerKey) -> Optional[Claim]:
        """Advance the claim under key by one minute, expiring it when it reaches zero.

        Returns:
            The claim after the tick, or None if no such claim exists any more
        """
        holder_id, resource_code = key
        claim = self._claims.get(resource_code)
        if claim is None or claim.holder_id != holder_id:
            self.timer_engine.cancel_countdown(key)
            return None

        claim.remaining_minutes = max(0, claim.remaining_minutes - 1)
        if claim.remaining_minutes == 0:
            del self._claims[resource_code]
            self.timer_engine.cancel_countdown(key)
            _LOGGER.info(f"Claim of {claim.holder_name} on {resource_code} expired")
            if self.on_expired:
                await self.on_expired(replace(claim))
        else:
            _LOGGER.debug(
                f"Claim of {claim.holder_name} on {resource_code}: "
                f"{claim.remaining_minutes} minutes left"
            )
            if self.on_updated:
                await self.on_updated(replace(claim))
        return replace(claim)

    def get(self, resource_code: str) -> Optional[Claim]:
        claim = self._claims.get(normalize_code(resource_code))
        return replace(claim) if claim else None

    def find(self, holder_id: str, resource_code: str) -> Optional[Claim]:
        claim = self._claims.get(normalize_code(resource_code))
        if claim is None or claim.holder_id != holder_id:
            return None
        return replace(claim)

    def list_claims(self) -> list[Claim]:
        return [replace(claim) for claim in self._claims.values()]

    def clear(self) -> None:
        """Drop every claim without expiring them (Used when tearing down for a reconnect)"""
        for claim in self._claims.values():
            self.timer_engine.cancel_countdown(claim.key)
        self._claims.clear()

    def __len__(self) -> int:
        return len(self._claims)

    def _insert(self, claim: Claim) -> None:
        self._claims[claim.resource_code] = claim
        self.timer_engine.start_countdown(claim.key, self.minute_seconds, self.tick)
