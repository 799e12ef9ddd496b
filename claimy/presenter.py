"""BBCode text for the shared claims display and the private messages sent to holders.

Everything here is a pure function of its arguments.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from claimy.claim import Claim
from claimy.duration import format_minutes
from claimy.offer import Offer
from claimy.queue_entry import QueueEntry
from claimy.respawn import Respawn

HEADER = """🎯 [b]CLAIMED RESPAWNS[/b] 🎯
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
📋 [b]!resp [code] [time][/b] - Claim a respawn or accept an offer
🚪 [b]!leave [code][/b] - Leave a respawn or its queue
📝 [b]!next [code] [time][/b] - Join the queue
📊 [b]!respinfo [code][/b] - Show the queue of a respawn

Time is HH:MM (e.g. !resp f4 0:30). Without a time the claim lasts 2:30.

⏰ Claimed below:

"""


@dataclass
class QueueStatus:
    respawn: Respawn
    claim: Optional[Claim] = None
    entries: list[QueueEntry] = field(default_factory=list)
    offer: Optional[Offer] = None


def holder_link(holder_id: str, holder_name: str) -> str:
    return f"[color=#0066CC][url=client://{holder_id}/{holder_name}]{holder_name}[/url][/color]"


def claim_line(claim: Claim, next_entry: Optional[QueueEntry] = None) -> str:
    time = f"[color=#FF6600][b]{format_minutes(claim.remaining_minutes)}[/b][/color]"
    line = (
        f"{claim.resource_code} - {time} [b]{claim.resource_name} ({claim.tier})[/b]: "
        f"{holder_link(claim.holder_id, claim.holder_name)}"
    )
    if next_entry is not None:
        line += f" | Next: {holder_link(next_entry.holder_id, next_entry.holder_name)}"
    return line


def render_state(
    claims: Sequence[Claim], queue_heads: Mapping[str, QueueEntry]
) -> str:
    """Render the shared display: the header followed by one line per active claim"""
    lines = [claim_line(claim, queue_heads.get(claim.resource_code)) for claim in claims]
    return HEADER + "\n".join(lines)


def render_queue_status(status: QueueStatus) -> str:
    respawn = status.respawn
    code = respawn.code.upper()
    lines = [
        f"📊 [b]{respawn.name}[/b] ({code})",
        f"🏷️ [b]Tier:[/b] {respawn.tier}",
        "",
    ]
    if status.claim:
        lines.append("🎯 [b]Current claim:[/b]")
        lines.append(f"┣━ {holder_link(status.claim.holder_id, status.claim.holder_name)}")
        lines.append(
            f"┗━ [color=#FF6600][b]{format_minutes(status.claim.remaining_minutes)}[/b][/color] left"
        )
    else:
        lines.append("🆓 [b]Status:[/b] free")
    if status.offer:
        lines.append(
            f"⏳ Offered to {holder_link(status.offer.holder_id, status.offer.holder_name)}"
        )
    lines.append("")
    if not status.entries:
        lines.append("📭 [b]Queue:[/b] empty")
    else:
        lines.append("🔄 [b]Queue:[/b]")
        for position, entry in enumerate(status.entries, start=1):
            lines.append(
                f"{position}. {holder_link(entry.holder_id, entry.holder_name)} - "
                f"[b]{format_minutes(entry.desired_minutes)}[/b]"
            )
    return "\n".join(lines)


def offer_message(offer: Offer, respawn: Respawn, ttl_minutes: int) -> str:
    code = respawn.code.upper()
    return (
        f"🎯 [b]RESPAWN AVAILABLE![/b]\n\n"
        f"[b]{respawn.name}[/b] ({code}) is free for you.\n"
        f"⏰ You have [b]{ttl_minutes} minutes[/b] to accept.\n"
        f"✅ Type [b]!resp {respawn.code}[/b] or [b]!accept[/b] to take it for "
        f"{format_minutes(offer.desired_minutes)}\n"
        f"❌ Ignore this message to pass."
    )


def claim_expired_message(claim: Claim) -> str:
    return (
        f"⏰ [color=#FF0000]CLAIM EXPIRED![/color] Your time on {claim.resource_name} "
        f"({claim.resource_code.upper()}) is over."
    )


def offer_expired_message(offer: Offer, respawn: Respawn) -> str:
    return (
        f"⌛ Your offer for {respawn.name} ({respawn.code.upper()}) expired. "
        f"Use !next {respawn.code} to queue again."
    )
