"""
Claimy - Claim / queue / offer scheduler for shared respawns.

This package provides the scheduler composing claims with their countdowns, per respawn
waiting queues and time limited offers, plus pluggable gateways and snapshot stores.
"""

# Core
from claimy.claim import Claim
from claimy.queue_entry import QueueEntry
from claimy.offer import Offer
from claimy.respawn import Respawn, get_respawn
from claimy.scheduler import Scheduler, create_scheduler

# Errors
from claimy.claimy_error import (
    ClaimyError,
    ConflictError,
    ExternalGatewayError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

# Interfaces
from claimy.gateway import Gateway
from claimy.snapshot_store import SnapshotStore

# Memory implementation
from claimy.mem import MemoryGateway, MemorySnapshotStore

__all__ = [
    # Core
    'Claim',
    'QueueEntry',
    'Offer',
    'Respawn',
    'get_respawn',
    'Scheduler',
    'create_scheduler',

    # Errors
    'ClaimyError',
    'ConflictError',
    'ExternalGatewayError',
    'NotFoundError',
    'PersistenceError',
    'ValidationError',

    # Interfaces
    'Gateway',
    'SnapshotStore',

    # Memory implementation
    'MemoryGateway',
    'MemorySnapshotStore',
]
