from claimy.mem.memory_gateway import MemoryGateway
from claimy.mem.memory_snapshot_store import MemorySnapshotStore

__all__ = ["MemoryGateway", "MemorySnapshotStore"]
