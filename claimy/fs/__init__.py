from claimy.fs.file_snapshot_store import FileSnapshotStore

__all__ = ["FileSnapshotStore"]
