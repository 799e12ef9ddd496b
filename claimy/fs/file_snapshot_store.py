from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter

from claimy.claimy_error import PersistenceError
from claimy.constants import CLAIMS_FILE_NAME, QUEUE_FILE_NAME
from claimy.records import ClaimRecord, QueueRecord
from claimy.serializers.pydantic_serializer import PydanticSerializer
from claimy.serializers.serializer import Serializer
from claimy.snapshot_store import SnapshotStore

_LOGGER = logging.getLogger(__name__)


def _claims_serializer() -> Serializer[list[ClaimRecord]]:
    return PydanticSerializer(TypeAdapter(list[ClaimRecord]))


def _queue_serializer() -> Serializer[QueueRecord]:
    return PydanticSerializer(TypeAdapter(QueueRecord))


@dataclass
class FileSnapshotStore(SnapshotStore):
    """
    Snapshot store keeping one JSON file per record under root_dir.

    Files are written atomically by writing to a temp file and renaming it over the
    previous snapshot, so a crash mid write leaves the last good snapshot in place.
    """

    root_dir: Path
    claims_serializer: Serializer[list[ClaimRecord]] = field(
        default_factory=_claims_serializer
    )
    queue_serializer: Serializer[QueueRecord] = field(
        default_factory=_queue_serializer
    )

    def __post_init__(self):
        self.root_dir = Path(self.root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

    @property
    def claims_file(self) -> Path:
        return self.root_dir / CLAIMS_FILE_NAME

    @property
    def queue_file(self) -> Path:
        return self.root_dir / QUEUE_FILE_NAME

    async def save_claims(self, records: list[ClaimRecord]) -> None:
        self._write(self.claims_file, self.claims_serializer.serialize(records))
        _LOGGER.debug(f"Saved {len(records)} claims")

    async def save_queue(self, record: QueueRecord) -> None:
        self._write(self.queue_file, self.queue_serializer.serialize(record))
        _LOGGER.debug(
            f"Saved {len(record.queue_entries)} queue entries and {len(record.offers)} offers"
        )

    async def load_claims(self) -> list[ClaimRecord]:
        data = self._read(self.claims_file)
        if data is None:
            return []
        try:
            return self.claims_serializer.deserialize(data)
        except ValueError as e:
            _LOGGER.warning(f"Ignoring unparseable claims snapshot {self.claims_file}: {e}")
            return []

    async def load_queue(self) -> QueueRecord:
        data = self._read(self.queue_file)
        if data is None:
            return QueueRecord()
        try:
            return self.queue_serializer.deserialize(data)
        except ValueError as e:
            _LOGGER.warning(f"Ignoring unparseable queue snapshot {self.queue_file}: {e}")
            return QueueRecord()

    async def clear(self) -> None:
        for snapshot_file in (self.claims_file, self.queue_file):
            try:
                snapshot_file.unlink(missing_ok=True)
            except OSError as e:
                raise PersistenceError(f"Failed to remove {snapshot_file}: {e}") from e

    def _write(self, snapshot_file: Path, data: bytes) -> None:
        temp_file = snapshot_file.with_suffix(".tmp")
        try:
            with open(temp_file, "wb") as f:
                f.write(data)
            temp_file.replace(snapshot_file)
        except OSError as e:
            raise PersistenceError(f"Failed to write {snapshot_file}: {e}") from e

    def _read(self, snapshot_file: Path) -> Optional[bytes]:
        try:
            with open(snapshot_file, "rb") as f:
                return f.read()
        except FileNotFoundError:
            _LOGGER.info(f"No snapshot found at {snapshot_file}")
            return None
        except OSError as e:
            raise PersistenceError(f"Failed to read {snapshot_file}: {e}") from e
