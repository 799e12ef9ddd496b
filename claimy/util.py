import importlib
import logging
import os
from datetime import UTC, datetime
from typing import TypeVar

T = TypeVar("T")
_LOGGER = logging.getLogger(__name__)


def import_from(qual_name: str):
    """Import a value from its fully qualified name.

    Args:
        qual_name: A fully qualified name in the format 'module.submodule.name'
                  e.g. 'claimy.mem.memory_gateway.MemoryGateway'

    Returns:
        The imported value (class, function, or variable)
    """
    parts = qual_name.split(".")
    module_name = ".".join(parts[:-1])
    module = importlib.import_module(module_name)
    result = getattr(module, parts[-1])
    return result


def get_impl(key: str, base_type: type[T], default_type: type) -> type[T]:
    value = os.getenv(key)
    if not value:
        assert issubclass(default_type, base_type)
        return default_type
    imported_type = import_from(value)
    assert issubclass(imported_type, base_type)
    _LOGGER.debug(f"Using {imported_type.__name__} from {key}")
    return imported_type


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Snapshots written by older versions may hold naive timestamps - read them as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
