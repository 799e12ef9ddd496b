from dataclasses import dataclass
import logging
import os
from pathlib import Path

from claimy.constants import (
    CLAIMY_MINUTE_SECONDS,
    CLAIMY_OFFER_TTL_MINUTES,
    CLAIMY_RECONNECT_DELAY,
    CLAIMY_RECONNECT_RETRY_DELAY,
    CLAIMY_ROOT_DIR,
    CLAIMY_WEBHOOK_URL,
    DEFAULT_MINUTE_SECONDS,
    DEFAULT_OFFER_TTL_MINUTES,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_RECONNECT_RETRY_DELAY,
    DEFAULT_ROOT_DIR,
)

_LOGGER = logging.getLogger(__name__)


@dataclass
class ClaimyConfig:
    """Configuration object for claimy"""

    root_dir: Path
    minute_seconds: float = DEFAULT_MINUTE_SECONDS
    offer_ttl_minutes: int = DEFAULT_OFFER_TTL_MINUTES
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY
    reconnect_retry_delay: float = DEFAULT_RECONNECT_RETRY_DELAY
    webhook_url: str | None = None


def _get_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        _LOGGER.warning(f"Ignoring invalid value for {key}: {value!r}")
        return default


def load_config() -> ClaimyConfig:
    """Build a config from the environment"""
    return ClaimyConfig(
        root_dir=Path(os.getenv(CLAIMY_ROOT_DIR, DEFAULT_ROOT_DIR)).expanduser(),
        minute_seconds=_get_float(CLAIMY_MINUTE_SECONDS, DEFAULT_MINUTE_SECONDS),
        offer_ttl_minutes=int(
            _get_float(CLAIMY_OFFER_TTL_MINUTES, DEFAULT_OFFER_TTL_MINUTES)
        ),
        reconnect_delay=_get_float(CLAIMY_RECONNECT_DELAY, DEFAULT_RECONNECT_DELAY),
        reconnect_retry_delay=_get_float(
            CLAIMY_RECONNECT_RETRY_DELAY, DEFAULT_RECONNECT_RETRY_DELAY
        ),
        webhook_url=os.getenv(CLAIMY_WEBHOOK_URL) or None,
    )


_config: ClaimyConfig | None = None


def get_config() -> ClaimyConfig:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: ClaimyConfig | None):
    global _config
    _config = config
