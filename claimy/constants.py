"""Environment variable constants for Claimy.

This module centralizes all environment variable keys and defaults used throughout
Claimy to avoid hardcoded strings.
"""

# Persistence
CLAIMY_ROOT_DIR = "CLAIMY_ROOT_DIR"
"""Directory holding the claims and queue snapshot files.
Default: ~/.claimy
"""
DEFAULT_ROOT_DIR = "~/.claimy"

# Gateway
CLAIMY_GATEWAY = "CLAIMY_GATEWAY"
"""Set this to a fully qualified class name to use a custom Gateway implementation.
Default: WebhookGateway if CLAIMY_WEBHOOK_URL is set, otherwise MemoryGateway
"""
CLAIMY_WEBHOOK_URL = "CLAIMY_WEBHOOK_URL"
"""Base url of the chat bridge receiving display updates and private messages"""

# Timing
CLAIMY_MINUTE_SECONDS = "CLAIMY_MINUTE_SECONDS"
"""Length in seconds of one countdown minute. Only ever changed for demos and tests."""
CLAIMY_OFFER_TTL_MINUTES = "CLAIMY_OFFER_TTL_MINUTES"
CLAIMY_RECONNECT_DELAY = "CLAIMY_RECONNECT_DELAY"
CLAIMY_RECONNECT_RETRY_DELAY = "CLAIMY_RECONNECT_RETRY_DELAY"

DEFAULT_MINUTE_SECONDS = 60.0
DEFAULT_OFFER_TTL_MINUTES = 10
DEFAULT_RECONNECT_DELAY = 5.0
DEFAULT_RECONNECT_RETRY_DELAY = 10.0

# Claims
MAX_CLAIM_MINUTES = 150
"""Longest claim that may be requested (2:30)"""
DEFAULT_CLAIM_MINUTES = MAX_CLAIM_MINUTES
MAX_CLAIM_HOURS = 2

CLAIMS_FILE_NAME = "claims.json"
QUEUE_FILE_NAME = "queue.json"
