class ClaimyError(Exception):
    pass


class ValidationError(ClaimyError):
    """Raised when a duration or resource code supplied by a user is malformed or out of range."""


class ConflictError(ClaimyError):
    """Raised when an operation would break exclusivity: the resource is held by someone else,
    the holder is already queued or already has an offer, or the resource is free to queue on."""


class NotFoundError(ClaimyError):
    """Raised when release, dequeue or accept finds no matching claim, queue entry or offer."""


class ExternalGatewayError(ClaimyError):
    """Raised by a gateway when the chat / display server cannot be reached. Never fatal."""


class PersistenceError(ClaimyError):
    """Raised when a snapshot cannot be written or read. In memory state is kept regardless."""
