class InvalidStateError(Exception):
    """Raised when a SyncFuture is read or written in the wrong state."""
