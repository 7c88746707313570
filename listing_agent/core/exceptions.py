# listing_agent/core/exceptions.py


class ListingError(Exception):
    """Base class for every error raised by the listing domain."""


class ConfigurationError(ListingError):
    """Raised at setup time for invalid configuration. Never retried automatically."""


class TransientRemoteError(ListingError):
    """Raised when the remote store cannot be listed. The next cycle retries the full walk."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(message or f"Failed to obtain file listing for {path}")


class RemoteAccessError(TransientRemoteError):
    """Raised by remote file system clients when a single call fails."""


class PartialTreeCorruption(TransientRemoteError):
    """Raised when a subdirectory becomes unlistable in the middle of a walk."""

    def __init__(self, path: str, root_path: str):
        self.root_path = root_path
        super().__init__(
            path,
            f"Subdirectory {path} under {root_path} could not be listed; "
            f"discarding the whole walk",
        )


class EmissionError(ListingError):
    """Raised when the downstream handoff of a cycle's records fails."""


class CursorPersistenceError(ListingError):
    """Raised when the listing cursor cannot be loaded or saved."""


class CursorConflictError(CursorPersistenceError):
    """Raised when another writer committed a cursor since it was loaded."""

    def __init__(self, expected_revision: int, actual_revision: int):
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision
        super().__init__(
            f"Cursor revision conflict: expected {expected_revision}, "
            f"store holds {actual_revision}"
        )


class InvalidTransitionError(Exception):
    """Raised when a listing cycle state transition is not allowed."""

    def __init__(self, cycle_id: str, from_state: str, to_state: str):
        self.cycle_id = cycle_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition for cycle {cycle_id}: "
            f"Cannot move from '{from_state}' to '{to_state}'."
        )
