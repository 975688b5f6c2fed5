"""Exception hierarchy for holding-area operations.

Every failure raised by the mover, the ledger, or the holding-area
operations derives from TossError and carries the path involved and
the underlying cause where one exists.
"""


class TossError(Exception):
    """Base exception for toss errors.

    Attributes:
        path: Filesystem path the failure relates to, if any.
        cause: Underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class NotFoundError(TossError):
    """Raised when a source or holding-area object does not exist."""


class PermissionDeniedError(TossError):
    """Raised when the filesystem refuses access."""


class DestinationExistsError(TossError):
    """Raised when a restore target is already occupied."""


class CrossVolumeFallbackError(TossError):
    """Raised when the copy-then-delete fallback fails part way.

    The source is left intact. The destination may hold a partial copy
    and must be discarded by the caller.

    Attributes:
        destination: Path of the (possibly partial) copy.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        destination: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, path=path, cause=cause)
        self.destination = destination


class ProtectedPathError(TossError):
    """Raised when asked to toss the holding area or something inside it."""


class OrphanedObjectError(TossError):
    """Raised when an object was moved into the bin but could not be recorded.

    Attributes:
        bin_path: Where the untracked object now lives.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        bin_path: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, path=path, cause=cause)
        self.bin_path = bin_path


class StaleRecordError(TossError):
    """Raised when a restored object's ledger record could not be removed."""


class LedgerError(TossError):
    """Base exception for metadata ledger errors."""


class LedgerInitError(LedgerError):
    """Raised when the ledger cannot be opened or its schema created."""


class DuplicateIDError(LedgerError):
    """Raised when appending an entry whose id already exists."""
