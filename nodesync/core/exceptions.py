__all__ = [
    "SyncError",
    "InvalidPathError",
    "NodeNotFoundError",
    "NodeExistsError",
    "NodeNotEmptyError",
    "VersionConflictError",
    "StructuralConflictError",
    "FilesystemError",
]


class SyncError(Exception):
    """
    Base class of all errors which abort a synchronization run.

    Carries the local or remote path at which the error was encountered so
    it can be surfaced to the operator.
    """

    path: str

    def __init__(self, path: object, message: str | None = None):
        self.path = str(path)
        super().__init__(message or f"{self.kind} at '{self.path}'")

    @property
    def kind(self) -> str:
        """
        Short name of this error kind for reporting.
        """
        return type(self).__name__.removesuffix("Error")


class InvalidPathError(SyncError):
    """
    Raised when a path is not the given root or a descendant of it, or is
    not in the expected absolute form.
    """


class NodeNotFoundError(SyncError):
    """
    Raised when a remote node does not exist at the point of lookup.
    """


class NodeExistsError(SyncError):
    """
    Raised when attempting to create a remote node which already exists.
    """


class NodeNotEmptyError(SyncError):
    """
    Raised when attempting to delete a remote node which still has children.
    """


class VersionConflictError(SyncError):
    """
    Raised when a write or delete conditioned on a version is rejected
    because the node was modified in the meantime.
    """


class StructuralConflictError(SyncError):
    """
    Raised when a file and a directory map to the same path on opposite
    sides, or a remote node with a payload also has children.
    """


class FilesystemError(SyncError):
    """
    Raised upon a local I/O failure.
    """

    @classmethod
    def from_os_error(cls, path: object, error: OSError) -> "FilesystemError":
        reason = error.strerror or str(error)
        return cls(path, f"Filesystem error at '{path}': {reason}")
