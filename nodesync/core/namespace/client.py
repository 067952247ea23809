"""
Interface to the remote hierarchical namespace.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

__all__ = [
    "NamespaceClient",
    "NodeStat",
]


@dataclass(frozen=True, kw_only=True)
class NodeStat:
    """
    Metadata of a remote node.
    """

    version: int
    """
    Data version, incremented by the remote service on every write.
    """

    child_count: int
    """
    Number of direct children.
    """

    data_length: int
    """
    Length of payload in bytes.
    """

    mtime: int
    """
    Modification timestamp in milliseconds since epoch, set by the remote
    service on write.
    """

    @property
    def is_dir(self) -> bool:
        """
        Whether this node acts as a directory, i.e. has an empty payload.
        """
        return self.data_length == 0


class NamespaceClient(ABC):
    """
    Connected and authenticated handle to the remote namespace.

    All methods block until the remote service responds. Failures are
    raised as subclasses of {obj}`SyncError`.
    """

    @abstractmethod
    def get_children(self, path: str) -> tuple[list[str], NodeStat]:
        """
        Get names of children and metadata of node.

        :raises NodeNotFoundError: Node does not exist
        """
        ...

    @abstractmethod
    def get(self, path: str) -> tuple[bytes, NodeStat]:
        """
        Get payload and metadata of node.

        :raises NodeNotFoundError: Node does not exist
        """
        ...

    @abstractmethod
    def create(self, path: str, payload: bytes):
        """
        Create node with payload.

        :raises NodeExistsError: Node already exists
        :raises NodeNotFoundError: Parent node does not exist
        """
        ...

    @abstractmethod
    def set(self, path: str, payload: bytes, version: int) -> NodeStat:
        """
        Overwrite payload of node if its version matches.

        :raises NodeNotFoundError: Node does not exist
        :raises VersionConflictError: Node was modified since version was read
        """
        ...

    @abstractmethod
    def delete(self, path: str, version: int):
        """
        Delete node if its version matches.

        :raises NodeNotFoundError: Node does not exist
        :raises VersionConflictError: Node was modified since version was read
        :raises NodeNotEmptyError: Node has children
        """
        ...

    @abstractmethod
    def exists(self, path: str) -> NodeStat | None:
        """
        Get metadata of node, or `None` if it does not exist.
        """
        ...
