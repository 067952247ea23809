"""
Namespace client backed by a ZooKeeper ensemble via kazoo.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from logging import Logger
from typing import Callable, Generator, Iterable

from kazoo.client import KazooClient
from kazoo.exceptions import (
    BadVersionError,
    KazooException,
    NoNodeError,
    NotEmptyError,
)
from kazoo.exceptions import NodeExistsError as KazooNodeExistsError
from kazoo.protocol.states import ZnodeStat
from kazoo.security import ACL, CREATOR_ALL_ACL, OPEN_ACL_UNSAFE

from ..exceptions import (
    NodeExistsError,
    NodeNotEmptyError,
    NodeNotFoundError,
    SyncError,
    VersionConflictError,
)
from .client import NamespaceClient, NodeStat

__all__ = [
    "ZooKeeperNamespace",
    "connect",
]

CONNECT_TIMEOUT = 5.0
"""
Default number of seconds to wait for a connection to the ensemble.
"""

AUTH_SCHEME = "digest"
"""
Authentication scheme for credentials of the form `user:password`.
"""


class ZooKeeperNamespace(NamespaceClient):
    """
    Adapts a started {obj}`KazooClient` to {obj}`NamespaceClient`.

    Every node is created with the same ACL granting all permissions:
    to the authenticated creator if the connection is authenticated,
    otherwise to anyone.
    """

    _client: KazooClient
    _acl: list[ACL]

    def __init__(self, client: KazooClient, *, authenticated: bool = False):
        self._client = client
        self._acl = list(CREATOR_ALL_ACL if authenticated else OPEN_ACL_UNSAFE)

    def get_children(self, path: str) -> tuple[list[str], NodeStat]:
        children, stat = _translate(
            path, lambda: self._client.get_children(path, include_data=True)
        )
        return children, _to_node_stat(stat)

    def get(self, path: str) -> tuple[bytes, NodeStat]:
        payload, stat = _translate(path, lambda: self._client.get(path))
        return payload or b"", _to_node_stat(stat)

    def create(self, path: str, payload: bytes):
        _translate(
            path, lambda: self._client.create(path, payload, acl=self._acl)
        )

    def set(self, path: str, payload: bytes, version: int) -> NodeStat:
        stat = _translate(
            path, lambda: self._client.set(path, payload, version=version)
        )
        return _to_node_stat(stat)

    def delete(self, path: str, version: int):
        _translate(path, lambda: self._client.delete(path, version=version))

    def exists(self, path: str) -> NodeStat | None:
        stat = _translate(path, lambda: self._client.exists(path))
        return _to_node_stat(stat) if stat is not None else None


@contextmanager
def connect(
    servers: Iterable[str],
    *,
    auth: str | None = None,
    timeout: float = CONNECT_TIMEOUT,
    logger: Logger | None = None,
) -> Generator[ZooKeeperNamespace, None, None]:
    """
    Connect to ensemble, optionally authenticate, and yield a namespace
    client. The connection is closed upon exiting the context.

    :param servers: Server addresses as `host[:port]`
    :param auth: Digest credentials as `user:password`
    :param timeout: Seconds to wait for the connection to be established
    :param logger: Logger to use, or `None` to use default logger
    """

    logger = logger or logging.getLogger()
    hosts = ",".join(servers)
    client = KazooClient(hosts=hosts, timeout=timeout)

    try:
        client.start(timeout=timeout)
    except Exception as e:
        logger.error(f"Failed to connect to servers '{hosts}': {e}")
        client.close()
        raise

    logger.debug(f"Connected to servers '{hosts}'")

    try:
        if auth:
            try:
                client.add_auth(AUTH_SCHEME, auth)
            except Exception as e:
                logger.error(f"Failed to authenticate to '{hosts}': {e}")
                raise

        yield ZooKeeperNamespace(client, authenticated=bool(auth))
    finally:
        client.stop()
        client.close()
        logger.debug(f"Disconnected from servers '{hosts}'")


def _translate[T](path: str, func: Callable[[], T]) -> T:
    """
    Invoke kazoo operation and map its errors to sync errors.
    """
    try:
        return func()
    except NoNodeError:
        raise NodeNotFoundError(path) from None
    except KazooNodeExistsError:
        raise NodeExistsError(path) from None
    except BadVersionError:
        raise VersionConflictError(
            path, f"Version conflict at '{path}': node was modified"
        ) from None
    except NotEmptyError:
        raise NodeNotEmptyError(path) from None
    except KazooException as e:
        raise SyncError(path, f"Remote error at '{path}': {e!r}") from e


def _to_node_stat(stat: ZnodeStat) -> NodeStat:
    return NodeStat(
        version=stat.version,
        child_count=stat.numChildren,
        data_length=stat.dataLength,
        mtime=stat.mtime,
    )
