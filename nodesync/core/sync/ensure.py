"""
Creation of remote directory nodes along a path.
"""
from __future__ import annotations

import logging
import posixpath
from logging import Logger

from ..exceptions import NodeExistsError, StructuralConflictError
from ..namespace.client import NamespaceClient, NodeStat
from ..paths import normalize_remote
from .options import SyncOptions

__all__ = [
    "ensure_path",
]


def ensure_path(
    client: NamespaceClient,
    path: str,
    *,
    options: SyncOptions | None = None,
    logger: Logger | None = None,
):
    """
    Ensure the node at `path` and all of its ancestors exist, creating
    missing ones as directory nodes starting from the root.

    Raises {obj}`StructuralConflictError` if an existing ancestor has a
    payload, since it could not act as a folder.
    """

    options = options or SyncOptions()
    logger = logger or logging.getLogger()

    _ensure(client, normalize_remote(path), options, logger)


def _ensure(
    client: NamespaceClient,
    path: str,
    options: SyncOptions,
    logger: Logger,
    is_ancestor: bool = False,
):
    if path == "/":
        return

    _ensure(client, posixpath.dirname(path), options, logger, True)

    if options.dry_run:
        node_stat = client.exists(path)
        if node_stat is None:
            logger.info(f"Would create dir: {path}")
        elif is_ancestor:
            _check_dir(path, node_stat)
        return

    try:
        client.create(path, b"")
    except NodeExistsError:
        logger.debug(f"Dir already created: {path}")

        if is_ancestor:
            node_stat = client.exists(path)
            if node_stat is not None:
                _check_dir(path, node_stat)
    else:
        logger.info(f"Created dir: {path}")


def _check_dir(path: str, node_stat: NodeStat):
    """
    Ensure existing node can hold children, i.e. has no payload.
    """
    if node_stat.data_length > 0:
        raise StructuralConflictError(
            path, f"Remote path is a file when a dir is expected: {path}"
        )
