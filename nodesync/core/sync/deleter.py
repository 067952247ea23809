"""
Recursive deletion of a remote subtree.
"""
from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from logging import Logger

from ..exceptions import NodeNotFoundError
from ..namespace.client import NamespaceClient
from ..paths import normalize_remote
from .options import SyncOptions

__all__ = [
    "DeleteStats",
    "delete",
]


@dataclass(kw_only=True)
class DeleteStats:
    """
    Encapsulates statistics for delete operation.
    """

    found: bool = True
    """
    Whether the subtree root existed.
    """

    delete_count: int = 0
    """
    Number of nodes deleted.
    """


def delete(
    client: NamespaceClient,
    remote_path: str,
    *,
    options: SyncOptions | None = None,
    logger: Logger | None = None,
) -> DeleteStats:
    """
    Delete remote node and all of its descendants, children before parents.

    Each node is deleted conditioned on the version read before recursing
    into its children; a concurrent modification aborts with
    {obj}`VersionConflictError`. The namespace root itself is never
    deleted, only its descendants.
    """

    options = options or SyncOptions()
    logger = logger or logging.getLogger()
    stats = DeleteStats()

    path = normalize_remote(remote_path)

    try:
        children, stat = client.get_children(path)
    except NodeNotFoundError:
        logger.info(f"Path {path} not there")
        stats.found = False
        return stats

    _delete_children(client, path, children, stats, options, logger)

    if path != "/":
        _delete_node(client, path, stat.version, stats, options, logger)

    return stats


def _delete_tree(
    client: NamespaceClient,
    path: str,
    stats: DeleteStats,
    options: SyncOptions,
    logger: Logger,
):
    # node was just listed by its parent, so it's fatal if it's gone
    children, stat = client.get_children(path)

    _delete_children(client, path, children, stats, options, logger)
    _delete_node(client, path, stat.version, stats, options, logger)


def _delete_children(
    client: NamespaceClient,
    path: str,
    children: list[str],
    stats: DeleteStats,
    options: SyncOptions,
    logger: Logger,
):
    for child in sorted(children):
        _delete_tree(
            client, posixpath.join(path, child), stats, options, logger
        )


def _delete_node(
    client: NamespaceClient,
    path: str,
    version: int,
    stats: DeleteStats,
    options: SyncOptions,
    logger: Logger,
):
    if options.dry_run:
        logger.info(f"Would delete {path}")
    else:
        logger.info(f"Will delete {path}")
        client.delete(path, version)

    stats.delete_count += 1
