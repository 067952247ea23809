"""
Upload of a local tree to the remote namespace.
"""
from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from logging import Logger
from pathlib import Path

from ..exceptions import (
    FilesystemError,
    NodeExistsError,
    StructuralConflictError,
)
from ..namespace.client import NamespaceClient, NodeStat
from ..paths import normalize_local, normalize_remote, to_remote
from .deleter import delete
from .ensure import ensure_path
from .options import SyncOptions

__all__ = [
    "UploadStats",
    "upload",
]


@dataclass(kw_only=True)
class UploadStats:
    """
    Encapsulates statistics for upload operation.
    """

    entry_count: int = 0
    """
    Number of local files and folders visited.
    """

    copied_count: int = 0
    """
    Number of remote nodes created.
    """

    present_count: int = 0
    """
    Number of folders whose remote node was already present.
    """

    overwritten_count: int = 0
    """
    Number of remote nodes whose payload was overwritten.
    """

    unchanged_count: int = 0
    """
    Number of files whose remote node already had the same payload.
    """

    skipped_count: int = 0
    """
    Number of local entries skipped as neither a regular file nor a folder.
    """


def upload(
    client: NamespaceClient,
    remote_root: str,
    local_root: Path | str,
    *,
    delete_first: bool = False,
    options: SyncOptions | None = None,
    logger: Logger | None = None,
) -> UploadStats:
    """
    Push local tree at `local_root` to remote tree at `remote_root`.

    Folders are mapped to nodes with an empty payload and are never
    overwritten; a folder mapping to a node with a payload is a
    {obj}`StructuralConflictError`. Files are created, or overwritten
    conditioned on the version of the existing node.

    :param delete_first: Recursively delete `remote_root` before uploading
    """

    options = options or SyncOptions()
    logger = logger or logging.getLogger()
    stats = UploadStats()

    remote_root = normalize_remote(remote_root)
    local_root = normalize_local(local_root)

    if not local_root.exists():
        raise FilesystemError(
            local_root, f"Local path does not exist: '{local_root}'"
        )

    if delete_first:
        delete(client, remote_root, options=options, logger=logger)

    ensure_path(client, remote_root, options=options, logger=logger)

    _upload_entry(
        client, remote_root, local_root, local_root, stats, options, logger
    )

    return stats


def _upload_entry(
    client: NamespaceClient,
    remote_root: str,
    local_root: Path,
    local_path: Path,
    stats: UploadStats,
    options: SyncOptions,
    logger: Logger,
):
    """
    Upload local entry, then recurse into its children if it's a folder.
    """

    try:
        mode = local_path.lstat().st_mode
    except OSError as e:
        raise FilesystemError.from_os_error(local_path, e) from e

    if not (stat.S_ISDIR(mode) or stat.S_ISREG(mode)):
        logger.warning(f"Node is not a regular file: {local_path}")
        stats.skipped_count += 1
        return

    is_dir = stat.S_ISDIR(mode)
    remote_path = to_remote(local_root, local_path, remote_root)
    stats.entry_count += 1

    try:
        payload = b"" if is_dir else local_path.read_bytes()
    except OSError as e:
        raise FilesystemError.from_os_error(local_path, e) from e

    if options.dry_run:
        reconcile = _plan_node
    else:
        reconcile = _sync_node

    reconcile(client, local_path, remote_path, payload, is_dir, stats, logger)

    if is_dir:
        try:
            children = sorted(local_path.iterdir())
        except OSError as e:
            raise FilesystemError.from_os_error(local_path, e) from e

        for child in children:
            _upload_entry(
                client,
                remote_root,
                local_root,
                child,
                stats,
                options,
                logger,
            )


def _sync_node(
    client: NamespaceClient,
    local_path: Path,
    remote_path: str,
    payload: bytes,
    is_dir: bool,
    stats: UploadStats,
    logger: Logger,
):
    """
    Create remote node, or overwrite it if it exists and maps to a file.
    """

    try:
        client.create(remote_path, payload)
    except NodeExistsError:
        pass
    else:
        logger.info(f"Copied {local_path} -> {remote_path}")
        stats.copied_count += 1
        return

    if is_dir:
        node_stat = client.exists(remote_path)
        if node_stat is not None:
            _check_dir_node(remote_path, node_stat)

        logger.debug(f"Dir already there: {remote_path}")
        stats.present_count += 1
        return

    current_payload, node_stat = _get_file_node(client, remote_path)

    if current_payload == payload:
        logger.debug(f"File already up to date: {remote_path}")
        stats.unchanged_count += 1
        return

    client.set(remote_path, payload, node_stat.version)

    logger.info(f"Overwrote {local_path} -> {remote_path}")
    stats.overwritten_count += 1


def _plan_node(
    client: NamespaceClient,
    local_path: Path,
    remote_path: str,
    payload: bytes,
    is_dir: bool,
    stats: UploadStats,
    logger: Logger,
):
    """
    Log what would be done for this node without modifying it.
    """

    node_stat = client.exists(remote_path)

    if node_stat is None:
        logger.info(f"Would copy {local_path} -> {remote_path}")
        stats.copied_count += 1
    elif is_dir:
        _check_dir_node(remote_path, node_stat)
        stats.present_count += 1
    else:
        current_payload, _ = _get_file_node(client, remote_path)

        if current_payload == payload:
            stats.unchanged_count += 1
        else:
            logger.info(f"Would overwrite {local_path} -> {remote_path}")
            stats.overwritten_count += 1


def _get_file_node(
    client: NamespaceClient, remote_path: str
) -> tuple[bytes, NodeStat]:
    """
    Get existing node which a local file maps to, ensuring it's not acting as
    a folder.
    """

    payload, node_stat = client.get(remote_path)

    if node_stat.child_count > 0:
        raise StructuralConflictError(
            remote_path,
            f"Remote path is a dir when a file is expected: {remote_path}",
        )

    return payload, node_stat


def _check_dir_node(remote_path: str, node_stat: NodeStat):
    """
    Ensure existing node which a local folder maps to has no payload.
    """

    if node_stat.data_length > 0:
        raise StructuralConflictError(
            remote_path,
            f"Remote path is a file when a dir is expected: {remote_path}",
        )
