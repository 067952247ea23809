"""
Download of a remote tree to the local filesystem.
"""
from __future__ import annotations

import logging
import os
import posixpath
import stat
from dataclasses import dataclass
from datetime import datetime
from logging import Logger
from pathlib import Path

from ..exceptions import (
    FilesystemError,
    NodeNotFoundError,
    StructuralConflictError,
)
from ..namespace.client import NamespaceClient, NodeStat
from ..paths import normalize_local, normalize_remote, to_local
from .options import SyncOptions

__all__ = [
    "DownloadStats",
    "download",
]

NS_PER_MS = 1_000_000


@dataclass(kw_only=True)
class DownloadStats:
    """
    Encapsulates statistics for download operation.
    """

    found: bool = True
    """
    Whether the remote root node existed.
    """

    node_count: int = 0
    """
    Number of remote nodes visited.
    """

    dir_count: int = 0
    """
    Number of local folders created.
    """

    written_count: int = 0
    """
    Number of local files written.
    """

    unchanged_count: int = 0
    """
    Number of local files with the same modification time as the remote node.
    """

    local_newer_count: int = 0
    """
    Number of local files left untouched as they're newer than the remote
    node.
    """


@dataclass(frozen=True, kw_only=True)
class _Context:
    client: NamespaceClient
    remote_root: str
    local_root: Path
    stats: DownloadStats
    options: SyncOptions
    logger: Logger


def download(
    client: NamespaceClient,
    remote_root: str,
    local_root: Path | str,
    *,
    options: SyncOptions | None = None,
    logger: Logger | None = None,
) -> DownloadStats:
    """
    Pull remote tree at `remote_root` to local folder at `local_root`.

    Nodes with an empty payload become folders, others become files. A file
    is only written if it doesn't exist locally or the remote node was
    modified more recently; its modification time is then set to that of
    the remote node so unchanged files compare equal on subsequent runs.

    If the remote root doesn't exist, nothing is done and the returned stats
    have `found = False`.
    """

    logger = logger or logging.getLogger()
    ctx = _Context(
        client=client,
        remote_root=normalize_remote(remote_root),
        local_root=normalize_local(local_root),
        stats=DownloadStats(),
        options=options or SyncOptions(),
        logger=logger,
    )

    try:
        payload, node_stat = client.get(ctx.remote_root)
    except NodeNotFoundError:
        logger.info(f"Path {ctx.remote_root} not there")
        ctx.stats.found = False
        return ctx.stats

    _download_node(ctx, ctx.remote_root, payload, node_stat)

    return ctx.stats


def _download_node(
    ctx: _Context, remote_path: str, payload: bytes, node_stat: NodeStat
):
    local_path = to_local(ctx.remote_root, remote_path, ctx.local_root)
    ctx.stats.node_count += 1

    if node_stat.is_dir:
        _download_dir(ctx, remote_path, local_path, node_stat)
    else:
        if node_stat.child_count > 0:
            raise StructuralConflictError(
                remote_path,
                f"Remote node has both data and children: {remote_path}",
            )
        _download_file(ctx, remote_path, local_path, payload, node_stat)


def _download_dir(
    ctx: _Context, remote_path: str, local_path: Path, node_stat: NodeStat
):
    local_stat = _stat(local_path)

    if local_stat is None:
        if ctx.options.dry_run:
            ctx.logger.info(f"Would create local dir: {local_path}")
        else:
            try:
                local_path.mkdir(
                    mode=ctx.options.dir_mode, parents=True, exist_ok=True
                )
            except OSError as e:
                raise FilesystemError.from_os_error(local_path, e) from e
            ctx.logger.info(f"Created local dir: {local_path}")
        ctx.stats.dir_count += 1
    elif not stat.S_ISDIR(local_stat.st_mode):
        raise StructuralConflictError(
            local_path,
            f"Local path is not a dir when a dir is expected: {local_path}",
        )
    else:
        ctx.logger.debug(f"Local dir already present: {local_path}")

    if node_stat.child_count == 0:
        return

    children, _ = ctx.client.get_children(remote_path)

    for child in sorted(children):
        child_path = posixpath.join(remote_path, child)

        # child was just listed, so it's fatal if it's gone
        payload, child_stat = ctx.client.get(child_path)
        _download_node(ctx, child_path, payload, child_stat)


def _download_file(
    ctx: _Context,
    remote_path: str,
    local_path: Path,
    payload: bytes,
    node_stat: NodeStat,
):
    logger = ctx.logger
    local_stat = _stat(local_path)

    if local_stat is None:
        logger.debug(f"Local file does not exist: {local_path}")
    elif stat.S_ISDIR(local_stat.st_mode):
        raise StructuralConflictError(
            local_path,
            f"Local path is a dir when a file is expected: {local_path}",
        )
    else:
        local_mtime = local_stat.st_mtime_ns // NS_PER_MS

        if local_mtime == node_stat.mtime:
            logger.debug(f"Files are the same: {local_path}")
            ctx.stats.unchanged_count += 1
            return
        elif local_mtime > node_stat.mtime:
            logger.info(
                f"Remote file {remote_path} ({_format_ms(node_stat.mtime)}) is older than local file: {local_path} ({_format_ms(local_mtime)})"
            )
            ctx.stats.local_newer_count += 1
            return

        logger.debug(f"Remote file is newer, will overwrite: {local_path}")

    ctx.stats.written_count += 1

    if ctx.options.dry_run:
        logger.info(f"Would download file: {remote_path} -> {local_path}")
        return

    mtime_ns = node_stat.mtime * NS_PER_MS

    try:
        local_path.write_bytes(payload)
        if local_stat is None:
            local_path.chmod(ctx.options.file_mode)
        os.utime(local_path, ns=(mtime_ns, mtime_ns))
    except OSError as e:
        raise FilesystemError.from_os_error(local_path, e) from e

    logger.info(f"Downloaded file: {remote_path} -> {local_path}")


def _stat(path: Path) -> os.stat_result | None:
    """
    Get stat of local path, or `None` if it doesn't exist.
    """
    try:
        return path.stat()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise FilesystemError.from_os_error(path, e) from e


def _format_ms(mtime: int) -> str:
    return datetime.fromtimestamp(mtime / 1000).isoformat(
        sep=" ", timespec="milliseconds"
    )
