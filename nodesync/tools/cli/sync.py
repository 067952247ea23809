"""
Upload, download and delete commands.
"""
from __future__ import annotations

from pathlib import Path

from typer import Context, Option

from ...core import sync as core_sync
from ...core.exceptions import SyncError
from ._utils import confirm, get_root_context, logger, report_error

__all__ = [
    "upload",
    "download",
    "delete",
]


def upload(
    ctx: Context,
    server_prefix: str
    | None = Option(
        None,
        help="Server prefix for config, defaults to instance's server_prefix or /discodev",
    ),
    local_prefix: Path = Option(
        Path("/"),
        help="Local prefix for config",
        exists=True,
    ),
    delete: bool = Option(
        False,
        "--delete",
        help="Clean remote before upload",
    ),
    dry_run: bool = Option(
        False,
        "--dry-run",
        help="Don't update remote tree, only log operations",
    ),
    yes: bool = Option(
        False,
        "-y",
        "--yes",
        help="Don't ask for confirmation before cleaning remote",
    ),
):
    """
    Upload local folder to remote tree
    """

    root_context = get_root_context(ctx)
    remote_root = server_prefix or root_context.server_prefix

    if delete:
        confirm(
            f"Delete remote tree '{remote_root}' before uploading?",
            dry_run=dry_run,
            yes=yes,
        )

    with root_context.connect() as client:
        try:
            stats = core_sync.upload(
                client,
                remote_root,
                local_prefix,
                delete_first=delete,
                options=root_context.sync_options(dry_run=dry_run),
                logger=logger,
            )
        except SyncError as e:
            report_error(e)

    extra = f"{stats.copied_count} copied, {stats.overwritten_count} overwritten, {stats.skipped_count} skipped"

    if dry_run:
        logger.info(
            f"Would upload {stats.entry_count} entries to '{remote_root}' ({extra})"
        )
    else:
        logger.info(
            f"Uploaded {stats.entry_count} entries to '{remote_root}' ({extra})"
        )


def download(
    ctx: Context,
    server_prefix: str
    | None = Option(
        None,
        help="Server prefix for config, defaults to instance's server_prefix or /discodev",
    ),
    local_prefix: Path = Option(
        Path("/"),
        help="Local prefix for config",
    ),
    dry_run: bool = Option(
        False,
        "--dry-run",
        help="Don't update filesystem, only log operations",
    ),
):
    """
    Download remote tree to local folder
    """

    root_context = get_root_context(ctx)
    remote_root = server_prefix or root_context.server_prefix

    with root_context.connect() as client:
        try:
            stats = core_sync.download(
                client,
                remote_root,
                local_prefix,
                options=root_context.sync_options(dry_run=dry_run),
                logger=logger,
            )
        except SyncError as e:
            report_error(e)

    if not stats.found:
        return

    extra = f"{stats.written_count} written, {stats.unchanged_count} unchanged, {stats.local_newer_count} newer locally"

    if dry_run:
        logger.info(
            f"Would download {stats.node_count} nodes to '{local_prefix}' ({extra})"
        )
    else:
        logger.info(
            f"Downloaded {stats.node_count} nodes to '{local_prefix}' ({extra})"
        )


def delete(
    ctx: Context,
    server_prefix: str
    | None = Option(
        None,
        help="Remote tree to delete, defaults to instance's server_prefix or /discodev",
    ),
    dry_run: bool = Option(
        False,
        "--dry-run",
        help="Don't update remote tree, only log operations",
    ),
    yes: bool = Option(
        False,
        "-y",
        "--yes",
        help="Don't ask for confirmation before deleting",
    ),
):
    """
    Recursively delete remote tree
    """

    root_context = get_root_context(ctx)
    remote_root = server_prefix or root_context.server_prefix

    confirm(
        f"Delete remote tree '{remote_root}'?", dry_run=dry_run, yes=yes
    )

    with root_context.connect() as client:
        try:
            stats = core_sync.delete(
                client,
                remote_root,
                options=root_context.sync_options(dry_run=dry_run),
                logger=logger,
            )
        except SyncError as e:
            report_error(e)

    if not stats.found:
        return

    if dry_run:
        logger.info(f"Would delete {stats.delete_count} nodes")
    else:
        logger.info(f"Deleted {stats.delete_count} nodes")
