"""
Mapping between local filesystem paths and remote node paths.

Both sides share the same relative suffix: a local path `local_root/a/b`
maps to `remote_root/a/b` and vice versa.
"""
from __future__ import annotations

import os
import posixpath
from pathlib import Path, PurePath, PurePosixPath

from .exceptions import InvalidPathError

__all__ = [
    "normalize_local",
    "normalize_remote",
    "to_remote",
    "to_local",
]


def normalize_local(path: Path | str) -> Path:
    """
    Get absolute, normalized form of local path. Symlinks are not resolved.
    """
    return Path(os.path.abspath(path))


def normalize_remote(path: str) -> str:
    """
    Get normalized form of remote path, which must be absolute.
    """
    if not path.startswith("/"):
        raise InvalidPathError(
            path, f"Remote path must be absolute: '{path}'"
        )

    # posix normpath keeps a leading "//", which isn't meaningful here
    normalized = posixpath.normpath(path)
    return "/" + normalized.lstrip("/")


def to_remote(
    local_root: Path | str, local_path: Path | str, remote_root: str
) -> str:
    """
    Map local path under `local_root` to its remote path under
    `remote_root`.
    """
    relative = _relative_to(
        normalize_local(local_path), normalize_local(local_root)
    )
    return str(PurePosixPath(normalize_remote(remote_root), *relative.parts))


def to_local(
    remote_root: str, remote_path: str, local_root: Path | str
) -> Path:
    """
    Map remote path under `remote_root` to its local path under
    `local_root`.
    """
    relative = _relative_to(
        PurePosixPath(normalize_remote(remote_path)),
        PurePosixPath(normalize_remote(remote_root)),
    )
    return normalize_local(local_root).joinpath(*relative.parts)


def _relative_to[P: PurePath](path: P, root: P) -> PurePath:
    try:
        return path.relative_to(root)
    except ValueError:
        raise InvalidPathError(
            path, f"Path '{path}' is not under root '{root}'"
        ) from None
