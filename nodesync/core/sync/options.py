"""
Options common to all synchronization operations.
"""
from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "SyncOptions",
]

DIR_MODE = 0o744
"""
Default permissions of local directories created upon download.
"""

FILE_MODE = 0o644
"""
Default permissions of local files created upon download.
"""


@dataclass(frozen=True, kw_only=True)
class SyncOptions:
    """
    Encapsulates policy applied uniformly during a synchronization run.
    """

    dir_mode: int = DIR_MODE
    """
    Permissions of local directories created upon download.
    """

    file_mode: int = FILE_MODE
    """
    Permissions of local files created upon download.
    """

    dry_run: bool = False
    """
    Only log operations, don't modify the remote namespace or local
    filesystem.
    """
