import logging
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from pytest import fixture, mark

from nodesync import SyncOptions

from .namespace_utils import MemoryNamespace

# enable import of modules in test folder
sys.path.insert(0, os.getcwd())

logging.basicConfig(level=logging.WARNING)

type TreeSpec = dict[str, bytes | TreeSpec]

TREE: TreeSpec = {
    "app.conf": b"workers=4\nlisten=0.0.0.0:8080\n",
    "db": {
        "primary.conf": b"host=db1.example.com\nport=5432\n",
        "replica.conf": b"host=db2.example.com\nport=5432\n",
        "shards": {
            "shard-0.conf": b"range=0-511\n",
        },
    },
    "features": {},
}
"""
Local tree used by most testcases.
"""

TREE_NODES: dict[str, bytes] = {
    "/config": b"",
    "/config/app.conf": b"workers=4\nlisten=0.0.0.0:8080\n",
    "/config/db": b"",
    "/config/db/primary.conf": b"host=db1.example.com\nport=5432\n",
    "/config/db/replica.conf": b"host=db2.example.com\nport=5432\n",
    "/config/db/shards": b"",
    "/config/db/shards/shard-0.conf": b"range=0-511\n",
    "/config/features": b"",
}
"""
Remote nodes corresponding to `TREE` uploaded to `/config`.
"""

requires_permissions = mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="Requires file permissions to be enforced",
)


@fixture(autouse=True)
def newline(request):
    """
    Print a newline and underline test name.
    """
    print("\n" + "-" * len(request.node.nodeid))


@fixture
def namespace() -> MemoryNamespace:
    return MemoryNamespace()


@fixture
def logger() -> logging.Logger:
    return logging.getLogger("nodesync.test")


@fixture
def dry_run() -> SyncOptions:
    return SyncOptions(dry_run=True)


@fixture
def local_tree(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Create `TREE` in a temporary folder.
    """
    root = tmp_path / "local"
    write_tree(root, TREE)
    yield root


def write_tree(root: Path, spec: TreeSpec):
    """
    Create folders and files from mapping of names to contents.
    """
    root.mkdir(parents=True, exist_ok=True)

    for name, value in spec.items():
        path = root / name
        if isinstance(value, bytes):
            path.write_bytes(value)
        else:
            write_tree(path, value)


def populate(namespace: MemoryNamespace, nodes: dict[str, bytes]):
    """
    Create remote nodes from mapping of paths to payloads.
    """
    for path, payload in nodes.items():
        namespace.put(path, payload)


def compare_folders(dir1: Path, dir2: Path):
    """
    Ensure the given folders have the same folders and files and the
    contents match.
    """

    def collect_paths(path: Path) -> Generator[Path, None, None]:
        for dirpath, dirnames, filenames in path.walk():
            for name in dirnames + filenames:
                yield (dirpath / name).relative_to(path)

    dir1_paths = set(collect_paths(dir1))
    dir2_paths = set(collect_paths(dir2))

    assert (
        dir1_paths == dir2_paths
    ), f"Directories do not contain the same paths: dir1='{dir1}', dir2='{dir2}'"

    for path in sorted(dir1_paths):
        path1, path2 = dir1 / path, dir2 / path

        assert path1.is_dir() == path2.is_dir(), f"Type mismatch: {path}"

        if path1.is_file():
            assert path1.read_bytes() == path2.read_bytes()


@contextmanager
def restricted(path: Path, mode: int) -> Generator[None, None, None]:
    """
    Temporarily change permissions of path, restoring them so the temporary
    folder can be cleaned up.
    """
    orig_mode = path.stat().st_mode
    path.chmod(mode)
    try:
        yield
    finally:
        path.chmod(orig_mode)
