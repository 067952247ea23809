"""
Test download of remote namespace to local tree.
"""

import os
from pathlib import Path

from pytest import raises

from nodesync import (
    FilesystemError,
    NodeNotFoundError,
    StructuralConflictError,
    SyncOptions,
    download,
)

from .conftest import (
    TREE_NODES,
    populate,
    requires_permissions,
    restricted,
)
from .namespace_utils import MemoryNamespace

NS_PER_MS = 1_000_000


def mtime_ms(path: Path) -> int:
    return path.stat().st_mtime_ns // NS_PER_MS


def set_mtime_ms(path: Path, mtime: int):
    os.utime(path, ns=(mtime * NS_PER_MS, mtime * NS_PER_MS))


def test_download(namespace: MemoryNamespace, tmp_path: Path):
    populate(namespace, TREE_NODES)
    dest = tmp_path / "dest"

    stats = download(namespace, "/config", dest)

    assert stats.found
    assert stats.node_count == len(TREE_NODES)
    assert stats.dir_count == 4
    assert stats.written_count == 4

    for path, payload in TREE_NODES.items():
        local_path = dest / path.removeprefix("/config").lstrip("/")
        if payload:
            assert local_path.read_bytes() == payload
            assert mtime_ms(local_path) == namespace.mtime(path)
        else:
            assert local_path.is_dir()


def test_download_modes(namespace: MemoryNamespace, tmp_path: Path):
    namespace.put("/config/app.conf", b"workers=4\n")
    dest = tmp_path / "dest"

    download(
        namespace,
        "/config",
        dest,
        options=SyncOptions(dir_mode=0o700, file_mode=0o600),
    )

    assert (dest.stat().st_mode & 0o777) == 0o700 & ~_umask()
    assert ((dest / "app.conf").stat().st_mode & 0o777) == 0o600


def test_download_idempotent(namespace: MemoryNamespace, tmp_path: Path):
    populate(namespace, TREE_NODES)
    dest = tmp_path / "dest"

    download(namespace, "/config", dest)
    stats = download(namespace, "/config", dest)

    assert stats.written_count == 0
    assert stats.dir_count == 0
    assert stats.unchanged_count == 4


def test_download_timestamps(namespace: MemoryNamespace, tmp_path: Path):
    """
    Local file is overwritten only if remote node is newer.
    """
    remote_mtime = 1_750_000_000_000
    namespace.put("/config/newer.conf", b"remote", mtime=remote_mtime)
    namespace.put("/config/older.conf", b"remote", mtime=remote_mtime)
    namespace.put("/config/same.conf", b"remote", mtime=remote_mtime)

    dest = tmp_path / "dest"
    dest.mkdir()

    # remote is newer
    newer = dest / "newer.conf"
    newer.write_bytes(b"local")
    set_mtime_ms(newer, remote_mtime - 1)

    # remote is older
    older = dest / "older.conf"
    older.write_bytes(b"local")
    set_mtime_ms(older, remote_mtime + 1)

    # same timestamp, content is not compared
    same = dest / "same.conf"
    same.write_bytes(b"local")
    set_mtime_ms(same, remote_mtime)

    stats = download(namespace, "/config", dest)

    assert stats.written_count == 1
    assert stats.local_newer_count == 1
    assert stats.unchanged_count == 1

    assert newer.read_bytes() == b"remote"
    assert mtime_ms(newer) == remote_mtime

    assert older.read_bytes() == b"local"
    assert mtime_ms(older) == remote_mtime + 1

    assert same.read_bytes() == b"local"


def test_download_not_found(namespace: MemoryNamespace, tmp_path: Path):
    dest = tmp_path / "dest"

    stats = download(namespace, "/config", dest)

    assert not stats.found
    assert stats.node_count == 0
    assert not dest.exists()


def test_download_vanished_child(namespace: MemoryNamespace, tmp_path: Path):
    """
    Node deleted concurrently after being listed is fatal.
    """
    populate(namespace, TREE_NODES)

    get_children = namespace.get_children

    def get_children_racing(path: str):
        result = get_children(path)
        if path == "/config":
            namespace.delete("/config/app.conf", 0)
        return result

    namespace.get_children = get_children_racing  # type: ignore

    with raises(NodeNotFoundError) as e:
        download(namespace, "/config", tmp_path / "dest")

    assert e.value.path == "/config/app.conf"


def test_download_data_with_children(
    namespace: MemoryNamespace, tmp_path: Path
):
    namespace.put("/config/app.conf/nested", b"x")
    namespace.put("/config/app.conf", b"data")

    with raises(StructuralConflictError) as e:
        download(namespace, "/config", tmp_path / "dest")

    assert e.value.path == "/config/app.conf"
    assert not (tmp_path / "dest" / "app.conf").exists()


def test_download_type_mismatch(namespace: MemoryNamespace, tmp_path: Path):
    """
    Local path of the wrong kind aborts the run.
    """
    namespace.put("/config/db/primary.conf", b"host=db1\n")
    dest = tmp_path / "dest"

    # local file where remote folder maps
    dest.mkdir()
    (dest / "db").write_bytes(b"")

    with raises(StructuralConflictError):
        download(namespace, "/config", dest)

    # local folder where remote file maps
    (dest / "db").unlink()
    (dest / "db" / "primary.conf").mkdir(parents=True)

    with raises(StructuralConflictError):
        download(namespace, "/config", dest)


def test_download_dry_run(
    namespace: MemoryNamespace, tmp_path: Path, dry_run: SyncOptions, caplog
):
    populate(namespace, TREE_NODES)
    dest = tmp_path / "dest"

    with caplog.at_level("INFO"):
        stats = download(namespace, "/config", dest, options=dry_run)

    assert not dest.exists()
    assert stats.written_count == 4
    assert stats.dir_count == 4
    assert f"Would create local dir: {dest}" in caplog.messages


def _umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


@requires_permissions
def test_download_filesystem_error(namespace: MemoryNamespace, tmp_path: Path):
    """
    Local I/O failure aborts the run, reporting the file being written.
    """
    populate(namespace, TREE_NODES)
    dest = tmp_path / "dest"
    dest.mkdir()

    with restricted(dest, 0o555):
        with raises(FilesystemError) as e:
            download(namespace, "/config", dest)

    assert e.value.path == str(dest / "app.conf")
    assert isinstance(e.value.__cause__, PermissionError)
    assert list(dest.iterdir()) == []
