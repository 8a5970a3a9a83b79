from __future__ import annotations

import asyncio
import errno
import os
import stat
from pathlib import Path

import pytest

from treesync.config import CopySettings
from treesync.models import FileStatus, NodeType

LINKS = CopySettings(use_hard_links=True)
COPIES = CopySettings(use_hard_links=False)


def run(coro):
    return asyncio.run(coro)


def mk_status(
    mode: int = 0o644,
    *,
    node_type: NodeType = NodeType.FILE,
    size: int = 0,
) -> FileStatus:
    type_bits = {
        NodeType.FILE: stat.S_IFREG,
        NodeType.DIR: stat.S_IFDIR,
        NodeType.SYMLINK: stat.S_IFLNK,
    }[node_type]
    return FileStatus(node_type=node_type, mode=type_bits | mode, size=size)


def mk_file(path: Path, content: str | bytes = "", mode: int = 0o644) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        path.write_text(content, encoding="utf-8")
    else:
        path.write_bytes(content)
    os.chmod(path, mode)
    return path


def rel_entries(root: Path, entries: list[str]) -> list[str]:
    return [Path(os.path.relpath(entry, root)).as_posix() for entry in entries]


def permissions(path: Path) -> int:
    return stat.S_IMODE(path.lstat().st_mode)


@pytest.fixture
def build_tree(tmp_path):
    def _build(
        files: dict[str, str | bytes | tuple[str | bytes, int]],
        *,
        symlinks: dict[str, str] | None = None,
        root_name: str = "src",
    ) -> Path:
        # files: relpath -> content, or (content, mode)
        root = tmp_path / root_name
        root.mkdir(parents=True, exist_ok=True)
        for relpath, spec in files.items():
            content, mode = spec if isinstance(spec, tuple) else (spec, 0o644)
            mk_file(root / relpath, content, mode)
        for relpath, target in (symlinks or {}).items():
            link = root / relpath
            link.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(target, link)
        return root

    return _build


@pytest.fixture
def cross_device_link(monkeypatch):
    """Make every `os.link` fail as if source and destination were on different volumes."""
    calls: list[tuple[str, str]] = []

    def _link(src, dst, *args, **kwargs):
        calls.append((src, dst))
        raise OSError(errno.EXDEV, os.strerror(errno.EXDEV), src, None, dst)

    monkeypatch.setattr(os, "link", _link)
    return calls
