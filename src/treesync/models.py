from __future__ import annotations

from typing import TypeAlias

import os
import stat
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum


class NodeType(str, Enum):
    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    OTHER = "other"


class ReplicationKind(str, Enum):
    LINKED = "linked"
    COPIED = "copied"
    TRANSFORMED = "transformed"


def _node_type(st_mode: int) -> NodeType:
    if stat.S_ISDIR(st_mode):
        return NodeType.DIR
    if stat.S_ISLNK(st_mode):
        return NodeType.SYMLINK
    if stat.S_ISREG(st_mode):
        return NodeType.FILE
    return NodeType.OTHER


_TYPE_BITS = {
    NodeType.FILE: stat.S_IFREG,
    NodeType.DIR: stat.S_IFDIR,
    NodeType.SYMLINK: stat.S_IFLNK,
}


@dataclass(frozen=True)
class FileStatus:
    """Snapshot of one path's metadata, taken without following symlinks.

    `mode` is the full `st_mode` (type and permission bits). `derived` marks
    a status built by a consumer instead of read from disk.
    """

    node_type: NodeType
    mode: int
    size: int = 0
    derived: bool = False

    @classmethod
    def from_stat(cls, st: os.stat_result) -> FileStatus:
        return cls(node_type=_node_type(st.st_mode), mode=st.st_mode, size=st.st_size)

    @classmethod
    def synthetic(
        cls, node_type: NodeType, *, mode: int = 0o644, size: int = 0
    ) -> FileStatus:
        type_bits = _TYPE_BITS.get(node_type, 0)
        return cls(
            node_type=node_type,
            mode=type_bits | stat.S_IMODE(mode),
            size=size,
            derived=True,
        )

    @property
    def is_dir(self) -> bool:
        return self.node_type == NodeType.DIR

    @property
    def is_file(self) -> bool:
        return self.node_type == NodeType.FILE

    @property
    def is_symlink(self) -> bool:
        return self.node_type == NodeType.SYMLINK

    @property
    def permissions(self) -> int:
        return stat.S_IMODE(self.mode)


@dataclass(frozen=True)
class PendingSymlink:
    link: str
    file: str


Filter: TypeAlias = Callable[[str, FileStatus], bool]
TransformerOutput: TypeAlias = str | bytes | None
Transformer: TypeAlias = Callable[
    [str], TransformerOutput | Awaitable[TransformerOutput]
]
HardLinkPredicate: TypeAlias = Callable[[str], bool]
WalkConsumer: TypeAlias = Callable[
    [str, FileStatus, str, set[str], tuple[str, ...]], Awaitable[FileStatus | None]
]
