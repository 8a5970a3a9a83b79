from __future__ import annotations

from typing import TypeAlias

import asyncio
import os

from .fs_utils import lstat, map_bounded
from .models import Filter, WalkConsumer

# child outcome: ("file", path), ("dir", name) or None when skipped
_ChildOutcome: TypeAlias = tuple[str, str] | None


async def walk(
    root: str | os.PathLike[str],
    filter: Filter | None = None,
    consumer: WalkConsumer | None = None,
) -> list[str]:
    """List every non-directory entry under `root`, depth first.

    Names are sorted per directory. A directory's own files come before the
    contents of its subdirectories, and subdirectories are visited in sorted
    order. Directories themselves (and `root`) are not listed.

    Children are inspected with bounded concurrency, but the result order is
    always the sorted order. A path in the ignore set, or rejected by
    `filter`, is skipped along with its whole subtree. `consumer` may add
    paths to the ignore set and may return a replacement status deciding
    whether the entry is descended into.
    """
    root = os.fspath(root)
    result: list[str] = []
    stack: list[str] = [root]
    ignored: set[str] = set()

    while stack:
        dir_path = stack.pop()
        child_names = tuple(sorted(await asyncio.to_thread(os.listdir, dir_path)))

        async def visit(name: str) -> _ChildOutcome:
            file_path = dir_path + os.sep + name
            status = await lstat(file_path)
            if file_path in ignored or (
                filter is not None and not filter(file_path, status)
            ):
                return None

            if consumer is not None:
                replacement = await consumer(
                    file_path, status, dir_path, ignored, child_names
                )
                if replacement is not None:
                    status = replacement

            if status.is_dir:
                return ("dir", name)
            return ("file", file_path)

        outcomes = await map_bounded(child_names, visit)

        dirs: list[str] = []
        for outcome in outcomes:
            if outcome is None:
                continue
            kind, value = outcome
            if kind == "dir":
                dirs.append(value)
            else:
                result.append(value)

        # pushed in reverse so they pop in sorted order
        for name in reversed(dirs):
            stack.append(dir_path + os.sep + name)

    return result
