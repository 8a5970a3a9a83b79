from __future__ import annotations

from typing import TypeVar

import asyncio
import os
from collections.abc import Awaitable, Callable, Iterable

from .config import MAX_FILE_REQUESTS
from .models import FileStatus

T = TypeVar("T")
R = TypeVar("R")


async def map_bounded(
    items: Iterable[T],
    fn: Callable[[T], Awaitable[R]],
    limit: int = MAX_FILE_REQUESTS,
) -> list[R]:
    """Run `fn` over `items` with at most `limit` calls in flight.

    Results keep the order of `items`, whatever order the calls finish in.
    The first failure cancels every call that has not finished, including
    those still waiting for a slot, and is re-raised unwrapped.
    """
    semaphore = asyncio.Semaphore(limit)

    async def run(item: T) -> R:
        async with semaphore:
            return await fn(item)

    tasks = [asyncio.create_task(run(item)) for item in items]
    if not tasks:
        return []
    try:
        done, _pending = await asyncio.wait(
            tasks, return_when=asyncio.FIRST_EXCEPTION
        )
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    for task in tasks:
        if task in done and task.exception() is not None:
            raise task.exception()
    return [task.result() for task in tasks]


async def lstat(path: str) -> FileStatus:
    return FileStatus.from_stat(await asyncio.to_thread(os.lstat, path))


async def stat_or_null(path: str) -> FileStatus | None:
    try:
        st = await asyncio.to_thread(os.stat, path)
    except FileNotFoundError:
        return None
    return FileStatus.from_stat(st)


async def exists(path: str) -> bool:
    return await asyncio.to_thread(os.access, path, os.F_OK)


def _unlink_missing_ok(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        return


async def unlink_if_exists(path: str) -> None:
    await asyncio.to_thread(_unlink_missing_ok, path)


async def ensure_dir(path: str) -> None:
    await asyncio.to_thread(os.makedirs, path, exist_ok=True)
