from __future__ import annotations

import asyncio
import logging
import os
from collections import Counter
from dataclasses import dataclass

from .config import CopySettings
from .fs_utils import ensure_dir, map_bounded, unlink_if_exists
from .models import (
    FileStatus,
    Filter,
    HardLinkPredicate,
    PendingSymlink,
    ReplicationKind,
    Transformer,
)
from .replicator import FileReplicator
from .walker import walk

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    entries: list[str]
    linked: int = 0
    copied: int = 0
    transformed: int = 0
    symlinks: int = 0

    @property
    def files(self) -> int:
        return self.linked + self.copied + self.transformed


def _remap(path: str, source: str, destination: str) -> str:
    if path == source:
        return destination
    return destination + path[len(source) :]


async def _create_symlink(pending: PendingSymlink) -> None:
    await unlink_if_exists(pending.file)
    await asyncio.to_thread(os.symlink, pending.link, pending.file)


class DirectorySyncEngine:
    """Mirrors a source tree into a destination tree.

    Regular files are replicated as the walk reaches them. Symlinks keep
    their literal target text and are created only once every regular file
    has been placed. Empty directories are never created.
    """

    def __init__(
        self,
        filter: Filter | None = None,
        transformer: Transformer | None = None,
        is_use_hard_link: HardLinkPredicate | None = None,
        *,
        settings: CopySettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.filter = filter
        self.logger = logger or _LOGGER
        self.replicator = FileReplicator(
            is_use_hard_link,
            transformer,
            settings=settings,
            logger=self.logger,
        )

    async def sync(
        self, source: str | os.PathLike[str], destination: str | os.PathLike[str]
    ) -> SyncResult:
        source = os.fspath(source)
        destination = os.fspath(destination)
        if self.logger.isEnabledFor(logging.DEBUG):
            suffix = " using hard links" if self.replicator.use_hard_links else ""
            self.logger.debug("Copying %s to %s%s", source, destination, suffix)

        created_dirs: set[str] = set()
        links: list[PendingSymlink] = []
        counts: Counter[ReplicationKind] = Counter()

        async def consume(
            file: str,
            status: FileStatus,
            parent: str,
            ignored: set[str],
            sibling_names: tuple[str, ...],
        ) -> FileStatus | None:
            if not status.is_file and not status.is_symlink:
                return None

            if parent not in created_dirs:
                await ensure_dir(_remap(parent, source, destination))
                created_dirs.add(parent)

            dest_file = _remap(file, source, destination)
            if status.is_file:
                counts[await self.replicator.copy(file, dest_file, status)] += 1
            else:
                target = await asyncio.to_thread(os.readlink, file)
                links.append(PendingSymlink(link=target, file=dest_file))
            return None

        entries = await walk(source, self.filter, consume)
        await map_bounded(links, _create_symlink)

        return SyncResult(
            entries=entries,
            linked=counts[ReplicationKind.LINKED],
            copied=counts[ReplicationKind.COPIED],
            transformed=counts[ReplicationKind.TRANSFORMED],
            symlinks=len(links),
        )


async def copy_dir(
    src: str | os.PathLike[str],
    destination: str | os.PathLike[str],
    filter: Filter | None = None,
    transformer: Transformer | None = None,
    is_use_hard_link: HardLinkPredicate | None = None,
) -> SyncResult:
    engine = DirectorySyncEngine(filter, transformer, is_use_hard_link)
    return await engine.sync(src, destination)
