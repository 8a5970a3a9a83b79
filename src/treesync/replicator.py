from __future__ import annotations

import asyncio
import errno
import logging
import os
import shutil

from .config import CopySettings, default_copy_settings
from .fs_utils import ensure_dir, unlink_if_exists
from .models import FileStatus, HardLinkPredicate, ReplicationKind, Transformer
from .permissions import describe_mode, normalize_mode
from .transform import resolve_content

_LOGGER = logging.getLogger(__name__)


def DO_NOT_USE_HARD_LINKS(path: str) -> bool:
    return False


def _copy_content(src: str, dest: str, mode: int | None) -> None:
    shutil.copyfile(src, dest)
    if mode is None:
        shutil.copymode(src, dest)
    else:
        os.chmod(dest, mode)


def _write_content(dest: str, data: str | bytes) -> None:
    if isinstance(data, str):
        data = data.encode("utf-8")
    with open(dest, "wb") as handle:
        handle.write(data)


async def copy_or_link_file(
    src: str,
    dest: str,
    status: FileStatus | None = None,
    use_hard_link: bool | None = None,
    *,
    logger: logging.Logger | None = None,
) -> ReplicationKind:
    """Place `src` at `dest`, as a hard link when allowed, else as a copy.

    Permissions are normalized: group and others may execute when the owner
    can, and may always read. A file whose permissions need fixing is never
    hard-linked, since a hard link shares its mode with the source.

    The parent of `dest` must exist.
    """
    log = logger or _LOGGER
    if use_hard_link is None:
        use_hard_link = default_copy_settings().use_hard_links

    mode: int | None = None
    if status is not None:
        original = status.mode
        fixed = normalize_mode(original)
        mode = fixed & 0o7777
        if fixed != original:
            if log.isEnabledFor(logging.DEBUG):
                log.debug(
                    "%s permissions fixed from %s to %s",
                    dest,
                    describe_mode(original),
                    describe_mode(fixed),
                )
            if use_hard_link:
                use_hard_link = False
                log.debug(
                    "%s will be copied, but not linked, because file permissions need to be fixed",
                    dest,
                )

    await unlink_if_exists(dest)
    if use_hard_link:
        await asyncio.to_thread(os.link, src, dest)
        return ReplicationKind.LINKED

    await asyncio.to_thread(_copy_content, src, dest, mode)
    return ReplicationKind.COPIED


async def copy_file(src: str, dest: str, ensure_parent: bool = True) -> ReplicationKind:
    """Copy one file, never hard-linked, keeping the source permissions."""
    if ensure_parent:
        await ensure_dir(os.path.dirname(dest))
    return await copy_or_link_file(src, dest, None, False)


class FileReplicator:
    """Replicates single files, preferring hard links until one crosses devices.

    `use_hard_links` only ever goes from True to False. Concurrent copies may
    read either value while that happens; both outcomes are correct.
    """

    def __init__(
        self,
        is_use_hard_link: HardLinkPredicate | None = None,
        transformer: Transformer | None = None,
        *,
        settings: CopySettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        resolved = settings or default_copy_settings()
        self.is_use_hard_link = is_use_hard_link
        self.transformer = transformer
        self.logger = logger or _LOGGER
        self.use_hard_links = (
            resolved.use_hard_links and is_use_hard_link is not DO_NOT_USE_HARD_LINKS
        )

    def _use_hard_link_for(self, dest: str) -> bool:
        if not self.use_hard_links or self.is_use_hard_link is None:
            return self.use_hard_links
        return self.is_use_hard_link(dest)

    async def copy(
        self, src: str, dest: str, status: FileStatus | None
    ) -> ReplicationKind:
        try:
            if self.transformer is not None and status is not None and status.is_file:
                data = await resolve_content(self.transformer, src)
                if data is not None:
                    await unlink_if_exists(dest)
                    await asyncio.to_thread(_write_content, dest, data)
                    return ReplicationKind.TRANSFORMED
            return await copy_or_link_file(
                src,
                dest,
                status,
                self._use_hard_link_for(dest),
                logger=self.logger,
            )
        except OSError as exc:
            # copies run concurrently: another one may already have demoted the flag
            if exc.errno != errno.EXDEV:
                raise
            if self.use_hard_links:
                self.logger.debug("Cannot copy using hard link: %s", exc)
                self.use_hard_links = False
            return await copy_or_link_file(
                src, dest, status, False, logger=self.logger
            )
