from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from pathspec import PathSpec

from .config import DEFAULT_IGNORE_FILE
from .models import FileStatus, Filter


def _to_posix(path: PurePosixPath) -> str:
    return "." if str(path) == "." else path.as_posix()


class IgnoreRules:
    """Evaluates gitignore-style patterns, each set scoped to a base directory.

    A deeper base decides over its ancestors whenever one of its patterns
    matches, so a nested `!pattern` can re-include what a parent excluded.
    """

    def __init__(self) -> None:
        self._lines: dict[str, list[str]] = {}
        self._specs: dict[str, PathSpec] = {}

    def add_spec(self, base_relpath: PurePosixPath, lines: Iterable[str]) -> None:
        clean = [
            line.strip()
            for line in lines
            if line.strip() and not line.lstrip().startswith("#")
        ]
        if not clean:
            return
        base = _to_posix(base_relpath)
        accumulated = self._lines.setdefault(base, [])
        accumulated.extend(clean)
        self._specs[base] = PathSpec.from_lines("gitwildmatch", accumulated)

    def load_if_exists(
        self, root: str, dir_relpath: PurePosixPath, file_name: str = DEFAULT_IGNORE_FILE
    ) -> None:
        rel = "" if str(dir_relpath) == "." else dir_relpath.as_posix()
        candidate = os.path.join(root, rel, file_name)
        if not os.path.isfile(candidate):
            return
        with open(candidate, encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
        self.add_spec(dir_relpath, lines)

    def is_ignored(self, relpath: PurePosixPath, is_dir: bool) -> bool:
        parts = relpath.parts
        ancestors = [PurePosixPath(".")]
        for idx in range(len(parts) - 1):
            ancestors.append(PurePosixPath(*parts[: idx + 1]))

        target = relpath.as_posix()
        if is_dir and not target.endswith("/"):
            target = f"{target}/"

        ignored = False
        for ancestor in ancestors:
            anc_key = _to_posix(ancestor)
            spec = self._specs.get(anc_key)
            if spec is None:
                continue

            if anc_key == ".":
                local_target = target
            else:
                local_target = target[len(anc_key) + 1 :]

            # None when no pattern of this base matched
            decision = spec.check_file(local_target).include
            if decision is not None:
                ignored = decision

        return ignored


def build_filter(
    root: str | os.PathLike[str],
    patterns: Iterable[str] = (),
    ignore_file: str | None = DEFAULT_IGNORE_FILE,
) -> Filter:
    """Filter rejecting paths matched by `patterns` or by nested ignore files.

    Ignore files are read lazily, the first time a path below their
    directory is checked. The walker only descends into a directory after
    checking it, so rules are always loaded before they are needed.
    """
    root_text = os.fspath(root)
    rules = IgnoreRules()
    rules.add_spec(PurePosixPath("."), patterns)
    loaded: set[PurePosixPath] = set()

    def accept(path: str, status: FileStatus) -> bool:
        relpath = PurePosixPath(Path(os.path.relpath(path, root_text)).as_posix())
        if ignore_file is not None:
            for directory in reversed([*relpath.parents]):
                if directory not in loaded:
                    rules.load_if_exists(root_text, directory, ignore_file)
                    loaded.add(directory)
        return not rules.is_ignored(relpath, is_dir=status.is_dir)

    return accept
