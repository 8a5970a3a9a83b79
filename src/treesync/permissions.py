from __future__ import annotations

import stat

_GROUP_OTHER_EXECUTE = stat.S_IXGRP | stat.S_IXOTH
_GROUP_OTHER_READ = stat.S_IRGRP | stat.S_IROTH


def normalize_mode(mode: int) -> int:
    """Let everyone execute when the owner can, and let everyone read."""
    if mode & stat.S_IXUSR:
        mode |= _GROUP_OTHER_EXECUTE
    return mode | _GROUP_OTHER_READ


def describe_mode(mode: int) -> str:
    return f"{stat.S_IMODE(mode):04o} ({stat.filemode(mode)})"
