from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cache

MAX_FILE_REQUESTS = 8

USE_HARD_LINKS_ENV = "USE_HARD_LINKS"
DEFAULT_IGNORE_FILE = ".syncignore"

# hard links behave unreliably for mirrored build trees on Windows
HARD_LINKS_UNSUPPORTED_PLATFORMS = {"win32"}

CI_ENV_VARS = (
    "CI",
    "CONTINUOUS_INTEGRATION",
    "BUILD_NUMBER",
    "RUN_ID",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "TRAVIS",
    "CIRCLECI",
    "APPVEYOR",
    "BUILDKITE",
    "JENKINS_URL",
    "TF_BUILD",
)


def is_ci(environ: Mapping[str, str]) -> bool:
    """Empty values count as unset; `CI=false` overrides every other marker."""
    if environ.get("CI", "").lower() == "false":
        return False
    return any(environ.get(name) for name in CI_ENV_VARS)


def resolve_use_hard_links(platform: str, environ: Mapping[str, str]) -> bool:
    if platform in HARD_LINKS_UNSUPPORTED_PLATFORMS:
        return False
    override = environ.get(USE_HARD_LINKS_ENV)
    if override == "false":
        return False
    return override == "true" or is_ci(environ)


@dataclass(frozen=True)
class CopySettings:
    use_hard_links: bool = False

    @classmethod
    def from_environment(
        cls,
        platform: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> CopySettings:
        return cls(
            use_hard_links=resolve_use_hard_links(
                sys.platform if platform is None else platform,
                os.environ if environ is None else environ,
            )
        )


@cache
def default_copy_settings() -> CopySettings:
    """Settings derived once per process from platform and environment."""
    return CopySettings.from_environment()
