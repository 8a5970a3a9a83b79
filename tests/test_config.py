from __future__ import annotations

from treesync.config import (
    MAX_FILE_REQUESTS,
    CopySettings,
    default_copy_settings,
    is_ci,
    resolve_use_hard_links,
)


def test_max_file_requests_is_eight() -> None:
    assert MAX_FILE_REQUESTS == 8


def test_is_ci_detection() -> None:
    assert is_ci({"CI": "true"})
    assert is_ci({"CI": "1"})
    assert is_ci({"GITHUB_ACTIONS": "true"})
    assert is_ci({"BUILD_NUMBER": "42"})
    assert not is_ci({"CI": "false"})
    assert not is_ci({})


def test_empty_ci_values_count_as_unset() -> None:
    assert not is_ci({"CI": ""})
    assert not is_ci({"BUILD_NUMBER": "", "TF_BUILD": ""})
    assert not resolve_use_hard_links("linux", {"CI": ""})


def test_ci_false_overrides_other_markers() -> None:
    assert not is_ci({"CI": "false", "BUILD_NUMBER": "1"})
    assert not is_ci({"CI": "FALSE", "GITHUB_ACTIONS": "true"})
    assert not resolve_use_hard_links("linux", {"CI": "false", "BUILD_NUMBER": "1"})


def test_hard_links_default_off_outside_ci() -> None:
    assert not resolve_use_hard_links("linux", {})


def test_hard_links_default_on_in_ci() -> None:
    assert resolve_use_hard_links("linux", {"CI": "true"})


def test_env_override_forces_either_way() -> None:
    assert resolve_use_hard_links("darwin", {"USE_HARD_LINKS": "true"})
    assert not resolve_use_hard_links(
        "linux", {"CI": "true", "USE_HARD_LINKS": "false"}
    )


def test_windows_never_uses_hard_links() -> None:
    assert not resolve_use_hard_links("win32", {"USE_HARD_LINKS": "true"})
    assert not resolve_use_hard_links("win32", {"CI": "true"})


def test_settings_from_explicit_environment() -> None:
    settings = CopySettings.from_environment(
        platform="linux", environ={"USE_HARD_LINKS": "true"}
    )
    assert settings == CopySettings(use_hard_links=True)


def test_default_settings_computed_once(monkeypatch) -> None:
    default_copy_settings.cache_clear()
    monkeypatch.setenv("USE_HARD_LINKS", "true")
    first = default_copy_settings()
    monkeypatch.setenv("USE_HARD_LINKS", "false")
    try:
        assert default_copy_settings() is first
    finally:
        default_copy_settings.cache_clear()
