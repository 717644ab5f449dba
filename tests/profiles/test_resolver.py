"""Tests for profile resolution."""

from pathlib import Path

from kitsync.profiles.registry import load_builtin_registry
from kitsync.profiles.resolver import detect_profiles, parse_profile_list, resolve_profiles


def test_parse_profile_list_normalizes() -> None:
    """Test that lists are split on both separators, trimmed, lowered and deduplicated."""
    assert parse_profile_list(" Claude ;cursor, CLAUDE,,") == ["claude", "cursor"]


def test_parse_profile_list_empty() -> None:
    """Test that empty and None inputs yield an empty list."""
    assert parse_profile_list(None) == []
    assert parse_profile_list("") == []
    assert parse_profile_list(" ; , ") == []


def test_detect_profiles_in_registry_order(tmp_path: Path) -> None:
    """Test that detection returns matching profiles in registry order."""
    (tmp_path / ".cursor").mkdir()
    (tmp_path / ".github").mkdir()

    assert detect_profiles(tmp_path, load_builtin_registry()) == ["copilot", "cursor"]


def test_detect_profiles_ignores_marker_files(tmp_path: Path) -> None:
    """Test that a file with a marker's name does not count as detection."""
    (tmp_path / ".claude").write_text("", encoding="utf-8")

    assert detect_profiles(tmp_path, load_builtin_registry()) == []


def test_explicit_list_wins_over_detection(tmp_path: Path) -> None:
    """Test that an explicit list disables detection and defaults."""
    (tmp_path / ".claude").mkdir()

    resolved = resolve_profiles(
        tmp_path,
        load_builtin_registry(),
        explicit="Cursor;custom",
        auto_detect=True,
        defaults="copilot",
    )

    assert resolved == ["cursor", "custom"]


def test_explicit_empty_string_means_none(tmp_path: Path) -> None:
    """Test that an explicitly empty list resolves to no profiles."""
    (tmp_path / ".claude").mkdir()

    resolved = resolve_profiles(
        tmp_path,
        load_builtin_registry(),
        explicit="",
        auto_detect=True,
        defaults="copilot",
    )

    assert resolved == []


def test_detection_used_when_not_explicit(tmp_path: Path) -> None:
    """Test that detected profiles are used when no explicit list is set."""
    (tmp_path / ".claude").mkdir()
    (tmp_path / ".opencode").mkdir()

    resolved = resolve_profiles(
        tmp_path,
        load_builtin_registry(),
        explicit=None,
        auto_detect=True,
        defaults="copilot",
    )

    assert resolved == ["claude", "opencode"]


def test_defaults_when_detection_finds_nothing(tmp_path: Path) -> None:
    """Test the fallback to the default list."""
    resolved = resolve_profiles(
        tmp_path,
        load_builtin_registry(),
        explicit=None,
        auto_detect=True,
        defaults="copilot;claude",
    )

    assert resolved == ["copilot", "claude"]


def test_defaults_when_detection_disabled(tmp_path: Path) -> None:
    """Test that markers are ignored when detection is disabled."""
    (tmp_path / ".claude").mkdir()

    resolved = resolve_profiles(
        tmp_path,
        load_builtin_registry(),
        explicit=None,
        auto_detect=False,
        defaults="cursor",
    )

    assert resolved == ["cursor"]


def test_every_source_empty_resolves_to_nothing(tmp_path: Path) -> None:
    """Test that the resolver does not invent a fallback."""
    resolved = resolve_profiles(
        tmp_path,
        load_builtin_registry(),
        explicit=None,
        auto_detect=True,
        defaults="",
    )

    assert resolved == []
