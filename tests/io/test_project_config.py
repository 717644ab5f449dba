"""Tests for kitsync.toml loading and saving."""

from pathlib import Path

import pytest

from kitsync.errors import ParseError
from kitsync.io.project_config import (
    PackageDeclaration,
    ProjectConfig,
    expand_content_items,
    load_project_config,
    save_project_config,
)
from kitsync.models.content import PrefixPolicy


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    """Test that a project without kitsync.toml gets the default config."""
    config = load_project_config(tmp_path)

    assert config == ProjectConfig()
    assert config.profiles.targets is None
    assert config.profiles.auto_detect is True
    assert config.profiles.defaults == "copilot"


def test_load_full_config(tmp_path: Path) -> None:
    """Test loading every supported table."""
    (tmp_path / "kitsync.toml").write_text(
        """
[profiles]
targets = "claude;cursor"
auto_detect = false
defaults = ""

[content]
prefix_all = true
default_prefix = "vendor"

[[package]]
id = "Acme.Skills"
source = "vendor/acme/skills"
use_prefix = false
suggested_prefix = "acme"
fragment = "vendor/acme/mcp.json"
unknown_key = "ignored"

[[package]]
id = "Other"
enabled = false

[[profile]]
id = "roo"
detection_marker = ".roo"
content_root = ".roo/rules"
config_document = ".roo/mcp.json"
""",
        encoding="utf-8",
    )

    config = load_project_config(tmp_path)

    assert config.profiles.targets == "claude;cursor"
    assert config.profiles.auto_detect is False
    assert config.profiles.defaults == ""
    assert config.content == PrefixPolicy(prefix_all=True, default_prefix="vendor")
    assert config.packages[0] == PackageDeclaration(
        id="Acme.Skills",
        source=Path("vendor/acme/skills"),
        use_prefix=False,
        suggested_prefix="acme",
        fragment=Path("vendor/acme/mcp.json"),
    )
    assert config.packages[1].enabled is False
    assert config.extra_profiles[0].id == "roo"


def test_empty_targets_string_is_kept(tmp_path: Path) -> None:
    """Test that an explicitly empty targets value is not treated as unset."""
    (tmp_path / "kitsync.toml").write_text('[profiles]\ntargets = ""\n', encoding="utf-8")

    assert load_project_config(tmp_path).profiles.targets == ""


def test_invalid_toml_raises_parse_error(tmp_path: Path) -> None:
    """Test that a broken kitsync.toml surfaces a ParseError."""
    (tmp_path / "kitsync.toml").write_text("[profiles\n", encoding="utf-8")

    with pytest.raises(ParseError, match="kitsync.toml"):
        load_project_config(tmp_path)


def test_package_without_id_raises_parse_error(tmp_path: Path) -> None:
    """Test that a package table without an id is rejected."""
    (tmp_path / "kitsync.toml").write_text('[[package]]\nsource = "x"\n', encoding="utf-8")

    with pytest.raises(ParseError):
        load_project_config(tmp_path)


def test_save_round_trips(tmp_path: Path) -> None:
    """Test that a saved config loads back equal."""
    config = ProjectConfig(
        packages=(
            PackageDeclaration(
                id="Acme.Skills",
                source=Path("vendor/acme"),
                prefix="acme",
                fragment=Path("vendor/acme.json"),
            ),
        ),
    ).with_targets("claude")

    save_project_config(tmp_path, config)

    assert load_project_config(tmp_path) == config


def test_with_helpers_return_new_config() -> None:
    """Test functional updates of profile settings."""
    config = ProjectConfig()

    updated = config.with_targets("cursor").with_auto_detect(False)

    assert config.profiles.targets is None
    assert updated.profiles.targets == "cursor"
    assert updated.profiles.auto_detect is False


def test_expand_directory_source(tmp_path: Path) -> None:
    """Test that every file below a directory source becomes a content item."""
    skills = tmp_path / "vendor" / "skills"
    (skills / "review").mkdir(parents=True)
    (skills / "review" / "SKILL.md").write_text("review", encoding="utf-8")
    (skills / "intro.md").write_text("intro", encoding="utf-8")
    config = ProjectConfig(
        packages=(
            PackageDeclaration(id="Acme", source=Path("vendor/skills"), suggested_prefix="acme"),
            PackageDeclaration(id="ConfigOnly", fragment=Path("x.json")),
        )
    )

    items = expand_content_items(tmp_path, config)

    assert [item.source_path for item in items] == [
        skills / "intro.md",
        skills / "review" / "SKILL.md",
    ]
    assert all(item.source_root == skills for item in items)
    assert all(item.package_id == "Acme" for item in items)
    assert all(item.suggested_prefix == "acme" for item in items)


def test_expand_file_source(tmp_path: Path) -> None:
    """Test that a single-file source is relative to its parent."""
    (tmp_path / "one.md").write_text("x", encoding="utf-8")
    config = ProjectConfig(packages=(PackageDeclaration(id="One", source=Path("one.md")),))

    items = expand_content_items(tmp_path, config)

    assert len(items) == 1
    assert items[0].source_root == tmp_path
