"""Project configuration (kitsync.toml) data structures and loading.

Loaded once at the CLI entry point and passed down as immutable data.
"""

import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import ValidationError as PydanticValidationError

from kitsync.errors import ParseError
from kitsync.models.content import ContentItem, PrefixPolicy
from kitsync.models.profile import Profile

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "kitsync.toml"
DEFAULT_PROFILES = "copilot"


@dataclass(frozen=True)
class ProfileSettings:
    """How the active profile set is chosen.

    targets=None means "not set"; an empty string means "explicitly none".
    """

    targets: str | None = None
    auto_detect: bool = True
    defaults: str = DEFAULT_PROFILES


@dataclass(frozen=True)
class PackageDeclaration:
    """One package whose content and configuration fragment are synchronized."""

    id: str
    source: Path | None = None
    prefix: str | None = None
    use_prefix: bool | None = None
    suggested_prefix: str | None = None
    enabled: bool = True
    fragment: Path | None = None


@dataclass(frozen=True)
class ProjectConfig:
    """Immutable project configuration."""

    profiles: ProfileSettings = field(default_factory=ProfileSettings)
    content: PrefixPolicy = field(default_factory=PrefixPolicy)
    packages: tuple[PackageDeclaration, ...] = ()
    extra_profiles: tuple[Profile, ...] = ()

    def with_targets(self, targets: str | None) -> "ProjectConfig":
        """Return a new config with the explicit profile list replaced."""
        return replace(self, profiles=replace(self.profiles, targets=targets))

    def with_auto_detect(self, auto_detect: bool) -> "ProjectConfig":
        return replace(self, profiles=replace(self.profiles, auto_detect=auto_detect))


def config_path(project_dir: Path) -> Path:
    return project_dir / CONFIG_FILE_NAME


def load_project_config(project_dir: Path) -> ProjectConfig:
    """Load kitsync.toml from project_dir.

    Returns the default configuration if the file doesn't exist. Unknown keys
    are ignored.

    Raises:
        ParseError: If the file is not valid TOML or a table is malformed
    """
    path = config_path(project_dir)
    if not path.exists():
        logger.debug("No %s in %s, using defaults", CONFIG_FILE_NAME, project_dir)
        return ProjectConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ParseError(path, str(e)) from e

    try:
        return ProjectConfig(
            profiles=_parse_profile_settings(data.get("profiles", {})),
            content=_parse_prefix_policy(data.get("content", {})),
            packages=tuple(_parse_package(entry) for entry in data.get("package", [])),
            extra_profiles=tuple(
                Profile.model_validate(entry) for entry in data.get("profile", [])
            ),
        )
    except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
        raise ParseError(path, str(e)) from e


def _parse_profile_settings(data: dict[str, Any]) -> ProfileSettings:
    targets = data.get("targets")
    return ProfileSettings(
        targets=None if targets is None else str(targets),
        auto_detect=bool(data.get("auto_detect", True)),
        defaults=str(data.get("defaults", DEFAULT_PROFILES)),
    )


def _parse_prefix_policy(data: dict[str, Any]) -> PrefixPolicy:
    return PrefixPolicy(
        prefix_all=bool(data.get("prefix_all", False)),
        default_prefix=str(data.get("default_prefix", "")),
    )


def _optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value))


def _parse_package(data: dict[str, Any]) -> PackageDeclaration:
    package_id = str(data["id"]).strip()
    if not package_id:
        raise ValueError("package id must be a non-empty string")

    use_prefix = data.get("use_prefix")
    return PackageDeclaration(
        id=package_id,
        source=_optional_path(data.get("source")),
        prefix=data.get("prefix") or None,
        use_prefix=None if use_prefix is None else bool(use_prefix),
        suggested_prefix=data.get("suggested_prefix") or None,
        enabled=bool(data.get("enabled", True)),
        fragment=_optional_path(data.get("fragment")),
    )


def expand_content_items(project_dir: Path, config: ProjectConfig) -> list[ContentItem]:
    """Turn package declarations into ContentItems, one per source file.

    A directory source contributes every file below it (sorted); a file source
    contributes itself relative to its parent. A missing source yields a single
    item for the missing path so the reconciler reports it.
    """
    items: list[ContentItem] = []
    for package in config.packages:
        if package.source is None:
            continue

        source = project_dir / package.source
        if source.is_dir():
            root = source
            files = sorted(p for p in source.rglob("*") if p.is_file())
        else:
            root = source.parent
            files = [source]

        for file_path in files:
            items.append(
                ContentItem(
                    source_path=file_path,
                    package_id=package.id,
                    source_root=root,
                    explicit_prefix=package.prefix,
                    use_prefix=package.use_prefix,
                    suggested_prefix=package.suggested_prefix,
                    enabled=package.enabled,
                )
            )
    return items


def save_project_config(project_dir: Path, config: ProjectConfig) -> Path:
    """Write config as kitsync.toml. Returns the written path."""
    profiles: dict[str, Any] = {
        "auto_detect": config.profiles.auto_detect,
        "defaults": config.profiles.defaults,
    }
    if config.profiles.targets is not None:
        profiles["targets"] = config.profiles.targets

    data: dict[str, Any] = {
        "profiles": profiles,
        "content": {
            "prefix_all": config.content.prefix_all,
            "default_prefix": config.content.default_prefix,
        },
    }
    if config.packages:
        data["package"] = [_serialize_package(p) for p in config.packages]

    path = config_path(project_dir)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)
    return path


def _serialize_package(package: PackageDeclaration) -> dict[str, Any]:
    result: dict[str, Any] = {"id": package.id, "enabled": package.enabled}
    if package.source is not None:
        result["source"] = package.source.as_posix()
    if package.prefix is not None:
        result["prefix"] = package.prefix
    if package.use_prefix is not None:
        result["use_prefix"] = package.use_prefix
    if package.suggested_prefix is not None:
        result["suggested_prefix"] = package.suggested_prefix
    if package.fragment is not None:
        result["fragment"] = package.fragment.as_posix()
    return result
