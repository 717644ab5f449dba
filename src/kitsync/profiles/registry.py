"""Profile registry: profile id -> storage conventions.

The built-in table is package data (data/profiles.yaml). Projects can add or
override profiles through their kitsync.toml; unknown ids get a profile
synthesized from the generic dot-directory convention.
"""

from collections.abc import Iterable
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from kitsync.errors import ParseError
from kitsync.models.profile import Profile

GENERIC_CONTENT_SUBDIR = "skills"
GENERIC_CONFIG_FILENAME = "mcp.json"
GENERIC_ROOT_KEY = "mcpServers"


def builtin_profiles_path() -> Path:
    return Path(__file__).parent.parent / "data" / "profiles.yaml"


def synthesize_profile(profile_id: str) -> Profile:
    """Build a profile for an unregistered id using the generic convention.

    Example:
        >>> synthesize_profile("roo").content_root
        '.roo/skills'
    """
    normalized = profile_id.strip().lower()
    base = f".{normalized}"
    return Profile(
        id=normalized,
        detection_marker=base,
        content_root=f"{base}/{GENERIC_CONTENT_SUBDIR}",
        config_document=f"{base}/{GENERIC_CONFIG_FILENAME}",
        config_root_key=GENERIC_ROOT_KEY,
    )


class ProfileRegistry:
    """Ordered table of registered profiles.

    Registration order is the detection order used by the resolver.
    """

    def __init__(self, profiles: Iterable[Profile]) -> None:
        self._profiles: dict[str, Profile] = {}
        for profile in profiles:
            self._profiles[profile.id] = profile

    def registered(self) -> list[Profile]:
        return list(self._profiles.values())

    def is_registered(self, profile_id: str) -> bool:
        return profile_id.strip().lower() in self._profiles

    def get(self, profile_id: str) -> Profile:
        """Return the registered profile, or a synthesized one for unknown ids."""
        normalized = profile_id.strip().lower()
        registered = self._profiles.get(normalized)
        if registered is not None:
            return registered
        return synthesize_profile(normalized)

    def with_profiles(self, profiles: Iterable[Profile]) -> "ProfileRegistry":
        """Return a new registry with profiles added or replaced.

        Replaced profiles keep their original position; new ones are appended.
        """
        merged = dict(self._profiles)
        for profile in profiles:
            merged[profile.id] = profile
        return ProfileRegistry(merged.values())


def load_registry(path: Path) -> ProfileRegistry:
    """Load a profile table from a YAML file.

    Raises:
        ParseError: If the file is not valid YAML or a profile is malformed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(path, str(e)) from e

    if not data or "profiles" not in data:
        return ProfileRegistry([])

    try:
        profiles = [Profile.model_validate(entry) for entry in data["profiles"]]
    except PydanticValidationError as e:
        raise ParseError(path, str(e)) from e

    return ProfileRegistry(profiles)


def load_builtin_registry() -> ProfileRegistry:
    return load_registry(builtin_profiles_path())
