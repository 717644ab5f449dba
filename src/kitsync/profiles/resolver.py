"""Decide which profiles a run targets."""

import logging
import re
from pathlib import Path

from kitsync.profiles.registry import ProfileRegistry

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[;,]")


def parse_profile_list(value: str | None) -> list[str]:
    """Parse a `;`/`,` separated profile list.

    Ids are trimmed and lower-cased; duplicates are dropped keeping the first
    occurrence.

    Example:
        >>> parse_profile_list("Claude; cursor,claude")
        ['claude', 'cursor']
    """
    if not value:
        return []

    result: list[str] = []
    for part in _SEPARATORS.split(value):
        normalized = part.strip().lower()
        if normalized and normalized not in result:
            result.append(normalized)
    return result


def detect_profiles(project_dir: Path, registry: ProfileRegistry) -> list[str]:
    """Return registered profiles whose detection marker directory exists."""
    return [
        profile.id
        for profile in registry.registered()
        if profile.marker_path(project_dir).is_dir()
    ]


def resolve_profiles(
    project_dir: Path,
    registry: ProfileRegistry,
    *,
    explicit: str | None,
    auto_detect: bool,
    defaults: str | None,
) -> list[str]:
    """Resolve the active profile set from three prioritized sources.

    1. explicit, when set at all. An empty string means "no profiles" and
       disables detection and defaults.
    2. auto-detected markers, in registry order, when enabled and non-empty.
    3. defaults.

    Returns an empty list when every source is empty; no fallback is invented.
    Unknown ids pass through unchanged.
    """
    if explicit is not None:
        resolved = parse_profile_list(explicit)
        logger.debug("Using explicit profiles: %s", resolved)
        return resolved

    if auto_detect:
        detected = detect_profiles(project_dir, registry)
        if detected:
            logger.debug("Detected profiles: %s", detected)
            return detected

    resolved = parse_profile_list(defaults)
    logger.debug("Using default profiles: %s", resolved)
    return resolved
