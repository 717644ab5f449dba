"""Profile registry, resolution and entry transforms."""

from kitsync.profiles.registry import (
    ProfileRegistry,
    load_builtin_registry,
    load_registry,
    synthesize_profile,
)
from kitsync.profiles.resolver import detect_profiles, parse_profile_list, resolve_profiles
from kitsync.profiles.transforms import apply_transform

__all__ = [
    "ProfileRegistry",
    "apply_transform",
    "detect_profiles",
    "load_builtin_registry",
    "load_registry",
    "parse_profile_list",
    "resolve_profiles",
    "synthesize_profile",
]
