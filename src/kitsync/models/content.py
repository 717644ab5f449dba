"""Desired-state models: content items and configuration fragments."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ContentItem:
    """One declared file to be copied into every active profile's content root.

    Prefix precedence when computing the destination:
    1. explicit_prefix
    2. use_prefix (True/False) combined with the prefix fallback chain
    3. the global PrefixPolicy.prefix_all flag with the same fallback chain
    4. no prefix

    Fallback chain: PrefixPolicy.default_prefix > suggested_prefix > package_id.
    """

    source_path: Path
    package_id: str | None
    source_root: Path | None
    explicit_prefix: str | None = None
    use_prefix: bool | None = None
    suggested_prefix: str | None = None
    enabled: bool = True


@dataclass(frozen=True)
class PrefixPolicy:
    """Project-wide prefixing defaults."""

    prefix_all: bool = False
    default_prefix: str = ""


@dataclass(frozen=True)
class PlannedFile:
    """A content item resolved to its destination relative to a content root."""

    package_id: str
    source_path: Path
    relative_path: Path


@dataclass(frozen=True)
class ConfigFragment:
    """Named configuration entries contributed by one package."""

    package_id: str
    entries: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FragmentSource:
    """Location of a fragment document and the package that declares it.

    package_id defaults to the document's file stem.
    """

    path: Path
    package_id: str | None = None
