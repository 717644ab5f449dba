"""Exception types raised by the reconciliation engine.

Only ConflictError is fatal for an apply pass. The other kinds are raised by
loaders and caught by the operations that call them, which turn them into
warnings and skip the offending item.
"""

from dataclasses import dataclass
from pathlib import Path


class KitsyncError(Exception):
    """Base class for all kitsync errors."""


class ValidationError(KitsyncError):
    """A content item is missing required package or source-root metadata."""


class NotFoundError(KitsyncError):
    """A declared source file or fragment document does not exist."""

    def __init__(self, path: Path, what: str = "File") -> None:
        super().__init__(f"{what} not found: {path}")
        self.path = path


class ParseError(KitsyncError):
    """A manifest, configuration document or fragment could not be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class DestinationConflict:
    """Two packages resolve to the same destination inside one profile."""

    profile_id: str
    destination: Path
    first_package: str
    second_package: str

    def describe(self) -> str:
        return (
            f"both '{self.first_package}' and '{self.second_package}' target "
            f"'{self.destination}' ({self.profile_id}). "
            f"Set a prefix on one of the packages to avoid this conflict."
        )


class ConflictError(KitsyncError):
    """One or more destination conflicts were found during the pre-flight check."""

    def __init__(self, conflicts: list[DestinationConflict]) -> None:
        self.conflicts = conflicts
        lines = [f"{len(conflicts)} destination conflict(s):"]
        lines.extend(f"  - {conflict.describe()}" for conflict in conflicts)
        super().__init__("\n".join(lines))
