"""Removal of directories left empty by kitsync."""

import logging
from collections.abc import Iterable
from pathlib import Path

from kitsync.models.result import Report

logger = logging.getLogger(__name__)


def prune_empty_directories(directories: Iterable[Path], root: Path, report: Report) -> None:
    """Delete now-empty directories, walking upward and stopping at root.

    Directories outside root are never touched. Failures are reported as
    warnings and stop the walk for that directory.
    """
    resolved_root = root.resolve()
    for directory in sorted(directories, key=lambda p: len(p.parts), reverse=True):
        current = directory
        while True:
            resolved = current.resolve()
            if resolved == resolved_root or resolved_root not in resolved.parents:
                break
            if not current.is_dir() or any(current.iterdir()):
                break
            try:
                current.rmdir()
            except OSError as e:
                report.warn(f"Failed to remove directory {current}: {e}")
                break
            logger.debug("Removed empty directory %s", current)
            current = current.parent
