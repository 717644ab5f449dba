"""Read and write shared JSON configuration documents.

Documents are parsed into plain dicts, transformed purely, then serialized
deterministically so byte comparison detects real changes.
"""

import json
import logging
from pathlib import Path
from typing import Any

from kitsync.errors import ParseError
from kitsync.models.result import Report

logger = logging.getLogger(__name__)


def parse_document(path: Path) -> dict[str, Any]:
    """Parse a configuration document.

    Raises:
        ParseError: If the file is unreadable, not JSON, or not a JSON object
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ParseError(path, "document root must be a JSON object")
    return data


def load_document(path: Path, report: Report) -> dict[str, Any]:
    """Load a document, treating absent or corrupt files as empty."""
    if not path.exists():
        return {}

    try:
        return parse_document(path)
    except ParseError as e:
        report.warn(f"{e}; starting from an empty document")
        return {}


def serialize_document(document: dict[str, Any]) -> str:
    """Stable serialization: sorted keys, two-space indent, LF, trailing newline."""
    text = json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False)
    return text + "\n"


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n")


def write_if_changed(path: Path, document: dict[str, Any]) -> bool:
    """Write document only when its serialization differs from what is on disk.

    Returns:
        True if the file was written
    """
    content = serialize_document(document)
    if path.exists():
        try:
            existing = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError):
            existing = None
        if existing is not None and _normalize_newlines(existing) == content:
            logger.debug("Unchanged: %s", path)
            return False

    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    with temp_path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(content)
    temp_path.replace(path)
    logger.info("Wrote %s", path)
    return True


def delete_document(path: Path) -> bool:
    """Delete path if it exists. Returns True if a file was removed."""
    if not path.exists():
        return False
    path.unlink()
    logger.info("Deleted %s", path)
    return True
