"""Per-directory .gitignore sections listing the files kitsync wrote.

A directory's .gitignore holds user lines first, followed by one section per
owning package:

    # Managed by kitsync (Acme.Skills)
    review.md
    testing.md

User lines are never modified. Managed sections are regenerated wholesale
from the files each package currently owns in that directory.
"""

import logging
from pathlib import Path

from kitsync.errors import ParseError

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".gitignore"
SECTION_HEADER = "# Managed by kitsync"


def section_header(package_id: str) -> str:
    return f"{SECTION_HEADER} ({package_id})"


def _header_package(line: str) -> str | None:
    if not line.startswith(SECTION_HEADER):
        return None
    start = line.find("(")
    end = line.rfind(")")
    if start < 0 or end <= start:
        return None
    return line[start + 1 : end]


def parse_ignore_text(text: str) -> tuple[list[str], dict[str, list[str]]]:
    """Split ignore-file text into preserved user lines and managed sections.

    Returns:
        (preserved_lines, sections) where sections maps package id to its entries
    """
    preserved: list[str] = []
    sections: dict[str, list[str]] = {}
    current: str | None = None

    for line in text.splitlines():
        package_id = _header_package(line)
        if package_id is not None:
            current = package_id
            sections.setdefault(current, [])
            continue
        if current is None:
            preserved.append(line)
        elif line.strip():
            sections[current].append(line.strip())

    while preserved and not preserved[-1].strip():
        preserved.pop()
    return preserved, sections


def render_ignore_text(preserved: list[str], sections: dict[str, set[str]]) -> str:
    lines = list(preserved)
    for package_id in sorted(sections, key=str.casefold):
        entries = sections[package_id]
        if not entries:
            continue
        lines.append(section_header(package_id))
        lines.extend(sorted(entries))
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def sync_ignore_file(directory: Path, sections: dict[str, set[str]]) -> None:
    """Replace every managed section in directory/.gitignore with sections.

    Passing an empty mapping removes all managed sections. The file is deleted
    when nothing but blank lines would remain, and is only rewritten when its
    content changes.

    Raises:
        ParseError: If the existing file is not valid UTF-8; it is left untouched
    """
    path = directory / IGNORE_FILE_NAME
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
    except UnicodeDecodeError as e:
        raise ParseError(path, str(e)) from e
    preserved, _ = parse_ignore_text(existing)

    content = render_ignore_text(preserved, sections)
    if not content.strip():
        if path.exists():
            path.unlink()
            logger.debug("Deleted %s", path)
        return

    if content == existing.replace("\r\n", "\n"):
        return

    if not directory.is_dir():
        return
    path.write_text(content, encoding="utf-8")
    logger.debug("Updated %s", path)


def collect_sections(
    files_by_package: dict[str, list[Path]],
) -> dict[Path, dict[str, set[str]]]:
    """Group written files into directory -> package id -> file names."""
    result: dict[Path, dict[str, set[str]]] = {}
    for package_id, files in files_by_package.items():
        for file_path in files:
            by_package = result.setdefault(file_path.parent, {})
            by_package.setdefault(package_id, set()).add(file_path.name)
    return result
