"""Tests for configuration document I/O."""

import logging
from pathlib import Path

import pytest

from kitsync.errors import ParseError
from kitsync.io.config_document import (
    delete_document,
    load_document,
    parse_document,
    serialize_document,
    write_if_changed,
)
from kitsync.models.result import Report

logger = logging.getLogger(__name__)


def test_serialize_is_sorted_and_newline_terminated() -> None:
    """Test deterministic serialization."""
    text = serialize_document({"b": 1, "a": {"d": "ü", "c": 2}})

    assert text == '{\n  "a": {\n    "c": 2,\n    "d": "ü"\n  },\n  "b": 1\n}\n'


def test_load_absent_document_is_empty(tmp_path: Path) -> None:
    """Test that an absent document loads as empty without warnings."""
    report = Report(operation="test", logger=logger)

    assert load_document(tmp_path / "mcp.json", report) == {}
    assert report.warnings == []


def test_load_corrupt_document_warns(tmp_path: Path) -> None:
    """Test that a corrupt document loads as empty with a warning."""
    path = tmp_path / "mcp.json"
    path.write_text("{ oops", encoding="utf-8")
    report = Report(operation="test", logger=logger)

    assert load_document(path, report) == {}
    assert len(report.warnings) == 1


def test_parse_rejects_non_object_root(tmp_path: Path) -> None:
    """Test that a JSON array document is a parse error."""
    path = tmp_path / "mcp.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ParseError, match="JSON object"):
        parse_document(path)


def test_write_if_changed_creates_parents(tmp_path: Path) -> None:
    """Test that the first write creates the document and its directory."""
    path = tmp_path / ".vscode" / "mcp.json"

    assert write_if_changed(path, {"servers": {}}) is True
    assert path.read_text(encoding="utf-8") == '{\n  "servers": {}\n}\n'


def test_write_if_changed_skips_identical_content(tmp_path: Path) -> None:
    """Test that identical content is not rewritten."""
    path = tmp_path / "mcp.json"
    write_if_changed(path, {"servers": {"a": 1}})

    assert write_if_changed(path, {"servers": {"a": 1}}) is False


def test_write_if_changed_ignores_crlf_differences(tmp_path: Path) -> None:
    """Test that a CRLF copy of the same content counts as unchanged."""
    path = tmp_path / "mcp.json"
    path.write_bytes(serialize_document({"a": 1}).replace("\n", "\r\n").encode("utf-8"))

    assert write_if_changed(path, {"a": 1}) is False


def test_delete_document(tmp_path: Path) -> None:
    """Test deleting present and absent documents."""
    path = tmp_path / "mcp.json"
    path.write_text("{}", encoding="utf-8")

    assert delete_document(path) is True
    assert delete_document(path) is False
