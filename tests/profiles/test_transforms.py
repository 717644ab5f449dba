"""Tests for profile entry transforms."""

from kitsync.models.profile import EntryTransform
from kitsync.profiles.registry import load_builtin_registry
from kitsync.profiles.transforms import apply_transform


def test_identity_transform_returns_equal_copy() -> None:
    """Test that an empty transform returns an equal but distinct entry."""
    entry = {"type": "stdio", "command": "run", "args": ["x"]}

    result = apply_transform(EntryTransform(), entry)

    assert result == entry
    assert result is not entry


def test_opencode_transform_example() -> None:
    """Test the opencode reshape of a local launch entry."""
    opencode = load_builtin_registry().get("opencode")
    entry = {"type": "stdio", "command": "run", "args": ["x"]}

    result = apply_transform(opencode.transform, entry)

    assert result == {"type": "local", "command": ["run", "x"], "enabled": True}


def test_opencode_transform_renames_env() -> None:
    """Test that env becomes environment under the opencode transform."""
    opencode = load_builtin_registry().get("opencode")
    entry = {"type": "stdio", "command": "npx", "args": ["-y", "server"], "env": {"TOKEN": "t"}}

    result = apply_transform(opencode.transform, entry)

    assert result["environment"] == {"TOKEN": "t"}
    assert "env" not in result
    assert result["command"] == ["npx", "-y", "server"]


def test_transform_does_not_mutate_input() -> None:
    """Test that the input entry is left untouched."""
    opencode = load_builtin_registry().get("opencode")
    entry = {"type": "stdio", "command": "run", "args": ["x"], "env": {"A": "1"}}
    snapshot = {"type": "stdio", "command": "run", "args": ["x"], "env": {"A": "1"}}

    apply_transform(opencode.transform, entry)

    assert entry == snapshot


def test_set_defaults_keeps_existing_value() -> None:
    """Test that set_defaults only fills in absent fields."""
    transform = EntryTransform(set_defaults={"enabled": True})

    result = apply_transform(transform, {"enabled": False})

    assert result == {"enabled": False}


def test_rename_values_only_touches_mapped_values() -> None:
    """Test that unmapped discriminator values pass through."""
    transform = EntryTransform(rename_values={"type": {"stdio": "local"}})

    assert apply_transform(transform, {"type": "http"}) == {"type": "http"}
    assert apply_transform(transform, {"type": "stdio"}) == {"type": "local"}


def test_join_fields_without_tail() -> None:
    """Test that a lone scalar head becomes a one-element list."""
    transform = EntryTransform(join_fields=("command", "args"))

    assert apply_transform(transform, {"command": "run"}) == {"command": ["run"]}


def test_join_fields_absent_leaves_entry_alone() -> None:
    """Test that entries without either joined field are unchanged."""
    transform = EntryTransform(join_fields=("command", "args"))

    assert apply_transform(transform, {"url": "http://x"}) == {"url": "http://x"}


def test_non_object_entry_passes_through() -> None:
    """Test that opaque non-object entries are returned unchanged."""
    opencode = load_builtin_registry().get("opencode")

    assert apply_transform(opencode.transform, "opaque") == "opaque"
