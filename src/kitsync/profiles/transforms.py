"""Apply a profile's EntryTransform to configuration entries."""

import copy
from typing import Any

from kitsync.models.profile import EntryTransform


def apply_transform(transform: EntryTransform, entry: Any) -> Any:
    """Return a reshaped copy of entry; the input is never mutated.

    Entries that are not JSON objects are returned unchanged (copied), since
    their shape is opaque to every transform step.

    Args:
        transform: The profile's transform
        entry: One entry definition from a fragment

    Returns:
        New entry in the profile's native shape
    """
    result = copy.deepcopy(entry)
    if transform.is_identity() or not isinstance(result, dict):
        return result

    for field_name, mapping in transform.rename_values.items():
        value = result.get(field_name)
        if isinstance(value, str) and value in mapping:
            result[field_name] = mapping[value]

    if transform.join_fields is not None:
        head, tail = transform.join_fields
        result = _join_fields(result, head, tail)

    for old_name, new_name in transform.rename_fields.items():
        if old_name in result:
            result[new_name] = result.pop(old_name)

    for field_name, default in transform.set_defaults.items():
        if field_name not in result:
            result[field_name] = copy.deepcopy(default)

    return result


def _join_fields(entry: dict[str, Any], head: str, tail: str) -> dict[str, Any]:
    if head not in entry and tail not in entry:
        return entry

    joined: list[Any] = []
    head_value = entry.get(head)
    if isinstance(head_value, list):
        joined.extend(head_value)
    elif head_value is not None:
        joined.append(head_value)

    tail_value = entry.pop(tail, None)
    if isinstance(tail_value, list):
        joined.extend(tail_value)
    elif tail_value is not None:
        joined.append(tail_value)

    entry[head] = joined
    return entry
