"""Load configuration fragment documents."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from kitsync.errors import NotFoundError, ParseError
from kitsync.models.content import ConfigFragment

FRAGMENT_ROOT_KEY = "servers"


class FragmentDocument(BaseModel):
    """On-disk fragment shape. Keys other than `servers` are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    servers: dict[str, Any] = Field(default_factory=dict)


def load_fragment(path: Path, package_id: str | None = None) -> ConfigFragment:
    """Load one fragment document.

    Args:
        path: Fragment JSON file
        package_id: Owning package; defaults to the file stem

    Raises:
        NotFoundError: If path does not exist
        ParseError: If the file is not JSON or `servers` is not an object
    """
    if not path.exists():
        raise NotFoundError(path, what="Fragment file")

    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ParseError(path, "fragment root must be a JSON object")

    try:
        document = FragmentDocument.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(path, f"'{FRAGMENT_ROOT_KEY}' must be an object") from e

    return ConfigFragment(
        package_id=package_id if package_id is not None else path.stem,
        entries=dict(document.servers),
    )
