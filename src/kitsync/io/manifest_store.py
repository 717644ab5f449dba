"""Persistence for the tracked manifest (.kitsync/manifest.json).

The unified manifest is the only authoritative store. The per-package
`<packageId>.manifest` files are a derived view regenerated on every save so
older tooling can still read them.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from kitsync.errors import ParseError
from kitsync.models.manifest import MANIFEST_VERSION, PackageRecord, TrackedManifest
from kitsync.models.result import Report

logger = logging.getLogger(__name__)

STATE_DIR_NAME = ".kitsync"
MANIFEST_FILE_NAME = "manifest.json"
LEGACY_SUFFIX = ".manifest"


class ManifestStore(ABC):
    """Abstract load/save of the tracked manifest."""

    @abstractmethod
    def load(self, report: Report) -> TrackedManifest:
        """Load the manifest, returning an empty one when absent or unreadable.

        Unreadable or outdated manifests are reported as warnings on report.
        """

    @abstractmethod
    def save(self, manifest: TrackedManifest) -> None:
        """Persist the manifest, or delete it when it holds no data."""

    @abstractmethod
    def legacy_packages(self, report: Report) -> dict[str, list[str]]:
        """Return package id -> recorded files from legacy per-package views."""


def write_json_atomic(path: Path, data: object) -> None:
    """Write data as pretty JSON via a temp file and rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    with temp_path.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)
        f.write("\n")
    temp_path.replace(path)


def _legacy_file_name(package_id: str) -> str:
    return f"{package_id}{LEGACY_SUFFIX}"


class FilesystemManifestStore(ManifestStore):
    """Manifest stored under <project>/.kitsync/."""

    def __init__(self, project_dir: Path) -> None:
        self._state_dir = project_dir / STATE_DIR_NAME

    @property
    def state_dir(self) -> Path:
        return self._state_dir

    @property
    def manifest_path(self) -> Path:
        return self._state_dir / MANIFEST_FILE_NAME

    def load(self, report: Report) -> TrackedManifest:
        path = self.manifest_path
        if not path.exists():
            return TrackedManifest.empty()

        try:
            manifest = _parse_manifest(path)
        except ParseError as e:
            report.warn(f"{e}; treating manifest as empty")
            return TrackedManifest.empty()

        if manifest.version < MANIFEST_VERSION:
            report.warn(
                f"Ignoring manifest version {manifest.version} at {path} "
                f"(expected {MANIFEST_VERSION})"
            )
            return TrackedManifest.empty()

        return manifest

    def save(self, manifest: TrackedManifest) -> None:
        if manifest.is_empty():
            self._delete_all()
            return

        self._state_dir.mkdir(parents=True, exist_ok=True)
        ignore_path = self._state_dir / ".gitignore"
        if not ignore_path.exists():
            ignore_path.write_text("*\n", encoding="utf-8")

        write_json_atomic(self.manifest_path, manifest.to_dict())
        self._write_legacy_views(manifest.packages)
        logger.debug("Saved manifest to %s", self.manifest_path)

    def legacy_packages(self, report: Report) -> dict[str, list[str]]:
        if not self._state_dir.is_dir():
            return {}

        result: dict[str, list[str]] = {}
        for path in sorted(self._state_dir.glob(f"*{LEGACY_SUFFIX}")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                report.warn(f"Failed to read legacy manifest {path}: {e}")
                continue

            if not isinstance(data, dict):
                report.warn(f"Ignoring malformed legacy manifest {path}")
                continue

            package_id = data.get("packageId") or path.name[: -len(LEGACY_SUFFIX)]
            files = data.get("files", [])
            if not isinstance(files, list):
                report.warn(f"Ignoring malformed legacy manifest {path}")
                continue
            result[package_id] = [f for f in files if isinstance(f, str)]
        return result

    def _write_legacy_views(self, packages: dict[str, PackageRecord]) -> None:
        expected = {_legacy_file_name(package_id) for package_id in packages}

        for package_id, record in packages.items():
            write_json_atomic(
                self._state_dir / _legacy_file_name(package_id),
                {"packageId": package_id, "files": record.all_files()},
            )

        for path in self._state_dir.glob(f"*{LEGACY_SUFFIX}"):
            if path.name not in expected:
                path.unlink()

    def _delete_all(self) -> None:
        if not self._state_dir.is_dir():
            return

        if self.manifest_path.exists():
            self.manifest_path.unlink()
        for path in self._state_dir.glob(f"*{LEGACY_SUFFIX}"):
            path.unlink()

        ignore_path = self._state_dir / ".gitignore"
        remaining = [p for p in self._state_dir.iterdir() if p != ignore_path]
        if remaining:
            return

        if ignore_path.exists():
            ignore_path.unlink()
        self._state_dir.rmdir()
        logger.debug("Removed empty state directory %s", self._state_dir)


def _parse_manifest(path: Path) -> TrackedManifest:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ParseError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ParseError(path, "manifest root must be a JSON object")

    # Unversioned manifests predate version 1
    data.setdefault("version", 0)
    try:
        return TrackedManifest.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(path, str(e)) from e
