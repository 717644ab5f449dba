"""Merge configuration fragments into each profile's shared document.

Every document is handled as parse -> pure merge -> serialize. Entries the
manifest does not list as managed are never modified, and top-level keys other
than the profile's root key are carried through untouched.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from kitsync.errors import NotFoundError, ParseError
from kitsync.io.config_document import (
    delete_document,
    load_document,
    parse_document,
    write_if_changed,
)
from kitsync.io.directories import prune_empty_directories
from kitsync.io.fragments import load_fragment
from kitsync.io.manifest_store import ManifestStore
from kitsync.models.content import ConfigFragment, FragmentSource
from kitsync.models.manifest import ConfigRecord, TrackedManifest
from kitsync.models.profile import Profile
from kitsync.models.result import Report
from kitsync.profiles.registry import ProfileRegistry
from kitsync.profiles.transforms import apply_transform

logger = logging.getLogger(__name__)

# An empty list under this key is not user content worth keeping a file for
AUXILIARY_LIST_KEY = "inputs"


def union_entries(fragments: Sequence[ConfigFragment]) -> dict[str, Any]:
    """Union fragment entries in order; a later fragment wins on name clashes."""
    entries: dict[str, Any] = {}
    owners: dict[str, str] = {}
    for fragment in fragments:
        for name, definition in fragment.entries.items():
            previous = owners.get(name)
            if previous is not None and previous != fragment.package_id:
                logger.debug(
                    "Entry '%s' from '%s' replaces the one from '%s'",
                    name,
                    fragment.package_id,
                    previous,
                )
            entries[name] = definition
            owners[name] = fragment.package_id
    return entries


def merge_document(
    document: dict[str, Any],
    root_key: str,
    previous_managed: set[str],
    new_entries: dict[str, Any],
) -> dict[str, Any]:
    """Return a new document with managed entries replaced by new_entries.

    Entries named in previous_managed are removed first; unmanaged entries
    survive unless a new entry has the same name.
    """
    result = dict(document)
    existing = document.get(root_key)
    entries = dict(existing) if isinstance(existing, dict) else {}

    for name in previous_managed:
        entries.pop(name, None)
    entries.update(new_entries)

    result[root_key] = entries
    return result


def has_meaningful_content(document: dict[str, Any], root_key: str) -> bool:
    """Whether anything worth keeping the file for remains."""
    for key, value in document.items():
        if key == root_key:
            if value:
                return True
        elif key == AUXILIARY_LIST_KEY:
            if value:
                return True
        else:
            return True
    return False


def finalize_document(document: dict[str, Any], root_key: str) -> dict[str, Any] | None:
    """Drop an empty root key; return None when the document should not exist."""
    if not has_meaningful_content(document, root_key):
        return None
    if not document.get(root_key):
        return {k: v for k, v in document.items() if k != root_key}
    return document


class ConfigFragmentMerger:
    """Applies and undoes fragment merges for every profile of a project."""

    def __init__(self, project_dir: Path, registry: ProfileRegistry, store: ManifestStore) -> None:
        self._project_dir = project_dir
        self._registry = registry
        self._store = store

    def load_fragments(
        self, sources: Sequence[FragmentSource], report: Report
    ) -> list[ConfigFragment]:
        """Load fragment documents, skipping missing or corrupt ones with a warning."""
        fragments: list[ConfigFragment] = []
        for source in sources:
            try:
                fragments.append(load_fragment(source.path, source.package_id))
            except (NotFoundError, ParseError) as e:
                report.warn(f"{e}, skipping fragment")
        return fragments

    def apply(
        self,
        sources: Sequence[FragmentSource],
        profile_ids: Sequence[str],
        report: Report,
    ) -> None:
        manifest = self._store.load(report)
        entries = union_entries(self.load_fragments(sources, report))

        for profile_id in profile_ids:
            profile = self._registry.get(profile_id)
            manifest = self._apply_profile(manifest, profile, entries, report)

        active = {profile_id.casefold() for profile_id in profile_ids}
        for profile_id in sorted(manifest.config):
            if profile_id.casefold() in active:
                continue
            logger.info("Removing managed entries for inactive profile '%s'", profile_id)
            manifest = self._remove_profile(manifest, profile_id, report)

        self._store.save(manifest)

    def clean(self, report: Report) -> None:
        """Remove every managed entry recorded in the manifest."""
        manifest = self._store.load(report)
        for profile_id in sorted(manifest.config):
            manifest = self._remove_profile(manifest, profile_id, report)
        self._store.save(manifest)

    def _document_path(self, recorded: str) -> Path:
        path = Path(recorded)
        if path.is_absolute():
            return path
        return self._project_dir / path

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self._project_dir).as_posix()
        except ValueError:
            return str(path)

    def _apply_profile(
        self,
        manifest: TrackedManifest,
        profile: Profile,
        entries: dict[str, Any],
        report: Report,
    ) -> TrackedManifest:
        path = profile.config_document_path(self._project_dir)
        previous = manifest.config.get(profile.id)
        previous_managed = manifest.managed_keys(profile.id)

        if previous is not None:
            previous_root_key = self._recorded_root_key(profile.id, previous)
            previous_path = self._document_path(previous.path)
            if previous_path != path or previous_root_key != profile.config_root_key:
                # Document or root key moved; clear the old location before writing the new one
                self._remove_entries(previous_path, previous_root_key, previous_managed, report)
                previous_managed = set()

        transformed = {
            name: apply_transform(profile.transform, definition)
            for name, definition in entries.items()
        }

        if not transformed and not previous_managed:
            return manifest.without_config(profile.id)

        document = load_document(path, report)
        merged = merge_document(document, profile.config_root_key, previous_managed, transformed)
        self._store_document(path, document, merged, profile.config_root_key, report)

        if not transformed:
            return manifest.without_config(profile.id)

        logger.info("Merged %d managed entries into %s (%s)", len(transformed), path, profile.id)
        record = ConfigRecord(
            path=self._relative(path),
            managed_keys=sorted(transformed),
            root_key=profile.config_root_key,
        )
        return manifest.with_config(profile.id, record)

    def _remove_profile(
        self, manifest: TrackedManifest, profile_id: str, report: Report
    ) -> TrackedManifest:
        record = manifest.config[profile_id]
        self._remove_entries(
            self._document_path(record.path),
            self._recorded_root_key(profile_id, record),
            set(record.managed_keys),
            report,
        )
        return manifest.without_config(profile_id)

    def _recorded_root_key(self, profile_id: str, record: ConfigRecord) -> str:
        """Root key the record's entries live under, independent of the current registry."""
        if record.root_key is not None:
            return record.root_key
        return self._registry.get(profile_id).config_root_key

    def _remove_entries(
        self, path: Path, root_key: str, managed: set[str], report: Report
    ) -> None:
        """Pure removal. Absent documents stay absent; corrupt ones are left alone."""
        if not path.exists() or not managed:
            return

        try:
            document = parse_document(path)
        except ParseError as e:
            report.warn(f"{e}; leaving it unchanged")
            return

        merged = merge_document(document, root_key, managed, {})
        self._store_document(path, document, merged, root_key, report)

    def _store_document(
        self,
        path: Path,
        original: dict[str, Any],
        merged: dict[str, Any],
        root_key: str,
        report: Report,
    ) -> None:
        final = finalize_document(merged, root_key)
        if final == original and path.exists():
            # Nothing owned by us changed; keep the user's formatting
            return
        if final is None:
            if delete_document(path):
                prune_empty_directories([path.parent], self._project_dir, report)
            return
        write_if_changed(path, final)
