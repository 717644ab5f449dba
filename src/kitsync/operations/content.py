"""Copy declared content files into every active profile and undo it later.

The manifest's packages section is the exact record of what this module
wrote: after an apply pass it lists precisely the files planned for that run,
and anything it used to list is removed from disk.
"""

import logging
import shutil
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePosixPath, PureWindowsPath

from kitsync.errors import (
    ConflictError,
    DestinationConflict,
    NotFoundError,
    ParseError,
    ValidationError,
)
from kitsync.io.directories import prune_empty_directories
from kitsync.io.ignore_hints import collect_sections, sync_ignore_file
from kitsync.io.manifest_store import ManifestStore
from kitsync.models.content import ContentItem, PlannedFile, PrefixPolicy
from kitsync.models.manifest import PackageRecord
from kitsync.models.result import Report
from kitsync.profiles.registry import ProfileRegistry

logger = logging.getLogger(__name__)


def resolve_prefix(item: ContentItem, policy: PrefixPolicy) -> str | None:
    """Return the directory prefix for item, or None when it is not prefixed.

    Example:
        >>> item = ContentItem(Path("a.md"), "Acme.Skills", Path("."), use_prefix=True)
        >>> resolve_prefix(item, PrefixPolicy())
        'Acme.Skills'
    """
    if item.explicit_prefix:
        return item.explicit_prefix

    use_prefix = item.use_prefix if item.use_prefix is not None else policy.prefix_all
    if not use_prefix:
        return None

    if policy.default_prefix:
        return policy.default_prefix
    if item.suggested_prefix:
        return item.suggested_prefix
    return item.package_id


def _check_prefix(prefix: str, item: ContentItem) -> None:
    path = PurePosixPath(prefix.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts or PureWindowsPath(prefix).drive:
        raise ValidationError(
            f"Prefix '{prefix}' of '{item.source_path}' must stay inside the content root"
        )


def relative_destination(item: ContentItem, policy: PrefixPolicy, report: Report) -> Path:
    """Destination of item relative to a profile's content root.

    Raises:
        ValidationError: If the resolved prefix is absolute or contains '..'
    """
    assert item.source_root is not None
    prefix = resolve_prefix(item, policy)
    if prefix is not None:
        _check_prefix(prefix, item)

    try:
        relative = item.source_path.resolve().relative_to(item.source_root.resolve())
    except ValueError:
        relative = Path(item.source_path.name)
        report.warn(
            f"Source file '{item.source_path}' is not under '{item.source_root}', "
            f"using file name only"
        )

    if prefix is None:
        return relative
    return Path(prefix) / relative


def _validate_item(item: ContentItem) -> None:
    if not item.package_id:
        raise ValidationError(f"Content item '{item.source_path}' has no package id")
    if item.source_root is None:
        raise ValidationError(f"Content item '{item.source_path}' has no source root")
    if not item.source_path.is_file():
        raise NotFoundError(item.source_path, what="Source file")


class ContentReconciler:
    """Plans, applies and undoes content copies for a project."""

    def __init__(
        self,
        project_dir: Path,
        registry: ProfileRegistry,
        store: ManifestStore,
        prefix_policy: PrefixPolicy | None = None,
    ) -> None:
        self._project_dir = project_dir
        self._registry = registry
        self._store = store
        self._policy = prefix_policy if prefix_policy is not None else PrefixPolicy()

    def plan(self, items: Sequence[ContentItem], report: Report) -> dict[str, list[PlannedFile]]:
        """Resolve items to destinations, grouped by package id.

        Package ids are matched case-insensitively; the first spelling seen is
        kept. Invalid, disabled and missing items are skipped with a warning.
        """
        planned: dict[str, list[PlannedFile]] = {}
        spellings: dict[str, str] = {}

        for item in items:
            try:
                _validate_item(item)
            except (ValidationError, NotFoundError) as e:
                report.warn(f"{e}, skipping")
                continue

            assert item.package_id is not None
            if not item.enabled:
                report.warn(f"Package '{item.package_id}' is disabled, skipping {item.source_path}")
                continue

            try:
                relative = relative_destination(item, self._policy, report)
            except ValidationError as e:
                report.warn(f"{e}, skipping")
                continue

            package_id = spellings.setdefault(item.package_id.casefold(), item.package_id)
            files = planned.setdefault(package_id, [])
            if any(f.relative_path == relative for f in files):
                continue
            files.append(PlannedFile(package_id, item.source_path, relative))

        return planned

    def find_conflicts(
        self,
        planned: dict[str, list[PlannedFile]],
        profile_ids: Sequence[str],
    ) -> list[DestinationConflict]:
        """Collect every destination claimed by more than one package.

        Destinations are compared case-insensitively. Side-effect free.
        """
        owners: dict[str, str] = {}
        conflicts: list[DestinationConflict] = []

        for profile_id in profile_ids:
            content_root = self._registry.get(profile_id).content_root_path(self._project_dir)
            for package_id, files in planned.items():
                for planned_file in files:
                    destination = content_root / planned_file.relative_path
                    key = str(destination).casefold()
                    owner = owners.get(key)
                    if owner is None:
                        owners[key] = package_id
                    elif owner.casefold() != package_id.casefold():
                        conflicts.append(
                            DestinationConflict(profile_id, destination, owner, package_id)
                        )
        return conflicts

    def apply(
        self,
        items: Sequence[ContentItem],
        profile_ids: Sequence[str],
        report: Report,
    ) -> None:
        """Make the active profiles' content roots match items.

        Raises:
            ConflictError: If two packages target one destination; nothing is
                written or removed in that case
        """
        manifest = self._store.load(report)
        planned = self.plan(items, report)

        conflicts = self.find_conflicts(planned, profile_ids)
        if conflicts:
            raise ConflictError(conflicts)

        written: dict[str, dict[str, list[Path]]] = {}
        for profile_id in profile_ids:
            content_root = self._registry.get(profile_id).content_root_path(self._project_dir)
            for package_id, files in planned.items():
                destinations = written.setdefault(package_id, {}).setdefault(profile_id, [])
                destinations.extend(content_root / f.relative_path for f in files)

        planned_paths = {
            str(path)
            for by_profile in written.values()
            for paths in by_profile.values()
            for path in paths
        }
        recorded = {
            path for record in manifest.packages.values() for path in record.all_files()
        }
        stale = sorted(recorded - planned_paths)
        current = {package_id.casefold() for package_id in planned}
        for package_id in manifest.packages:
            if package_id.casefold() not in current:
                logger.info("Retiring package '%s'", package_id)
        touched_dirs = self._remove_files(stale, report)

        for package_id, by_profile in written.items():
            sources = {f.relative_path: f.source_path for f in planned[package_id]}
            for profile_id, destinations in by_profile.items():
                content_root = self._registry.get(profile_id).content_root_path(self._project_dir)
                for destination in destinations:
                    source = sources[destination.relative_to(content_root)]
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(source, destination)
                logger.info(
                    "Copied %d file(s) from %s to %s (%s)",
                    len(destinations),
                    package_id,
                    content_root,
                    profile_id,
                )

        packages = {
            package_id: PackageRecord(
                files={
                    profile_id: sorted({str(p) for p in paths})
                    for profile_id, paths in by_profile.items()
                    if paths
                }
            )
            for package_id, by_profile in written.items()
        }
        packages = {package_id: record for package_id, record in packages.items() if record.files}
        # Record copies before anything else can fail so clean can always undo them
        self._store.save(manifest.with_packages(packages))

        files_by_package = {
            package_id: [path for paths in by_profile.values() for path in paths]
            for package_id, by_profile in written.items()
        }
        sections = collect_sections(files_by_package)
        for directory in sorted(touched_dirs | set(sections)):
            self._sync_ignore(directory, sections.get(directory, {}), report)
        prune_empty_directories(touched_dirs, self._project_dir, report)

    def clean(self, report: Report) -> None:
        """Remove every file recorded for every package, then forget them.

        Legacy per-package views are honored for packages the unified manifest
        does not know. The manifest's config section is left intact.
        """
        manifest = self._store.load(report)
        paths = {path for record in manifest.packages.values() for path in record.all_files()}

        known = {package_id.casefold() for package_id in manifest.packages}
        for package_id, files in self._store.legacy_packages(report).items():
            if package_id.casefold() in known:
                continue
            logger.info("Cleaning package '%s' from legacy manifest", package_id)
            paths.update(files)

        touched_dirs = self._remove_files(sorted(paths), report)
        for directory in sorted(touched_dirs):
            self._sync_ignore(directory, {}, report)
        prune_empty_directories(touched_dirs, self._project_dir, report)

        self._store.save(manifest.with_packages({}))

    def _absolute(self, recorded: str) -> Path:
        path = Path(recorded)
        if path.is_absolute():
            return path
        return self._project_dir / path

    def _remove_files(self, recorded: Iterable[str], report: Report) -> set[Path]:
        """Delete recorded files. Missing files are fine; OS errors are warnings."""
        touched: set[Path] = set()
        for entry in recorded:
            path = self._absolute(entry)
            touched.add(path.parent)
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                report.warn(f"Failed to delete {path}: {e}")
                continue
            logger.debug("Deleted %s", path)
        return touched

    def _sync_ignore(self, directory: Path, sections: dict[str, set[str]], report: Report) -> None:
        try:
            sync_ignore_file(directory, sections)
        except ParseError as e:
            report.warn(f"{e}; leaving ignore hints unchanged")
        except OSError as e:
            report.warn(f"Failed to update ignore hints in {directory}: {e}")
