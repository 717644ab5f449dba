"""Public API for kitsync.

The four reconciliation operations plus whole-project helpers. Every
operation returns an OperationResult; unexpected exceptions are caught here
and turned into a failed result instead of propagating.

Example usage:
    from pathlib import Path
    from kitsync.api import clean_project, sync_project
    from kitsync.io.project_config import load_project_config

    project_dir = Path("/path/to/repo")
    results = sync_project(project_dir, load_project_config(project_dir))
    if not all(result.success for result in results):
        ...

    # Later, undo everything kitsync wrote
    clean_project(project_dir, load_project_config(project_dir))
"""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from kitsync.errors import ConflictError
from kitsync.io.manifest_store import FilesystemManifestStore, ManifestStore
from kitsync.io.project_config import ProjectConfig, expand_content_items
from kitsync.models.content import ContentItem, FragmentSource, PrefixPolicy
from kitsync.models.result import OperationResult, Report
from kitsync.operations.config_merge import ConfigFragmentMerger
from kitsync.operations.content import ContentReconciler
from kitsync.profiles.registry import ProfileRegistry, load_builtin_registry
from kitsync.profiles.resolver import resolve_profiles

__all__ = [
    "apply_config",
    "apply_content",
    "build_registry",
    "clean_config",
    "clean_content",
    "clean_project",
    "fragment_sources",
    "resolve_project_profiles",
    "sync_project",
]

logger = logging.getLogger(__name__)


def _run(operation: str, body: Callable[[Report], None]) -> OperationResult:
    report = Report(operation=operation, logger=logger)
    try:
        body(report)
    except ConflictError as e:
        for conflict in e.conflicts:
            report.error(f"Destination conflict: {conflict.describe()}")
    except Exception as e:
        logger.debug("%s failed", operation, exc_info=True)
        report.error(f"{operation} failed: {e}")
    return report.to_result()


def apply_content(
    project_dir: Path,
    items: Sequence[ContentItem],
    profile_ids: Sequence[str],
    *,
    prefix_policy: PrefixPolicy | None = None,
    registry: ProfileRegistry | None = None,
    store: ManifestStore | None = None,
) -> OperationResult:
    """Copy items into every profile's content root and retire stale files."""
    reconciler = ContentReconciler(
        project_dir,
        registry if registry is not None else load_builtin_registry(),
        store if store is not None else FilesystemManifestStore(project_dir),
        prefix_policy,
    )
    return _run("apply-content", lambda report: reconciler.apply(items, profile_ids, report))


def apply_config(
    project_dir: Path,
    fragments: Sequence[FragmentSource],
    profile_ids: Sequence[str],
    *,
    registry: ProfileRegistry | None = None,
    store: ManifestStore | None = None,
) -> OperationResult:
    """Merge fragment entries into every profile's configuration document."""
    merger = ConfigFragmentMerger(
        project_dir,
        registry if registry is not None else load_builtin_registry(),
        store if store is not None else FilesystemManifestStore(project_dir),
    )
    return _run("apply-config", lambda report: merger.apply(fragments, profile_ids, report))


def clean_content(
    project_dir: Path,
    *,
    registry: ProfileRegistry | None = None,
    store: ManifestStore | None = None,
) -> OperationResult:
    """Delete every content file recorded in the manifest."""
    reconciler = ContentReconciler(
        project_dir,
        registry if registry is not None else load_builtin_registry(),
        store if store is not None else FilesystemManifestStore(project_dir),
    )
    return _run("clean-content", reconciler.clean)


def clean_config(
    project_dir: Path,
    *,
    registry: ProfileRegistry | None = None,
    store: ManifestStore | None = None,
) -> OperationResult:
    """Remove every managed configuration entry recorded in the manifest."""
    merger = ConfigFragmentMerger(
        project_dir,
        registry if registry is not None else load_builtin_registry(),
        store if store is not None else FilesystemManifestStore(project_dir),
    )
    return _run("clean-config", merger.clean)


def build_registry(config: ProjectConfig) -> ProfileRegistry:
    """Built-in profiles plus the project's own additions and overrides."""
    return load_builtin_registry().with_profiles(config.extra_profiles)


def resolve_project_profiles(
    project_dir: Path, config: ProjectConfig, registry: ProfileRegistry
) -> list[str]:
    return resolve_profiles(
        project_dir,
        registry,
        explicit=config.profiles.targets,
        auto_detect=config.profiles.auto_detect,
        defaults=config.profiles.defaults,
    )


def fragment_sources(project_dir: Path, config: ProjectConfig) -> list[FragmentSource]:
    """Fragment documents of every enabled package, in declaration order."""
    return [
        FragmentSource(path=project_dir / package.fragment, package_id=package.id)
        for package in config.packages
        if package.fragment is not None and package.enabled
    ]


def sync_project(project_dir: Path, config: ProjectConfig) -> list[OperationResult]:
    """Run a full apply pass: resolve profiles once, then content, then config.

    A failed content phase (for example a destination conflict) ends the pass;
    configuration documents are not touched in that case.
    """
    project_dir = project_dir.resolve()
    registry = build_registry(config)
    store = FilesystemManifestStore(project_dir)

    profile_ids = resolve_project_profiles(project_dir, config, registry)
    logger.info("Resolved profiles: %s", ", ".join(profile_ids) or "(none)")

    content = apply_content(
        project_dir,
        expand_content_items(project_dir, config),
        profile_ids,
        prefix_policy=config.content,
        registry=registry,
        store=store,
    )
    if not content.success:
        logger.info("Content phase failed, skipping config merge")
        return [content]

    return [
        content,
        apply_config(
            project_dir,
            fragment_sources(project_dir, config),
            profile_ids,
            registry=registry,
            store=store,
        ),
    ]


def clean_project(project_dir: Path, config: ProjectConfig) -> list[OperationResult]:
    """Undo everything recorded in the manifest. Profiles are not re-resolved."""
    project_dir = project_dir.resolve()
    registry = build_registry(config)
    store = FilesystemManifestStore(project_dir)
    return [
        clean_content(project_dir, registry=registry, store=store),
        clean_config(project_dir, registry=registry, store=store),
    ]
