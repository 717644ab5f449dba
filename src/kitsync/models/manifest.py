"""Models for .kitsync/manifest.json, the record of everything kitsync wrote."""

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_VERSION = 2


class PackageRecord(BaseModel):
    """Files written for one package, keyed by profile id."""

    model_config = ConfigDict(frozen=True)

    files: dict[str, list[str]] = Field(default_factory=dict)

    def all_files(self) -> list[str]:
        """Union of every profile's files, sorted."""
        return sorted({path for paths in self.files.values() for path in paths})


class ConfigRecord(BaseModel):
    """Managed entry names inside one profile's configuration document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Relative to the project directory
    path: str
    managed_keys: list[str] = Field(default_factory=list, alias="managedKeys")
    # Root key the entries were written under; None in records from older versions
    root_key: str | None = Field(default=None, alias="rootKey")


class TrackedManifest(BaseModel):
    """The single source of truth for undo.

    Instances are immutable; the with_/without_ helpers return updated copies.
    """

    model_config = ConfigDict(frozen=True)

    version: int = MANIFEST_VERSION
    packages: dict[str, PackageRecord] = Field(default_factory=dict)
    config: dict[str, ConfigRecord] = Field(default_factory=dict)

    @staticmethod
    def empty() -> "TrackedManifest":
        return TrackedManifest()

    def is_empty(self) -> bool:
        return not self.packages and not self.config

    def with_packages(self, packages: dict[str, PackageRecord]) -> "TrackedManifest":
        return self.model_copy(update={"packages": dict(packages)})

    def with_config(self, profile_id: str, record: ConfigRecord) -> "TrackedManifest":
        return self.model_copy(update={"config": {**self.config, profile_id: record}})

    def without_config(self, profile_id: str) -> "TrackedManifest":
        remaining = {k: v for k, v in self.config.items() if k != profile_id}
        return self.model_copy(update={"config": remaining})

    def managed_keys(self, profile_id: str) -> set[str]:
        record = self.config.get(profile_id)
        if record is None:
            return set()
        return set(record.managed_keys)

    def to_dict(self) -> dict[str, object]:
        """Serialize in the on-disk shape (camelCase keys, sorted lists)."""
        return {
            "version": self.version,
            "packages": {
                package_id: {
                    "files": {
                        profile_id: sorted(set(paths))
                        for profile_id, paths in record.files.items()
                    }
                }
                for package_id, record in self.packages.items()
            },
            "config": {
                profile_id: _config_record_dict(record)
                for profile_id, record in self.config.items()
            },
        }


def _config_record_dict(record: ConfigRecord) -> dict[str, object]:
    result: dict[str, object] = {
        "path": record.path,
        "managedKeys": sorted(set(record.managed_keys)),
    }
    if record.root_key is not None:
        result["rootKey"] = record.root_key
    return result
