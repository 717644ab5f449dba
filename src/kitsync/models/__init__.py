"""Data models for kitsync.

Import from submodules:
- content: ContentItem, PrefixPolicy, PlannedFile, ConfigFragment, FragmentSource
- manifest: TrackedManifest, PackageRecord, ConfigRecord
- profile: Profile, EntryTransform
- result: OperationResult, Report
"""
