"""Errors raised while building entity reference trees."""


class TreeBuildError(Exception):
    """Base class for fatal tree build failures."""


class BundleNotFound(TreeBuildError):
    """The bundle registry has no bundle with the requested id."""

    def __init__(self, bundle_id: str):
        self.bundle_id = bundle_id
        super().__init__(f"Bundle not found: {bundle_id}")


class EntityTypeNotFound(TreeBuildError):
    """No entity storage is configured for the requested entity type."""

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        super().__init__(f"No storage for entity type: {entity_type}")


class SiteDocumentError(TreeBuildError):
    """A site document could not be read or validated."""


class ConfigError(TreeBuildError):
    """The settings file or environment holds an unreadable or invalid value."""
