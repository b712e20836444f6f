"""Exceptions raised while assembling a sharded test run."""


class ShardingError(Exception):
    """Base class for errors raised by this package."""


class ManifestError(ShardingError):
    """The instrumentation manifest could not be used to configure a run."""


class MissingManifestField(ManifestError):
    """A required identifier was not found after scanning the whole manifest."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class ManifestUnreadable(ManifestError):
    """The manifest entry could not be located or decoded."""
