"""Exception hierarchy for contentsync."""


class ContentSyncError(Exception):
    """Base exception."""


class BundleNotFoundError(ContentSyncError, FileNotFoundError):
    """Bundle root or one of its listed files does not exist."""


class BundleReadError(ContentSyncError, OSError):
    """A bundle file exists but could not be read."""


class BundleParseError(ContentSyncError, ValueError):
    """The metadata document is not valid JSON."""


class DigestSetParseError(ContentSyncError, ValueError):
    """A persisted digest set is malformed or does not match its schema."""
