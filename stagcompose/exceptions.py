"""Exception classes for the composition engine."""


class CompositionError(Exception):
    """Base exception for composition errors."""

    pass


class ImportDecodeError(CompositionError):
    """Raised when an imported file cannot be decoded as an image or SVG."""

    pass


class UnsupportedExportFormatError(CompositionError):
    """Raised when an export is requested in an unknown format."""

    pass


class SessionNotFoundError(CompositionError):
    """Raised when a session ID does not resolve to a live session."""

    pass
