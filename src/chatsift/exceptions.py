"""Exception hierarchy for chatsift."""


class ChatsiftError(Exception):
    """Base exception for all chatsift errors."""


class ExportFormatError(ChatsiftError):
    """Export data does not match the shape an adapter understands."""


class UnknownPlatformError(ExportFormatError):
    """No adapter recognized the export with enough confidence."""


class ExportLoadError(ChatsiftError):
    """Export file could not be read or decoded as JSON."""


class ConfigurationError(ChatsiftError):
    """Invalid deduplication or project-detection options."""
