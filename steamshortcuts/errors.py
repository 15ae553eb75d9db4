"""Exceptions raised by the KeyValues codecs and the backup manager."""


class FormatError(ValueError):
    """Malformed KeyValues data (unknown tag, truncated stream, bad structure)."""


class IdentityResolutionError(LookupError):
    """The canonical shortcuts.vdf for a Steam user could not be determined."""
