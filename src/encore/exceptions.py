class EncoreError(Exception):
    """Base exception for encore."""


class LibraryError(EncoreError):
    """Raised when a song folder or file cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read songs from {path}: {reason}")


class SetlistFormatError(EncoreError):
    """Raised when an exported setlist document cannot be decoded."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid setlist in {source}: {reason}")


class UnsupportedSourceError(EncoreError):
    """Raised when no song source matches the given path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"No song source found for path: {path}")
