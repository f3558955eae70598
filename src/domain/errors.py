from __future__ import annotations


class MediaError(Exception):
    """Base class for every error raised by the version engine."""


class DecodeError(MediaError, ValueError):
    """Source bytes are not a recognized or intact image."""


class GeometryError(MediaError, ValueError):
    """Requested output dimensions cannot produce a sampling rectangle."""


class StorageError(MediaError, RuntimeError):
    """Loading or saving bytes or the image record failed.

    When raised after a new version was appended, the in-memory image and the
    backend may have diverged; nothing is rolled back.
    """


class ImageNotFoundError(MediaError, LookupError):
    pass
