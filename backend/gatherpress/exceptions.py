"""Errors raised by the RSVP storage and cache collaborators."""


class StorageError(Exception):
    """The response store could not be read or written."""


class CacheError(Exception):
    """The aggregate cache is unavailable. Callers fall back to the store."""
