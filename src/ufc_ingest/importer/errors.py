"""Exceptions raised by the import pipeline."""


class IngestError(Exception):
    """Base class for import errors."""


class StructuralError(IngestError):
    """Extract is missing, unreadable, or has no usable header."""


class PersistenceError(IngestError):
    """Store rejected a single record write."""


class StoreConnectionError(IngestError):
    """Store could not be reached before the run started."""
