"""Errors raised by the versioning engine."""


class VersioningError(Exception):
    """Base class for all versioning failures surfaced to callers of save."""


class ValidationFailure(VersioningError):
    """The record failed its own integrity rules; nothing was written."""


class PersistenceFailure(VersioningError):
    """The storage transaction failed and was rolled back."""


class ConstraintViolation(PersistenceFailure):
    """The database rejected a write on an integrity constraint."""


class SequencingInconsistency(VersioningError):
    """A computed version number collides with one already stored for the record."""
