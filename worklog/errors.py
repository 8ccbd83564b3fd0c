from __future__ import annotations


class WorklogError(Exception):
    """Base class for errors scoped to a single worklog operation."""


class ValidationError(WorklogError, ValueError):
    """User input is missing a required field."""


class StorageError(WorklogError, RuntimeError):
    """The local store could not be read or written."""


class ConfigurationError(WorklogError, ValueError):
    """A summary provider is missing its credential or is unknown."""


class UpstreamError(WorklogError, RuntimeError):
    """The text-generation provider failed or returned no usable text."""
