"""Shared error types for jobworker.

Goal: state persistence failures surface to whoever called start/stop.
Job registration never raises; task failures never leave the worker.
"""


class JobWorkerError(Exception):
    """Base error for jobworker."""


class FilesystemError(JobWorkerError):
    """State directory or file could not be created, read or written."""


class ParseError(JobWorkerError):
    """Persisted state is not valid JSON, or the in-memory state can't be serialized."""
