"""Configuration module for jobworker."""

from jobworker.config.schema import WorkerConfig

__all__ = ["WorkerConfig"]
