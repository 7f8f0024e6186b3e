"""Observability — logging setup."""

from cybex.core.observability.logging_config import resolve_level, setup_logging

__all__ = ["resolve_level", "setup_logging"]
