"""Service manager adapters."""

from cybex.adapters.services.systemd import SystemdAdapter

__all__ = ["SystemdAdapter"]
