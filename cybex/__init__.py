"""cybex — idempotent post-install setup for Illogical Impulse desktops."""

__version__ = "0.1.0"
