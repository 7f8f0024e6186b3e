"""Subprocess and filesystem adapters."""

from cybex.adapters.shell.command import CommandResult, CommandRunner
from cybex.adapters.shell.filesystem import LocalFilesystem, PrivilegedFilesystem

__all__ = [
    "CommandResult",
    "CommandRunner",
    "LocalFilesystem",
    "PrivilegedFilesystem",
]
