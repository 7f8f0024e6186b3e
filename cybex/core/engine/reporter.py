"""
Reporter — where user-facing status lines go.

The engine and components only know this interface. The CLI plugs in a
click-based console reporter; tests use RecordingReporter.

    step     ▶  something is about to change
    success  ✓  it changed
    skip     ⊙  already in the desired state
    warn     ⚠  worth knowing, not fatal
    error    ✗  a step failed or was skipped for a missing input
"""

from __future__ import annotations


class Reporter:
    """Base reporter: drops everything."""

    def header(self, title: str) -> None:
        pass

    def step(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def skip(self, message: str) -> None:
        pass

    def warn(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def detail(self, message: str) -> None:
        pass


NullReporter = Reporter


class RecordingReporter(Reporter):
    """Keeps every line as ``(kind, message)``."""

    def __init__(self) -> None:
        self.lines: list[tuple[str, str]] = []

    def header(self, title: str) -> None:
        self.lines.append(("header", title))

    def step(self, message: str) -> None:
        self.lines.append(("step", message))

    def success(self, message: str) -> None:
        self.lines.append(("success", message))

    def skip(self, message: str) -> None:
        self.lines.append(("skip", message))

    def warn(self, message: str) -> None:
        self.lines.append(("warn", message))

    def error(self, message: str) -> None:
        self.lines.append(("error", message))

    def detail(self, message: str) -> None:
        self.lines.append(("detail", message))

    def messages(self, kind: str) -> list[str]:
        return [message for k, message in self.lines if k == kind]
