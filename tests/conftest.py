"""
Shared test fixtures and configuration.

Every test runs against a throwaway home, system root and assets
directory under ``tmp_path`` and against the fakes in
``cybex.adapters.mock``; nothing touches the real system.
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from cybex.adapters.mock import FakeRunner, fake_registry
from cybex.adapters.registry import AdapterRegistry
from cybex.core.context import InstallContext
from cybex.core.engine.reporter import RecordingReporter
from cybex.core.models.settings import Settings


class SteppingClock:
    """Deterministic clock; ``advance`` moves it forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock(datetime(2025, 3, 14, 9, 26, 53))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted entirely in a temporary directory."""
    home = tmp_path / "home"
    system_root = tmp_path / "root"
    assets = tmp_path / "assets"
    for path in (home, system_root, assets):
        path.mkdir()
    return Settings(home=home, system_root=system_root, assets_dir=assets)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def registry(settings: Settings, runner: FakeRunner) -> AdapterRegistry:
    return fake_registry(settings, runner=runner)


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def ctx(settings, registry, reporter, clock) -> InstallContext:
    context = InstallContext(settings=settings, adapters=registry, reporter=reporter, clock=clock)
    context.component = "test"
    return context


@pytest.fixture
def assets(settings: Settings) -> Path:
    """A complete bundled-assets tree."""
    root = settings.assets_dir
    files = {
        "screensaver/screensaver.txt": "  C Y B E X\n",
        "starship/starship.toml": 'format = "$all"\n',
        "plymouth/themes/cybex/cybex.plymouth": "[Plymouth Theme]\nName=Cybex\n",
        "plymouth/themes/cybex/cybex.script": "Window.SetBackgroundTopColor(0, 0, 0);\n",
        "plymouth/themes/cybex/.DS_Store": "junk",
        "keyd/macos_shortcuts.conf": "[ids]\n*\n\n[main]\nleftmeta = layer(meta_mac)\n",
        "kitty/kitty.conf": "map super+c copy_to_clipboard\n",
        "hyprland/keybinds.conf": "bind = SUPER, Return, exec, kitty\n",
        "hyprland/execs.conf": "exec-once = waybar\n",
        "scripts/auto-tile": "#!/bin/sh\nsocat - UNIX-CONNECT:/tmp/hypr.sock\n",
    }
    for name in settings.hyprland_apps:
        files[f"apps/{name}"] = f"#!/bin/sh\n# {name}\n"
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root
