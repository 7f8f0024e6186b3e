"""
Settings model — where things live and what gets installed.

Loaded from cybex.yml (see config/loader.py). Every path the components
touch is derived from here, so tests can point ``home`` and
``system_root`` at a temporary directory.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class PackageSettings(BaseModel):
    """Package lists for the packages and auto-tile components."""

    pacman: list[str] = Field(
        default_factory=lambda: ["npm", "nano", "micro", "nautilus", "uwsm", "docker"]
    )
    aur: list[str] = Field(default_factory=lambda: ["1password-beta", "lazydocker"])
    # removed by `uninstall packages`; everything else is left in place
    uninstall: list[str] = Field(default_factory=lambda: ["npm", "nano"])
    auto_tile_deps: list[str] = Field(default_factory=lambda: ["jq", "socat"])


class PreflightSettings(BaseModel):
    """Thresholds for the run-wide preflight checks."""

    connectivity_hosts: list[str] = Field(default_factory=lambda: ["8.8.8.8", "1.1.1.1"])
    ping_timeout: int = 3
    min_root_free_mb: int = 1024
    min_boot_free_mb: int = 100
    allow_root: bool = False


class KernelSettings(BaseModel):
    """Mainline kernel and the Chaotic-AUR repository that ships it."""

    package: str = "linux-mainline"
    repo: str = "chaotic-aur"
    mirrorlist: str = "/etc/pacman.d/chaotic-mirrorlist"
    key_id: str = "3056513887B78AEB"
    keyserver: str = "keyserver.ubuntu.com"
    mirrorlist_url: str = (
        "https://cdn-mirror.chaotic.cx/chaotic-aur/chaotic-mirrorlist.pkg.tar.zst"
    )
    keyring_url: str = (
        "https://cdn-mirror.chaotic.cx/chaotic-aur/chaotic-keyring.pkg.tar.zst"
    )
    grub_entry: str = "Advanced options for Arch Linux>Arch Linux, with Linux linux-mainline"


class PlymouthSettings(BaseModel):
    theme: str = "cybex"
    fallback_theme: str = "spinner"


class Settings(BaseModel):
    """Root configuration for a setup run."""

    assets_dir: Path = Field(default_factory=lambda: Path.cwd() / "config")
    home: Path = Field(default_factory=Path.home)
    system_root: Path = Path("/")

    npm_prefix: Path | None = None      # default: <home>/.local
    min_node_major: int = 14

    packages: PackageSettings = Field(default_factory=PackageSettings)
    preflight: PreflightSettings = Field(default_factory=PreflightSettings)
    kernel: KernelSettings = Field(default_factory=KernelSettings)
    plymouth: PlymouthSettings = Field(default_factory=PlymouthSettings)

    hyprland_apps: list[str] = Field(
        default_factory=lambda: [
            "cybex-cmd-screenshot",
            "cybex-cmd-terminal-cwd",
            "cybex-launch-browser",
            "cybex-launch-editor",
            "cybex-launch-or-focus",
            "cybex-launch-or-focus-webapp",
            "cybex-launch-webapp",
        ]
    )

    def home_path(self, *parts: str) -> Path:
        """A path under the user's home directory."""
        return self.home.joinpath(*parts)

    def system_path(self, absolute: str) -> Path:
        """Map an absolute system path (``/etc/...``) under ``system_root``."""
        return self.system_root / absolute.lstrip("/")

    def asset(self, *parts: str) -> Path:
        """A path inside the bundled assets directory."""
        return self.assets_dir.joinpath(*parts)

    @property
    def local_prefix(self) -> Path:
        return self.npm_prefix or self.home_path(".local")

    @property
    def local_bin(self) -> Path:
        return self.local_prefix / "bin"

    @property
    def state_dir(self) -> Path:
        """Per-user state directory (audit ledger)."""
        return self.home_path(".local", "state", "cybex")
