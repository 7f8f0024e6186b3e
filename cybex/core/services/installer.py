"""
Component installer and uninstaller — the ensure/restore primitives.

Every helper probes before it mutates, so calling it again on a system
that is already in the desired state issues no mutating command.

    install_target     absent → copy;  current → skip;  stale → backup + overwrite
    uninstall_target   latest backup → restore;  else artifact → delete;  else skip
    ensure_packages    install only what the package query says is absent
    ensure_service     enable when not enabled, start when not active
    stop_and_disable   stop when active, disable when enabled
"""

from __future__ import annotations

import logging
import stat
from collections.abc import Iterable
from pathlib import Path

from cybex.adapters.base import PackageManager, ServiceManager
from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.context import InstallContext
from cybex.core.models.target import InstallTarget, TargetState
from cybex.core.services.probe import probe_target
from cybex.core.services.shell_profile import carry_blocks

logger = logging.getLogger(__name__)


# ── Files ──────────────────────────────────────────────────────


def _file_mode(target: InstallTarget, src: Path | None) -> int | None:
    if target.mode is not None:
        return target.mode
    if src is not None:
        return stat.S_IMODE(src.stat().st_mode)
    return None


def _write_file(
    data: bytes,
    dest: Path,
    mode: int | None,
    target: InstallTarget,
    fs: LocalFilesystem,
) -> None:
    if target.preserve_managed_blocks and fs.exists(dest) and not fs.is_dir(dest):
        merged = carry_blocks(data.decode("utf-8", errors="replace"), fs.read_text(dest))
        data = merged.encode("utf-8")
    fs.write_bytes(dest, data, mode=mode)


def _copy_target(target: InstallTarget, fs: LocalFilesystem) -> list[Path]:
    """Write every source file to the destination; returns what was written."""
    dest = target.destination
    if target.is_directory:
        assert target.source is not None
        if fs.exists(dest) and not fs.is_dir(dest):
            fs.remove(dest)
        fs.make_dir(dest)
        written = []
        for rel in fs.iter_files(target.source, exclude_hidden=target.exclude_hidden):
            src = target.source / rel
            _write_file(fs.read_bytes(src), dest / rel, _file_mode(target, src), target, fs)
            written.append(rel)
        return written

    if fs.is_dir(dest):
        fs.remove(dest)
    _write_file(target.source_bytes(), dest, _file_mode(target, target.source), target, fs)
    return [Path(dest.name)]


def install_target(target: InstallTarget, ctx: InstallContext) -> TargetState | None:
    """Bring ``target`` up to date.

    Returns:
        The state found before installing, or None when the source
        asset is missing (reported, not fatal).
    """
    step = f"install {target.name}"
    if not target.source_available():
        assert target.source is not None
        ctx.missing(step, target.source)
        return None

    fs = ctx.fs_for(target)
    state = probe_target(target, fs)

    if state is TargetState.CURRENT:
        ctx.skip(step, "already up to date")
        return state

    if state is TargetState.STALE:
        try:
            record = ctx.backups(target.privileged).backup(target.destination)
        except OSError as e:
            ctx.fail(f"backup {target.name}", str(e))
        if record is not None:
            ctx.ok(f"backup {target.name}", str(record.backup_path))

    ctx.step(f"Installing {target.name} to {target.destination}")
    try:
        written = _copy_target(target, fs)
    except OSError as e:
        ctx.fail(step, str(e))

    if target.is_directory:
        for rel in written:
            ctx.reporter.detail(str(rel))
    ctx.ok(step, str(target.destination), state=state.value, files=len(written))
    return state


def uninstall_target(target: InstallTarget, ctx: InstallContext) -> str:
    """Undo ``target``: restore its newest backup, else delete it.

    Returns:
        ``"restored"``, ``"removed"`` or ``"absent"``.
    """
    fs = ctx.fs_for(target)
    backups = ctx.backups(target.privileged)
    dest = target.destination

    latest = backups.find_latest_backup(dest)
    try:
        if latest is not None:
            ctx.step(f"Restoring {target.name} from {latest.backup_path}")
            backups.restore(latest)
            ctx.ok(f"restore {target.name}", str(latest.backup_path))
            return "restored"
        if fs.exists(dest):
            ctx.step(f"Removing {dest}")
            fs.remove(dest)
            ctx.ok(f"remove {target.name}", str(dest))
            return "removed"
    except OSError as e:
        ctx.fail(f"uninstall {target.name}", str(e))

    ctx.skip(f"remove {target.name}", "not installed")
    return "absent"


# ── Packages ───────────────────────────────────────────────────


def ensure_packages(pm: PackageManager, packages: Iterable[str], ctx: InstallContext) -> list[str]:
    """Install the packages ``pm`` reports absent. Returns what was installed."""
    missing = []
    for package in packages:
        if pm.is_installed(package):
            ctx.skip(f"install {package}", "already installed")
        else:
            missing.append(package)
    if not missing:
        return []

    ctx.step(f"Installing {' '.join(missing)} ({pm.name})")
    ctx.check(pm.install(*missing), f"install {' '.join(missing)}")
    for package in missing:
        ctx.ok(f"install {package}", pm.name)
    return missing


def remove_packages(pm: PackageManager, packages: Iterable[str], ctx: InstallContext) -> list[str]:
    """Remove the packages ``pm`` reports present. Returns what was removed."""
    present = []
    for package in packages:
        if pm.is_installed(package):
            present.append(package)
        else:
            ctx.skip(f"remove {package}", "not installed")
    if not present:
        return []

    ctx.step(f"Removing {' '.join(present)} ({pm.name})")
    ctx.check(pm.remove(*present), f"remove {' '.join(present)}")
    for package in present:
        ctx.ok(f"remove {package}", pm.name)
    return present


# ── Services ───────────────────────────────────────────────────


def ensure_service(services: ServiceManager, service: str, ctx: InstallContext) -> bool:
    """Enable and start ``service``. Returns True if anything changed."""
    changed = False
    if services.is_enabled(service):
        ctx.skip(f"enable {service}", "already enabled")
    else:
        ctx.step(f"Enabling {service}")
        ctx.check(services.enable(service), f"enable {service}")
        ctx.ok(f"enable {service}")
        changed = True

    if services.is_active(service):
        ctx.skip(f"start {service}", "already running")
    else:
        ctx.step(f"Starting {service}")
        ctx.check(services.start(service), f"start {service}")
        ctx.ok(f"start {service}")
        changed = True
    return changed


def stop_and_disable(services: ServiceManager, service: str, ctx: InstallContext) -> None:
    """Stop then disable ``service``, each only when needed."""
    if services.is_active(service):
        ctx.step(f"Stopping {service}")
        ctx.check(services.stop(service), f"stop {service}")
        ctx.ok(f"stop {service}")
    else:
        ctx.skip(f"stop {service}", "not running")

    if services.is_enabled(service):
        ctx.step(f"Disabling {service}")
        ctx.check(services.disable(service), f"disable {service}")
        ctx.ok(f"disable {service}")
    else:
        ctx.skip(f"disable {service}", "not enabled")
