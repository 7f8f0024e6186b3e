"""
System packages — pacman and AUR packages plus Docker setup.
"""

from __future__ import annotations

import getpass
import logging

from cybex.core.components.base import Component
from cybex.core.context import InstallContext
from cybex.core.models.requirements import Requirements
from cybex.core.services.installer import (
    ensure_packages,
    ensure_service,
    remove_packages,
    stop_and_disable,
)

logger = logging.getLogger(__name__)

DOCKER_SERVICE = "docker.service"
DOCKER_GROUP = "docker"


class Packages(Component):
    name = "packages"
    title = "Installing System Packages"
    description = "System packages (pacman + AUR), Docker service and group"
    requires = Requirements(sudo=True, internet=True)

    def install(self, ctx: InstallContext) -> None:
        adapters = ctx.adapters
        pkgs = ctx.settings.packages

        ensure_packages(adapters.pacman, pkgs.pacman, ctx)

        if adapters.pacman.is_installed("docker"):
            ensure_service(adapters.services, DOCKER_SERVICE, ctx)
            self._ensure_docker_group(ctx)

        if not pkgs.aur:
            return
        if adapters.aur.is_available():
            ensure_packages(adapters.aur, pkgs.aur, ctx)
        else:
            ctx.reporter.error(
                f"yay is not installed, skipping AUR packages ({', '.join(pkgs.aur)})"
            )
            ctx.skip("install AUR packages", "yay not installed")

    def _ensure_docker_group(self, ctx: InstallContext) -> None:
        user = getpass.getuser()
        groups = ctx.adapters.runner.run(["id", "-nG", user])
        if groups.ok and DOCKER_GROUP in groups.stdout.split():
            ctx.skip(f"add {user} to {DOCKER_GROUP} group", "already a member")
            return
        ctx.step(f"Adding user {user} to the {DOCKER_GROUP} group")
        ctx.run(["usermod", "-aG", DOCKER_GROUP, user], f"add {user} to {DOCKER_GROUP} group", sudo=True)
        ctx.ok(f"add {user} to {DOCKER_GROUP} group")
        ctx.warn(f"Run 'newgrp {DOCKER_GROUP}' or log out and back in to use docker")

    def uninstall_prompt(self, ctx: InstallContext) -> str:
        remove = ctx.settings.packages.uninstall
        if not remove:
            return ""
        names = remove[0] if len(remove) == 1 else f"{', '.join(remove[:-1])} and {remove[-1]}"
        return f"This will remove {names} packages."

    def uninstall(self, ctx: InstallContext) -> None:
        adapters = ctx.adapters
        remove = ctx.settings.packages.uninstall

        if not remove:
            ctx.skip("remove packages", "no packages configured for removal")
            return
        if "docker" in remove and adapters.pacman.is_installed("docker"):
            stop_and_disable(adapters.services, DOCKER_SERVICE, ctx)
        remove_packages(adapters.pacman, remove, ctx)

    def is_installed(self, ctx: InstallContext) -> bool:
        pacman = ctx.adapters.pacman
        return all(pacman.is_installed(p) for p in ctx.settings.packages.pacman)
