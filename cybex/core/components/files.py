"""
Single-file components — a bundled asset copied into the user's config.
"""

from __future__ import annotations

from typing import ClassVar

from cybex.core.components.base import SimpleComponent
from cybex.core.context import InstallContext
from cybex.core.models.target import InstallTarget


class ConfigFileComponent(SimpleComponent):
    """Copy ``assets/<asset>`` to ``~/<destination>``."""

    asset: ClassVar[tuple[str, ...]]
    destination: ClassVar[tuple[str, ...]]

    def targets(self, ctx: InstallContext) -> list[InstallTarget]:
        settings = ctx.settings
        return [
            InstallTarget(
                source=settings.asset(*self.asset),
                destination=settings.home_path(*self.destination),
                label=self.asset[-1],
            )
        ]


class Screensaver(ConfigFileComponent):
    name = "screensaver"
    title = "Configuring Screensaver"
    description = "Custom screensaver text"
    asset = ("screensaver", "screensaver.txt")
    destination = (".config", "omarchy", "branding", "screensaver.txt")


class StarshipPrompt(ConfigFileComponent):
    name = "prompt"
    aliases = ("starship",)
    title = "Configuring Starship Prompt"
    description = "Starship prompt configuration"
    # Illogical Impulse already ships a starship config
    in_all = False
    asset = ("starship", "starship.toml")
    destination = (".config", "starship.toml")
