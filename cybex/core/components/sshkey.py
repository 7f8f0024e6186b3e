"""
SSH key — an ED25519 key for GitHub plus ssh-agent startup.

Irreversible: deleting a private key can lock the user out of every
host it was registered with, so uninstall always refuses.
"""

from __future__ import annotations

import getpass
import logging
import socket
from pathlib import Path

from cybex.core.components.base import Component
from cybex.core.context import InstallContext
from cybex.core.models.environment import ProfileBlock
from cybex.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

AGENT_BLOCK = ProfileBlock(
    key="ssh-agent",
    bash=[
        'if [ -z "$SSH_AUTH_SOCK" ]; then',
        '    eval "$(ssh-agent -s)" >/dev/null 2>&1',
        "fi",
    ],
    fish=[
        "if not set -q SSH_AUTH_SOCK",
        "    eval (ssh-agent -c) >/dev/null",
        "end",
    ],
    present_pattern=r"SSH_AUTH_SOCK|ssh-agent",
)

# ssh-add -l exit codes
_AGENT_HAS_KEYS = 0
_AGENT_EMPTY = 1


class SshKey(Component):
    name = "ssh"
    aliases = ("ssh-key",)
    title = "Generating SSH Key for GitHub"
    description = "ED25519 SSH key for GitHub (cannot be uninstalled)"
    reversible = False
    irreversible_reason = "SSH keys are never deleted; removing one could lock you out of remote hosts"

    def key_path(self, ctx: InstallContext) -> Path:
        return ctx.settings.home_path(".ssh", "id_ed25519")

    def install(self, ctx: InstallContext) -> None:
        fs = ctx.adapters.fs
        key = self.key_path(ctx)
        try:
            fs.make_dir(key.parent, mode=0o700)
        except OSError as e:
            ctx.fail(f"create {key.parent}", str(e))

        if fs.exists(key):
            ctx.skip("generate SSH key", f"already exists at {key}")
        else:
            ctx.step("Generating new ED25519 SSH key")
            comment = f"{getpass.getuser()}@{socket.gethostname()}"
            ctx.run(
                ["ssh-keygen", "-t", "ed25519", "-C", comment, "-f", str(key), "-N", ""],
                "generate SSH key",
            )
            ctx.ok("generate SSH key", str(key))

        ctx.env_patch.add_block(AGENT_BLOCK)
        self._load_into_agent(ctx, key)

        public = key.with_name(key.name + ".pub")
        if fs.exists(public):
            ctx.facts["ssh_public_key"] = fs.read_text(public).strip()

    def _load_into_agent(self, ctx: InstallContext, key: Path) -> None:
        runner = ctx.adapters.runner
        listed = runner.run(["ssh-add", "-l"])
        if listed.returncode not in (_AGENT_HAS_KEYS, _AGENT_EMPTY):
            ctx.record(Receipt.skip(ctx.component, "add key to ssh-agent", "no agent running"))
            ctx.warn("No ssh-agent running; the agent configured in your shell will load the key on next login")
            return

        fingerprint = runner.run(["ssh-keygen", "-lf", str(key)])
        parts = fingerprint.stdout.split()
        if fingerprint.ok and len(parts) > 1 and parts[1] in listed.stdout:
            ctx.skip("add key to ssh-agent", "already loaded")
            return

        result = runner.run(["ssh-add", str(key)])
        if result.ok:
            ctx.ok("add key to ssh-agent")
        else:
            ctx.warn(f"Failed to add key to ssh-agent; run 'ssh-add {key}' manually")

    def is_installed(self, ctx: InstallContext) -> bool:
        return ctx.adapters.fs.exists(self.key_path(ctx))

    def next_steps(self) -> list[str]:
        return [
            "Add the public key at https://github.com/settings/ssh/new",
            "Test the connection: ssh -T git@github.com",
        ]
