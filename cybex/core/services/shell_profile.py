"""
Managed blocks — marker-delimited lines the tool owns inside user files.

    # >>> cybex:local-bin >>>
    export PATH=$HOME/.local/bin:$PATH
    # <<< cybex:local-bin <<<

Adding a block with an existing key is a no-op (or an in-place update
when its lines changed); removing deletes exactly the block and the
blank separator line written with it. Everything outside the markers
belongs to the user and is never touched.

``apply_patch`` writes a whole EnvironmentPatch into ~/.bashrc and the
fish config once per run.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import MutableMapping
from pathlib import Path

from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.models.environment import EnvironmentPatch, ProfileBlock
from cybex.core.models.receipt import Receipt
from cybex.core.models.settings import Settings

logger = logging.getLogger(__name__)

_ANY_BLOCK_RE = re.compile(
    r"(?:^\n)?^# >>> cybex:(?P<key>[\w.-]+) >>>\n.*?^# <<< cybex:(?P=key) <<<\n?",
    re.MULTILINE | re.DOTALL,
)


def begin_marker(key: str) -> str:
    return f"# >>> cybex:{key} >>>"


def end_marker(key: str) -> str:
    return f"# <<< cybex:{key} <<<"


def _block_re(key: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?:^\n)?^{re.escape(begin_marker(key))}\n.*?^{re.escape(end_marker(key))}\n?",
        re.MULTILINE | re.DOTALL,
    )


def render_block(key: str, lines: list[str]) -> str:
    return "\n".join([begin_marker(key), *lines, end_marker(key)]) + "\n"


def has_block(text: str, key: str) -> bool:
    return _block_re(key).search(text) is not None


def add_block(text: str, key: str, lines: list[str]) -> str:
    """Return ``text`` with the block ``key`` present and holding ``lines``."""
    block = render_block(key, lines)
    match = _block_re(key).search(text)
    if match:
        current = match.group(0).lstrip("\n")
        if not current.endswith("\n"):
            current += "\n"
        if current == block:
            return text
        lead = "\n" if match.group(0).startswith("\n") else ""
        return text[: match.start()] + lead + block + text[match.end():]

    if text and not text.endswith("\n"):
        text += "\n"
    if text:
        text += "\n"
    return text + block


def remove_block(text: str, key: str) -> str:
    """Return ``text`` without the block ``key`` (unchanged if absent)."""
    return _block_re(key).sub("", text, count=1)


def strip_managed_blocks(text: str) -> str:
    """``text`` with every cybex block removed."""
    return _ANY_BLOCK_RE.sub("", text)


def managed_blocks(text: str) -> dict[str, list[str]]:
    """Key → lines of every cybex block in ``text``, in file order."""
    blocks: dict[str, list[str]] = {}
    for match in _ANY_BLOCK_RE.finditer(text):
        lines = match.group(0).strip("\n").split("\n")
        blocks[match.group("key")] = lines[1:-1]
    return blocks


def carry_blocks(new_text: str, old_text: str) -> str:
    """Append to ``new_text`` the blocks of ``old_text`` it lacks."""
    for key, lines in managed_blocks(old_text).items():
        if not has_block(new_text, key):
            new_text = add_block(new_text, key, lines)
    return new_text


# ── Profile files ──────────────────────────────────────────────


def bashrc_path(settings: Settings) -> Path:
    return settings.home_path(".bashrc")


def fish_config_path(settings: Settings) -> Path:
    return settings.home_path(".config", "fish", "config.fish")


def _configured_by_hand(text: str, block: ProfileBlock) -> bool:
    if not block.present_pattern:
        return False
    return re.search(block.present_pattern, strip_managed_blocks(text)) is not None


def _update_profile(
    path: Path,
    shell: str,
    patch: EnvironmentPatch,
    fs: LocalFilesystem,
    create: bool,
) -> list[Receipt]:
    receipts: list[Receipt] = []
    exists = fs.exists(path)
    if not exists and not create:
        return receipts

    original = fs.read_text(path) if exists else ""
    text = original

    for key in patch.remove:
        if has_block(text, key):
            text = remove_block(text, key)
            receipts.append(Receipt.success("environment", f"remove {key} from {path.name}"))

    for block in patch.add:
        lines = block.bash if shell == "bash" else block.fish
        if not lines:
            continue
        if has_block(text, block.key):
            updated = add_block(text, block.key, lines)
            if updated == text:
                receipts.append(
                    Receipt.skip("environment", f"{block.key} in {path.name}", "already configured")
                )
            else:
                receipts.append(Receipt.success("environment", f"update {block.key} in {path.name}"))
            text = updated
        elif _configured_by_hand(text, block):
            receipts.append(
                Receipt.skip("environment", f"{block.key} in {path.name}", "configured outside cybex")
            )
        else:
            text = add_block(text, block.key, lines)
            receipts.append(Receipt.success("environment", f"add {block.key} to {path.name}"))

    if text != original:
        fs.write_text(path, text)
        logger.info("Updated %s", path)
    return receipts


def apply_patch(
    patch: EnvironmentPatch,
    settings: Settings,
    fs: LocalFilesystem,
    *,
    fish_available: bool = False,
    environ: MutableMapping[str, str] | None = None,
) -> list[Receipt]:
    """Write ``patch`` into the user's shell profiles.

    The bash profile is created if needed; the fish config only when
    fish is installed or the file already exists. PATH entries are also
    prepended to ``environ`` (default: this process) so later steps see
    freshly installed commands.
    """
    if patch.is_empty:
        return []

    receipts = _update_profile(bashrc_path(settings), "bash", patch, fs, create=bool(patch.add))
    fish = fish_config_path(settings)
    receipts += _update_profile(
        fish, "fish", patch, fs, create=fish_available and bool(patch.add)
    )

    env = os.environ if environ is None else environ
    entries = env.get("PATH", "").split(os.pathsep) if env.get("PATH") else []
    for entry in reversed(patch.path_prepend):
        if entry not in entries:
            entries.insert(0, entry)
            logger.debug("PATH += %s", entry)
    if patch.path_prepend:
        env["PATH"] = os.pathsep.join(entries)

    return receipts
