"""
Tests for managed blocks and the environment patch writer.
"""

from cybex.adapters.shell.filesystem import LocalFilesystem
from cybex.core.components.npm_cli import local_bin_block
from cybex.core.models.environment import EnvironmentPatch, ProfileBlock
from cybex.core.services.shell_profile import (
    add_block,
    apply_patch,
    bashrc_path,
    carry_blocks,
    fish_config_path,
    has_block,
    managed_blocks,
    remove_block,
    render_block,
    strip_managed_blocks,
)

LINES = ['export PATH="$HOME/.local/bin:$PATH"']


# ── Block editing ───────────────────────────────────────────────────


class TestAddBlock:
    def test_into_empty_text(self):
        assert add_block("", "local-bin", LINES) == render_block("local-bin", LINES)

    def test_appended_after_blank_line(self):
        text = add_block("alias ll='ls -l'\n", "local-bin", LINES)
        assert text.startswith("alias ll='ls -l'\n\n# >>> cybex:local-bin >>>\n")
        assert text.endswith("# <<< cybex:local-bin <<<\n")

    def test_missing_trailing_newline(self):
        text = add_block("alias ll='ls -l'", "local-bin", LINES)
        assert text.startswith("alias ll='ls -l'\n\n# >>> cybex:local-bin >>>")

    def test_same_block_twice_is_noop(self):
        once = add_block("x=1\n", "local-bin", LINES)
        assert add_block(once, "local-bin", LINES) == once

    def test_changed_lines_update_in_place(self):
        text = add_block("x=1\n", "local-bin", LINES) + "y=2\n"
        updated = add_block(text, "local-bin", ["export PATH=/opt/bin:$PATH"])

        assert "/opt/bin" in updated
        assert ".local/bin" not in updated
        assert updated.startswith("x=1\n\n# >>>")
        assert updated.endswith("y=2\n")


class TestRemoveBlock:
    def test_add_then_remove_restores_text(self):
        original = "alias ll='ls -l'\n"
        assert remove_block(add_block(original, "local-bin", LINES), "local-bin") == original

    def test_removes_only_that_block(self):
        text = add_block("a\n", "one", ["1"])
        text = add_block(text, "two", ["2"])
        text = remove_block(text, "one")

        assert not has_block(text, "one")
        assert has_block(text, "two")
        assert text.startswith("a\n")

    def test_block_between_user_lines(self):
        text = "a\n" + "\n" + render_block("k", ["x"]) + "b\n"
        assert remove_block(text, "k") == "a\nb\n"

    def test_absent_block_is_noop(self):
        assert remove_block("a\n", "k") == "a\n"

    def test_similar_user_lines_are_kept(self):
        text = "# cybex:k is mine\n" + add_block("", "k", ["x"])
        assert remove_block(text, "k").startswith("# cybex:k is mine\n")


class TestBlockQueries:
    def test_managed_blocks_and_strip(self):
        text = add_block(add_block("user\n", "a", ["1", "2"]), "b", ["3"])
        assert managed_blocks(text) == {"a": ["1", "2"], "b": ["3"]}
        assert strip_managed_blocks(text) == "user\n"

    def test_carry_blocks_adds_only_missing(self):
        old = add_block("old\n", "auto-tile", ["exec-once = auto-tile"])
        new = "new\n"
        carried = carry_blocks(new, old)

        assert carried.startswith("new\n")
        assert managed_blocks(carried) == {"auto-tile": ["exec-once = auto-tile"]}
        assert carry_blocks(carried, old) == carried


# ── Applying a patch ────────────────────────────────────────────────


class TestApplyPatch:
    def _patch(self, settings) -> EnvironmentPatch:
        patch = EnvironmentPatch()
        patch.add_block(local_bin_block(settings))
        patch.prepend_path(str(settings.local_bin))
        return patch

    def test_creates_bashrc_and_updates_path(self, settings):
        environ = {"PATH": "/usr/bin"}
        receipts = apply_patch(self._patch(settings), settings, LocalFilesystem(), environ=environ)

        bashrc = bashrc_path(settings).read_text()
        assert 'export PATH="$HOME/.local/bin:$PATH"' in bashrc
        assert environ["PATH"] == f"{settings.local_bin}:/usr/bin"
        assert [r.status for r in receipts] == ["ok"]

    def test_fish_config_skipped_without_fish(self, settings):
        apply_patch(self._patch(settings), settings, LocalFilesystem(), environ={})
        assert not fish_config_path(settings).exists()

    def test_fish_config_written_when_fish_installed(self, settings):
        apply_patch(self._patch(settings), settings, LocalFilesystem(), fish_available=True, environ={})
        assert "fish_add_path ~/.local/bin" in fish_config_path(settings).read_text()

    def test_existing_fish_config_is_updated(self, settings):
        fish = fish_config_path(settings)
        fish.parent.mkdir(parents=True)
        fish.write_text("set -g fish_greeting\n")

        apply_patch(self._patch(settings), settings, LocalFilesystem(), environ={})
        assert fish.read_text().startswith("set -g fish_greeting\n")
        assert has_block(fish.read_text(), "local-bin")

    def test_second_apply_is_noop(self, settings):
        fs = LocalFilesystem()
        environ = {"PATH": "/usr/bin"}
        apply_patch(self._patch(settings), settings, fs, environ=environ)
        before = bashrc_path(settings).read_text()

        receipts = apply_patch(self._patch(settings), settings, fs, environ=environ)
        assert bashrc_path(settings).read_text() == before
        assert all(r.skipped for r in receipts)
        assert environ["PATH"].count(str(settings.local_bin)) == 1

    def test_hand_written_entry_is_respected(self, settings):
        bashrc = bashrc_path(settings)
        bashrc.write_text("export PATH=$HOME/.local/bin:$PATH\n")

        receipts = apply_patch(self._patch(settings), settings, LocalFilesystem(), environ={})
        assert bashrc.read_text() == "export PATH=$HOME/.local/bin:$PATH\n"
        assert receipts[0].skipped
        assert receipts[0].output == "configured outside cybex"

    def test_commented_entry_does_not_count(self, settings):
        bashrc = bashrc_path(settings)
        bashrc.write_text("# export PATH=$HOME/.local/bin:$PATH\n")

        apply_patch(self._patch(settings), settings, LocalFilesystem(), environ={})
        assert has_block(bashrc.read_text(), "local-bin")

    def test_remove_patch(self, settings):
        fs = LocalFilesystem()
        apply_patch(self._patch(settings), settings, fs, environ={})

        patch = EnvironmentPatch()
        patch.remove_block("local-bin")
        receipts = apply_patch(patch, settings, fs, environ={})

        assert not has_block(bashrc_path(settings).read_text(), "local-bin")
        assert receipts[0].ok

    def test_remove_only_does_not_create_bashrc(self, settings):
        patch = EnvironmentPatch()
        patch.remove_block("local-bin")
        assert apply_patch(patch, settings, LocalFilesystem(), environ={}) == []
        assert not bashrc_path(settings).exists()

    def test_block_without_lines_for_shell_is_skipped(self, settings):
        patch = EnvironmentPatch()
        patch.add_block(ProfileBlock(key="fish-only", fish=["set -x A 1"]))
        apply_patch(patch, settings, LocalFilesystem(), environ={})
        assert not bashrc_path(settings).exists()


class TestEnvironmentPatch:
    def test_later_add_replaces_earlier(self):
        patch = EnvironmentPatch()
        patch.add_block(ProfileBlock(key="k", bash=["1"]))
        patch.add_block(ProfileBlock(key="k", bash=["2"]))
        assert [b.bash for b in patch.add] == [["2"]]

    def test_remove_cancels_add(self):
        patch = EnvironmentPatch()
        patch.add_block(ProfileBlock(key="k", bash=["1"]))
        patch.remove_block("k")
        assert patch.add == []
        assert patch.remove == ["k"]

    def test_empty(self):
        assert EnvironmentPatch().is_empty
