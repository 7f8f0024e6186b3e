"""
Tests for the adapter layer — command runner, package managers,
systemd, filesystems and the registry.
"""

from pathlib import Path

import pytest

from cybex.adapters.mock import FakeBootloader, FakeRunner, fake_registry
from cybex.adapters.packages.npm import NpmGlobalAdapter
from cybex.adapters.packages.pacman import PacmanAdapter, YayAdapter
from cybex.adapters.registry import AdapterRegistry
from cybex.adapters.services.systemd import SystemdAdapter
from cybex.adapters.shell.command import CommandResult, CommandRunner
from cybex.adapters.shell.filesystem import LocalFilesystem, PrivilegedFilesystem


# ── CommandRunner ───────────────────────────────────────────────────


class TestCommandRunner:
    def test_captures_output(self):
        result = CommandRunner().run(["echo", "hello"])
        assert result.ok
        assert result.stdout.strip() == "hello"

    def test_failure_is_a_result(self):
        result = CommandRunner().run(["false"])
        assert not result.ok
        assert result.message == "exited with code 1"

    def test_missing_program(self):
        result = CommandRunner().run(["cybex-no-such-program"])
        assert not result.ok
        assert result.message.startswith("cannot execute")

    def test_timeout(self):
        result = CommandRunner().run(["sleep", "5"], timeout=1)
        assert not result.ok
        assert result.error == "timed out after 1s"

    def test_input(self):
        assert CommandRunner().run(["cat"], input="piped").stdout == "piped"

    def test_sudo_prefix(self, monkeypatch):
        runner = CommandRunner()
        monkeypatch.setattr(runner, "is_root", lambda: False)
        assert runner._prepare(["pacman", "-Syy"], sudo=True) == ["sudo", "pacman", "-Syy"]
        assert runner._prepare(["pacman", "-Q"], sudo=False) == ["pacman", "-Q"]

    def test_no_sudo_when_root(self, monkeypatch):
        runner = CommandRunner()
        monkeypatch.setattr(runner, "is_root", lambda: True)
        assert runner._prepare(["pacman", "-Syy"], sudo=True) == ["pacman", "-Syy"]

    def test_env_overrides(self):
        runner = CommandRunner(env_overrides={"CYBEX_TEST": "1"})
        assert runner.run(["sh", "-c", "echo $CYBEX_TEST"]).stdout.strip() == "1"

    def test_message_prefers_stderr(self):
        assert CommandResult(["x"], 1, stderr=" boom \n").message == "boom"


class TestFakeRunner:
    def test_last_response_wins(self):
        runner = FakeRunner()
        runner.fail(["pgrep"])
        runner.respond(["pgrep", "-f"], stdout="42\n")

        assert runner.run(["pgrep", "-f", "auto-tile"]).stdout == "42\n"
        assert not runner.run(["pgrep", "keyd"]).ok

    def test_records_calls(self):
        runner = FakeRunner()
        runner.run(["systemctl", "start", "keyd"], sudo=True)
        assert runner.commands == ["systemctl start keyd"]
        assert runner.calls[0].sudo
        assert runner.ran("systemctl", "start")


# ── Package managers ────────────────────────────────────────────────


class TestPacman:
    def test_query(self):
        runner = FakeRunner()
        runner.fail(["pacman", "-Q", "keyd"])
        pacman = PacmanAdapter(runner)

        assert pacman.is_installed("docker")
        assert not pacman.is_installed("keyd")
        assert not any(call.sudo for call in runner.calls)

    def test_install_is_needed_and_privileged(self):
        runner = FakeRunner()
        PacmanAdapter(runner).install("jq", "socat")

        call = runner.calls[0]
        assert call.argv == ["pacman", "-S", "--needed", "--noconfirm", "jq", "socat"]
        assert call.sudo and call.interactive

    def test_import_key_stops_after_failed_receive(self):
        runner = FakeRunner()
        runner.fail(["pacman-key", "--recv-key"])
        result = PacmanAdapter(runner).import_key("ABCD", "keyserver.ubuntu.com")

        assert not result.ok
        assert not runner.ran("pacman-key", "--lsign-key")

    def test_import_key(self):
        runner = FakeRunner()
        assert PacmanAdapter(runner).import_key("ABCD", "keyserver.ubuntu.com").ok
        assert runner.commands == [
            "pacman-key --recv-key ABCD --keyserver keyserver.ubuntu.com",
            "pacman-key --lsign-key ABCD",
        ]

    def test_refresh_and_files(self):
        runner = FakeRunner()
        pacman = PacmanAdapter(runner)
        pacman.refresh()
        pacman.install_files("https://example.invalid/a.pkg.tar.zst")
        assert runner.commands == [
            "pacman -Syy --noconfirm",
            "pacman -U --noconfirm https://example.invalid/a.pkg.tar.zst",
        ]


class TestYay:
    def test_runs_as_user(self):
        runner = FakeRunner(programs={"yay"})
        yay = YayAdapter(runner)

        assert yay.is_available()
        yay.install("lazydocker")
        assert runner.calls[-1].argv == ["yay", "-S", "--noconfirm", "lazydocker"]
        assert not runner.calls[-1].sudo

    def test_unavailable(self):
        assert not YayAdapter(FakeRunner()).is_available()


class TestNpm:
    def _npm(self, runner: FakeRunner) -> NpmGlobalAdapter:
        return NpmGlobalAdapter(runner, Path("/home/u/.local"))

    def test_node_version(self):
        runner = FakeRunner(programs={"node"})
        runner.respond(["node", "--version"], stdout="v20.11.1\n")
        assert self._npm(runner).node_version() == (20, 11, 1)

    def test_node_missing(self):
        assert self._npm(FakeRunner()).node_version() is None

    def test_node_garbage(self):
        runner = FakeRunner(programs={"node"})
        runner.respond(["node", "--version"], stdout="node\n")
        assert self._npm(runner).node_version() is None

    def test_install_uses_prefix(self):
        runner = FakeRunner()
        self._npm(runner).install("@openai/codex")
        assert runner.commands == ["npm install -g @openai/codex --prefix /home/u/.local"]
        assert not runner.calls[0].sudo

    def test_is_installed_checks_listing(self):
        runner = FakeRunner()
        runner.respond(["npm", "ls"], stdout="/home/u/.local/lib\n└── @openai/codex@0.1.0\n")
        npm = self._npm(runner)

        assert npm.is_installed("@openai/codex")
        assert not npm.is_installed("@anthropic-ai/claude-code")


class TestSystemd:
    def test_queries_by_exit_code(self):
        runner = FakeRunner()
        runner.fail(["systemctl", "is-active"])
        systemd = SystemdAdapter(runner)

        assert systemd.is_enabled("keyd")
        assert not systemd.is_active("keyd")

    def test_mutations_use_sudo(self):
        runner = FakeRunner()
        systemd = SystemdAdapter(runner)
        systemd.enable("docker.service")
        systemd.stop("docker.service")

        assert runner.commands == ["systemctl enable docker.service", "systemctl stop docker.service"]
        assert all(call.sudo for call in runner.calls)


# ── Filesystems ─────────────────────────────────────────────────────


class TestLocalFilesystem:
    def test_iter_files(self, tmp_path: Path):
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "x.conf").write_text("x")
        (tmp_path / "a.conf").write_text("a")
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "HEAD").write_text("ref")

        fs = LocalFilesystem()
        assert list(fs.iter_files(tmp_path, exclude_hidden=True)) == [Path("a.conf"), Path("b/x.conf")]
        assert Path(".git/HEAD") in list(fs.iter_files(tmp_path))

    def test_siblings(self, tmp_path: Path):
        for name in ("app.conf", "app.conf.bak.1", "app.conf.bak.2", "other"):
            (tmp_path / name).write_text("")
        siblings = LocalFilesystem().siblings(tmp_path / "app.conf", "app.conf.bak.")
        assert [p.name for p in siblings] == ["app.conf.bak.1", "app.conf.bak.2"]

    def test_siblings_missing_parent(self, tmp_path: Path):
        assert LocalFilesystem().siblings(tmp_path / "nope" / "app.conf", "app") == []

    def test_duplicate_replaces(self, tmp_path: Path):
        src = tmp_path / "src"
        (src / "sub").mkdir(parents=True)
        (src / "sub" / "f").write_text("new")
        dst = tmp_path / "dst"
        dst.mkdir()
        (dst / "stale").write_text("old")

        LocalFilesystem().duplicate(src, dst)
        assert (dst / "sub" / "f").read_text() == "new"
        assert not (dst / "stale").exists()

    def test_write_with_mode(self, tmp_path: Path):
        path = tmp_path / "deep" / "script"
        LocalFilesystem().write_text(path, "#!/bin/sh\n", mode=0o755)
        assert path.stat().st_mode & 0o777 == 0o755


class TestPrivilegedFilesystem:
    def test_write_goes_through_install(self, tmp_path: Path):
        runner = FakeRunner()
        PrivilegedFilesystem(runner).write_text(tmp_path / "etc" / "keyd.conf", "x")

        call = runner.calls[0]
        assert call.sudo
        assert call.argv[:4] == ["install", "-D", "-m", "644"]
        assert call.argv[-1] == str(tmp_path / "etc" / "keyd.conf")
        assert not Path(call.argv[4]).exists()

    def test_failure_raises_oserror(self, tmp_path: Path):
        runner = FakeRunner()
        runner.fail(["install"], stderr="permission denied")
        with pytest.raises(OSError, match="permission denied"):
            PrivilegedFilesystem(runner).make_dir(tmp_path / "usr" / "share" / "theme")

    def test_remove_only_existing(self, tmp_path: Path):
        runner = FakeRunner()
        fs = PrivilegedFilesystem(runner)
        fs.remove(tmp_path / "missing")
        assert runner.calls == []

        (tmp_path / "present").write_text("")
        fs.remove(tmp_path / "present")
        assert runner.commands == [f"rm -rf {tmp_path / 'present'}"]


# ── Registry ────────────────────────────────────────────────────────


class TestAdapterRegistry:
    def test_from_settings(self, settings):
        registry = AdapterRegistry.from_settings(settings)

        assert isinstance(registry.system_fs, PrivilegedFilesystem)
        assert registry.npm.prefix == settings.local_bin.parent
        assert registry.pacman.name == "pacman"

    def test_bootloader_detected_once(self, settings, monkeypatch):
        calls = []

        def detect(*args):
            calls.append(args)
            return FakeBootloader()

        monkeypatch.setattr("cybex.adapters.registry.detect_bootloader", detect)
        registry = AdapterRegistry.from_settings(settings)
        assert registry.bootloader is registry.bootloader
        assert len(calls) == 1

    def test_explicit_none_bootloader(self, settings):
        registry = fake_registry(settings, bootloader=None)
        assert registry.bootloader is None
        assert [a.name for a in registry.adapters()] == ["pacman", "yay", "npm", "fake-services"]

    def test_adapter_status(self, settings):
        status = fake_registry(settings).adapter_status()
        assert status["fake-boot"]["available"] is True
        assert status["pacman"]["type"] == "FakePackageManager"
