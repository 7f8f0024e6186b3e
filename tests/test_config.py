"""
Tests for the configuration loader — lookup order, validation, path
resolution.
"""

from pathlib import Path

import pytest

from cybex.core.config.loader import ConfigError, find_config_file, load_settings


@pytest.fixture
def isolated(tmp_path: Path, monkeypatch) -> Path:
    """Empty cwd and HOME so no real config is picked up."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return tmp_path


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


# ── Lookup ──────────────────────────────────────────────────────────


class TestFindConfigFile:
    def test_nothing_found(self, isolated):
        assert find_config_file() is None

    def test_walks_up(self, isolated):
        config = _write(isolated / "work" / "cybex.yml", "{}\n")
        nested = isolated / "work" / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == config.resolve()

    def test_user_fallback(self, isolated):
        config = _write(isolated / "home" / ".config" / "cybex" / "cybex.yml", "{}\n")
        assert find_config_file() == config


class TestLoadSettings:
    def test_defaults_without_file(self, isolated):
        settings = load_settings()
        assert settings.home == isolated / "home"
        assert settings.assets_dir == Path.cwd() / "config"
        assert settings.packages.aur == ["1password-beta", "lazydocker"]
        assert settings.packages.uninstall == ["npm", "nano"]

    def test_found_file_is_used(self, isolated):
        _write(isolated / "work" / "cybex.yml", "min_node_major: 18\n")
        assert load_settings().min_node_major == 18

    def test_explicit_missing_file(self, isolated):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(isolated / "missing.yml")

    def test_empty_file(self, isolated):
        config = _write(isolated / "cybex.yml", "")
        assert load_settings(config).plymouth.theme == "cybex"

    def test_invalid_yaml(self, isolated):
        config = _write(isolated / "cybex.yml", "packages: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(config)

    def test_not_a_mapping(self, isolated):
        config = _write(isolated / "cybex.yml", "- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_settings(config)

    def test_schema_error(self, isolated):
        config = _write(isolated / "cybex.yml", "preflight:\n  ping_timeout: soon\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(config)


class TestPathResolution:
    def test_relative_assets_dir(self, isolated):
        config = _write(isolated / "checkout" / "cybex.yml", "assets_dir: assets\n")
        assert load_settings(config).assets_dir == (isolated / "checkout" / "assets").resolve()

    def test_default_assets_next_to_config(self, isolated):
        config = _write(isolated / "checkout" / "cybex.yml", "{}\n")
        assert load_settings(config).assets_dir == (isolated / "checkout" / "config").resolve()

    def test_absolute_assets_dir(self, isolated):
        config = _write(isolated / "cybex.yml", "assets_dir: /opt/cybex\n")
        assert load_settings(config).assets_dir == Path("/opt/cybex")

    def test_home_is_expanded(self, isolated):
        config = _write(isolated / "cybex.yml", "system_root: ~/sysroot\n")
        assert load_settings(config).system_root == isolated / "home" / "sysroot"

    def test_nested_overrides(self, isolated):
        config = _write(
            isolated / "cybex.yml",
            "packages:\n  pacman: [git]\npreflight:\n  allow_root: true\n"
            "kernel:\n  package: linux-zen\n",
        )
        settings = load_settings(config)

        assert settings.packages.pacman == ["git"]
        assert settings.packages.aur == ["1password-beta", "lazydocker"]
        assert settings.preflight.allow_root is True
        assert settings.kernel.package == "linux-zen"
        assert settings.kernel.repo == "chaotic-aur"
