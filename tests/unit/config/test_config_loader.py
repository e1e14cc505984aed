"""Tests for layered config loading and the Config schema."""

import json
import os
from pathlib import Path

import pytest

from cmdlets.config.loader import load_config, read_config_layer
from cmdlets.config.schema import Config
from cmdlets.core.errors import ConfigError


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config directory at a temp dir."""
    home_dir = tmp_path / "home" / ".cmdlets"
    monkeypatch.setattr("cmdlets.config.loader.get_cmdlets_dir", lambda: home_dir)
    return home_dir


@pytest.fixture
def project(tmp_path: Path) -> Path:
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    return project_dir


def _write_config(directory: Path, data: dict) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestConfigSchema:
    """Tests for Config defaults and validation."""

    def test_defaults(self) -> None:
        config = Config()
        assert config.exit_on_error is True
        assert config.show_hidden is False
        assert config.module_dirs == []
        assert config.modules == {}

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            Config.model_validate({"exit_on_eror": False})

    def test_module_dirs_made_absolute(self) -> None:
        config = Config(module_dirs=["mods", "~/more"])
        assert config.module_dirs[0] == os.path.abspath("mods")
        assert config.module_dirs[1] == os.path.abspath(os.path.expanduser("~/more"))

    def test_module_config(self) -> None:
        config = Config(modules={"hello": {"who": "team"}})
        assert config.module_config("hello") == {"who": "team"}
        assert config.module_config("math") == {}


class TestLayeredLoading:
    """Tests for global + local layering."""

    def test_no_files_gives_defaults(self, home: Path, project: Path) -> None:
        assert load_config(cwd=project) == Config()

    def test_global_only(self, home: Path, project: Path) -> None:
        _write_config(home, {"exit_on_error": False})
        assert load_config(cwd=project).exit_on_error is False

    def test_local_only(self, home: Path, project: Path) -> None:
        _write_config(project / ".cmdlets", {"show_hidden": True})
        assert load_config(cwd=project).show_hidden is True

    def test_local_overrides_global(self, home: Path, project: Path) -> None:
        _write_config(home, {
            "exit_on_error": False,
            "modules": {"hello": {"who": "world", "greeting": "Hi"}},
        })
        _write_config(project / ".cmdlets", {
            "exit_on_error": True,
            "modules": {"hello": {"who": "team"}},
        })

        config = load_config(cwd=project)

        assert config.exit_on_error is True
        # Nested module settings merge rather than replace
        assert config.modules["hello"] == {"who": "team", "greeting": "Hi"}

    def test_lists_replaced(self, home: Path, project: Path) -> None:
        _write_config(home, {"module_dirs": ["/global/a", "/global/b"]})
        _write_config(project / ".cmdlets", {"module_dirs": ["/local"]})
        assert load_config(cwd=project).module_dirs == [os.path.abspath("/local")]

    def test_invalid_json_in_layer(self, home: Path, project: Path) -> None:
        home.mkdir(parents=True)
        (home / "config.json").write_text("{broken", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(cwd=project)

    def test_validation_error(self, home: Path, project: Path) -> None:
        _write_config(project / ".cmdlets", {"exit_on_error": "sometimes"})
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(cwd=project)


class TestExplicitPath:
    """Tests for --config style explicit paths."""

    def test_loads_file(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path / "custom", {"show_hidden": True})
        assert load_config(path).show_hidden is True

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="File not found"):
            load_config(tmp_path / "nope.json")

    def test_skips_layers(self, home: Path, tmp_path: Path) -> None:
        _write_config(home, {"exit_on_error": False})
        path = _write_config(tmp_path / "custom", {"show_hidden": True})
        assert load_config(path).exit_on_error is True


class TestEnvSubstitution:
    """Tests for %VAR% expansion in config strings."""

    def test_substitutes_module_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CMDLETS_TEST_WHO", "ops")
        path = _write_config(tmp_path, {"modules": {"hello": {"who": "%CMDLETS_TEST_WHO%"}}})
        assert load_config(path).modules["hello"]["who"] == "ops"

    def test_substitutes_module_dirs(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CMDLETS_TEST_ROOT", str(tmp_path))
        path = _write_config(tmp_path, {"module_dirs": ["%CMDLETS_TEST_ROOT%/mods"]})
        assert load_config(path).module_dirs == [os.path.abspath(f"{tmp_path}/mods")]

    def test_unknown_variable_left_verbatim(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("CMDLETS_TEST_UNSET", raising=False)
        path = _write_config(tmp_path, {"modules": {"x": {"v": "%CMDLETS_TEST_UNSET%"}}})
        assert load_config(path).modules["x"]["v"] == "%CMDLETS_TEST_UNSET%"


class TestReadConfigLayer:
    """Tests for decoding a single config file."""

    def test_object(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text('{"exit_on_error": false}', encoding="utf-8")
        assert read_config_layer(path) == {"exit_on_error": False}

    def test_byte_order_mark_accepted(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_bytes(b"\xef\xbb\xbf" + b'{"show_hidden": true}')
        assert read_config_layer(path) == {"show_hidden": True}

    @pytest.mark.parametrize("content", ["", "  \n\t"])
    def test_blank_file_is_empty_layer(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "config.json"
        path.write_text(content, encoding="utf-8")
        assert read_config_layer(path) == {}

    def test_non_object_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigError, match="must hold a JSON object, got list"):
            read_config_layer(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            read_config_layer(path)

    def test_unreadable_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Failed to read file"):
            read_config_layer(tmp_path)

    def test_blank_layer_does_not_count_as_loaded(
        self, home: Path, project: Path
    ) -> None:
        home.mkdir(parents=True)
        (home / "config.json").write_text("", encoding="utf-8")
        assert load_config(cwd=project) == Config()
