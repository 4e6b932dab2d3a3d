from __future__ import annotations

from pathlib import Path

import pytest

from console.config import DEFAULTS, ConfigManager, resolve_dynmap_path


def test_load_without_file_returns_defaults(tmp_path: Path) -> None:
    config = ConfigManager(str(tmp_path)).load(environ={})

    assert config == DEFAULTS
    assert config is not DEFAULTS
    assert config["web"] is not DEFAULTS["web"]


def test_load_merges_partial_yaml(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text(
        "web:\n  port: 25580\n  serve_dynmap: true\nserver:\n  name: Creeper Cove\n",
        encoding="utf-8",
    )

    config = ConfigManager(str(tmp_path)).load(environ={})

    assert config["web"]["port"] == 25580
    assert config["web"]["serve_dynmap"] is True
    assert config["web"]["host"] == DEFAULTS["web"]["host"]
    assert config["server"]["name"] == "Creeper Cove"
    assert config["server"]["login_message"] == DEFAULTS["server"]["login_message"]


@pytest.mark.parametrize("content", ["web: [unclosed\n", "- just\n- a list\n"])
def test_invalid_yaml_falls_back_to_defaults(tmp_path: Path, content: str) -> None:
    (tmp_path / "config.yaml").write_text(content, encoding="utf-8")

    config = ConfigManager(str(tmp_path)).load(environ={})

    assert config["_config_error"]
    assert config["web"] == DEFAULTS["web"]


def test_environment_overrides_file(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text("web:\n  port: 9000\n", encoding="utf-8")

    config = ConfigManager(str(tmp_path)).load(
        environ={"DROWSY_WEB_PORT": "9100", "DROWSY_SERVER_COMMAND": "./start.sh"}
    )

    assert config["web"]["port"] == 9100
    assert config["process"]["command"] == "./start.sh"
    assert "_config_error" not in config


def test_bad_environment_value_is_reported(tmp_path: Path) -> None:
    config = ConfigManager(str(tmp_path)).load(environ={"DROWSY_WEB_PORT": "eighty"})

    assert config["web"]["port"] == DEFAULTS["web"]["port"]
    assert "DROWSY_WEB_PORT" in config["_config_error"]


def _web(serve_dynmap) -> dict:
    return {"web": {"serve_dynmap": serve_dynmap}}


@pytest.mark.parametrize("setting", [False, None, ""])
def test_dynmap_disabled(setting, tmp_path: Path) -> None:
    assert resolve_dynmap_path(_web(setting), str(tmp_path)) is None


def test_dynmap_path_string_is_used_as_given(tmp_path: Path) -> None:
    assert resolve_dynmap_path(_web("/srv/map"), str(tmp_path)) == "/srv/map"


def test_dynmap_true_prefers_working_directory(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "plugins" / "dynmap" / "web").mkdir(parents=True)
    monkeypatch.chdir(tmp_path)

    assert resolve_dynmap_path(_web(True), "/opt/drowsy") == "./plugins/dynmap/web/"


def test_dynmap_true_falls_back_to_project_dir(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    path = resolve_dynmap_path(_web(True), "/opt/drowsy")

    assert Path(path) == Path("/opt/drowsy/plugins/dynmap/web")
