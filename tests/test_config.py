from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from sharptask.config import (
    ConfigFile,
    Direction,
    load,
    local_timezone_name,
    parse_config_file,
)


def _write(tmp_path, text, name="config.toml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_simple_config(tmp_path):
    path = _write(
        tmp_path,
        'vault_path = "~/myVault"\n'
        '                             task_path = "~/taskPath"\n',
    )
    config = parse_config_file(path)
    assert config.vault_path == Path("~/myVault")
    assert config.task_path == Path("~/taskPath")


def test_parse_defaults_for_missing_keys(tmp_path):
    config = parse_config_file(_write(tmp_path, ""))
    assert config.vault_path is None
    assert config.task_path == Path("~/.task")
    assert config.timezone == local_timezone_name()


def test_parse_timezone_key(tmp_path):
    config = parse_config_file(_write(tmp_path, 'timezone = "America/Chicago"\n'))
    assert config.timezone == "America/Chicago"


def test_parse_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        parse_config_file(tmp_path / "absent.toml")


def test_parse_invalid_toml_raises(tmp_path):
    with pytest.raises(ValueError):
        parse_config_file(_write(tmp_path, "vault_path = = ="))


def test_parse_wrong_type_raises(tmp_path):
    with pytest.raises(ValueError):
        parse_config_file(_write(tmp_path, "vault_path = 3\n"))


def test_parse_expands_environment(tmp_path, monkeypatch):
    _write(tmp_path, 'vault_path = "/notes"\n')
    monkeypatch.setenv("SHARPTASK_CFG_DIR", str(tmp_path))
    config = parse_config_file("${SHARPTASK_CFG_DIR}/config.toml")
    assert config.vault_path == Path("/notes")


def test_parse_undefined_environment_raises(monkeypatch):
    monkeypatch.delenv("SHARPTASK_UNSET_VAR", raising=False)
    with pytest.raises(ValueError):
        parse_config_file("$SHARPTASK_UNSET_VAR/config.toml")


def test_local_timezone_from_env(monkeypatch):
    monkeypatch.setenv("TZ", "America/Chicago")
    assert local_timezone_name() == "America/Chicago"


def test_local_timezone_is_always_valid(monkeypatch):
    monkeypatch.setenv("TZ", "Not/A_Zone")
    name = local_timezone_name()
    assert ZoneInfo(name).key == name


def test_load_cli_overrides_config(tmp_path):
    cfg = _write(tmp_path, 'task_path = "/from/config"\ntimezone = "UTC"\n')
    config = load([
        "--config", str(cfg),
        "--task-db", "/from/cli",
        "--tz", "America/Chicago",
        "--file", "notes.md",
        "md-to-tc",
    ])
    assert config.task_path == Path("/from/cli")
    assert config.tz == ZoneInfo("America/Chicago")
    assert config.file_path == Path("notes.md")
    assert config.vault_path is None
    assert config.direction is Direction.MD_TO_TC


def test_load_expands_tilde_in_config_paths(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    cfg = _write(tmp_path, 'vault_path = "~/vault"\ntimezone = "UTC"\n')
    config = load(["--config", str(cfg), "tc-to-md"])
    assert config.vault_path == tmp_path / "vault"
    assert config.task_path == tmp_path / ".task"
    assert config.tz == ZoneInfo("UTC")
    assert config.direction is Direction.TC_TO_MD


def test_load_without_config_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    config = load(["--config", str(tmp_path / "missing.toml"), "--tz", "UTC", "md-to-tc"])
    assert config.task_path == tmp_path / ".task"
    assert config.vault_path is None
    assert config.task_path == Path(ConfigFile().task_path).expanduser()


def test_load_invalid_timezone_raises(tmp_path):
    with pytest.raises(ValueError):
        load(["--config", str(tmp_path / "missing.toml"), "--tz", "Nowhere/Land", "md-to-tc"])


def test_vault_and_file_are_exclusive(tmp_path):
    with pytest.raises(SystemExit):
        load(["--vault", str(tmp_path), "--file", "a.md", "md-to-tc"])


def test_direction_is_required(tmp_path):
    with pytest.raises(SystemExit):
        load(["--config", str(tmp_path / "missing.toml")])