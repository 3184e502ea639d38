import logging

import pytest

import diary_config


def test_config_dir_override(tmp_path, monkeypatch):
    target = tmp_path / "diary-home"
    monkeypatch.setenv(diary_config.ENV_HOME, str(target))
    assert diary_config.config_dir() == target
    assert target.is_dir()
    assert diary_config.keys_path() == target / "keys.json"


def test_config_dir_xdg(tmp_path, monkeypatch):
    monkeypatch.delenv(diary_config.ENV_HOME, raising=False)
    monkeypatch.setattr(diary_config.platform, "system", lambda: "Linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert diary_config.config_dir() == tmp_path / "SecureDiary"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, logging.INFO),
        ("DEBUG", logging.DEBUG),
        ("warning", logging.WARNING),
        ("chatty", logging.INFO),
    ],
)
def test_log_level(monkeypatch, value, expected):
    if value is None:
        monkeypatch.delenv(diary_config.ENV_LOG_LEVEL, raising=False)
    else:
        monkeypatch.setenv(diary_config.ENV_LOG_LEVEL, value)
    assert diary_config.log_level() == expected
