import json
import os

import pytest

from xl_office.config import environment as env_mod
from xl_office.config.settings import Settings
from xl_office.exceptions import ConfigError

ENV_KEYS = [
    "XL_OFFICE_ENGINE",
    "XL_OFFICE_DEFAULT_SHEET",
    "XL_OFFICE_VISIBLE",
    "XL_OFFICE_DISPLAY_ALERTS",
    "XL_OFFICE_SAVE_TO_OPEN_PATH",
    "XL_OFFICE_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # 避免读取到开发环境中的 .env 和环境变量
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_apply_to_without_env_keeps_settings():
    base = Settings(engine="openpyxl", default_sheet=2)
    assert env_mod.EnvManager().apply_to(base) == base


def test_apply_to_overrides_from_environment(monkeypatch):
    monkeypatch.setenv("XL_OFFICE_ENGINE", "COM")
    monkeypatch.setenv("XL_OFFICE_DEFAULT_SHEET", "3")
    monkeypatch.setenv("XL_OFFICE_VISIBLE", "yes")
    monkeypatch.setenv("XL_OFFICE_DISPLAY_ALERTS", "1")
    monkeypatch.setenv("XL_OFFICE_SAVE_TO_OPEN_PATH", "true")
    monkeypatch.setenv("XL_OFFICE_LOG_LEVEL", "debug")

    settings = env_mod.EnvManager().apply_to(Settings())

    assert settings.engine == "com"
    assert settings.default_sheet == 3
    assert settings.visible is True
    assert settings.display_alerts is True
    assert settings.save_to_open_path is True
    assert settings.log_level == "DEBUG"


def test_invalid_env_values_are_ignored(monkeypatch, caplog):
    monkeypatch.setenv("XL_OFFICE_ENGINE", "libreoffice")
    monkeypatch.setenv("XL_OFFICE_DEFAULT_SHEET", "abc")

    with caplog.at_level("WARNING"):
        settings = env_mod.EnvManager().apply_to(Settings())

    assert settings.engine == "auto"
    assert settings.default_sheet == 1
    warnings = [
        r for r in caplog.records
        if r.levelname == "WARNING" and r.name.startswith("xl_office")
    ]
    assert len(warnings) == 2


def test_non_positive_default_sheet_is_ignored(monkeypatch):
    monkeypatch.setenv("XL_OFFICE_DEFAULT_SHEET", "0")
    settings = env_mod.EnvManager().apply_to(Settings())
    assert settings.default_sheet == 1


def test_env_file_is_loaded(tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("XL_OFFICE_ENGINE=openpyxl\n", encoding="utf-8")

    try:
        manager = env_mod.EnvManager(env_file=str(env_file))
        assert manager.get_str("ENGINE") == "openpyxl"
    finally:
        # load_dotenv 直接写入 os.environ，需要手动清理
        os.environ.pop("XL_OFFICE_ENGINE", None)


def test_load_settings_combines_json_and_env(tmp_path, monkeypatch):
    cfg_path = tmp_path / "xl_office.json"
    cfg_path.write_text(
        json.dumps({"engine": "openpyxl", "default_sheet": 2}), encoding="utf-8"
    )
    monkeypatch.setenv("XL_OFFICE_VISIBLE", "true")

    settings = env_mod.load_settings(config_file=str(cfg_path))

    assert settings.engine == "openpyxl"
    assert settings.default_sheet == 2
    assert settings.visible is True


def test_load_settings_without_config_file_uses_defaults():
    assert env_mod.load_settings(config_file="missing.json") == Settings()


def test_validate_settings_rejects_bad_values():
    with pytest.raises(ConfigError):
        env_mod.validate_settings(Settings(engine="gnumeric"))
    with pytest.raises(ConfigError):
        env_mod.validate_settings(Settings(default_sheet=0))
    with pytest.raises(ConfigError):
        env_mod.validate_settings(Settings(default_sheet=True))

    ok = Settings(engine="com")
    assert env_mod.validate_settings(ok) is ok


def _xl_warnings(caplog):
    return [
        r for r in caplog.records
        if r.levelname == "WARNING" and r.name.startswith("xl_office")
    ]


def test_unrecognised_bool_keeps_default_and_warns(monkeypatch, caplog):
    monkeypatch.setenv("XL_OFFICE_VISIBLE", "maybe")
    monkeypatch.setenv("XL_OFFICE_SAVE_TO_OPEN_PATH", "off")

    with caplog.at_level("WARNING"):
        settings = env_mod.EnvManager().apply_to(
            Settings(visible=True, save_to_open_path=True)
        )

    # 无法识别的值保留原设置，可识别的 off 正常生效
    assert settings.visible is True
    assert settings.save_to_open_path is False
    warnings = _xl_warnings(caplog)
    assert len(warnings) == 1
    assert "XL_OFFICE_VISIBLE" in warnings[0].getMessage()


def test_invalid_log_level_is_ignored(monkeypatch, caplog):
    monkeypatch.setenv("XL_OFFICE_LOG_LEVEL", "bogus")

    with caplog.at_level("WARNING"):
        settings = env_mod.EnvManager().apply_to(Settings(log_level="ERROR"))

    assert settings.log_level == "ERROR"
    warnings = _xl_warnings(caplog)
    assert len(warnings) == 1
    assert "XL_OFFICE_LOG_LEVEL" in warnings[0].getMessage()


def test_validate_settings_rejects_bad_log_level():
    with pytest.raises(ConfigError):
        env_mod.validate_settings(Settings(log_level="verbose"))
    with pytest.raises(ConfigError):
        env_mod.validate_settings(Settings(log_level=10))

    ok = Settings(log_level="warning")
    assert env_mod.validate_settings(ok) is ok


def test_default_settings_are_loaded_once_per_process(
    monkeypatch, fresh_default_settings
):
    calls = []

    def fake_load_settings():
        calls.append(1)
        return Settings(engine="openpyxl")

    monkeypatch.setattr(env_mod, "load_settings", fake_load_settings)
    first = env_mod.get_default_settings()
    second = env_mod.get_default_settings()

    assert first is second
    assert first.engine == "openpyxl"
    assert len(calls) == 1
