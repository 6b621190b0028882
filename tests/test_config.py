from __future__ import annotations

from pathlib import Path

import pytest

from config.config import (
    AppConfig,
    ConfigurationError,
    EnvironmentSettings,
    ReminderRule,
    ScheduleConfig,
    expand_env_vars,
    load_config,
    validate_config,
)


def test_default_config_file_loads(env_settings: EnvironmentSettings) -> None:
    config = load_config(env=env_settings)
    assert config.schedule.namespace == "agenda-ccb"
    assert config.schedule.window_days == 7
    assert [(r.offset_minutes, r.label) for r in config.schedule.offsets] == [
        (240, "4 horas"),
        (60, "1 hora"),
    ]
    assert config.onesignal.api_url == "https://onesignal.com/api/v1/notifications"


def test_env_vars_expanded_in_yaml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, env_settings: EnvironmentSettings
) -> None:
    monkeypatch.setenv("AGENDA_PATH", "/data/agenda.json")
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "agenda:\n  path: ${AGENDA_PATH:agenda.json}\nlogging:\n  level: ${MISSING_LEVEL:DEBUG}\n",
        encoding="utf-8",
    )

    config = load_config(config_file, env=env_settings)

    assert config.agenda.path == "/data/agenda.json"
    assert config.logging.level == "DEBUG"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_values_raise(tmp_path: Path, env_settings: EnvironmentSettings) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("schedule:\n  window_days: -1\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(config_file, env=env_settings)


def test_environment_settings_read_process_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ONESIGNAL_APP_ID", "from-env")
    monkeypatch.setenv("ONESIGNAL_REST_API_KEY", "key-env")
    monkeypatch.setenv("SITE_URL", "https://site.example.org")
    monkeypatch.setenv("TZ", "")

    settings = EnvironmentSettings()

    assert settings.onesignal_app_id == "from-env"
    assert settings.onesignal_rest_api_key == "key-env"
    assert settings.site_url == "https://site.example.org"
    assert settings.tz == "America/Campo_Grande"


def test_validate_config_reports_missing_credentials() -> None:
    config = AppConfig(env=EnvironmentSettings(onesignal_app_id="", onesignal_rest_api_key="", tz="UTC"))
    errors = validate_config(config)
    assert errors == ["Faltam secrets: ONESIGNAL_APP_ID e/ou ONESIGNAL_REST_API_KEY."]
    assert validate_config(config, require_credentials=False) == []


def test_validate_config_reports_bad_zone_and_offsets(env_settings: EnvironmentSettings) -> None:
    config = AppConfig(
        env=env_settings.model_copy(update={"tz": "Mars/Olympus_Mons"}),
        schedule=ScheduleConfig(offsets=[ReminderRule(offset_minutes=60, label="1 hora", enabled=False)]),
    )
    errors = validate_config(config)
    assert errors == ["Unknown time zone: Mars/Olympus_Mons", "No reminder offsets enabled"]


def test_expand_env_vars_leaves_unknown_plain_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
    data = {"a": "${NOT_SET_ANYWHERE}", "b": ["plain", 3]}
    assert expand_env_vars(data) == {"a": "${NOT_SET_ANYWHERE}", "b": ["plain", 3]}


def test_unknown_log_level_is_a_configuration_error(
    tmp_path: Path, env_settings: EnvironmentSettings
) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("logging:\n  level: verbose\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(config_file, env=env_settings)

    config_file.write_text("logging:\n  level: debug\n", encoding="utf-8")
    assert load_config(config_file, env=env_settings).logging.level == "DEBUG"
