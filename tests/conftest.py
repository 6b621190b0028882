from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from config.config import AppConfig, EnvironmentSettings


ZONE = ZoneInfo("America/Campo_Grande")
NOW = datetime(2024, 6, 10, 10, 0, tzinfo=timezone(timedelta(hours=-4)))


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def zone() -> ZoneInfo:
    return ZONE


@pytest.fixture
def env_settings() -> EnvironmentSettings:
    return EnvironmentSettings(
        onesignal_app_id="app-123",
        onesignal_rest_api_key="secret-key",
        site_url="https://ccb.example.org",
        tz="America/Campo_Grande",
    )


@pytest.fixture
def app_config(env_settings: EnvironmentSettings) -> AppConfig:
    return AppConfig(env=env_settings)
