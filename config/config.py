"""Configuration management for the reminder scheduler."""

import os
import yaml
from pathlib import Path
from typing import Optional, Any, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"
DEFAULT_TIMEZONE = "America/Campo_Grande"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when the configuration cannot be loaded or is incomplete."""


class ReminderRule(BaseModel):
    """How long before an event a reminder fires."""
    offset_minutes: int = Field(gt=0, description="Minutes before event to remind")
    label: str = Field(description="Human-readable offset used in the message")
    enabled: bool = Field(default=True, description="Whether this rule is enabled")


def default_rules() -> List[ReminderRule]:
    return [
        ReminderRule(offset_minutes=240, label="4 horas"),
        ReminderRule(offset_minutes=60, label="1 hora"),
    ]


class OneSignalConfig(BaseModel):
    """Notification service configuration."""
    api_url: str = Field(
        default="https://onesignal.com/api/v1/notifications",
        description="Notification creation endpoint",
    )
    language: str = Field(default="pt", description="Language key for headings/contents")
    segment: str = Field(default="Subscribed Users", description="Audience segment")
    timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP timeout")


class ScheduleConfig(BaseModel):
    """Event window and reminder planning configuration."""
    namespace: str = Field(default="agenda-ccb", description="Prefix of every dedup key")
    window_days: int = Field(default=7, gt=0, description="Lookahead window in days")
    grace_minutes: int = Field(default=60, ge=0, description="Look-back for recently started events")
    safety_margin_minutes: int = Field(default=1, ge=0, description="Minimum lead time for send_after")
    max_concurrency: int = Field(default=1, ge=1, description="Dispatches in flight at once")
    title: str = Field(default="Lembrete CCB", description="Notification heading")
    fallback_title: str = Field(default="Culto", description="Event title when none is given")
    message_template: str = Field(
        default="Daqui {label}: {title}{place}. Hoje {when}.",
        description="Template for the notification body",
    )
    offsets: List[ReminderRule] = Field(default_factory=default_rules, description="Reminder rules")


class AgendaConfig(BaseModel):
    """Agenda source configuration."""
    path: str = Field(default="agenda.json", description="Path to the agenda JSON file")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    show_timestamps: bool = Field(default=False, description="Whether to prefix log lines with the time")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


class EnvironmentSettings(BaseSettings):
    """Secrets and deployment values read from the process environment."""
    model_config = SettingsConfigDict(extra="ignore", env_ignore_empty=True)

    onesignal_app_id: str = ""
    onesignal_rest_api_key: str = ""
    site_url: str = ""
    tz: str = DEFAULT_TIMEZONE

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.tz)


class AppConfig(BaseModel):
    """Application configuration."""
    model_config = {"frozen": True}

    onesignal: OneSignalConfig = Field(default_factory=OneSignalConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    agenda: AgendaConfig = Field(default_factory=AgendaConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    env: EnvironmentSettings = Field(default_factory=EnvironmentSettings)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in configuration data.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    if isinstance(data, dict):
        return {key: expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        if data.startswith("${") and data.endswith("}"):
            var_part = data[2:-1]
            if ":" in var_part:
                var_name, default_value = var_part.split(":", 1)
                return os.getenv(var_name, default_value)
            return os.getenv(var_part, data)
        return data
    else:
        return data


def load_config(
    config_path: Optional[Path] = None,
    env: Optional[EnvironmentSettings] = None,
) -> AppConfig:
    """Load configuration from the YAML file and the environment.

    Args:
        config_path: Path to config YAML file. Defaults to config/config.yaml
        env: Pre-built environment settings (read from os.environ when omitted)

    Returns:
        AppConfig: Loaded configuration

    Raises:
        ConfigurationError: If the file is missing or its contents are invalid
    """
    load_dotenv()

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration must be a mapping: {config_path}")

    config_data = expand_env_vars(config_data)
    config_data.pop("env", None)

    try:
        return AppConfig(**config_data, env=env or EnvironmentSettings())
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def validate_config(config: AppConfig, require_credentials: bool = True) -> List[str]:
    """Validate that all required configuration values are present and valid.

    Args:
        config: Application configuration
        require_credentials: Whether the OneSignal secrets must be set

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if require_credentials and (
        not config.env.onesignal_app_id or not config.env.onesignal_rest_api_key
    ):
        errors.append("Faltam secrets: ONESIGNAL_APP_ID e/ou ONESIGNAL_REST_API_KEY.")

    try:
        ZoneInfo(config.env.tz)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"Unknown time zone: {config.env.tz}")

    if not any(rule.enabled for rule in config.schedule.offsets):
        errors.append("No reminder offsets enabled")

    return errors
