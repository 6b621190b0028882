"""Data models for the agenda file."""

from typing import Any, Optional, List
from pydantic import BaseModel, Field, field_validator


class EventRecord(BaseModel):
    """A single scheduled occurrence as written in the agenda."""
    id: Optional[str] = Field(default=None, description="Stable event identifier")
    start: Optional[str] = Field(default=None, description="ISO 8601 start, with or without offset")
    title: Optional[str] = Field(default=None, description="Event title")
    location: Optional[str] = Field(default=None, description="Event location")
    url: Optional[str] = Field(default=None, description="Click-through URL for this event")

    model_config = {
        "frozen": True,
        "extra": "ignore",
        "json_schema_extra": {
            "example": {
                "id": "culto-2024-06-10",
                "start": "2024-06-10T19:30:00-04:00",
                "title": "Culto Oficial",
                "location": "Sede",
            }
        },
    }

    @field_validator("id", "title", "location", "url", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        return value if isinstance(value, str) else None

    @field_validator("start", mode="before")
    @classmethod
    def _keep_string_start(cls, value: Any) -> Any:
        # Anything that is not a string is left for the window filter to drop
        return value if isinstance(value, str) else None


class AgendaDefaults(BaseModel):
    """Agenda-wide defaults."""
    url: Optional[str] = Field(default=None, description="Default click-through URL")


class Agenda(BaseModel):
    """The whole agenda file."""
    defaults: AgendaDefaults = Field(default_factory=AgendaDefaults)
    events: List[EventRecord] = Field(default_factory=list)

    @field_validator("defaults", mode="before")
    @classmethod
    def _null_defaults(cls, value: Any) -> Any:
        return value if value is not None else {}

    @field_validator("events", mode="before")
    @classmethod
    def _null_events(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            # Entries that are not objects cannot carry a start
            return [item for item in value if isinstance(item, dict)]
        return value
