"""Pydantic schemas for adoption control-channel events."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# Maximum number of local addresses reported in a readiness event
MAX_REPORTED_IPS = 32


class LogLevel(str, Enum):
    """Severity attached to an inbound status event."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"


def format_timestamp(value: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a Z suffix."""
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# --- Inbound ---


class StatusEvent(BaseModel):
    """Adoption status pushed by the control channel."""

    message: str
    adopted: bool
    level: LogLevel = LogLevel.INFO

    @field_validator("level", mode="before")
    @classmethod
    def default_level(cls, value):
        # null and empty levels mean info, same as an absent one
        return value or LogLevel.INFO


# --- Outbound ---


class AdoptionTicket(BaseModel):
    """Token and expiry handed out by a freshly started adoption server."""

    token: str
    expires_at: datetime


class ReadinessPayload(BaseModel):
    """Announces a live local adoption endpoint and how to reach it."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    expires_at: datetime = Field(..., alias="expiresAt")
    ips: list[str] = Field(default_factory=list, max_length=MAX_REPORTED_IPS)

    @field_serializer("expires_at")
    def _serialize_expires_at(self, value: datetime) -> str:
        return format_timestamp(value)

    def to_event(self) -> dict:
        """Wire representation sent on the channel."""
        return self.model_dump(by_alias=True)
