"""Validation of measurement command options."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from probeadopt.local_ips import is_private_ip

# Error types with a fixed user-facing message; checked before the generic one
ERROR_MESSAGES: dict[str, str] = {
    "ip_private": "Private IP ranges are not allowed.",
}


def _describe(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        loc = ".".join(str(p) for p in detail["loc"])
        parts.append(f"{loc}: {detail['msg']}" if loc else detail["msg"])
    return "; ".join(parts)


class InvalidOptionsError(Exception):
    """Raised when a command receives options that fail validation."""

    def __init__(self, command: str, error: ValidationError):
        self.command = command
        self.error = error

        special = next((d for d in error.errors() if d["type"] in ERROR_MESSAGES), None)
        if special is not None:
            message = ERROR_MESSAGES[special["type"]]
        else:
            message = f"invalid options for command '{command}': {_describe(error)}"

        super().__init__(message)


class MeasurementOptions(BaseModel):
    """Options shared by measurement commands."""

    target: str = Field(..., min_length=1, max_length=255)
    packets: int = Field(default=3, ge=1, le=16)

    @field_validator("target")
    @classmethod
    def reject_private_ip(cls, value: str) -> str:
        try:
            private = is_private_ip(value)
        except ValueError:
            # Hostname, resolved later
            return value
        if private:
            raise PydanticCustomError("ip_private", "Private IP ranges are not allowed")
        return value


def validate_options(command: str, options: dict[str, Any]) -> MeasurementOptions:
    """Parse raw options, translating failures into InvalidOptionsError."""
    try:
        return MeasurementOptions.model_validate(options)
    except ValidationError as e:
        raise InvalidOptionsError(command, e) from e
