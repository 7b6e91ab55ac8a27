"""Runtime configuration read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_PORT = 50005
DEFAULT_LIFETIME_MS = 10 * 60 * 1000
DEFAULT_HOST = "0.0.0.0"

HARDWARE_PROBE_ENV = "GP_HOST_HW"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class AdoptionServerConfig:
    """Listen address and lifetime of the adoption server."""

    port: int = DEFAULT_PORT
    lifetime_ms: int = DEFAULT_LIFETIME_MS
    host: str = DEFAULT_HOST

    @property
    def lifetime_seconds(self) -> float:
        return self.lifetime_ms / 1000

    @classmethod
    def from_env(cls) -> AdoptionServerConfig:
        """Build config from ADOPTION_SERVER_* variables, falling back to defaults."""
        return cls(
            port=int(os.environ.get("ADOPTION_SERVER_PORT", DEFAULT_PORT)),
            lifetime_ms=int(os.environ.get("ADOPTION_SERVER_LIFETIME_MS", DEFAULT_LIFETIME_MS)),
            host=os.environ.get("ADOPTION_SERVER_HOST", DEFAULT_HOST),
        )


def is_hardware_probe() -> bool:
    """True when running on dedicated probe hardware.

    Only presence matters: any non-empty value, including "false", enables it.
    """
    return bool(os.environ.get(HARDWARE_PROBE_ENV))


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logging for CLI entry points."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
