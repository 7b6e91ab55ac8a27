"""Tests for event schemas and configuration."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from probeadopt.config import AdoptionServerConfig, is_hardware_probe
from probeadopt.schemas import LogLevel, ReadinessPayload, StatusEvent, format_timestamp


class TestStatusEvent:
    def test_defaults_to_info(self):
        event = StatusEvent.model_validate({"message": "hello", "adopted": False})
        assert event.level is LogLevel.INFO

    @pytest.mark.parametrize("level", [None, ""])
    def test_null_level_means_info(self, level):
        event = StatusEvent.model_validate({"message": "hello", "adopted": True, "level": level})
        assert event.level is LogLevel.INFO

    def test_rejects_unknown_level(self):
        with pytest.raises(ValidationError):
            StatusEvent.model_validate({"message": "hello", "adopted": False, "level": "debug"})


class TestReadinessPayload:
    def test_wire_format(self):
        payload = ReadinessPayload(
            token="abc",
            expires_at=datetime(2025, 1, 1, 12, 30, 15, 123456, tzinfo=timezone.utc),
            ips=["192.168.1.50"],
        )

        assert payload.to_event() == {
            "token": "abc",
            "expiresAt": "2025-01-01T12:30:15.123Z",
            "ips": ["192.168.1.50"],
        }

    def test_rejects_more_than_32_ips(self):
        with pytest.raises(ValidationError):
            ReadinessPayload(
                token="abc",
                expires_at=datetime.now(timezone.utc),
                ips=[f"1.1.1.{i}" for i in range(33)],
            )


class TestFormatTimestamp:
    def test_converts_to_utc(self):
        value = datetime(2025, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2025-01-01T00:00:00.000Z"


class TestConfig:
    def test_defaults(self, monkeypatch):
        for name in ("ADOPTION_SERVER_PORT", "ADOPTION_SERVER_LIFETIME_MS", "ADOPTION_SERVER_HOST"):
            monkeypatch.delenv(name, raising=False)

        config = AdoptionServerConfig.from_env()
        assert config == AdoptionServerConfig()
        assert config.lifetime_seconds == config.lifetime_ms / 1000

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ADOPTION_SERVER_PORT", "8123")
        monkeypatch.setenv("ADOPTION_SERVER_LIFETIME_MS", "1500")
        monkeypatch.setenv("ADOPTION_SERVER_HOST", "127.0.0.1")

        config = AdoptionServerConfig.from_env()
        assert config.port == 8123
        assert config.lifetime_ms == 1500
        assert config.lifetime_seconds == 1.5
        assert config.host == "127.0.0.1"

    def test_hardware_flag_presence(self, monkeypatch):
        monkeypatch.delenv("GP_HOST_HW", raising=False)
        assert is_hardware_probe() is False

        monkeypatch.setenv("GP_HOST_HW", "false")
        assert is_hardware_probe() is True

        monkeypatch.setenv("GP_HOST_HW", "")
        assert is_hardware_probe() is False
