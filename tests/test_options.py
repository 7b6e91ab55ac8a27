"""Tests for command option validation and error translation."""

import pytest
from pydantic import ValidationError

from probeadopt.options import InvalidOptionsError, MeasurementOptions, validate_options


class TestValidateOptions:
    def test_public_ip_accepted(self):
        options = validate_options("ping", {"target": "1.1.1.1"})
        assert options.target == "1.1.1.1"
        assert options.packets == 3

    def test_hostname_accepted(self):
        assert validate_options("ping", {"target": "example.com"}).target == "example.com"

    def test_private_ip_rejected_with_friendly_message(self):
        with pytest.raises(InvalidOptionsError) as exc_info:
            validate_options("ping", {"target": "192.168.1.1"})

        assert str(exc_info.value) == "Private IP ranges are not allowed."
        assert exc_info.value.command == "ping"
        assert isinstance(exc_info.value.error, ValidationError)

    def test_special_case_wins_over_other_errors(self):
        with pytest.raises(InvalidOptionsError) as exc_info:
            validate_options("ping", {"target": "10.0.0.1", "packets": 100})

        assert str(exc_info.value) == "Private IP ranges are not allowed."

    def test_generic_message_fallback(self):
        with pytest.raises(InvalidOptionsError) as exc_info:
            validate_options("traceroute", {"target": "1.1.1.1", "packets": 0})

        message = str(exc_info.value)
        assert message.startswith("invalid options for command 'traceroute': ")
        assert "packets" in message

    def test_missing_target(self):
        with pytest.raises(InvalidOptionsError) as exc_info:
            validate_options("ping", {})

        assert "invalid options for command 'ping'" in str(exc_info.value)
        assert "target" in str(exc_info.value)


class TestInvalidOptionsError:
    def test_built_from_validation_error(self):
        try:
            MeasurementOptions.model_validate({"target": ""})
        except ValidationError as e:
            error = InvalidOptionsError("mtr", e)

        assert str(error).startswith("invalid options for command 'mtr': target: ")
