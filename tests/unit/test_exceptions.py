"""Tests for probe_telemetry.exceptions."""

import pytest

from probe_telemetry.exceptions import (
    ApplicationError,
    ConfigurationError,
    NotFoundError,
    SessionStateError,
    TransportError,
    ValidationError,
)


@pytest.mark.parametrize("error_cls", [TransportError, NotFoundError, ValidationError, ConfigurationError])
def test_errors_share_application_base(error_cls):
    error = error_cls()

    assert isinstance(error, ApplicationError)
    assert str(error)


def test_keyword_arguments_become_attributes():
    error = NotFoundError("gone", client_id="c1")

    assert error.client_id == "c1"
    assert str(error) == "gone"


def test_transport_error_from_response():
    error = TransportError.from_response(502, "Bad Gateway", "http://telemetry.test/api/clients")

    assert error.status_code == 502
    assert error.status_text == "Bad Gateway"
    assert error.url == "http://telemetry.test/api/clients"
    assert str(error) == "API error: 502 Bad Gateway"


def test_transport_error_without_status():
    error = TransportError()

    assert error.status_code is None
    assert str(error) == "Network communication error"


def test_transport_error_with_missing_reason():
    assert str(TransportError.from_response(418, None)) == "API error: 418"


def test_session_state_error_invalid_transition():
    invalid = SessionStateError.invalid_transition("save", "closed")

    assert invalid.operation == "save"
    assert invalid.state == "closed"
    assert "save" in str(invalid)
