"""Unit tests for the error taxonomy."""

import pytest
from deployctl.core.errors import (
    ContentVerificationError,
    DeployError,
    ErrorDetails,
    JournalLockedError,
    OperationRecordError,
    SerializationError,
    TransportError,
    VersionParseError,
)


class TestErrorName:
    """Tests for DeployError.error_name."""

    @pytest.mark.parametrize(
        ("error", "name"),
        [
            (ContentVerificationError("x"), "content-verification"),
            (JournalLockedError("x"), "journal-locked"),
            (TransportError("x"), "transport"),
            (OperationRecordError("x"), "operation-record"),
            (DeployError("x"), "deploy"),
        ],
    )
    def test_kebab_case(self, error: DeployError, name: str) -> None:
        assert error.error_name == name

    def test_details(self) -> None:
        details = TransportError("HTTP 404").details()
        assert details == ErrorDetails(name="transport", message="HTTP 404")
        assert details.to_dict() == {"name": "transport", "message": "HTTP 404"}


class TestHierarchy:
    """Tests for the exception hierarchy."""

    def test_record_errors_are_serialization_errors(self) -> None:
        assert issubclass(OperationRecordError, SerializationError)

    def test_version_errors_are_value_errors(self) -> None:
        with pytest.raises(ValueError):
            raise VersionParseError("1.x")
