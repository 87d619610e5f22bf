"""Tests for custom exception hierarchy."""

from fee_reminder.exceptions import (
    AlreadyPaidError,
    ConfigurationError,
    ConflictError,
    FeeReminderError,
    InternalError,
    NotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_fee_reminder_error_is_exception(self) -> None:
        assert isinstance(FeeReminderError("test"), Exception)

    def test_validation_error_names_field(self) -> None:
        err = ValidationError("amount", "must be positive")
        assert isinstance(err, FeeReminderError)
        assert err.field == "amount"
        assert str(err) == "amount: must be positive"

    def test_not_found_names_entity(self) -> None:
        err = NotFoundError("Student", "stu-001")
        assert isinstance(err, FeeReminderError)
        assert err.entity == "Student"
        assert err.entity_id == "stu-001"
        assert str(err) == "Student stu-001 not found"

    def test_already_paid_is_conflict(self) -> None:
        err = AlreadyPaidError("inst-1")
        assert isinstance(err, ConflictError)
        assert err.installment_id == "inst-1"
        assert "inst-1" in str(err)

    def test_referential_integrity_is_conflict(self) -> None:
        assert isinstance(ReferentialIntegrityError("test"), ConflictError)

    def test_configuration_error_is_fee_reminder_error(self) -> None:
        assert isinstance(ConfigurationError("test"), FeeReminderError)

    def test_internal_error_is_fee_reminder_error(self) -> None:
        assert isinstance(InternalError("test"), FeeReminderError)
