"""Custom exception hierarchy for fee-reminder."""


class FeeReminderError(Exception):
    """Base exception for all fee-reminder errors."""


class ValidationError(FeeReminderError):
    """Raised when a required field is missing or malformed.

    Always raised before any mutation takes place.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class NotFoundError(FeeReminderError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(FeeReminderError):
    """Raised when an entity is in an invalid state for the operation."""


class AlreadyPaidError(ConflictError):
    """Raised when paying an installment that is already paid."""

    def __init__(self, installment_id: str) -> None:
        super().__init__(f"Installment {installment_id} is already paid")
        self.installment_id = installment_id


class ReferentialIntegrityError(ConflictError):
    """Raised when deleting an entity that is still referenced."""


class ConfigurationError(FeeReminderError):
    """Raised when configuration is invalid or missing."""


class InternalError(FeeReminderError):
    """Raised when the underlying storage fails."""
