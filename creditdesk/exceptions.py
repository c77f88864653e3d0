"""Custom exceptions for CreditDesk."""


class CreditDeskError(Exception):
    """Base exception for all CreditDesk errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class InvalidCreditInputError(CreditDeskError):
    """Raised when a credit input violates a precondition with no defined fallback."""

    def __init__(self, field: str, value, reason: str):
        details = {
            'field': field,
            'value': value
        }
        message = f"Invalid credit input '{field}': {reason}"
        super().__init__(message, details)


class WizardError(CreditDeskError):
    """Raised when a wizard cannot be built from the supplied steps."""
    pass


class EmptyStepRegistryError(WizardError):
    """Raised when a step registry is built without any step."""

    def __init__(self):
        super().__init__("Step registry must contain at least one step")


class DuplicateStepError(WizardError):
    """Raised when two steps of a registry share the same id."""

    def __init__(self, step_id: str):
        super().__init__(f"Duplicate step id '{step_id}'", {'step_id': step_id})


class DocumentGenerationError(CreditDeskError):
    """Raised when the payment plan document cannot be produced."""
    pass
