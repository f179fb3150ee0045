from typing import Iterable, List, Optional, Tuple


class VendorWorkflowError(Exception):
    """Base exception for vendor onboarding errors"""

    status_code = 400

    def __init__(self, message: str, details: Optional[object] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(VendorWorkflowError):
    """
    Raised when input is missing or malformed.
    Carries every failing field so callers can show all problems at once.
    """

    status_code = 422

    def __init__(self, issues: Iterable[Tuple[str, str]], message: str = "Validation failed"):
        self.issues: List[Tuple[str, str]] = list(issues)
        super().__init__(message, [{"field": f, "message": m} for f, m in self.issues])

    @property
    def fields(self) -> List[str]:
        return [f for f, _ in self.issues]


class NotFoundError(VendorWorkflowError):
    """Raised when a registration or document does not exist"""

    status_code = 404


class InvalidTransitionError(VendorWorkflowError):
    """Raised when a status change is not legal from the current state"""

    status_code = 409

    def __init__(self, message: str, current_status: Optional[str] = None, operation: Optional[str] = None):
        details = {"currentStatus": current_status, "operation": operation} if operation else None
        super().__init__(message, details)
        self.current_status = current_status
        self.operation = operation


class ImmutableStateError(VendorWorkflowError):
    """Raised when a registration can no longer be edited by the applicant"""

    status_code = 409


class UnsupportedMediaTypeError(VendorWorkflowError):
    status_code = 415


class PayloadTooLargeError(VendorWorkflowError):
    status_code = 413


class DependencyError(VendorWorkflowError):
    """Raised when the file store or another external collaborator fails"""

    status_code = 502
