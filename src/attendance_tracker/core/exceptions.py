class DomainError(Exception):
    """Base exception for business rule violations.

    ``kind`` is the machine-readable name reported to API callers and
    ``status_code`` the HTTP status the controllers answer with.
    """

    kind = "domain_error"
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = "validation_error"
    default_message = "Invalid input"


class NotFoundError(DomainError):
    kind = "not_found"
    status_code = 404
    default_message = "Resource not found"


class AlreadyCheckedInError(DomainError):
    kind = "already_checked_in"
    default_message = "Already checked in today"


class AlreadyCheckedOutError(DomainError):
    kind = "already_checked_out"
    default_message = "Already checked out today"


class NoCheckInFoundError(DomainError):
    kind = "no_check_in_found"
    default_message = "No check-in found for today"


class InvalidOrderError(DomainError):
    """Raised when a check-out timestamp precedes the check-in."""

    kind = "invalid_order"
    default_message = "Check-out cannot be earlier than check-in"


class DuplicateRecordError(DomainError):
    """Raised by the store when (employee, date) already has a record."""

    kind = "duplicate_record"
    status_code = 409
    default_message = "Attendance record already exists for this day"


class StoreUnavailableError(DomainError):
    kind = "store_unavailable"
    status_code = 503
    default_message = "Attendance store is unavailable"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the caller is anonymous."""

    kind = "authentication_error"
    status_code = 401
    default_message = "Authentication required"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = "authorization_error"
    status_code = 403
    default_message = "You do not have permission for this action"
