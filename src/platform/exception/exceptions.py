from enum import StrEnum


class ErrorKind(StrEnum):
    NOT_FOUND = 'NotFound'
    UNAUTHORIZED = 'Unauthorized'
    FORBIDDEN = 'Forbidden'
    VALIDATION_FAILED = 'ValidationFailed'
    STAFF_NOT_ASSIGNED = 'StaffNotAssigned'
    EVENT_NOT_BOOKABLE = 'EventNotBookable'
    CAPACITY_EXCEEDED = 'CapacityExceeded'
    DUPLICATE_BOOKING = 'DuplicateBooking'
    PAYMENT_REQUIRED = 'PaymentRequired'
    PAYMENT_NOT_CONFIRMED = 'PaymentNotConfirmed'
    PAYMENT_PENDING = 'PaymentPending'
    NOT_OWNER = 'NotOwner'
    NOT_CANCELLABLE = 'NotCancellable'
    TICKET_NOT_ACTIVE = 'TicketNotActive'
    EVENT_WINDOW_CLOSED = 'EventWindowClosed'
    NOT_CHECKED_IN = 'NotCheckedIn'
    INCONSISTENT_STATE = 'InconsistentState'
    INTERNAL_ERROR = 'InternalError'


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    retryable: bool = False

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    kind = ErrorKind.VALIDATION_FAILED

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class AuthenticationError(CustomBaseError):
    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class ForbiddenError(CustomBaseError):
    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class StaffNotAssignedError(CustomBaseError):
    kind = ErrorKind.STAFF_NOT_ASSIGNED

    def __init__(self, message: str = 'Staff member is not assigned to this event') -> None:
        super().__init__(message, 403)


class NotOwnerError(CustomBaseError):
    kind = ErrorKind.NOT_OWNER

    def __init__(self, message: str = 'Ticket belongs to another attendee') -> None:
        super().__init__(message, 403)


class EventNotBookableError(ConflictError):
    kind = ErrorKind.EVENT_NOT_BOOKABLE


class CapacityExceededError(ConflictError):
    kind = ErrorKind.CAPACITY_EXCEEDED

    def __init__(self, message: str = 'Event is sold out') -> None:
        super().__init__(message)


class DuplicateBookingError(ConflictError):
    kind = ErrorKind.DUPLICATE_BOOKING

    def __init__(self, message: str = 'Attendee already holds a ticket for this event') -> None:
        super().__init__(message)


class NotCancellableError(ConflictError):
    kind = ErrorKind.NOT_CANCELLABLE


class TicketNotActiveError(ConflictError):
    kind = ErrorKind.TICKET_NOT_ACTIVE


class EventWindowClosedError(ConflictError):
    kind = ErrorKind.EVENT_WINDOW_CLOSED


class NotCheckedInError(ConflictError):
    kind = ErrorKind.NOT_CHECKED_IN

    def __init__(self, message: str = 'Ticket has no entry scan to exit from') -> None:
        super().__init__(message)


class InconsistentStateError(ConflictError):
    kind = ErrorKind.INCONSISTENT_STATE


class PaymentRequiredError(CustomBaseError):
    kind = ErrorKind.PAYMENT_REQUIRED

    def __init__(self, message: str = 'Payment is required for this event') -> None:
        super().__init__(message, 402)


class PaymentNotConfirmedError(CustomBaseError):
    kind = ErrorKind.PAYMENT_NOT_CONFIRMED

    def __init__(self, message: str = 'Payment could not be confirmed') -> None:
        super().__init__(message, 402)


class PaymentPendingError(CustomBaseError):
    """Gateway did not answer in time; the client may retry with the same payment reference."""

    kind = ErrorKind.PAYMENT_PENDING
    retryable = True

    def __init__(self, message: str = 'Payment confirmation is still pending') -> None:
        super().__init__(message, 503)


class InternalError(CustomBaseError):
    kind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str = 'Internal server error') -> None:
        super().__init__(message, 500)


class IdentifierCollisionError(InternalError):
    """A generated ticket number or verification token already exists; regenerate and retry."""

    def __init__(self, message: str = 'Generated ticket identifier collided') -> None:
        super().__init__(message)
