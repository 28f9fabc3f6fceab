class LibraryError(Exception):
    """Base class for declined library operations.

    Carries the message shown to the caller and the HTTP status the
    controllers answer with.
    """

    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(LibraryError):
    """Requested entity does not exist."""

    status_code = 404
    default_message = "Not found"


class ForbiddenError(LibraryError):
    """Caller is authenticated but not allowed to act on this entity."""

    status_code = 403
    default_message = "Access denied"


class NoCopiesAvailableError(LibraryError):
    default_message = "No copies available"


class DuplicateBorrowError(LibraryError):
    default_message = "You already borrowed this book"


class BorrowLimitExceededError(LibraryError):
    default_message = "Maximum active borrows reached"


class AlreadyReturnedError(LibraryError):
    default_message = "Book already returned"


class InvalidStateError(LibraryError):
    """Operation is not valid for the record's current lifecycle state."""

    default_message = "Operation not allowed in the current state"


class InvalidArgumentError(LibraryError):
    """Malformed or out-of-range input."""

    default_message = "Invalid argument"


class ReservedNameError(LibraryError):
    status_code = 403
    default_message = "Cannot use reserved username"


class NoFieldsProvidedError(LibraryError):
    default_message = "No fields provided for update"


class NoPendingRequestError(LibraryError):
    default_message = "No pending update request found"


class InvalidActionError(LibraryError):
    default_message = 'Invalid action. Use "approve" or "reject"'


class AuthenticationError(LibraryError):
    status_code = 401
    default_message = "Invalid username or password"


class AccountLockedError(LibraryError):
    status_code = 429
    default_message = "Too many failed attempts. Try again later."
