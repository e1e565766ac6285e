"""Status definitions and exceptions for ProductCatalog.

This module provides:
    - Status: enumeration of possible application states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - Specific exceptions (e.g., ValidationException) raised by the catalog, store and session layers
"""
import enum
import logging
from typing import Dict, Iterable, Optional


class Status(enum.StrEnum):
    """Enumeration of application status codes."""
    UnknownStatus = enum.auto()
    Okay = enum.auto()

    # Config status
    ConfigNotFound = enum.auto()
    ConfigInvalid = enum.auto()

    # Catalog status
    ValidationFailed = enum.auto()
    ProductNotFound = enum.auto()
    StoreUnavailable = enum.auto()
    Busy = enum.auto()

    # Session status
    UserExists = enum.auto()
    InvalidCredentials = enum.auto()
    PasswordMismatch = enum.auto()
    SessionUnavailable = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status. Please check the settings.',
    Status.Okay: 'Everything is okay.',

    Status.ConfigNotFound: 'Could not find the catalog config.',
    Status.ConfigInvalid: 'The catalog config seems to be incomplete, or contains invalid values.',

    Status.ValidationFailed: 'Please fill in all fields.',
    Status.ProductNotFound: 'The product could not be found. It may have been removed.',
    Status.StoreUnavailable: 'The product store could not be read or written. Please try again.',
    Status.Busy: 'Another operation is still in progress.',

    Status.UserExists: 'User already exists.',
    Status.InvalidCredentials: 'Invalid email or password.',
    Status.PasswordMismatch: 'Passwords do not match.',
    Status.SessionUnavailable: 'The user database could not be read or written.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in ProductCatalog.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): User-facing message for the status.
        log_level (int): Level the exception is logged with on creation.

    Args:
        message (str): Optional additional context for the error.
    """
    status = Status.UnknownStatus
    log_level = logging.ERROR

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.log(self.log_level, exception_message)

        from ..ui.actions import signals
        signals.error.emit(message or self.status_message)


class UnknownException(BaseStatusException):
    """Exception for an unknown error during status processing."""
    pass


class ConfigNotFoundException(BaseStatusException):
    """Exception raised when the catalog configuration file cannot be found."""
    status = Status.ConfigNotFound


class ConfigInvalidException(BaseStatusException):
    """Exception raised when the catalog configuration is invalid or malformed."""
    status = Status.ConfigInvalid


class ValidationException(BaseStatusException):
    """Exception raised when product or account input is missing or malformed.

    Attributes:
        fields (tuple[str, ...]): Names of the offending input fields.
    """
    status = Status.ValidationFailed
    log_level = logging.WARNING

    def __init__(self, message: str = None, fields: Optional[Iterable[str]] = None):
        self.fields = tuple(fields or ())
        super().__init__(message)


class NotFoundException(BaseStatusException):
    """Exception raised when an edit or update references an unknown product id."""
    status = Status.ProductNotFound
    log_level = logging.WARNING


class StoreUnavailableException(BaseStatusException):
    """Exception raised when the record store's backing medium cannot be read or written."""
    status = Status.StoreUnavailable


class BusyException(BaseStatusException):
    """Exception raised when a catalog operation is started while another is in flight."""
    status = Status.Busy
    log_level = logging.WARNING


class UserExistsException(BaseStatusException):
    """Exception raised when signing up with an email that is already registered."""
    status = Status.UserExists
    log_level = logging.WARNING


class InvalidCredentialsException(BaseStatusException):
    """Exception raised when the email is unknown or the password does not match."""
    status = Status.InvalidCredentials
    log_level = logging.WARNING


class PasswordMismatchException(BaseStatusException):
    """Exception raised when the sign-up password and its confirmation differ."""
    status = Status.PasswordMismatch
    log_level = logging.WARNING


class SessionUnavailableException(BaseStatusException):
    """Exception raised when the user and session database cannot be accessed."""
    status = Status.SessionUnavailable
