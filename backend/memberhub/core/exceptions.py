"""Shared exceptions module."""

from typing import Optional, Union

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError


class MemberHubException(Exception):
    """Base exception for memberhub services."""

    def __init__(self, message: Optional[str] = None):
        """Create a new MemberHubException instance.

        Args:
        ----
            message (str, optional): The error message.

        """
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)


class UnauthorizedAccessException(MemberHubException):
    """Exception raised when the request carries no authenticated identity."""

    def __init__(self, message: Optional[str] = "Authentication required"):
        """Create a new UnauthorizedAccessException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class ForbiddenAccessException(MemberHubException):
    """Exception raised when a user may not perform an action or an invalid transition."""

    def __init__(
        self,
        message: Optional[str] = "User does not have the right to perform this action",
    ):
        """Create a new ForbiddenAccessException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class InvalidArgumentException(MemberHubException):
    """Exception raised for malformed input."""

    def __init__(self, message: Optional[str] = "Invalid argument"):
        """Create a new InvalidArgumentException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class ResourceNotFoundException(MemberHubException):
    """Exception raised when an object is not found or a search matched nothing."""

    def __init__(self, message: Optional[str] = "Object not found"):
        """Create a new ResourceNotFoundException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        super().__init__(message)


class InvalidStateError(MemberHubException):
    """Exception raised when an object is used in a state that does not allow it."""

    pass


class EmailEncryptionError(MemberHubException):
    """Base exception for the email encryption codec."""

    pass


class ConfigurationError(EmailEncryptionError):
    """Raised when the master key is malformed, too short or already wiped."""

    pass


class DecryptionFailure(EmailEncryptionError):
    """Raised when a stored email cannot be decrypted (corrupted or tampered data)."""

    pass


class UnsupportedVersionError(EmailEncryptionError):
    """Raised when a payload carries an encryption version this codec does not know."""

    def __init__(self, version: int):
        """Create a new UnsupportedVersionError instance.

        Args:
        ----
            version (int): The version found on the payload.

        """
        self.version = version
        super().__init__(f"Unsupported encryption version: {version}")


def unpack_validation_error(exc: Union[RequestValidationError, ValidationError]) -> dict:
    """Unpack a Pydantic validation error into a dictionary.

    Args:
    ----
        exc (ValidationError): The Pydantic validation error.

    Returns:
    -------
        dict: The dictionary representation of the validation error.

    """
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        error_messages.append({field: error["msg"]})

    return {"errors": error_messages}
