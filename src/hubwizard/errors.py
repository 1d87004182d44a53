"""Errors raised while acquiring and resolving firmware."""

from typing import Optional


class FirmwareError(Exception):
    """Base class for domain failures that leave the wizard re-editable.

    Each subclass carries a stable ``code`` that ends up in
    ``ResolutionResult.error``.
    """

    code = "FIRMWARE_ERROR"

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message} (cause: {self.original_error})"
        return self.message


class ResolutionFailure(FirmwareError):
    """Official firmware could not be obtained from the catalog."""

    code = "RESOLUTION_FAILED"


class InvalidArchive(FirmwareError):
    """The custom file is not a readable zip archive."""

    code = "INVALID_ARCHIVE"


class MissingMetadata(FirmwareError):
    """The archive has no firmware metadata file."""

    code = "MISSING_METADATA"


class MissingBinary(FirmwareError):
    """The archive has no firmware binary."""

    code = "MISSING_BINARY"


class MalformedMetadata(FirmwareError):
    """The metadata file exists but cannot be parsed."""

    code = "MALFORMED_METADATA"


class UserCancelledPick(Exception):
    """The user dismissed the file picker. Not an error."""


class UnexpectedError(Exception):
    """A failure outside the firmware domain, routed to the alert channel."""

    code = "UNEXPECTED_ERROR"

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
