"""Exception classes for the multipart upload workflow."""

from enum import Enum


class CancelReason(str, Enum):
    """Why an in-flight upload attempt was cancelled."""

    PAUSING = "pausing upload, not an actual error"
    ABORTED = "upload aborted by caller"


class UploaderError(Exception):
    """Base error for the upload workflow."""


class InvalidConfigurationError(UploaderError):
    """Raised when uploader options fail validation."""

    def __init__(self, errors: list[str]):
        """Initialize InvalidConfigurationError with list of error messages.

        Args:
            errors: List of error messages from validation.
        """
        message = "\n".join(errors)
        super().__init__(message)
        self.errors = errors


class ChunkReleasedError(UploaderError):
    """Raised when data is requested from a chunk that was already released."""


class SessionClosedError(UploaderError):
    """Raised when a finished upload session is started again."""


class TransportError(UploaderError):
    """Base error for transport failures surfaced to the session."""


class UploadCancelled(UploaderError):
    """Raised through the transport failure path when an attempt is cancelled.

    The session inspects ``reason`` to tell an intentional cancellation
    (pause, resume, restart, abort) apart from a genuine transport failure.
    """

    def __init__(self, reason: CancelReason):
        """Initialize UploadCancelled.

        Args:
            reason: The cause passed to the cancel token.
        """
        super().__init__(reason.value)
        self.reason = reason
