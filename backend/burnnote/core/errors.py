# burnnote/core/errors.py

from typing import Optional


class BurnNoteError(Exception):
    """Base error for every failure the message service reports."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail


class ValidationError(BurnNoteError):
    status_code = 400
    detail = "Invalid request"


class NotFound(BurnNoteError):
    status_code = 404
    detail = "Message not found"


class Expired(BurnNoteError):
    status_code = 410
    detail = "Message has expired"


class InvalidKey(BurnNoteError):
    # Wrong key and tampered ciphertext are deliberately the same error
    status_code = 400
    detail = "Invalid decryption key"


class EntropyUnavailable(BurnNoteError):
    detail = "Secure random source unavailable"


class StoreError(BurnNoteError):
    detail = "Message store unavailable"


class AuthenticationFailed(Exception):
    """Raised by the cipher engine when the GCM tag does not verify."""
