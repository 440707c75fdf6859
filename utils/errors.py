"""
Domain errors raised by the verification and reservation services.

Each error carries the HTTP status and the user-facing message the API
returns for it; ``app.py`` turns them into ``{"success": false, ...}`` bodies.
"""
from typing import Optional


class ReservationServiceError(Exception):
    status_code = 500
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"success": False, "message": self.message}


class InvalidInput(ReservationServiceError):
    status_code = 400
    default_message = "A required field is missing."


class InvalidOrExpiredCode(ReservationServiceError):
    # Wrong, expired and already-used codes all map here
    status_code = 400
    default_message = "The verification code is invalid or has expired."


class VerificationRequired(ReservationServiceError):
    status_code = 401
    default_message = "Email verification is required before making a reservation."


class StorageError(ReservationServiceError):
    status_code = 500
    default_message = "Database error. Please try again later."

    def __init__(self, cause: Exception, message: Optional[str] = None):
        super().__init__(message)
        self.cause = cause
        self.__cause__ = cause

    def to_response(self) -> dict:
        return {"success": False, "message": self.message, "error": "storage_error"}


class NotificationFailed(ReservationServiceError):
    status_code = 500
    default_message = "Failed to send verification email."

    def __init__(self, cause: Optional[Exception] = None, message: Optional[str] = None):
        super().__init__(message)
        self.cause = cause

    def to_response(self) -> dict:
        return {"success": False, "message": self.message, "error": "notification_failed"}
