"""
Custom exception classes for DataJeopardy.

Provides structured error handling across the application.
"""

class DataJeopardyException(Exception):
    """Base exception for all DataJeopardy errors."""
    status_code = 500

    def __init__(self, message: str, error_code: str = None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ValidationException(DataJeopardyException):
    """Raised when a required field is missing, before any store access."""
    status_code = 400


class NotFoundException(DataJeopardyException):
    """Raised when a referenced record does not exist."""
    status_code = 404


class UserNotFoundException(NotFoundException):
    """Raised when a user id is unknown."""

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}", error_code="USER_NOT_FOUND")


class RoutineMissingException(NotFoundException):
    """
    Raised when no handler routine is configured for a threat category.

    Every audit entry must be attributable to a routine, so this is a hard
    stop rather than a default action.
    """
    status_code = 500

    def __init__(self, threat_type: str):
        self.threat_type = threat_type
        super().__init__(f"No handler routine found for {threat_type}", error_code="ROUTINE_MISSING")


class TransactionException(DataJeopardyException):
    """Raised when a multi-step write failed and was rolled back."""
    status_code = 500


class AuthenticationException(DataJeopardyException):
    """Raised for authentication/authorization failures."""
    status_code = 401
