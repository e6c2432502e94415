# server/core/errors.py

from fastapi import status


class MiniBaseError(Exception):
    """
    Base class for every error the engine reports to a caller.
    `message` is what the caller sees; it never includes SQL or internal detail.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ConfigurationError(MiniBaseError):
    message = "Invalid configuration"


class InvalidIdentifier(MiniBaseError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid identifier. Use only letters, numbers, and underscores."


class InvalidRequest(MiniBaseError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class TableNotFound(MiniBaseError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Table not found"


class RecordNotFound(MiniBaseError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Record not found"


class TableExists(MiniBaseError):
    status_code = status.HTTP_409_CONFLICT
    message = "Table already exists"


# -------------------------------
# Protection policy violations
# -------------------------------

class ProtectedRecord(MiniBaseError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Cannot delete the default admin user"


class ProtectedTable(MiniBaseError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Cannot delete system tables"


class LastAdminProtected(MiniBaseError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Cannot delete the last admin user"


# -------------------------------
# Credentials & sessions
# -------------------------------

class UsernameTaken(MiniBaseError):
    status_code = status.HTTP_409_CONFLICT
    message = "Username already exists"


class AuthFailed(MiniBaseError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid username or password"


class NoToken(MiniBaseError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"


class InvalidToken(MiniBaseError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"


class StorageError(MiniBaseError):
    message = "Database operation failed"
