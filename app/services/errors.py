"""Errors raised by account operations; the API maps status_code and message onto the response."""


class AccountServiceError(Exception):
    """Base for account operation failures reported to the client."""

    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AccountConflictError(AccountServiceError):
    """Email or username already belongs to an account."""

    def __init__(self, message: str = "User already exists") -> None:
        super().__init__(message)


class AccountNotFoundError(AccountServiceError):
    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class InvalidCredentialsError(AccountServiceError):
    def __init__(self, message: str = "Please provide the correct information") -> None:
        super().__init__(message)


class InvalidTokenError(AccountServiceError):
    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class PasswordMismatchError(AccountServiceError):
    def __init__(self, message: str = "Passwords don't match!") -> None:
        super().__init__(message)


class InvalidUploadError(AccountServiceError):
    """Upload missing or rejected by storage checks."""


class MailDeliveryError(AccountServiceError):
    """Activation email could not be dispatched."""

    status_code = 500


class AvatarStorageError(AccountServiceError):
    """Stored avatar file could not be removed or written."""

    status_code = 500


class InvalidPasswordError(AccountServiceError):
    """New password cannot be stored (bcrypt reads at most 72 bytes)."""
