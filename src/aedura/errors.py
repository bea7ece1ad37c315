"""Error taxonomy for the signup and login core.

Client errors (``InvalidPayload``, ``DuplicateEmail``, ``InvalidCredentials``)
carry a message that is safe to return verbatim. Server errors
(``ConfigurationError``, ``TransientStorageError``) keep their detail for the
logs and expose only a generic message.
"""


class AuthError(Exception):
    """Base class for every error raised by the auth core."""

    status_code = 500
    public_message = "Internal server error"
    headers: dict | None = None

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def client_message(self) -> str:
        return self.message


class InvalidPayload(AuthError):
    status_code = 400
    public_message = "Invalid request payload"


class DuplicateEmail(AuthError):
    status_code = 409
    public_message = "An account with this email already exists"


class InvalidCredentials(AuthError):
    status_code = 401
    public_message = "Invalid email or password"

    def __init__(self) -> None:
        # same message whether the email or the password was wrong
        super().__init__(self.public_message)


class Unauthenticated(AuthError):
    """No valid session token accompanied the request."""

    status_code = 401
    public_message = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class ConfigurationError(AuthError):
    """Missing or invalid server configuration (secrets, service credentials)."""

    @property
    def client_message(self) -> str:
        return self.public_message


class TransientStorageError(AuthError):
    """The user directory could not be reached; safe to retry."""

    @property
    def client_message(self) -> str:
        return self.public_message
