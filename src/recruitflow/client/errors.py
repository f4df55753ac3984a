"""Error taxonomy of the client core."""


class ClientError(Exception):
    """Base class for everything the client core raises."""


class FormValidationError(ClientError):
    """Input rejected before any network call (missing or inconsistent form fields)."""


class UnexpectedResponseError(ClientError):
    """Transport failure or a response that is not JSON."""


class ApiError(ClientError):
    """The gateway answered with a structured ``{error}`` / ``{message}`` failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotAuthenticatedError(ClientError):
    """The operation needs a signed-in profile."""


class NotConnectedError(ClientError):
    """The operation needs a connected Google Calendar account."""
