"""Errors raised by the remote API gateway."""

# Used when the error body is missing, unparsable or has no "error" field
GENERIC_ERROR_MESSAGE = "Request failed"


class ApiError(Exception):
    """Non-2xx response from the remote API.

    ``str(error)`` is exactly the server-supplied message.
    """

    def __init__(self, message: str = GENERIC_ERROR_MESSAGE, status_code: int = 0):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404
