from typing import Any


class CustomException(Exception):
    """
    Base for all custom exceptions
    """

    def __init__(self, message, exception: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.exception = exception

    def __str__(self):
        if self.exception:
            return f"{self.message}\nException: {self.exception}"

        return self.message


class ApiError(CustomException):
    """
    Normalized failure of a call to the remote API.
    """

    def __init__(
        self,
        status: int,
        message: str = "Request failed",
        error_code: str | None = None,
        details: Any = None,
        exception: Exception | None = None,
    ) -> None:
        """
        :param status: HTTP status of the response, 0 when no response was received.
        :param message: Human readable message, taken from the error body when present.
        :param error_code: Server error code such as ``AUTH_003``.
        :param details: Raw error body or transport error description.
        :param exception: The underlying exception, if any.
        """
        super().__init__(message, exception)
        self.status = status
        self.error_code = error_code
        self.details = details

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(status={self.status}, "
            f"message={self.message!r}, error_code={self.error_code!r})"
        )
