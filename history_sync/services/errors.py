"""
Failures raised at the submissions fetch boundary.

Each error carries a user-facing message; the reconciler shows it as-is.
"""


class HistoryFetchError(Exception):
    """Base class for failures fetching history data."""

    user_message = "Unable to load history"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class TransportError(HistoryFetchError):
    """Connectivity problem or timeout; the request never produced a response."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Network Error: {message}")


class DecodeError(HistoryFetchError):
    """The response body did not match the expected shape."""

    user_message = "Failed to decode response"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__()
        self.detail = detail


class ServerError(HistoryFetchError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


_STATUS_MESSAGES = {
    400: "Invalid request format",
    401: "Your session has expired. Please sign in again",
    500: "Server error. Please try again later",
}


def message_for_status(status_code: int) -> str:
    return _STATUS_MESSAGES.get(status_code, f"Request failed: {status_code}")
