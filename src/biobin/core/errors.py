from typing import Optional


class IngestionError(Exception):
    """Base class for everything that can go wrong while fetching readings."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def user_message(self) -> str:
        return self.message


class TransportError(IngestionError):
    """The backend could not be reached (refused connection, DNS, timeout)."""

    def user_message(self) -> str:
        return (f"Failed to load sensor data: {self.message}. "
                "Please check the server and network connection.")


class ResponseError(IngestionError):
    """The backend answered with a non-success status."""

    def __init__(self, status: int, reason: str = "", detail: str = ""):
        head = " ".join(filter(None, (str(status), reason)))
        super().__init__(f"{head} - {detail}" if detail else head)
        self.status = status
        self.reason = reason
        self.detail = detail


class MalformedDataError(IngestionError):
    """The response body is not a sequence of reading records."""

    def user_message(self) -> str:
        return "Failed to load sensor data."


class NoUsableDataError(Exception):
    """Informational: the records (or the window) left nothing to plot.

    Never raised by the pipeline. It is carried as a notice next to an empty
    result so views can show an empty state instead of an error.
    """

    def __init__(self, message: str, window: Optional[object] = None):
        super().__init__(message)
        self.message = message
        self.window = window


class ConfigError(Exception):
    pass
