"""Custom exceptions for bandwidth explorer operations."""


class BandwidthError(Exception):
    """Base exception for all bandwidth explorer operations."""
    pass


class ConfigError(BandwidthError):
    """Raised when the settings file or a setting value is invalid."""
    pass


class LogFileError(BandwidthError):
    """Raised when the request log cannot be opened at all."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class LogFileNotFoundError(LogFileError):
    """Raised when the request log does not exist."""
    pass


class LogFileUnreadableError(LogFileError):
    """Raised when the request log exists but cannot be read."""
    pass


class LogLineError(BandwidthError):
    """Raised for a single log line that cannot become a request record."""

    kind = "invalid"

    def __init__(self, message: str, line_number: int = 0):
        self.line_number = line_number
        super().__init__(message)


class MalformedJsonError(LogLineError):
    """Raised when a log line is not valid JSON."""

    kind = "malformed_json"


class MissingUrlError(LogLineError):
    """Raised when a log line has no usable body.url."""

    kind = "missing_url"


class OpenUrlError(BandwidthError):
    """Raised when the system browser opener cannot be launched."""
    pass
