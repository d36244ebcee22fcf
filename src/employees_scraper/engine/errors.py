"""Normalized error signals for the employees scraper.

Every failure the scraper raises is a ScraperError carrying a ScraperSignal,
so callers can branch on the signal without knowing the concrete subclass.
"""
from enum import Enum


class ScraperSignal(Enum):
    """Normalized error signals."""
    AUTH_EXPIRED = "auth_expired" # session cookie no longer logged in
    TRANSIENT = "transient"       # navigation ran out of time
    FATAL = "fatal"               # unrecoverable, bail out


class ScraperError(Exception):
    """Exception carrying a normalized ScraperSignal."""

    def __init__(self, signal: ScraperSignal, message: str = ""):
        self.signal = signal
        super().__init__(message or signal.value)


class ConfigError(ScraperError):
    """Invalid scraper options."""

    def __init__(self, message: str):
        super().__init__(ScraperSignal.FATAL, f"Error during setup. {message}")


class LaunchError(ScraperError):
    """The browser process could not be started or connected to."""

    def __init__(self, message: str):
        super().__init__(ScraperSignal.FATAL, message)


class SessionExpired(ScraperError):
    """The session cookie does not log us in anymore."""

    def __init__(self, message: str):
        super().__init__(ScraperSignal.AUTH_EXPIRED, message)


class PreconditionError(ScraperError):
    """An operation was called in a state or with input it cannot work with."""

    def __init__(self, message: str):
        super().__init__(ScraperSignal.FATAL, message)


class ParseError(ScraperError):
    """Scraped content did not have the expected shape."""

    def __init__(self, message: str):
        super().__init__(ScraperSignal.FATAL, message)


class NavigationTimeout(ScraperError):
    """A page navigation exceeded the configured timeout."""

    def __init__(self, url: str, timeout_ms: int):
        self.url = url
        self.timeout_ms = timeout_ms
        super().__init__(
            ScraperSignal.TRANSIENT,
            f"Navigation to {url} timed out after {timeout_ms}ms",
        )


class ProcessKillError(ScraperError):
    """Forced termination of the browser process failed."""

    def __init__(self, pid: int):
        self.pid = pid
        # set when closing the page failed before the kill did
        self.page_error: Exception | None = None
        super().__init__(ScraperSignal.FATAL, f"Failed to kill browser process pid: {pid}")
