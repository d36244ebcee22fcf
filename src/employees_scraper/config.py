"""Scraper options: defaults, validation and environment loading."""
import os
from dataclasses import asdict, dataclass, fields

from .engine.errors import ConfigError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/69.0.3497.100 Safari/537.36"
)
DEFAULT_TIMEOUT_MS = 10000

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ScraperOptions:
    """Options for LinkedInEmployeesScraper.

    ``session_cookie_value`` is the ``li_at`` cookie of a logged-in LinkedIn
    session. Using a known session instead of e-mail/password avoids login
    blocks and captchas when running from a server. When the logs show the
    session expired, log in with a browser again and copy the new value.

    ``keep_alive`` keeps the browser in memory between runs: faster recurring
    scrapes, higher memory use. ``timeout`` is in milliseconds and bounds
    every navigation as well as the browser start.
    """
    session_cookie_value: str
    keep_alive: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    timeout: int = DEFAULT_TIMEOUT_MS
    headless: bool = True
    chrome_path: str = ""
    cdp_port: int = 0

    def __post_init__(self):
        if not self.session_cookie_value:
            raise ConfigError('Option "session_cookie_value" is required.')
        if not isinstance(self.session_cookie_value, str):
            raise ConfigError('Option "session_cookie_value" needs to be a string.')
        if not isinstance(self.user_agent, str) or not self.user_agent:
            raise ConfigError('Option "user_agent" needs to be a non-empty string.')
        for name in ("keep_alive", "headless"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f'Option "{name}" needs to be a boolean.')
        # bool is an int subclass; reject it explicitly
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, int) or self.timeout <= 0:
            raise ConfigError('Option "timeout" needs to be a positive number of milliseconds.')
        if not isinstance(self.chrome_path, str):
            raise ConfigError('Option "chrome_path" needs to be a string.')
        if isinstance(self.cdp_port, bool) or not isinstance(self.cdp_port, int) \
                or not 0 <= self.cdp_port < 65536:
            raise ConfigError('Option "cdp_port" needs to be a valid TCP port.')

    @classmethod
    def from_env(cls, **overrides) -> "ScraperOptions":
        """Build options from ``LINKEDIN_*``/``SCRAPER_*`` environment variables.

        Keyword arguments win over the environment; ``None`` values are ignored.
        """
        values: dict = {}
        cookie = os.environ.get("LINKEDIN_SESSION_COOKIE_VALUE")
        if cookie:
            values["session_cookie_value"] = cookie
        for env_name, key in (("SCRAPER_HEADLESS", "headless"),
                              ("SCRAPER_KEEP_ALIVE", "keep_alive")):
            raw = os.environ.get(env_name)
            if raw is not None:
                values[key] = raw.strip().lower() in _TRUE_VALUES
        raw_timeout = os.environ.get("SCRAPER_TIMEOUT_MS")
        if raw_timeout:
            try:
                values["timeout"] = int(raw_timeout)
            except ValueError:
                raise ConfigError('Option "timeout" needs to be a number.') from None
        if os.environ.get("SCRAPER_USER_AGENT"):
            values["user_agent"] = os.environ["SCRAPER_USER_AGENT"]
        if os.environ.get("SCRAPER_CHROME_PATH"):
            values["chrome_path"] = os.environ["SCRAPER_CHROME_PATH"]

        known = {f.name for f in fields(cls)}
        for key, value in overrides.items():
            if key not in known:
                raise ConfigError(f'Unknown option "{key}".')
            if value is not None:
                values[key] = value
        values.setdefault("session_cookie_value", "")
        return cls(**values)

    def as_log_dict(self) -> dict:
        """Options as a dict, safe to log (cookie value masked)."""
        data = asdict(self)
        cookie = data["session_cookie_value"]
        data["session_cookie_value"] = f"{cookie[:4]}***" if len(cookie) > 8 else "***"
        return data
