"""Session liveness check against the LinkedIn login page."""
import logging
from typing import Any, Callable

from .errors import SessionExpired
from .navigation import goto

log = logging.getLogger(__name__)

LOGIN_URL = "https://www.linkedin.com/login"

SESSION_EXPIRED_MESSAGE = (
    "Bad news, we are not logged in! Your session seems to be expired. "
    "Use your browser to login again with your LinkedIn credentials and extract "
    'the "li_at" cookie value for the "session_cookie_value" option.'
)


def is_login_url(url: str) -> bool:
    return url.endswith("/login")


def check_logged_in(new_page: Callable[[], Any], timeout_ms: int) -> None:
    """Raise SessionExpired unless the session cookie logs us in.

    A logged-in session visiting /login is redirected (to /feed); a logged-out
    one stays on /login. The probe page is always closed; a failing close
    never replaces an error raised while checking.
    """
    page = new_page()
    try:
        log.info("Checking if we are still logged in...")
        goto(page, LOGIN_URL, timeout_ms)
        url = page.url
    except Exception:
        try:
            page.close()
        except Exception as close_error:
            log.warning("Failed to close login check page: %s", close_error)
        raise
    page.close()

    if is_login_url(url):
        log.warning(SESSION_EXPIRED_MESSAGE)
        raise SessionExpired(SESSION_EXPIRED_MESSAGE)
    log.info("All good. We are still logged in.")
