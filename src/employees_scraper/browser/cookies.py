"""LinkedIn session cookie injection."""
SESSION_COOKIE_NAME = "li_at"
SESSION_COOKIE_DOMAIN = ".www.linkedin.com"


def build_session_cookie(value: str) -> dict:
    """Return the ``li_at`` cookie in Playwright's ``add_cookies`` shape."""
    return {
        "name": SESSION_COOKIE_NAME,
        "value": value,
        "domain": SESSION_COOKIE_DOMAIN,
        "path": "/",
        "secure": True,
        "httpOnly": True,
    }


def set_session_cookie(context, value: str) -> None:
    """Log *context* in by adding the session cookie to it."""
    context.add_cookies([build_session_cookie(value)])
