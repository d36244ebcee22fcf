"""Page provisioning: CDP lifecycle setup, request filtering, authentication.

Each operation gets its own freshly provisioned page and closes it when done.
"""
import logging
from typing import Any

from ..engine.errors import PreconditionError
from .blocked_hosts import get_hostname
from .cookies import set_session_cookie

log = logging.getLogger(__name__)

# Never add "stylesheet" here: LinkedIn renders the data we read from it.
BLOCKED_RESOURCE_TYPES = frozenset({
    "image", "media", "font", "texttrack", "object", "beacon", "csp_report", "imageset",
})

# Resource types aborted when they come from a blocked host.
BLOCKED_BY_HOST_TYPES = frozenset({"script", "xhr", "fetch", "document"})

VIEWPORT = {"width": 1200, "height": 720}


class RequestFilter:
    """Route handler aborting heavy resources and tracker requests.

    Installed with ``page.route("**/*", RequestFilter(blocked_hosts))``.
    """

    def __init__(self, blocked_hosts: frozenset[str]):
        self._blocked_hosts = blocked_hosts

    def should_abort(self, resource_type: str, url: str) -> bool:
        if resource_type in BLOCKED_RESOURCE_TYPES:
            return True
        if resource_type in BLOCKED_BY_HOST_TYPES:
            hostname = get_hostname(url)
            if hostname and hostname in self._blocked_hosts:
                log.debug("Blocked %s: %s: %s", resource_type, hostname, url)
                return True
        return False

    def __call__(self, route: Any, request: Any) -> None:
        if self.should_abort(request.resource_type, request.url):
            route.abort()
        else:
            route.continue_()


def _default_context(browser):
    return browser.contexts[0] if browser.contexts else browser.new_context()


def create_page(browser, options, blocked_hosts: frozenset[str]):
    """Open and configure a single page ready for navigation.

    On failure the half-configured page is closed and the error re-raised;
    the caller owns tearing down the browser.
    """
    if browser is None:
        raise PreconditionError("Browser not set.")

    context = _default_context(browser)
    page = context.new_page()
    try:
        # Reuse a single tab: close the blank page Chrome opened on launch
        for other in list(context.pages):
            if other is not page:
                other.close()

        # Keep the page "active" so it is never throttled in the background
        cdp = context.new_cdp_session(page)
        cdp.send("Page.enable")
        cdp.send("Page.setWebLifecycleState", {"state": "active"})
        cdp.send("Page.setBypassCSP", {"enabled": True})

        log.info("Blocking the following resources: %s", ", ".join(sorted(BLOCKED_RESOURCE_TYPES)))
        log.info("Blocking scripts from %d unwanted hosts to speed up the crawling.",
                 len(blocked_hosts))
        page.route("**/*", RequestFilter(blocked_hosts))

        cdp.send("Network.setUserAgentOverride", {"userAgent": options.user_agent})
        page.set_viewport_size(VIEWPORT)

        set_session_cookie(context, options.session_cookie_value)
        log.info("Session cookie set!")
    except Exception as e:
        log.warning("An error occurred during page setup: %s", e)
        try:
            page.close()
        except Exception as close_err:
            log.warning("Failed to close page after setup error: %s", close_err)
        raise
    return page
