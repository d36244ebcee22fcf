"""Single-attempt page navigation bounded by the configured timeout."""
import logging

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .errors import NavigationTimeout

log = logging.getLogger(__name__)


def goto(page, url: str, timeout_ms: int) -> None:
    """Navigate and wait until the network is idle.

    Waiting for "networkidle" rather than "domcontentloaded": with the latter
    some elements are not rendered yet, resulting in missing data.
    """
    try:
        page.goto(url, wait_until="networkidle", timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        log.warning("Navigation to %s timed out after %dms", url, timeout_ms)
        raise NavigationTimeout(url, timeout_ms) from e
