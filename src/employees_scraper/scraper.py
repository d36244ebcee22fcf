"""LinkedInEmployeesScraper: the public entry point.

Ties the browser lifecycle, page provisioning, session check and the
paginated crawl together, and enforces the teardown policy: any failure
during setup, page setup or a run closes the page and the browser before
the error reaches the caller.
"""
import logging
import time

from .browser.blocked_hosts import load_blocked_hosts
from .browser.page import create_page
from .browser.session import BrowserSession
from .config import ScraperOptions
from .engine.auth import check_logged_in
from .engine.crawler import crawl_employees, normalize_company_url
from .engine.errors import ConfigError, PreconditionError
from .models import CrawlResult

log = logging.getLogger(__name__)


class LinkedInEmployeesScraper:
    """Scrape the employees list of LinkedIn company pages.

    Usage::

        with LinkedInEmployeesScraper(session_cookie_value="...") as scraper:
            batches = scraper.run("https://www.linkedin.com/company/acme")

    Keyword arguments are ScraperOptions fields; alternatively pass a
    ready-made ScraperOptions. ``session`` injects a BrowserSession.
    """

    def __init__(self, options: ScraperOptions | None = None, *,
                 session: BrowserSession | None = None,
                 blocked_hosts: frozenset[str] | None = None,
                 **option_kwargs):
        if options is None:
            try:
                options = ScraperOptions(**option_kwargs)
            except TypeError as e:
                raise ConfigError(str(e)) from None
        elif option_kwargs:
            raise ConfigError("Pass either a ScraperOptions or keyword options, not both.")
        elif not isinstance(options, ScraperOptions):
            raise ConfigError("options needs to be a ScraperOptions instance.")

        self.options = options
        self._session = session if session is not None else BrowserSession(options)
        self._blocked_hosts = blocked_hosts
        log.info("Using options: %s", options.as_log_dict())

    def __enter__(self):
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            self._close_after_error()

    @property
    def blocked_hosts(self) -> frozenset[str]:
        if self._blocked_hosts is None:
            self._blocked_hosts = load_blocked_hosts()
        return self._blocked_hosts

    @property
    def is_running(self) -> bool:
        return self._session.is_running

    def setup(self) -> None:
        """Start the browser (unless running already) and check the session."""
        try:
            if not self._session.is_running:
                log.info("Launching browser in the %s...",
                         "background" if self.options.headless else "foreground")
                self._session.launch()
            self.check_if_logged_in()
            log.info("Setup done!")
        except Exception:
            log.error("An error occurred during setup.")
            self._close_after_error()
            raise

    def check_if_logged_in(self) -> None:
        """Raise SessionExpired if the session cookie is not logged in."""
        check_logged_in(self._create_page, self.options.timeout)

    def close(self, page=None) -> None:
        """Close *page* and the browser, killing the browser process."""
        self._session.close(page)

    def run(self, company_url: str, *, event_logger=None) -> CrawlResult:
        """Scrape all employees of the company at *company_url*.

        Returns one PageBatch per results page, in page order. With
        ``keep_alive`` the browser stays open for the next run.
        """
        session_id = int(time.time() * 1000)

        if not self._session.is_running:
            raise PreconditionError("Browser is not set. Please run the setup method first.")
        company_url = normalize_company_url(company_url)

        started = time.monotonic()
        if event_logger is not None:
            event_logger.log_run_start(company_url, self.options.as_log_dict())

        page = None
        try:
            # Each run has its own page
            page = self._create_page()
            result = crawl_employees(page, company_url, self.options.timeout,
                                     event_logger=event_logger, session_id=session_id)
        except Exception as e:
            self._close_after_error(page)
            log.error("An error occurred during a run (%s).", session_id)
            if event_logger is not None:
                event_logger.log_run_end(0, 0, time.monotonic() - started,
                                         status="error", error=str(e))
            raise

        if not self.options.keep_alive:
            log.info("Not keeping the session alive.")
            self.close(page)
            log.info("Done. Browser is closed.")
        else:
            # Only close the current page, we do not need it anymore
            page.close()
            log.info("Done. Browser is being kept alive in memory.")

        if event_logger is not None:
            event_logger.log_run_end(len(result), sum(len(b.employees) for b in result),
                                     time.monotonic() - started)
        return result

    def _create_page(self):
        if not self._session.is_running:
            raise PreconditionError("Browser not set.")
        try:
            return create_page(self._session.browser, self.options, self.blocked_hosts)
        except Exception:
            # page setup failures tear down the whole browser
            self._close_after_error()
            raise

    def _close_after_error(self, page=None) -> None:
        try:
            self._session.close(page)
        except Exception as e:
            log.error("Teardown after error failed: %s", e)
