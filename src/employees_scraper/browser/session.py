"""Browser lifecycle: the one place the browser is launched and torn down.

BrowserSession owns the Playwright driver, the CDP-connected browser and the
Chrome process behind it. Nothing else closes or replaces them.
"""
import logging
import shutil
import subprocess
import tempfile
from typing import Any, Callable

from playwright.sync_api import sync_playwright

from ..engine.errors import LaunchError, ProcessKillError
from .chrome import kill_process_tree, launch_cdp_browser, resolve_chrome_path

log = logging.getLogger(__name__)


class BrowserSession:
    """Launch and tear down a single hardened Chrome instance.

    The Playwright driver factory, the launcher and the process killer are
    injected so the lifecycle can run against fakes.
    """

    def __init__(
        self,
        options,
        *,
        playwright_factory: Callable[[], Any] = sync_playwright,
        launcher: Callable[..., tuple[Any, Any]] = launch_cdp_browser,
        kill_process: Callable[[int], None] = kill_process_tree,
    ):
        self._options = options
        self._playwright_factory = playwright_factory
        self._launcher = launcher
        self._kill_process = kill_process
        self._playwright = None
        self._browser = None
        self._proc = None
        self._profile_dir = None

    @property
    def browser(self):
        return self._browser

    @property
    def pid(self) -> int | None:
        return self._proc.pid if self._proc is not None else None

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    def launch(self):
        """Start the browser, or return the one already running."""
        if self._browser is not None:
            return self._browser

        opts = self._options
        try:
            self._profile_dir = tempfile.mkdtemp(prefix="employees-scraper-")
            self._playwright = self._playwright_factory().start()
            chrome_path = resolve_chrome_path(self._playwright, opts.chrome_path)
            self._browser, self._proc = self._launcher(
                self._playwright, chrome_path,
                headless=opts.headless,
                port=opts.cdp_port,
                timeout_ms=opts.timeout,
                user_data_dir=self._profile_dir,
            )
        except Exception as e:
            self._stop_playwright()
            self._remove_profile_dir()
            if isinstance(e, LaunchError):
                raise
            raise LaunchError(f"Failed to launch browser: {e}") from e
        log.info("Browser launched!")
        return self._browser

    def close(self, page=None) -> None:
        """Close *page* (if given) and the browser, then kill its process tree.

        A no-op when nothing is open. A failing page close does not prevent
        browser teardown; it is re-raised once teardown finished.
        """
        page_error = None
        if page is not None:
            try:
                log.info("Closing page...")
                page.close()
                log.info("Closed page!")
            except Exception as e:
                log.warning("Failed to close page: %s", e)
                page_error = e

        if self._browser is not None:
            browser, proc = self._browser, self._proc
            self._browser = None
            self._proc = None
            try:
                log.info("Closing browser...")
                browser.close()
                log.info("Closed browser!")
            except Exception as e:
                log.warning("Failed to close browser cleanly: %s", e)

            try:
                # Kill the whole tree to prevent zombie processes
                if proc is not None and proc.pid:
                    self._kill_browser_process(proc)
            except ProcessKillError as e:
                if page_error is not None:
                    log.error("Closing the page failed as well: %s", page_error)
                    e.page_error = page_error
                raise
            finally:
                self._stop_playwright()
                self._remove_profile_dir()

        if page_error is not None:
            raise page_error

    def _kill_browser_process(self, proc) -> None:
        pid = proc.pid
        log.info("Killing browser process pid: %d...", pid)
        try:
            self._kill_process(pid)
        except Exception as e:
            log.error("Failed to kill browser process pid %d: %s", pid, e)
            raise ProcessKillError(pid) from e
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            log.warning("Browser process pid %d did not exit after SIGKILL", pid)
        log.info("Killed browser pid: %d. Closed browser.", pid)

    def _stop_playwright(self) -> None:
        if self._playwright is None:
            return
        try:
            self._playwright.stop()
        except Exception as e:
            log.warning("Failed to stop Playwright driver: %s", e)
        self._playwright = None

    def _remove_profile_dir(self) -> None:
        if self._profile_dir is None:
            return
        shutil.rmtree(self._profile_dir, ignore_errors=True)
        self._profile_dir = None
