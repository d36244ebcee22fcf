"""Tests for BrowserSession launch/close — fake Playwright, launcher and killer."""
import os
from unittest.mock import MagicMock

import pytest

from employees_scraper.browser import session as session_module
from employees_scraper.browser.session import BrowserSession
from employees_scraper.config import ScraperOptions
from employees_scraper.engine.errors import LaunchError, ProcessKillError


@pytest.fixture(autouse=True)
def _fixed_chrome_path(monkeypatch):
    monkeypatch.setattr(session_module, "resolve_chrome_path",
                        lambda playwright, preferred="": "/usr/bin/chromium")


@pytest.fixture(autouse=True)
def profile_dir(monkeypatch, tmp_path):
    path = tmp_path / "profile"

    def _mkdtemp(prefix=""):
        path.mkdir()
        return str(path)

    monkeypatch.setattr(session_module.tempfile, "mkdtemp", _mkdtemp)
    return path


def _make_session(launcher=None, kill_process=None, **option_kwargs):
    options = ScraperOptions(session_cookie_value="cookie", **option_kwargs)
    playwright = MagicMock()
    factory = MagicMock()
    factory.return_value.start.return_value = playwright
    browser = MagicMock()
    proc = MagicMock()
    proc.pid = 4321
    if launcher is None:
        launcher = MagicMock(return_value=(browser, proc))
    if kill_process is None:
        kill_process = MagicMock()
    session = BrowserSession(options, playwright_factory=factory,
                             launcher=launcher, kill_process=kill_process)
    return session, playwright, browser, proc, launcher, kill_process


def test_close_without_browser_is_noop():
    session, *_rest, kill = _make_session()
    session.close()
    session.close()
    kill.assert_not_called()
    assert not session.is_running


def test_launch_passes_options(profile_dir):
    session, playwright, browser, _proc, launcher, _kill = _make_session(
        headless=False, timeout=5000, cdp_port=9555,
    )
    assert session.launch() is browser
    assert session.is_running
    assert session.pid == 4321
    launcher.assert_called_once_with(
        playwright, "/usr/bin/chromium", headless=False, port=9555, timeout_ms=5000,
        user_data_dir=str(profile_dir),
    )


def test_launch_twice_keeps_one_browser():
    session, _pw, browser, _proc, launcher, _kill = _make_session()
    assert session.launch() is browser
    assert session.launch() is browser
    launcher.assert_called_once()


def test_close_kills_process_and_stops_driver():
    session, playwright, browser, proc, _launcher, kill = _make_session()
    session.launch()

    session.close()

    browser.close.assert_called_once()
    kill.assert_called_once_with(4321)
    proc.wait.assert_called_once()
    playwright.stop.assert_called_once()
    assert not session.is_running
    assert session.pid is None

    # idempotent
    session.close()
    kill.assert_called_once()


def test_close_page_first():
    session, _pw, browser, _proc, _launcher, kill = _make_session()
    session.launch()
    order = []
    page = MagicMock()
    page.close.side_effect = lambda: order.append("page")
    browser.close.side_effect = lambda: order.append("browser")
    kill.side_effect = lambda pid: order.append("kill")

    session.close(page)
    assert order == ["page", "browser", "kill"]


def test_close_page_failure_still_tears_down_browser():
    session, _pw, browser, _proc, _launcher, kill = _make_session()
    session.launch()
    page = MagicMock()
    page.close.side_effect = RuntimeError("Target page has been closed")

    with pytest.raises(RuntimeError, match="Target page"):
        session.close(page)

    browser.close.assert_called_once()
    kill.assert_called_once_with(4321)
    assert not session.is_running


def test_close_page_without_browser():
    session, *_rest = _make_session()
    page = MagicMock()
    session.close(page)
    page.close.assert_called_once()


def test_browser_close_failure_still_kills():
    session, _pw, browser, _proc, _launcher, kill = _make_session()
    session.launch()
    browser.close.side_effect = RuntimeError("connection lost")

    session.close()
    kill.assert_called_once_with(4321)


def test_kill_failure_names_pid():
    kill = MagicMock(side_effect=OSError("Operation not permitted"))
    session, playwright, *_rest = _make_session(kill_process=kill)
    session.launch()

    with pytest.raises(ProcessKillError) as excinfo:
        session.close()

    assert excinfo.value.pid == 4321
    assert "4321" in str(excinfo.value)
    assert not session.is_running
    playwright.stop.assert_called_once()
    session.close()  # nothing left to tear down


def test_launch_error_stops_driver():
    launcher = MagicMock(side_effect=LaunchError("Browser failed to start within 10000ms"))
    session, playwright, *_rest = _make_session(launcher=launcher)

    with pytest.raises(LaunchError, match="within 10000ms"):
        session.launch()
    playwright.stop.assert_called_once()
    assert not session.is_running


def test_unexpected_launch_error_is_wrapped():
    launcher = MagicMock(side_effect=RuntimeError("boom"))
    session, *_rest = _make_session(launcher=launcher)

    with pytest.raises(LaunchError, match="boom"):
        session.launch()
    assert not session.is_running


def test_close_removes_profile_dir(profile_dir):
    session, *_rest = _make_session()
    session.launch()
    assert profile_dir.is_dir()

    session.close()
    assert not os.path.exists(profile_dir)


def test_launch_failure_removes_profile_dir(profile_dir):
    launcher = MagicMock(side_effect=LaunchError("Port 9222 is already in use by another process."))
    session, *_rest = _make_session(launcher=launcher)

    with pytest.raises(LaunchError, match="already in use"):
        session.launch()
    assert not os.path.exists(profile_dir)


def test_kill_failure_keeps_page_error():
    kill = MagicMock(side_effect=OSError("Operation not permitted"))
    session, *_rest = _make_session(kill_process=kill)
    session.launch()
    page = MagicMock()
    page.close.side_effect = RuntimeError("Target page has been closed")

    with pytest.raises(ProcessKillError) as excinfo:
        session.close(page)

    assert excinfo.value.pid == 4321
    assert isinstance(excinfo.value.page_error, RuntimeError)
    assert "Target page" in str(excinfo.value.page_error)


def test_kill_failure_without_page_error():
    kill = MagicMock(side_effect=OSError("Operation not permitted"))
    session, *_rest = _make_session(kill_process=kill)
    session.launch()

    with pytest.raises(ProcessKillError) as excinfo:
        session.close()
    assert excinfo.value.page_error is None
