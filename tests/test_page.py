"""Tests for page provisioning and request filtering — no actual browser needed."""
from unittest.mock import MagicMock, call

import pytest

from employees_scraper.browser.cookies import build_session_cookie
from employees_scraper.browser.page import RequestFilter, VIEWPORT, create_page
from employees_scraper.config import ScraperOptions
from employees_scraper.engine.errors import PreconditionError

BLOCKED = frozenset({"connect.facebook.net", "www.google-analytics.com"})


def _route_request(resource_type, url):
    route = MagicMock()
    request = MagicMock(resource_type=resource_type, url=url)
    return route, request


def _run_filter(resource_type, url):
    route, request = _route_request(resource_type, url)
    RequestFilter(BLOCKED)(route, request)
    return route


def test_image_always_aborted():
    route = _run_filter("image", "https://media.licdn.com/dms/image/photo.jpg")
    route.abort.assert_called_once()
    route.continue_.assert_not_called()


@pytest.mark.parametrize("resource_type", [
    "image", "media", "font", "texttrack", "object", "beacon", "csp_report", "imageset",
])
def test_heavy_resource_types_aborted(resource_type):
    route = _run_filter(resource_type, "https://www.linkedin.com/anything")
    route.abort.assert_called_once()


def test_document_to_blocked_host_aborted():
    route = _run_filter("document", "https://connect.facebook.net/en_US/sdk.js")
    route.abort.assert_called_once()
    route.continue_.assert_not_called()


@pytest.mark.parametrize("resource_type", ["script", "xhr", "fetch"])
def test_scripts_from_blocked_host_aborted(resource_type):
    route = _run_filter(resource_type, "https://www.google-analytics.com/analytics.js")
    route.abort.assert_called_once()


def test_document_to_other_host_continues():
    route = _run_filter("document", "https://www.linkedin.com/company/acme/")
    route.continue_.assert_called_once_with()
    route.abort.assert_not_called()


def test_stylesheet_never_aborted_by_type():
    route = _run_filter("stylesheet", "https://static.licdn.com/sc/h/app.css")
    route.continue_.assert_called_once()
    route.abort.assert_not_called()


def test_stylesheet_from_blocked_host_continues():
    # host filtering only applies to script/xhr/fetch/document
    route = _run_filter("stylesheet", "https://connect.facebook.net/style.css")
    route.continue_.assert_called_once()


def test_should_abort_without_hostname():
    assert RequestFilter(BLOCKED).should_abort("document", "about:blank") is False


def _make_browser():
    browser = MagicMock()
    context = MagicMock()
    blank = MagicMock(name="blank")
    page = MagicMock(name="page")
    context.new_page.return_value = page
    context.pages = [blank, page]
    browser.contexts = [context]
    return browser, context, blank, page


def _options():
    return ScraperOptions(session_cookie_value="cookie123", user_agent="TestAgent/1.0")


def test_create_page_configures_everything():
    browser, context, blank, page = _make_browser()
    cdp = context.new_cdp_session.return_value

    result = create_page(browser, _options(), BLOCKED)

    assert result is page
    blank.close.assert_called_once()
    page.close.assert_not_called()
    context.new_cdp_session.assert_called_once_with(page)
    assert cdp.send.call_args_list == [
        call("Page.enable"),
        call("Page.setWebLifecycleState", {"state": "active"}),
        call("Page.setBypassCSP", {"enabled": True}),
        call("Network.setUserAgentOverride", {"userAgent": "TestAgent/1.0"}),
    ]
    pattern, handler = page.route.call_args.args
    assert pattern == "**/*"
    assert isinstance(handler, RequestFilter)
    page.set_viewport_size.assert_called_once_with({"width": 1200, "height": 720})
    assert VIEWPORT == {"width": 1200, "height": 720}
    context.add_cookies.assert_called_once_with([build_session_cookie("cookie123")])


def test_session_cookie_shape():
    cookie = build_session_cookie("abc")
    assert cookie["name"] == "li_at"
    assert cookie["value"] == "abc"
    assert cookie["domain"] == ".www.linkedin.com"


def test_create_page_without_contexts_creates_one():
    browser = MagicMock()
    browser.contexts = []
    context = browser.new_context.return_value
    page = context.new_page.return_value
    context.pages = [page]

    assert create_page(browser, _options(), BLOCKED) is page
    browser.new_context.assert_called_once()


def test_create_page_failure_closes_page():
    browser, context, _blank, page = _make_browser()
    context.new_cdp_session.return_value.send.side_effect = RuntimeError("Target closed")

    with pytest.raises(RuntimeError, match="Target closed"):
        create_page(browser, _options(), BLOCKED)
    page.close.assert_called_once()


def test_create_page_failure_keeps_original_error_when_close_fails():
    browser, context, _blank, page = _make_browser()
    context.add_cookies.side_effect = ValueError("bad cookie")
    page.close.side_effect = RuntimeError("already closed")

    with pytest.raises(ValueError, match="bad cookie"):
        create_page(browser, _options(), BLOCKED)


def test_create_page_requires_browser():
    with pytest.raises(PreconditionError):
        create_page(None, _options(), BLOCKED)
