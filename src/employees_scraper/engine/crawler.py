"""Paginated employee extraction for a LinkedIn company page.

Works on an already provisioned page and never opens or closes a browser.
The caller owns the page and tears everything down if this raises.
"""
import logging
import math
import time
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from ..models import CrawlResult, EmployeeRecord, PageBatch
from .errors import ParseError, PreconditionError
from .navigation import goto

log = logging.getLogger(__name__)

BASE_URL = "https://www.linkedin.com"
RESULTS_PER_PAGE = 10

CONNECTIONS_CONTAINER = ".org-top-card-secondary-content__connections"
SEARCH_RESULTS_CONTAINER = ".reusable-search__entity-results-list"

# Reads the "see all employees" link and its count text from the top card.
_CONNECTIONS_JS = """
(nodes) => nodes.map((node) => {
    const anchor = node.querySelector('a.org-top-card-secondary-content__see-all-link');
    const span = anchor ? anchor.querySelector('span') : null;
    return {
        link: anchor ? anchor.getAttribute('href') : null,
        employees: span ? span.innerHTML : null,
    };
})
"""

# One entry per search result title: profile href and the nested name span.
_EMPLOYEES_JS = """
(nodes) => {
    const data = [];
    for (const node of nodes) {
        node.querySelectorAll('span.entity-result__title-text').forEach((element) => {
            const link = element.querySelector('a');
            const outer = link ? link.querySelector('span') : null;
            const inner = outer ? outer.querySelector('span') : null;
            data.push({
                href: link ? link.getAttribute('href') : null,
                name: inner ? inner.innerHTML : null,
            });
        });
    }
    return data;
}
"""


def normalize_company_url(company_url: str | None) -> str:
    """Validate the company URL and make sure it ends with a slash."""
    if not company_url:
        raise PreconditionError("No company URL given.")
    if "linkedin.com/" not in company_url:
        raise PreconditionError("The given URL to scrape is not a linkedin.com url.")
    if not company_url.endswith("/"):
        company_url += "/"
    return company_url


def parse_employee_count(text: str | None) -> int:
    """Parse the leading number of e.g. ``"23 employees"``."""
    if text is None:
        raise ParseError("Employee count not found on the company page.")
    tokens = text.strip().split()
    first = tokens[0].replace(",", "") if tokens else ""
    if not first.isdigit():
        raise ParseError(f"Employee count is not a number: {text.strip()!r}")
    return int(first)


def page_count(num_employees: int, per_page: int = RESULTS_PER_PAGE) -> int:
    return math.ceil(num_employees / per_page)


def build_results_url(link: str, page_index: int) -> str:
    """Resolve the results *link* and set its ``page`` query parameter."""
    parts = urlsplit(urljoin(BASE_URL, link))
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "page"]
    query.append(("page", str(page_index)))
    return urlunsplit(parts._replace(query=urlencode(query)))


def strip_query(href: str | None) -> str | None:
    if href is None:
        return None
    return href.split("?", 1)[0]


def extract_connections_summary(page) -> tuple[str | None, str | None]:
    """Return ``(results_link, employee_count_text)`` from the company top card.

    Either value is None when the markup is missing.
    """
    entries = page.eval_on_selector_all(CONNECTIONS_CONTAINER, _CONNECTIONS_JS)
    if not entries:
        return None, None
    first = entries[0]
    return first.get("link"), first.get("employees")


def extract_employees(page) -> list[EmployeeRecord]:
    entries = page.eval_on_selector_all(SEARCH_RESULTS_CONTAINER, _EMPLOYEES_JS)
    return [
        EmployeeRecord(
            profile_link=strip_query(entry.get("href")),
            display_name=entry.get("name"),
        )
        for entry in entries
    ]


def crawl_employees(page, company_url: str, timeout_ms: int, *,
                    event_logger=None, session_id: int | None = None) -> CrawlResult:
    """Scrape every employees results page reachable from *company_url*.

    Args:
        page: Provisioned Playwright page.
        company_url: Normalized company page URL.
        timeout_ms: Budget for every single navigation.
        event_logger: Optional CrawlEventLogger for telemetry.
        session_id: Run identifier included in log lines.

    Returns:
        One PageBatch per results page, in ascending page order.
    """
    tag = f" ({session_id})" if session_id is not None else ""

    log.info("Navigating to LinkedIn company page%s: %s", tag, company_url)
    goto(page, company_url, timeout_ms)

    link, employees_text = extract_connections_summary(page)
    log.info("Parsing data...%s", tag)
    num_employees = parse_employee_count(employees_text)
    total_pages = page_count(num_employees)
    if total_pages and not link:
        raise ParseError("Employees results link not found on the company page.")
    log.info("Found %d employees on %d pages%s", num_employees, total_pages, tag)

    result: CrawlResult = []
    for page_index in range(1, total_pages + 1):
        started = time.monotonic()
        url = build_results_url(link, page_index)
        goto(page, url, timeout_ms)
        employees = extract_employees(page)
        result.append(PageBatch(page=page_index, employees=employees))
        log.info("Page %d/%d: %d employees%s", page_index, total_pages, len(employees), tag)
        if event_logger is not None:
            event_logger.log_page_result(page_index, url, len(employees),
                                         time.monotonic() - started)
    return result
