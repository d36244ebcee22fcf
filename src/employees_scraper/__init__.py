"""employees-scraper — scrape the employee list of LinkedIn company pages.

Drives a hardened headless Chrome over CDP, authenticates with a session
cookie, filters tracker and heavy resource requests, and walks the paginated
employee search results of a company.
"""
from .scraper import LinkedInEmployeesScraper  # noqa: F401
from .config import ScraperOptions  # noqa: F401
from .models import EmployeeRecord, PageBatch, CrawlResult, crawl_result_to_json  # noqa: F401
from .engine.errors import (  # noqa: F401
    ScraperSignal,
    ScraperError,
    ConfigError,
    LaunchError,
    SessionExpired,
    PreconditionError,
    ParseError,
    NavigationTimeout,
    ProcessKillError,
)
