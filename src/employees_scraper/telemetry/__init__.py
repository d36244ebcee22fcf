"""telemetry — structured crawl event logging."""
from .logger import CrawlEventLogger  # noqa: F401
