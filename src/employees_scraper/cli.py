"""Command-line entry point: scrape one company and print the result as JSON."""
import argparse
import logging
import sys
import time

from .config import ScraperOptions
from .engine.errors import ConfigError, ScraperError
from .models import crawl_result_to_json
from .scraper import LinkedInEmployeesScraper
from .telemetry.logger import CrawlEventLogger

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="employees-scraper",
        description="Scrape the employees list of a LinkedIn company page.",
    )
    parser.add_argument("company_url", help="e.g. https://www.linkedin.com/company/acme/")
    parser.add_argument("--cookie", dest="session_cookie_value",
                        help="li_at session cookie (default: $LINKEDIN_SESSION_COOKIE_VALUE)")
    parser.add_argument("--headed", action="store_true", help="show the browser window")
    parser.add_argument("--keep-alive", action="store_true", default=None)
    parser.add_argument("--timeout", type=int, help="navigation timeout in milliseconds")
    parser.add_argument("--user-agent")
    parser.add_argument("--chrome-path")
    parser.add_argument("--event-log-dir", default="",
                        help="write JSONL crawl events to this directory")
    parser.add_argument("-o", "--output", help="write JSON here instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        options = ScraperOptions.from_env(
            session_cookie_value=args.session_cookie_value,
            headless=False if args.headed else None,
            keep_alive=args.keep_alive,
            timeout=args.timeout,
            user_agent=args.user_agent,
            chrome_path=args.chrome_path,
        )
    except ConfigError as e:
        log.error("%s", e)
        return 2

    event_logger = None
    if args.event_log_dir:
        event_logger = CrawlEventLogger(str(int(time.time())), args.company_url,
                                        log_dir=args.event_log_dir)
    try:
        scraper = LinkedInEmployeesScraper(options)
        scraper.setup()
        try:
            result = scraper.run(args.company_url, event_logger=event_logger)
        finally:
            scraper.close()
    except ScraperError as e:
        log.error("Scrape failed (%s): %s", e.signal.value, e)
        return 1
    finally:
        if event_logger is not None:
            event_logger.close()

    output = crawl_result_to_json(result)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output + "\n")
    else:
        print(output)
    return 0
