"""Tracker hostnames to block while crawling.

Requests to these hosts are aborted by the page's request filter. This is
what a plain hosts-file adblocker does and speeds the crawl up noticeably.

The packaged list uses the hosts-file format of
http://winhelp2002.mvps.org/hosts.htm.
"""
import logging
from importlib import resources
from urllib.parse import urlparse

log = logging.getLogger(__name__)

NULL_ROUTE = "0.0.0.0"

# Always blocked, whether or not the data file lists them.
EXTRA_BLOCKED_HOSTS = (
    "static.chartbeat.com",
    "scdn.cxense.com",
    "api.cxense.com",
    "www.googletagmanager.com",
    "connect.facebook.net",
    "platform.twitter.com",
    "tags.tiqcdn.com",
    "dev.visualwebsiteoptimizer.com",
    "smartlock.google.com",
    "cdn.embedly.com",
)

_blocked_hosts_cache: frozenset[str] | None = None


def build_blocked_hosts(data: str) -> frozenset[str]:
    """Build the blocked host set from hosts-file text.

    Only ``0.0.0.0 <hostname>`` lines count; everything else is skipped.
    """
    hosts = set()
    for line in data.splitlines():
        frags = line.split()
        if len(frags) > 1 and frags[0] == NULL_ROUTE:
            hosts.add(frags[1].strip())
    hosts.update(EXTRA_BLOCKED_HOSTS)
    return frozenset(hosts)


def load_blocked_hosts() -> frozenset[str]:
    """Load the packaged blocked hosts list, with caching."""
    global _blocked_hosts_cache
    if _blocked_hosts_cache is None:
        data = resources.files("employees_scraper").joinpath("data/blocked_hosts.txt") \
            .read_text(encoding="utf-8")
        _blocked_hosts_cache = build_blocked_hosts(data)
        log.debug("Loaded %d blocked hosts", len(_blocked_hosts_cache))
    return _blocked_hosts_cache


def get_hostname(url: str) -> str:
    """Return the hostname of *url*, or ``""`` if it has none."""
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""
