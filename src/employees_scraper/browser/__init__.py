"""browser — Chrome lifecycle and page provisioning over Playwright/CDP.

macOS and Linux only (uses POSIX signals).
"""
from .chrome import find_system_chrome, build_launch_args, launch_cdp_browser, kill_process_tree  # noqa: F401
from .blocked_hosts import build_blocked_hosts, load_blocked_hosts, get_hostname  # noqa: F401
from .cookies import build_session_cookie, set_session_cookie  # noqa: F401
from .page import RequestFilter, create_page  # noqa: F401
from .session import BrowserSession  # noqa: F401
