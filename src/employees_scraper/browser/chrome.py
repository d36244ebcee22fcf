"""Chrome discovery, hardened CDP launch, and process-tree kill.

macOS and Linux only, the forced kill relies on POSIX signals.
"""
import logging
import os
import platform
import shutil
import signal
import socket
import subprocess
import time
import urllib.request

import psutil

from ..engine.errors import LaunchError

log = logging.getLogger(__name__)

DEVTOOLS_PORT_FILE = "DevToolsActivePort"

# Fixed and ordered; only the headless switch and the port vary.
HARDENED_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--proxy-server=direct://",
    "--proxy-bypass-list=*",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--disable-features=site-per-process,AudioServiceOutOfProcess",
    "--enable-features=NetworkService",
    "--allow-running-insecure-content",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-web-security",
    "--autoplay-policy=user-gesture-required",
    "--disable-background-networking",
    "--disable-breakpad",
    "--disable-client-side-phishing-detection",
    "--disable-component-update",
    "--disable-default-apps",
    "--disable-domain-reliability",
    "--disable-extensions",
    "--disable-hang-monitor",
    "--disable-ipc-flooding-protection",
    "--disable-notifications",
    "--disable-offer-store-unmasked-wallet-cards",
    "--disable-popup-blocking",
    "--disable-print-preview",
    "--disable-prompt-on-repost",
    "--disable-speech-api",
    "--disable-sync",
    "--disk-cache-size=33554432",
    "--hide-scrollbars",
    "--ignore-gpu-blocklist",
    "--metrics-recording-only",
    "--mute-audio",
    "--no-default-browser-check",
    "--no-first-run",
    "--no-pings",
    "--no-zygote",
    "--password-store=basic",
    "--use-gl=swiftshader",
    "--use-mock-keychain",
)


# Absolute bundle paths on macOS, PATH lookups on Linux.
_CHROME_CANDIDATES = {
    "Darwin": (
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
        "/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge",
    ),
    "Linux": (
        "google-chrome",
        "google-chrome-stable",
        "chromium-browser",
        "chromium",
        "microsoft-edge",
    ),
}


def find_system_chrome() -> str | None:
    """Return the first installed Chrome, Chromium or Edge binary, if any."""
    for candidate in _CHROME_CANDIDATES.get(platform.system(), ()):
        path = candidate if os.path.isabs(candidate) else shutil.which(candidate)
        if path and os.path.isfile(path):
            return path
    return None


def resolve_chrome_path(playwright, preferred: str = "") -> str:
    """Pick the browser binary: *preferred*, system Chrome, or Playwright's Chromium."""
    if preferred:
        if not os.path.isfile(preferred):
            raise LaunchError(f"Browser executable not found: {preferred}")
        return preferred
    path = find_system_chrome()
    if path:
        return path
    path = playwright.chromium.executable_path
    if not path or not os.path.isfile(path):
        raise LaunchError(
            "No Chrome found. Install Chrome or run `playwright install chromium`."
        )
    return path


def build_launch_args(headless: bool, port: int, user_data_dir: str = "") -> list[str]:
    args = [f"--remote-debugging-port={port}"]
    if user_data_dir:
        args.append(f"--user-data-dir={user_data_dir}")
    args.append("--headless=new" if headless else "--start-maximized")
    args.extend(HARDENED_ARGS)
    return args


def port_in_use(port: int) -> bool:
    """True when something already accepts connections on 127.0.0.1:*port*."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(1)
        return sock.connect_ex(("127.0.0.1", port)) == 0


def read_devtools_port(user_data_dir: str) -> int | None:
    """Port from the DevToolsActivePort file Chrome writes once it listens.

    None while the file is missing or not fully written yet.
    """
    try:
        with open(os.path.join(user_data_dir, DEVTOOLS_PORT_FILE), encoding="utf-8") as f:
            first = f.readline().strip()
    except OSError:
        return None
    return int(first) if first.isdigit() and int(first) > 0 else None


def launch_cdp_browser(
    playwright,
    chrome_path: str,
    *,
    headless: bool = True,
    port: int = 0,
    timeout_ms: int = 10000,
    user_data_dir: str,
):
    """Launch Chrome with remote debugging and connect to it via CDP.

    *user_data_dir* must be a profile directory owned by this launch: the
    debugger port is read from the DevToolsActivePort file Chrome writes
    there, so only the spawned Chrome is ever attached. ``port=0`` lets
    Chrome pick a free port.

    Returns ``(browser, chrome_proc)``. Raises LaunchError when *port* is
    taken, Chrome exits early, the debugger is not ready within
    *timeout_ms*, or the CDP connect fails; a spawned process is terminated
    first in every case.
    """
    if port and port_in_use(port):
        raise LaunchError(f"Port {port} is already in use by another process.")

    os.makedirs(user_data_dir, exist_ok=True)
    try:
        os.remove(os.path.join(user_data_dir, DEVTOOLS_PORT_FILE))
    except FileNotFoundError:
        pass

    args = [chrome_path, *build_launch_args(headless, port, user_data_dir), "about:blank"]

    log.info("Launching %s in the %s (port %s)", os.path.basename(chrome_path),
             "background" if headless else "foreground", port or "auto")
    try:
        proc = subprocess.Popen(
            args,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        raise LaunchError(f"Failed to start browser: {e}") from e

    def _terminate_browser() -> None:
        if proc.poll() is not None:
            return
        proc.terminate()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait(timeout=5)

    # Wait for our Chrome to report its port and answer on it
    cdp_url = ""
    deadline = time.monotonic() + timeout_ms / 1000
    while True:
        if proc.poll() is not None:
            raise LaunchError(f"Browser exited unexpectedly (code {proc.returncode})")
        active_port = read_devtools_port(user_data_dir)
        if active_port is not None:
            cdp_url = f"http://127.0.0.1:{active_port}"
            try:
                with urllib.request.urlopen(f"{cdp_url}/json/version", timeout=1):
                    break
            except OSError:
                pass
        if time.monotonic() >= deadline:
            _terminate_browser()
            raise LaunchError(f"Browser failed to start within {timeout_ms}ms")
        time.sleep(0.2)

    try:
        browser = playwright.chromium.connect_over_cdp(cdp_url, timeout=timeout_ms)
    except Exception as e:
        _terminate_browser()
        raise LaunchError(f"Failed to connect to browser over CDP: {e}") from e
    log.info("Connected to browser via CDP at %s (pid %d)", cdp_url, proc.pid)
    return browser, proc


def kill_process_tree(pid: int) -> None:
    """SIGKILL *pid* and all of its descendants.

    Graceful browser shutdown leaves renderer/GPU children behind, so the
    whole tree goes. A process that is already gone is not an error.
    """
    try:
        parent = psutil.Process(pid)
        procs = parent.children(recursive=True)
    except psutil.NoSuchProcess:
        return
    procs.append(parent)
    for proc in procs:
        try:
            proc.send_signal(signal.SIGKILL)
        except psutil.NoSuchProcess:
            continue
    psutil.wait_procs(procs, timeout=5)
