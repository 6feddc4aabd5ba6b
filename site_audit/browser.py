"""
site_audit/browser.py

Chrome process + Playwright attachment shared by the whole run.

Chrome is started by us (not by Playwright) with a remote debugging port so
that Lighthouse can drive the very same browser, and with it the logged-in
session cookies. Playwright attaches over CDP using the websocket address
published at ``/json/version``.
"""

import logging
import shutil
import socket
import subprocess
import tempfile
import time
from typing import Optional

import requests
from playwright.sync_api import sync_playwright

from .config import AuditConfig, DeviceProfile
from .errors import BrowserLaunchError

logger = logging.getLogger(__name__)


def find_free_port() -> int:
    """Find an available TCP port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        return s.getsockname()[1]


def fetch_ws_endpoint(port: int, timeout: float = 30.0, poll_interval: float = 0.25) -> str:
    """Poll Chrome's /json/version until it answers and return webSocketDebuggerUrl."""
    version_url = f"http://localhost:{port}/json/version"
    deadline = time.monotonic() + timeout
    last_error: Optional[Exception] = None
    while True:
        try:
            res = requests.get(version_url, timeout=2)
            res.raise_for_status()
            return res.json()["webSocketDebuggerUrl"]
        except (requests.RequestException, ValueError, KeyError) as e:
            last_error = e
        if time.monotonic() >= deadline:
            break
        time.sleep(poll_interval)
    raise BrowserLaunchError(f"Chrome debugging endpoint {version_url} not ready after {timeout}s: {last_error}")


class ChromeSession:
    """A running Chrome process, the Playwright connection to it and the one
    page every audit step reuses."""

    def __init__(self, playwright, process, port: int, browser, page, profile_dir: Optional[str] = None):
        self.playwright = playwright
        self.process = process
        self.port = port
        self.browser = browser
        self.page = page
        self.profile_dir = profile_dir
        self._cdp = None

    def set_device(self, device: DeviceProfile) -> None:
        """Apply a device profile to the shared page in place."""
        if self._cdp is None:
            self._cdp = self.page.context.new_cdp_session(self.page)
        self._cdp.send("Emulation.setDeviceMetricsOverride", {
            "width": device.width,
            "height": device.height,
            "deviceScaleFactor": device.device_scale_factor,
            "mobile": device.is_mobile,
        })
        self._cdp.send("Emulation.setTouchEmulationEnabled", {"enabled": device.has_touch})
        self._cdp.send("Emulation.setUserAgentOverride", {"userAgent": device.user_agent})
        logger.debug("Viewport set to %s (%dx%d)", device.name, device.width, device.height)

    def close(self) -> None:
        try:
            self.browser.close()
        finally:
            self.process.terminate()
            try:
                self.process.wait(timeout=10)
            except subprocess.TimeoutExpired:
                self.process.kill()
            self.playwright.stop()
            if self.profile_dir:
                shutil.rmtree(self.profile_dir, ignore_errors=True)
        logger.info("Chrome instance closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def launch_chrome(config: AuditConfig) -> ChromeSession:
    logger.info("Launching Chrome")
    playwright = sync_playwright().start()
    profile_dir = tempfile.mkdtemp(prefix="site-audit-chrome-")
    process = None
    try:
        chrome_path = config.chrome_path or playwright.chromium.executable_path
        port = find_free_port()
        cmd = [
            chrome_path,
            *config.chrome_flags,
            f"--remote-debugging-port={port}",
            f"--user-data-dir={profile_dir}",
            "--no-first-run",
            "--no-default-browser-check",
            "about:blank",
        ]
        process = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        ws_endpoint = fetch_ws_endpoint(port, timeout=config.timeout)
        browser = playwright.chromium.connect_over_cdp(ws_endpoint)
        context = browser.contexts[0] if browser.contexts else browser.new_context()
        page = context.new_page()
    except Exception:
        if process is not None:
            process.kill()
        playwright.stop()
        shutil.rmtree(profile_dir, ignore_errors=True)
        raise
    logger.info("Chrome listening on port %d (%s)", port, chrome_path)
    return ChromeSession(playwright, process, port, browser, page, profile_dir)
