import dataclasses
import subprocess
from unittest.mock import MagicMock

import pytest
import requests

from site_audit import browser as browser_module
from site_audit.browser import ChromeSession, fetch_ws_endpoint, find_free_port, launch_chrome
from site_audit.config import DESKTOP, MOBILE
from site_audit.errors import BrowserLaunchError

WS = "ws://localhost:9222/devtools/browser/3f1c0a"


def _version_response():
    res = MagicMock()
    res.json.return_value = {"Browser": "HeadlessChrome/126.0", "webSocketDebuggerUrl": WS}
    return res


def test_find_free_port():
    port = find_free_port()
    assert 0 < port < 65536


def test_fetch_ws_endpoint_waits_for_chrome(monkeypatch):
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        if len(calls) < 3:
            raise requests.ConnectionError("connection refused")
        return _version_response()

    monkeypatch.setattr(browser_module.requests, "get", fake_get)

    assert fetch_ws_endpoint(9222, timeout=5, poll_interval=0) == WS
    assert calls == ["http://localhost:9222/json/version"] * 3


def test_fetch_ws_endpoint_gives_up(monkeypatch):
    def fake_get(url, timeout):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(browser_module.requests, "get", fake_get)

    with pytest.raises(BrowserLaunchError, match="/json/version"):
        fetch_ws_endpoint(9222, timeout=0, poll_interval=0)


def _session(tmp_path):
    page = MagicMock()
    profile_dir = tmp_path / "profile"
    profile_dir.mkdir()
    session = ChromeSession(MagicMock(), MagicMock(), 9222, MagicMock(), page, str(profile_dir))
    return session, page, profile_dir


def test_set_device_emulates_profile(tmp_path):
    session, page, _ = _session(tmp_path)
    cdp = page.context.new_cdp_session.return_value

    session.set_device(MOBILE)
    session.set_device(DESKTOP)

    page.context.new_cdp_session.assert_called_once_with(page)
    cdp.send.assert_any_call("Emulation.setDeviceMetricsOverride", {
        "width": 375, "height": 667, "deviceScaleFactor": 2, "mobile": True,
    })
    cdp.send.assert_any_call("Emulation.setTouchEmulationEnabled", {"enabled": True})
    cdp.send.assert_any_call("Emulation.setUserAgentOverride", {"userAgent": MOBILE.user_agent})
    last_metrics = [c for c in cdp.send.call_args_list if c.args[0] == "Emulation.setDeviceMetricsOverride"][-1]
    assert last_metrics.args[1]["width"] == 1920
    assert last_metrics.args[1]["mobile"] is False


def test_close_tears_everything_down(tmp_path):
    session, _, profile_dir = _session(tmp_path)

    session.close()

    session.browser.close.assert_called_once()
    session.process.terminate.assert_called_once()
    session.playwright.stop.assert_called_once()
    assert not profile_dir.exists()


def test_close_kills_stuck_process(tmp_path):
    session, _, _ = _session(tmp_path)
    session.process.wait.side_effect = subprocess.TimeoutExpired("chrome", 10)

    session.close()

    session.process.kill.assert_called_once()


def test_close_terminates_chrome_even_if_disconnect_fails(tmp_path):
    session, _, _ = _session(tmp_path)
    session.browser.close.side_effect = RuntimeError("Target closed")

    with pytest.raises(RuntimeError):
        session.close()

    session.process.terminate.assert_called_once()
    session.playwright.stop.assert_called_once()


def test_launch_chrome_attaches_over_cdp(monkeypatch, config):
    playwright = MagicMock()
    playwright.chromium.executable_path = "/ms-playwright/chromium/chrome"
    browser = playwright.chromium.connect_over_cdp.return_value
    context = MagicMock()
    browser.contexts = [context]
    starter = MagicMock()
    starter.return_value.start.return_value = playwright
    popen = MagicMock()

    monkeypatch.setattr(browser_module, "sync_playwright", starter)
    monkeypatch.setattr(browser_module, "find_free_port", lambda: 9555)
    monkeypatch.setattr(browser_module, "fetch_ws_endpoint", lambda port, timeout: WS)
    monkeypatch.setattr(browser_module.subprocess, "Popen", popen)

    session = launch_chrome(config)

    cmd = popen.call_args.args[0]
    assert cmd[0] == "/ms-playwright/chromium/chrome"
    assert "--headless" in cmd and "--no-sandbox" in cmd and "--disable-gpu" in cmd
    assert "--remote-debugging-port=9555" in cmd
    playwright.chromium.connect_over_cdp.assert_called_once_with(WS)
    assert session.port == 9555
    assert session.page is context.new_page.return_value

    browser_module.shutil.rmtree(session.profile_dir, ignore_errors=True)


def test_launch_chrome_cleans_up_when_endpoint_never_appears(monkeypatch, config):
    playwright = MagicMock()
    starter = MagicMock()
    starter.return_value.start.return_value = playwright
    popen = MagicMock()

    def never_ready(port, timeout):
        raise BrowserLaunchError("not ready")

    monkeypatch.setattr(browser_module, "sync_playwright", starter)
    monkeypatch.setattr(browser_module, "fetch_ws_endpoint", never_ready)
    monkeypatch.setattr(browser_module.subprocess, "Popen", popen)

    with pytest.raises(BrowserLaunchError):
        launch_chrome(config)

    popen.return_value.kill.assert_called_once()
    playwright.stop.assert_called_once()


def test_launch_chrome_cleans_up_when_chrome_cannot_start(monkeypatch, config, tmp_path):
    playwright = MagicMock()
    starter = MagicMock()
    starter.return_value.start.return_value = playwright
    profile_dir = tmp_path / "profile"
    profile_dir.mkdir()

    def missing_binary(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(browser_module, "sync_playwright", starter)
    monkeypatch.setattr(browser_module.tempfile, "mkdtemp", lambda prefix: str(profile_dir))
    monkeypatch.setattr(browser_module.subprocess, "Popen", missing_binary)

    with pytest.raises(FileNotFoundError):
        launch_chrome(dataclasses.replace(config, chrome_path="/no/chrome"))

    playwright.stop.assert_called_once()
    assert not profile_dir.exists()
