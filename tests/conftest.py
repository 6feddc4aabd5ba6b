"""
Shared fixtures: a config pointed at tmp_path, and fakes for the browser
session and both auditors so the pipeline runs without Chrome or Node.
"""

from unittest.mock import MagicMock

import pytest

from site_audit.auditors.base import AccessibilityAuditor, QualityAuditor
from site_audit.config import AuditConfig
from site_audit.errors import AuditorError


class FakeSession:
    def __init__(self, page=None, port=9222):
        self.page = page if page is not None else MagicMock(name="page")
        self.port = port
        self.devices = []
        self.closed = False

    def set_device(self, device):
        self.devices.append(device.name)

    def close(self):
        self.closed = True


class FakeQualityAuditor(QualityAuditor):
    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    def run(self, url, device):
        self.calls.append((url, device.name))
        if (url, device.name) in self.fail_on:
            raise AuditorError(f"Lighthouse exited with code 1 for {url}")
        return f"<html><body>{device.name} report for {url}</body></html>".encode("utf-8")


class FakeAccessibilityAuditor(AccessibilityAuditor):
    """Records which device profile was active when each analysis ran."""

    def __init__(self, session, fail_on_device=None):
        self.session = session
        self.fail_on_device = fail_on_device
        self.devices_seen = []

    def run(self, page):
        device = self.session.devices[-1] if self.session.devices else None
        self.devices_seen.append(device)
        if device == self.fail_on_device:
            raise AuditorError("axe-core failed")
        return {"violations": [], "passes": [{"id": "html-has-lang"}], "device": device}


@pytest.fixture
def config(tmp_path):
    return AuditConfig(domain="https://example.com", password="hunter2", output_dir=tmp_path, timeout=5)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def quality_auditor():
    return FakeQualityAuditor()


@pytest.fixture
def accessibility_auditor(session):
    return FakeAccessibilityAuditor(session)


@pytest.fixture
def make_quality_auditor():
    return FakeQualityAuditor


@pytest.fixture
def make_accessibility_auditor():
    return FakeAccessibilityAuditor
