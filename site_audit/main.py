#!/usr/bin/env python3
"""
site_audit/main.py

Runs Lighthouse (mobile + desktop) and axe (mobile + desktop) for every
configured storefront path, after unlocking the store once.

Usage:
    WEBSITE=https://shop.example.com PASSWORD=... python -m site_audit
"""

import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .auditors import (
    AccessibilityAuditor,
    AxeAuditor,
    LighthouseAuditor,
    QualityAuditor,
    run_axe,
    run_lighthouse,
)
from .auth import login
from .browser import ChromeSession, launch_chrome
from .config import AuditConfig, configure_logging, load_config
from .errors import AuditRunAborted
from .models import AuditTarget, StepPolicy, step_policies
from .navigation import navigate_with_retries

logger = logging.getLogger(__name__)


def _audit_target(session: ChromeSession, target: AuditTarget, config: AuditConfig,
                  quality: QualityAuditor, accessibility: AccessibilityAuditor) -> List[Path]:
    page = session.page
    url = target.url
    out = config.output_dir
    policies = step_policies(config.auditor_failure_policy)

    steps = [
        ("navigate", "navigation",
         lambda: navigate_with_retries(page, url, config.max_retries, config.timeout_ms)),
        ("lighthouse", "lighthouse mobile",
         lambda: run_lighthouse(url, session.port, True,
                                target.report_path("lighthouse", "mobile", out), config, quality)),
        ("lighthouse", "lighthouse desktop",
         lambda: run_lighthouse(url, session.port, False,
                                target.report_path("lighthouse", "desktop", out), config, quality)),
        ("viewport", "mobile viewport", lambda: session.set_device(config.mobile)),
        ("axe", "axe mobile",
         lambda: run_axe(page, url, target.report_path("axe", "mobile", out), True, accessibility)),
        ("viewport", "desktop viewport", lambda: session.set_device(config.desktop)),
        ("axe", "axe desktop",
         lambda: run_axe(page, url, target.report_path("axe", "desktop", out), False, accessibility)),
    ]

    written = []
    for step, label, action in steps:
        try:
            result = action()
        except Exception as e:
            if policies[step] is StepPolicy.SKIP:
                logger.error("Skipping %s: %s failed: %s", url, label, e)
                return written
            raise AuditRunAborted(label, url, e) from e
        if isinstance(result, Path):
            written.append(result)
    return written


def run_audits_for_urls(config: AuditConfig,
                        paths: Optional[Sequence[str]] = None,
                        login_url: Optional[str] = None,
                        launcher: Callable[[AuditConfig], ChromeSession] = launch_chrome,
                        quality_auditor: Optional[QualityAuditor] = None,
                        accessibility_auditor: Optional[AccessibilityAuditor] = None) -> List[Path]:
    """Audit ``paths`` (default: config.paths) one after the other.

    Browser launch and login failures end the run as AuditRunAborted. Returns
    the report files written, in order. The browser is torn down on every exit
    path; a teardown error never hides the error that ended the run.
    """
    paths = config.paths if paths is None else paths
    login_url = login_url or config.login_url

    written: List[Path] = []
    try:
        session = launcher(config)
    except Exception as e:
        raise AuditRunAborted("launch", config.domain, e) from e

    try:
        try:
            login(session.page, login_url, config)
        except Exception as e:
            raise AuditRunAborted("login", login_url, e) from e

        quality = quality_auditor or LighthouseAuditor(session.port, config.categories, config.lighthouse_path)
        accessibility = accessibility_auditor or AxeAuditor(config.axe_script_url)

        for relative_path in paths:
            target = AuditTarget(config.domain, relative_path)
            written.extend(_audit_target(session, target, config, quality, accessibility))
    except BaseException:
        try:
            session.close()
        except Exception:
            logger.exception("Failed to close Chrome after an aborted run")
        raise
    session.close()
    return written


def main() -> int:
    configure_logging()
    try:
        config = load_config()
        written = run_audits_for_urls(config)
    except Exception:
        logger.exception("Audit run failed")
        return 1
    logger.info("Audit finished: %d reports written", len(written))
    return 0


if __name__ == "__main__":
    sys.exit(main())
