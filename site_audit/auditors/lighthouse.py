"""
site_audit/auditors/lighthouse.py

Runs the Lighthouse CLI against the already running Chrome (``--port``) so the
audit reuses the logged-in session. The HTML report is read from stdout and
only written to disk once Lighthouse exited cleanly.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..config import CATEGORIES, AuditConfig, DeviceProfile
from ..errors import AuditorError
from ..reports import write_report
from .base import QualityAuditor

logger = logging.getLogger(__name__)


def find_lighthouse(explicit: Optional[str] = None) -> List[str]:
    """Command prefix for the Lighthouse CLI: LIGHTHOUSE_PATH, PATH, then npx."""
    if explicit:
        return [explicit]
    lh = shutil.which("lighthouse")
    if lh:
        return [lh]
    npx = shutil.which("npx")
    if npx:
        return [npx, "--yes", "lighthouse"]
    raise AuditorError(
        "lighthouse CLI not found. Install with `npm i -g lighthouse` "
        "or set LIGHTHOUSE_PATH to the lighthouse executable."
    )


def _flag(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class LighthouseAuditor(QualityAuditor):
    def __init__(self, port: int, categories: Sequence[str] = CATEGORIES,
                 lighthouse_path: Optional[str] = None, timeout: Optional[float] = None):
        self.port = port
        self.categories = tuple(categories)
        self.lighthouse_path = lighthouse_path
        self.timeout = timeout

    def build_command(self, url: str, device: DeviceProfile) -> List[str]:
        cmd = find_lighthouse(self.lighthouse_path) + [
            url,
            f"--port={self.port}",
            f"--form-factor={device.name}",
            f"--only-categories={','.join(self.categories)}",
        ]
        for key, value in device.screen_emulation.items():
            cmd.append(f"--screenEmulation.{key}={_flag(value)}")
        cmd += [
            f"--emulated-user-agent={device.user_agent}",
            "--disable-storage-reset",
            "--output=html",
            "--output-path=stdout",
            "--quiet",
        ]
        return cmd

    def run(self, url: str, device: DeviceProfile) -> bytes:
        cmd = self.build_command(url, device)
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=self.timeout, check=False)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise AuditorError(f"Lighthouse could not run for {url}: {e}") from e
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise AuditorError(
                f"Lighthouse exited with code {result.returncode} for {url}: {stderr[-500:]}"
            )
        if not result.stdout:
            raise AuditorError(f"Lighthouse produced an empty report for {url}")
        return result.stdout


def run_lighthouse(url: str, port: int, is_mobile: bool, report_path: Union[str, Path],
                   config: AuditConfig, auditor: Optional[QualityAuditor] = None) -> Path:
    device = config.device(is_mobile)
    logger.info("Running Lighthouse audit for %s on: %s", device.name, url)

    auditor = auditor or LighthouseAuditor(port, config.categories, config.lighthouse_path)
    report = auditor.run(url, device)

    path = write_report(report_path, report)
    logger.info("Lighthouse report saved to %s", path)
    return path
