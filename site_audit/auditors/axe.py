import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from playwright.sync_api import Error as PlaywrightError

from ..config import AXE_CDN
from ..errors import AuditorError
from ..reports import write_report
from .base import AccessibilityAuditor

logger = logging.getLogger(__name__)

AXE_LOADED = "() => typeof window.axe !== 'undefined' && typeof window.axe.run === 'function'"
AXE_RUN = "async () => await axe.run(document)"


class AxeAuditor(AccessibilityAuditor):
    """Injects axe-core into the page and runs it against the rendered DOM.

    ``script`` is either a URL or a path to a local ``axe.min.js``.
    """

    def __init__(self, script: str = AXE_CDN):
        self.script = script

    def inject(self, page) -> None:
        if page.evaluate(AXE_LOADED):
            return
        if self.script.startswith(("http://", "https://")):
            page.add_script_tag(url=self.script)
        else:
            page.add_script_tag(path=self.script)

    def run(self, page) -> Dict[str, Any]:
        try:
            self.inject(page)
            results = page.evaluate(AXE_RUN)
        except PlaywrightError as e:
            raise AuditorError(f"axe-core failed on {page.url}: {e}") from e
        if not isinstance(results, dict):
            raise AuditorError(f"axe-core returned {type(results).__name__} instead of a result object")
        return results


def run_axe(page, url: str, report_path: Union[str, Path], is_mobile: bool,
            auditor: AccessibilityAuditor) -> Path:
    logger.info("Running Axe accessibility audit for %s on: %s", "mobile" if is_mobile else "desktop", url)

    results = auditor.run(page)

    path = write_report(report_path, json.dumps(results, indent=2))
    logger.info("Axe report saved to %s", path)
    return path
