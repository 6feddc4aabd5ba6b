# models.py

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Union

from .reports import get_safe_filename, report_path


@dataclass(frozen=True)
class AuditTarget:
    domain: str
    relative_path: str

    @property
    def url(self) -> str:
        # Plain concatenation: "" audits the bare domain, no slash cleanup
        return f"{self.domain}{self.relative_path}"

    @property
    def safe_name(self) -> str:
        return get_safe_filename(self.url, self.domain)

    def report_path(self, kind: str, device: str, output_dir: Union[str, Path] = ".") -> Path:
        return report_path(kind, device, self.safe_name, output_dir)


class StepPolicy(Enum):
    FATAL = "fatal"  # stop the whole run
    SKIP = "skip"    # give up on this URL, continue with the next one


def step_policies(auditor_failure_policy: str = "abort") -> Dict[str, StepPolicy]:
    """What a failure of each per-URL step means for the run.

    Navigation retries happen inside the navigator; only exhaustion reaches
    this table.
    """
    auditor = StepPolicy.SKIP if auditor_failure_policy == "skip" else StepPolicy.FATAL
    return {
        "navigate": StepPolicy.SKIP,
        "lighthouse": auditor,
        "viewport": StepPolicy.FATAL,
        "axe": auditor,
    }
