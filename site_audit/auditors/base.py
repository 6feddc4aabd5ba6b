from abc import ABC, abstractmethod
from typing import Any, Dict

from ..config import DeviceProfile


class QualityAuditor(ABC):
    """Scores a live page load and renders the result as an HTML report."""

    name = "lighthouse"

    @abstractmethod
    def run(self, url: str, device: DeviceProfile) -> bytes:
        raise NotImplementedError


class AccessibilityAuditor(ABC):
    """Inspects the DOM currently rendered in a page for rule violations."""

    name = "axe"

    @abstractmethod
    def run(self, page) -> Dict[str, Any]:
        raise NotImplementedError
