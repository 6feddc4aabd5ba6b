"""
Adapters for the two external auditors.

- lighthouse: page quality (performance, accessibility, best practices, SEO, PWA)
- axe: DOM accessibility rules
"""
from .axe import AxeAuditor, run_axe
from .base import AccessibilityAuditor, QualityAuditor
from .lighthouse import LighthouseAuditor, run_lighthouse

__all__ = [
    "AccessibilityAuditor",
    "AxeAuditor",
    "LighthouseAuditor",
    "QualityAuditor",
    "run_axe",
    "run_lighthouse",
]
