"""
Per-page Lighthouse and axe audits of a password-protected storefront.

Modules:
- site_audit.config      run configuration and device profiles
- site_audit.browser     Chrome process + Playwright attachment
- site_audit.auth        storefront password login
- site_audit.navigation  navigation with bounded retries
- site_audit.auditors    Lighthouse and axe adapters
- site_audit.reports     report naming and writing

Use site_audit.main (or ``python -m site_audit``) as the CLI entry point.
"""

__version__ = "1.0.0"
