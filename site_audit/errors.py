"""Exception classes for the audit run."""


class AuditError(Exception):
    """Base exception for audit failures."""


class BrowserLaunchError(AuditError):
    """Raised when Chrome does not expose its debugging endpoint in time."""


class LoginError(AuditError):
    """Raised when the password form cannot be found or submitted."""


class NavigationExhaustedError(AuditError):
    """Raised when every navigation attempt for a URL failed."""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(f"Failed to navigate to {url} after {attempts} attempts")


class AuditorError(AuditError):
    """Raised when Lighthouse or axe fails to produce a result."""


class AuditRunAborted(AuditError):
    """Raised when a fatal step stops the whole run."""

    def __init__(self, step: str, url: str, cause: BaseException):
        self.step = step
        self.url = url
        super().__init__(f"{step} failed for {url}: {cause}")
