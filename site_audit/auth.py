import logging

from playwright.sync_api import Error as PlaywrightError

from .config import AuditConfig
from .errors import LoginError

logger = logging.getLogger(__name__)


def login(page, login_url: str, config: AuditConfig) -> None:
    """Unlock the storefront through its password-only form.

    Loads ``login_url``, waits for the password input to become visible, fills
    it and submits the surrounding form, then waits for the post-submit
    navigation to settle. There is no retry: any timeout is raised as
    LoginError.
    """
    logger.info("Logging in at: %s", login_url)
    try:
        page.goto(login_url, wait_until="networkidle", timeout=config.timeout_ms)
        page.wait_for_selector(config.password_selector, state="visible", timeout=config.timeout_ms)
        page.fill(config.password_selector, config.password)
        with page.expect_navigation(wait_until="networkidle", timeout=config.timeout_ms):
            page.eval_on_selector(config.login_form_selector, "form => form.submit()")
    except PlaywrightError as e:
        raise LoginError(f"Login at {login_url} failed: {e}") from e
    logger.info("Logged in successfully")
