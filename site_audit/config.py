"""Configuration for the site audit run"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Chrome launch flags
CHROME_FLAGS = ("--headless", "--no-sandbox", "--disable-gpu")

# Lighthouse categories
CATEGORIES = ("performance", "accessibility", "best-practices", "seo", "pwa")

MOBILE_USER_AGENT = "Mozilla/5.0 (Android 10; Mobile; rv:88.0) Gecko/88.0 Firefox/88.0"
DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

# Storefront pages audited on every run
DEFAULT_PATHS = (
    "/account/login",
    "/cart",
    "/collections/stationary",
    "/collections",
    "/pages/about",
    "/products/spiral-notebook",
    "/search?q=note",
    "/search",
    "",
)

AXE_CDN = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"

AUDITOR_FAILURE_POLICIES = ("abort", "skip")


@dataclass(frozen=True)
class DeviceProfile:
    name: str
    width: int
    height: int
    device_scale_factor: float
    is_mobile: bool
    has_touch: bool
    user_agent: str

    @property
    def viewport(self) -> Dict[str, object]:
        return {
            "width": self.width,
            "height": self.height,
            "deviceScaleFactor": self.device_scale_factor,
            "isMobile": self.is_mobile,
            "hasTouch": self.has_touch,
        }

    @property
    def screen_emulation(self) -> Dict[str, object]:
        """Lighthouse screenEmulation settings for this profile."""
        return {
            "width": self.width,
            "height": self.height,
            "deviceScaleFactor": self.device_scale_factor,
            "mobile": self.is_mobile,
        }


MOBILE = DeviceProfile(
    name="mobile",
    width=375,
    height=667,
    device_scale_factor=2,
    is_mobile=True,
    has_touch=True,
    user_agent=MOBILE_USER_AGENT,
)

DESKTOP = DeviceProfile(
    name="desktop",
    width=1920,
    height=1080,
    device_scale_factor=1,
    is_mobile=False,
    has_touch=False,
    user_agent=DESKTOP_USER_AGENT,
)


@dataclass(frozen=True)
class AuditConfig:
    domain: str
    password: str
    mobile: DeviceProfile = MOBILE
    desktop: DeviceProfile = DESKTOP
    paths: Tuple[str, ...] = DEFAULT_PATHS
    timeout: float = 60.0  # seconds, per navigation
    max_retries: int = 3
    chrome_flags: Tuple[str, ...] = CHROME_FLAGS
    login_path: str = "/password"
    password_selector: str = 'input[type="password"]'
    login_form_selector: str = ".password-form"
    categories: Tuple[str, ...] = CATEGORIES
    output_dir: Path = field(default_factory=lambda: Path("."))
    chrome_path: Optional[str] = None
    lighthouse_path: Optional[str] = None
    axe_script_url: str = AXE_CDN
    auditor_failure_policy: str = "abort"

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")
        if self.auditor_failure_policy not in AUDITOR_FAILURE_POLICIES:
            raise ValueError(
                f"auditor_failure_policy must be one of {AUDITOR_FAILURE_POLICIES}, "
                f"got {self.auditor_failure_policy!r}"
            )
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "paths", tuple(self.paths))

    @property
    def login_url(self) -> str:
        return f"{self.domain}{self.login_path}"

    @property
    def timeout_ms(self) -> int:
        return int(self.timeout * 1000)

    def device(self, is_mobile: bool) -> DeviceProfile:
        return self.mobile if is_mobile else self.desktop


def load_config(environ: Optional[Mapping[str, str]] = None) -> AuditConfig:
    """Build the run configuration from the process environment.

    A ``.env`` file in the working directory is loaded first when reading the
    real environment. WEBSITE and PASSWORD are not validated here; a run with
    either missing fails later against the site.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    domain = environ.get("WEBSITE", "")
    password = environ.get("PASSWORD", "")
    if not domain:
        logger.warning("WEBSITE is not set; every audited URL will be relative")
    if not password:
        logger.warning("PASSWORD is not set; login will submit an empty password")

    return AuditConfig(
        domain=domain,
        password=password,
        timeout=float(environ.get("AUDIT_TIMEOUT", "60")),
        max_retries=int(environ.get("AUDIT_MAX_RETRIES", "3")),
        output_dir=Path(environ.get("AUDIT_OUTPUT_DIR", ".")),
        chrome_path=environ.get("CHROME_PATH") or environ.get("CHROME_BIN") or None,
        lighthouse_path=environ.get("LIGHTHOUSE_PATH") or None,
        axe_script_url=environ.get("AXE_SCRIPT_URL", AXE_CDN),
        auditor_failure_policy=environ.get("AUDITOR_FAILURE_POLICY", "abort").lower(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    log_level = getattr(logging, (level or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # Suppress noisy connection-pool chatter while polling the debugging port
    logging.getLogger("urllib3").setLevel(logging.WARNING)
