import logging
import re
from pathlib import Path
from typing import Union
from urllib.parse import quote, urljoin, urlparse

logger = logging.getLogger(__name__)

_PATH_SAFE = "/%:@!$&'()*+,;=[]|^"

REPORT_EXTENSIONS = {
    "lighthouse": "html",
    "axe": "json",
}

_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def get_safe_filename(url: str, base: str = "") -> str:
    """Report file stem for a URL: its path without the leading slash, with
    every non-alphanumeric character replaced by an underscore.

    The query string and fragment never take part, so ``/search?q=note`` and
    ``/search`` share the stem ``search`` and overwrite each other's reports.
    """
    path = urlparse(urljoin(base, url) if base else url).path
    # Percent-encode like a browser URL pathname: "é" -> "%C3%A9" -> "_C3_A9"
    path = quote(path, safe=_PATH_SAFE)
    if path.startswith("/"):
        path = path[1:]
    return _UNSAFE.sub("_", path)


def report_path(kind: str, device: str, safe_name: str, output_dir: Union[str, Path] = ".") -> Path:
    ext = REPORT_EXTENSIONS[kind]
    return Path(output_dir) / kind / device / f"{safe_name}_{device}.{ext}"


def write_report(path: Union[str, Path], data: Union[bytes, str]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        with open(path, "w", encoding="utf-8") as f:
            f.write(data)
    return path
