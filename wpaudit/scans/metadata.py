# wpaudit/scans/metadata.py
import re
from typing import Iterable, Optional

from ..models import EndpointFinding, SiteMetadata
from ..probes import GENERATOR_PATTERN

# core assets only; theme and plugin assets carry their own versions
ASSET_VERSION_PATTERN = r"wp-includes/[^\"'\s>]*?[?&]ver=(\d+(?:\.\d+)+)"
THEME_PATTERN = r"wp-content/themes/([^/\"'\s?#]+)"


def _match(pattern: Optional[str], text: str) -> Optional[str]:
    if not pattern or not text:
        return None
    m = re.search(pattern, text, re.I)
    if not m:
        return None
    # prefer first capturing group if present
    return m.group(1) if m.groups() else m.group(0)


def extract(html: str, root_url: str, waf: Optional[str] = None,
            endpoints: Iterable[EndpointFinding] = ()) -> SiteMetadata:
    generator = re.search(GENERATOR_PATTERN, html or "", re.I)
    version = generator.group(1) if generator else None
    if not version:
        version = _match(ASSET_VERSION_PATTERN, html)

    readme = any(e.path == "/readme.html" and e.status == "accessible" for e in endpoints)

    return SiteMetadata(
        version=version,
        theme=_match(THEME_PATTERN, html),
        generator=generator is not None,
        readme=readme,
        waf=waf,
        tls=root_url.lower().startswith("https://"),
    )
