# wpaudit/scans/wordpress.py
import logging
import re
from typing import List, NamedTuple, Tuple

from ..errors import RelayExhausted
from ..models import WordPressDetection
from ..probes import (
    CHALLENGE_MARKERS,
    GENERATOR_PATTERN,
    STRONG_SIGNATURES,
    SUBDIRECTORY_CANDIDATES,
    WEAK_SIGNATURES,
)
from ..relay import RelayResponse, RelayTransport

logger = logging.getLogger(__name__)


class DetectionReport(NamedTuple):
    detection: WordPressDetection
    base_url: str
    page: RelayResponse


def match_signatures(html: str) -> Tuple[List[str], List[str]]:
    """Return (strong, weak) signatures found in the page."""
    lower = (html or "").lower()
    strong = [sig for sig in STRONG_SIGNATURES if sig in lower]
    if re.search(GENERATOR_PATTERN, html or "", re.I):
        strong.append("generator meta tag")
    weak = [sig for sig in WEAK_SIGNATURES if sig in lower]
    return strong, weak


def is_wordpress_match(strong: List[str], weak: List[str]) -> bool:
    return len(strong) >= 1 or len(weak) >= 2


def blocked_reason(resp: RelayResponse) -> str:
    if resp.status in (401, 403):
        return f"Site answered HTTP {resp.status}; a firewall or access rule is hiding the page content."
    lower = resp.body.lower()
    for marker in CHALLENGE_MARKERS:
        if marker in lower:
            return f"Site served an anti-bot challenge page (matched '{marker}')."
    return ""


async def detect(base_url: str, root: RelayResponse, transport: RelayTransport) -> DetectionReport:
    """
    Classify the root page, then fall back to common subdirectories in order.
    The first subdirectory that looks like WordPress becomes the audit base.
    """
    strong, weak = match_signatures(root.body)
    if is_wordpress_match(strong, weak):
        detection = WordPressDetection(status="detected", strong_matches=strong, weak_matches=weak,
                                       detail="WordPress signatures found on the home page.")
        return DetectionReport(detection, base_url, root)

    for sub in SUBDIRECTORY_CANDIDATES:
        url = base_url + sub
        try:
            resp = await transport.fetch(url)
        except RelayExhausted:
            logger.debug("Subdirectory %s not reachable", url)
            continue
        sub_strong, sub_weak = match_signatures(resp.body)
        if is_wordpress_match(sub_strong, sub_weak):
            detection = WordPressDetection(status="detected", subdirectory=sub,
                                           strong_matches=sub_strong, weak_matches=sub_weak,
                                           detail=f"WordPress found under {sub}.")
            return DetectionReport(detection, url, resp)

    reason = blocked_reason(root)
    if reason:
        detection = WordPressDetection(status="blocked", detail=reason, weak_matches=weak)
    else:
        detection = WordPressDetection(status="not_detected", weak_matches=weak,
                                       detail="No WordPress signatures found; results have reduced confidence.")
    return DetectionReport(detection, base_url, root)
