# wpaudit/scans/security_headers.py
import logging
import re
from typing import List, Mapping, NamedTuple, Optional

import httpx

from ..errors import RelayExhausted
from ..models import HeaderFinding
from ..probes import DISCLOSURE_HEADERS, HSTS_MIN_MAX_AGE, SECURITY_HEADERS
from ..references import detect_waf, get_reference
from ..relay import RelayTransport

logger = logging.getLogger(__name__)

DESCRIPTIONS = {
    "content-security-policy": "Restricts which resources the page may load.",
    "x-frame-options": "Protects against clickjacking.",
    "strict-transport-security": "Forces browsers to use HTTPS.",
    "x-content-type-options": "Prevents MIME sniffing.",
    "x-xss-protection": "Legacy browser XSS filter.",
    "referrer-policy": "Controls how much referrer information is sent.",
    "permissions-policy": "Controls which browser APIs the page may use.",
    "cross-origin-opener-policy": "Isolates the browsing context from cross-origin windows.",
    "cross-origin-embedder-policy": "Blocks cross-origin resources that don't opt in.",
}


class HeaderReport(NamedTuple):
    findings: List[HeaderFinding]
    waf: Optional[str]


def _max_age(value: str) -> int:
    m = re.search(r"max-age\s*=\s*\"?(\d+)", value, re.I)
    return int(m.group(1)) if m else 0


def header_status(name: str, value: Optional[str]) -> str:
    if not value or not value.strip():
        return "vulnerable"

    lower = value.strip().lower()
    key = name.lower()

    if key == "content-security-policy":
        if "unsafe-inline" in lower or "unsafe-eval" in lower:
            return "warning"
        return "secure"
    if key == "x-frame-options":
        return "secure" if lower in ("deny", "sameorigin") else "warning"
    if key == "strict-transport-security":
        max_age = _max_age(lower)
        if max_age >= HSTS_MIN_MAX_AGE:
            return "secure"
        if max_age > 0:
            return "warning"
        return "vulnerable"
    if key == "x-content-type-options":
        return "secure" if lower == "nosniff" else "warning"
    return "secure"


def header_description(name: str, value: Optional[str], status: str) -> str:
    if status == "vulnerable":
        if value:
            return f"{name} is set but ineffective ({value})."
        return f"{name} is not configured. This can expose the site to attacks."
    base = DESCRIPTIONS.get(name.lower(), f"Security header: {value}")
    if status == "warning":
        return f"{base} Current value is weak: {value}"
    return base


def evaluate_headers(headers: Mapping[str, str]) -> List[HeaderFinding]:
    headers = httpx.Headers(headers)
    findings: List[HeaderFinding] = []
    for header in SECURITY_HEADERS:
        name = header["name"]
        value = headers.get(name)
        status = header_status(name, value)
        findings.append(HeaderFinding(
            name=name,
            value=value,
            status=status,
            description=header_description(name, value, status),
            reference=get_reference("header", name),
        ))

    for name in DISCLOSURE_HEADERS:
        value = headers.get(name)
        if value:
            findings.append(HeaderFinding(
                name=name,
                value=value,
                status="warning",
                description=f"{name} reveals backend software ({value}); remove or blank it.",
                reference=get_reference("header", name),
            ))
    return findings


async def run(target: str, transport: RelayTransport) -> HeaderReport:
    try:
        resp = await transport.fetch(target)
    except RelayExhausted as e:
        logger.warning("Could not fetch headers from %s: %s", target, e)
        return HeaderReport([], None)
    return HeaderReport(evaluate_headers(resp.headers), detect_waf(resp.headers))
