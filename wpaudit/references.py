# wpaudit/references.py
"""
Reference catalog: maps findings to OWASP Top 10 (2021) categories, CWE ids and
CVSS 3.1 base scores, plus WAF fingerprints and the aggregate severity formula.
"""

import math
from typing import Dict, Iterable, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict

Severity = Literal["None", "Low", "Medium", "High", "Critical"]


def severity_band(score: float) -> Severity:
    if score <= 0:
        return "None"
    if score < 4.0:
        return "Low"
    if score < 7.0:
        return "Medium"
    if score < 9.0:
        return "High"
    return "Critical"


class SecurityReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    owasp: str
    cwe: str
    score: float
    severity: Severity
    vector: str


class SeverityScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float
    severity: Severity
    vector: str


def _ref(owasp: str, cwe: str, score: float, vector: str) -> SecurityReference:
    return SecurityReference(owasp=owasp, cwe=cwe, score=score, severity=severity_band(score), vector=vector)


MISCONFIG = "A05:2021-Security Misconfiguration"
ACCESS_CONTROL = "A01:2021-Broken Access Control"

V_UI_INTEGRITY = "CVSS:3.1/AV:N/AC:L/PR:N/UI:R/S:U/C:N/I:L/A:N"
V_UI_CONFIDENTIALITY = "CVSS:3.1/AV:N/AC:L/PR:N/UI:R/S:U/C:L/I:N/A:N"
V_LOW_LEAK = "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:L/I:N/A:N"
V_HIGH_LEAK = "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:N/A:N"
V_FULL = "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H"
V_NONE = "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:N/I:N/A:N"

HEADER_REFERENCES: Dict[str, SecurityReference] = {
    "Content-Security-Policy": _ref(MISCONFIG, "CWE-693", 4.3, V_UI_INTEGRITY),
    "X-Frame-Options": _ref(MISCONFIG, "CWE-693", 4.3, V_UI_INTEGRITY),
    "X-Content-Type-Options": _ref(MISCONFIG, "CWE-693", 3.1, V_UI_CONFIDENTIALITY),
    "Strict-Transport-Security": _ref("A02:2021-Cryptographic Failures", "CWE-319", 5.3, V_LOW_LEAK),
    "X-XSS-Protection": _ref("A03:2021-Injection", "CWE-693", 2.1, V_UI_INTEGRITY),
    "Referrer-Policy": _ref(MISCONFIG, "CWE-200", 3.1, V_UI_CONFIDENTIALITY),
    "Permissions-Policy": _ref(MISCONFIG, "CWE-693", 2.1, V_UI_INTEGRITY),
    "Cross-Origin-Embedder-Policy": _ref(MISCONFIG, "CWE-942", 3.1, V_UI_CONFIDENTIALITY),
    "Cross-Origin-Opener-Policy": _ref(MISCONFIG, "CWE-942", 3.1, V_UI_CONFIDENTIALITY),
    "Server": _ref(MISCONFIG, "CWE-200", 2.0, V_LOW_LEAK),
    "X-Powered-By": _ref(MISCONFIG, "CWE-200", 2.0, V_LOW_LEAK),
}

# keyed by path, see probes.SENSITIVE_ENDPOINTS
ENDPOINT_REFERENCES: Dict[str, SecurityReference] = {
    "/xmlrpc.php": _ref(ACCESS_CONTROL, "CWE-749", 7.5, "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:N/I:N/A:H"),
    "/wp-login.php": _ref("A07:2021-Auth Failures", "CWE-522", 5.3, V_LOW_LEAK),
    "/wp-admin/": _ref(ACCESS_CONTROL, "CWE-284", 5.3, V_LOW_LEAK),
    "/wp-json/": _ref(ACCESS_CONTROL, "CWE-284", 0.0, V_NONE),
    "/wp-content/debug.log": _ref("A09:2021-Logging Failures", "CWE-532", 7.5, V_HIGH_LEAK),
    "/wp-config.php.bak": _ref(MISCONFIG, "CWE-200", 9.8, V_FULL),
    "/wp-config.php~": _ref(MISCONFIG, "CWE-200", 9.8, V_FULL),
    "/.git/": _ref(MISCONFIG, "CWE-527", 7.5, V_HIGH_LEAK),
    "/.env": _ref(MISCONFIG, "CWE-200", 9.8, V_FULL),
    "/backup.sql": _ref(MISCONFIG, "CWE-200", 9.8, V_FULL),
    "/database.sql": _ref(MISCONFIG, "CWE-200", 9.8, V_FULL),
    "/wp-admin/install.php": _ref(MISCONFIG, "CWE-749", 9.8, V_FULL),
    "/.htaccess": _ref(MISCONFIG, "CWE-200", 5.3, V_LOW_LEAK),
    "/phpinfo.php": _ref(MISCONFIG, "CWE-200", 5.3, V_LOW_LEAK),
    "/wp-cron.php": _ref(MISCONFIG, "CWE-749", 5.3, "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:N/I:N/A:L"),
    "/readme.html": _ref(MISCONFIG, "CWE-200", 2.0, V_LOW_LEAK),
    "/wp-includes/": _ref(MISCONFIG, "CWE-200", 0.0, V_NONE),
    "/wp-content/uploads/": _ref(ACCESS_CONTROL, "CWE-200", 3.1, V_LOW_LEAK),
    "/wp-content/plugins/": _ref("A06:2021-Vulnerable Components", "CWE-200", 3.1, V_LOW_LEAK),
}

USER_ENUMERATION_REFERENCE = _ref(ACCESS_CONTROL, "CWE-200", 5.3, V_LOW_LEAK)
VERSION_DISCLOSURE_REFERENCE = _ref(MISCONFIG, "CWE-200", 2.0, V_LOW_LEAK)


def get_reference(subject: str, name: Optional[str] = None) -> Optional[SecurityReference]:
    if subject == "header":
        return HEADER_REFERENCES.get(name)
    if subject == "endpoint":
        return ENDPOINT_REFERENCES.get(name)
    if subject == "user-enumeration":
        return USER_ENUMERATION_REFERENCE
    if subject == "version-disclosure":
        return VERSION_DISCLOSURE_REFERENCE
    return None


# Declaration order decides ties.
WAF_SIGNATURES: List[Dict] = [
    {"name": "Cloudflare", "markers": ["cloudflare", "cf-ray", "__cfduid"]},
    {"name": "Sucuri", "markers": ["sucuri", "x-sucuri"]},
    {"name": "Wordfence", "markers": ["wordfence", "wfwaf"]},
    {"name": "ModSecurity", "markers": ["mod_security", "modsecurity"]},
    {"name": "Imperva", "markers": ["imperva", "incapsula"]},
    {"name": "AWS WAF", "markers": ["awswaf", "x-amz-cf"]},
    {"name": "Akamai", "markers": ["akamai", "akamai-"]},
    {"name": "F5 BIG-IP", "markers": ["bigip", "f5-"]},
]


def detect_waf(headers: Mapping[str, str]) -> Optional[str]:
    haystack = " ".join(f"{k.lower()}:{v.lower()}" for k, v in headers.items())
    for waf in WAF_SIGNATURES:
        if any(marker in haystack for marker in waf["markers"]):
            return waf["name"]
    return None


def aggregate_severity(
    header_findings: Iterable,
    endpoint_findings: Iterable,
    user_enum_found: bool,
    version_disclosed: bool,
) -> SeverityScore:
    """
    60% worst finding + 40% mean of all scored findings, rounded to one decimal.
    Counts vulnerable headers and accessible endpoints that carry a reference.
    """
    scores: List[float] = []
    for h in header_findings:
        if h.status == "vulnerable" and h.reference is not None:
            scores.append(h.reference.score)
    for e in endpoint_findings:
        if e.status == "accessible" and e.reference is not None:
            scores.append(e.reference.score)
    if user_enum_found:
        scores.append(USER_ENUMERATION_REFERENCE.score)
    if version_disclosed:
        scores.append(VERSION_DISCLOSURE_REFERENCE.score)

    worst = max(scores) if scores else 0.0
    mean = sum(scores) / len(scores) if scores else 0.0
    overall = math.floor((worst * 0.6 + mean * 0.4) * 10 + 0.5) / 10
    return SeverityScore(score=overall, severity=severity_band(overall), vector=f"Max: {worst}, Issues: {len(scores)}")
