# wpaudit/scoring.py
import math
from typing import Sequence

from .models import EndpointFinding, HeaderFinding
from .probes import CRITICAL_HEADERS, RISK_DEDUCTIONS

CRITICAL_HEADER_PENALTY = 8
HEADER_PENALTY = 4
WARNING_PENALTY = 2
USER_ENUM_PENALTY = 12
VERSION_PENALTY = 4

CLEAN_SCORE = 95
SCORE_FLOOR = 10


def overall_score(
    headers: Sequence[HeaderFinding],
    endpoints: Sequence[EndpointFinding],
    user_enum_found: bool,
    version_disclosed: bool,
) -> int:
    """
    0-100 score. 100 is never returned once checks produced findings: a clean
    run scores 95, and a reachable site never drops below 10.
    """
    deductions = 0
    for h in headers:
        if h.status == "vulnerable":
            deductions += CRITICAL_HEADER_PENALTY if h.name in CRITICAL_HEADERS else HEADER_PENALTY
        elif h.status == "warning":
            deductions += WARNING_PENALTY
    for e in endpoints:
        if e.status == "accessible":
            deductions += RISK_DEDUCTIONS.get(e.risk, 0)
    if user_enum_found:
        deductions += USER_ENUM_PENALTY
    if version_disclosed:
        deductions += VERSION_PENALTY

    score = int(math.floor(min(100, max(0, 100 - deductions)) + 0.5))

    has_findings = bool(headers) or bool(endpoints)
    if has_findings and deductions == 0:
        return CLEAN_SCORE
    if has_findings and score < SCORE_FLOOR:
        return SCORE_FLOOR
    return score
