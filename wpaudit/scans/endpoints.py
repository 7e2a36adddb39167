# wpaudit/scans/endpoints.py
from typing import List

from .. import config
from ..models import EndpointFinding
from ..probes import SENSITIVE_ENDPOINTS
from ..references import get_reference
from ..relay import RelayTransport


async def run(target: str, transport: RelayTransport, concurrency: int = config.PROBE_CONCURRENCY) -> List[EndpointFinding]:
    base = target.rstrip("/")
    urls = [base + ep["path"] for ep in SENSITIVE_ENDPOINTS]
    outcomes = await transport.probe_many_exist(urls, concurrency=concurrency)

    findings: List[EndpointFinding] = []
    for ep, url in zip(SENSITIVE_ENDPOINTS, urls):
        outcome = outcomes[url]
        findings.append(EndpointFinding(
            name=ep["name"],
            path=ep["path"],
            url=url,
            status="accessible" if outcome.exists else "blocked",
            status_code=outcome.status_code,
            risk=ep["risk"],
            description=ep["description"],
            reference=get_reference("endpoint", ep["path"]),
        ))
    return findings
