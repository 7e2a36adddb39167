# wpaudit/auditor.py
import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from . import recommendations, scoring
from .errors import ConnectionFailed, RelayExhausted
from .models import AuditProgress, AuditResult
from .references import aggregate_severity
from .relay import RelayTransport, get_default_transport
from .scans import endpoints, metadata, security_headers, user_enumeration, wordpress

logger = logging.getLogger(__name__)

TOTAL_STEPS = 4

ProgressCallback = Callable[[AuditProgress], Optional[Awaitable[None]]]


def normalize_url(url: str) -> str:
    normalized = (url or "").strip()
    if not normalized.lower().startswith(("http://", "https://")):
        normalized = "https://" + normalized
    return normalized.rstrip("/")


async def _report(on_progress: Optional[ProgressCallback], step: str, current: int) -> None:
    if on_progress is None:
        return
    progress = AuditProgress(
        step=step,
        current=current,
        total=TOTAL_STEPS,
        percentage=round(current / TOTAL_STEPS * 100),
    )
    ret = on_progress(progress)
    if inspect.isawaitable(ret):
        await ret


async def audit_site(
    url: str,
    on_progress: Optional[ProgressCallback] = None,
    *,
    transport: Optional[RelayTransport] = None,
) -> AuditResult:
    """
    Audit orchestration:
      1. connect: fetch the home page (the only step whose failure is fatal)
      2. detect WordPress, falling back to common subdirectories
      3. headers, sensitive endpoints and user enumeration, concurrently
      4. metadata extraction
      5. scoring and result assembly
    Raises ConnectionFailed when no relay could fetch the home page.
    """
    transport = transport or get_default_transport()
    base_url = normalize_url(url)
    logger.info("Starting audit of %s", base_url)

    await _report(on_progress, "Connecting to site", 0)
    try:
        root = await transport.fetch(base_url)
    except RelayExhausted as exc:
        logger.warning("Connect step failed for %s: %s", base_url, exc)
        raise ConnectionFailed(
            f"Could not connect to {base_url}. The relay services may be down or blocked by "
            f"the site. Errors: {', '.join(exc.errors)}"
        ) from exc

    await _report(on_progress, "Detecting WordPress", 1)
    report = await wordpress.detect(base_url, root, transport)
    logger.debug("Detection for %s: %s", base_url, report.detection.status)

    await _report(on_progress, "Analyzing headers, endpoints and users", 2)
    header_report, endpoint_findings, enumeration = await asyncio.gather(
        security_headers.run(report.base_url, transport),
        endpoints.run(report.base_url, transport),
        user_enumeration.run(report.base_url, transport, root=base_url),
    )

    await _report(on_progress, "Extracting metadata and scoring", 3)
    site = metadata.extract(report.page.body, base_url, waf=header_report.waf, endpoints=endpoint_findings)

    score = scoring.overall_score(header_report.findings, endpoint_findings, enumeration.found, site.generator)
    severity = aggregate_severity(header_report.findings, endpoint_findings, enumeration.found, site.generator)

    result = AuditResult(
        url=base_url,
        timestamp=datetime.now(timezone.utc),
        wordpress=report.detection,
        security_headers=header_report.findings,
        endpoints=endpoint_findings,
        user_enumeration=enumeration,
        metadata=site,
        overall_score=score,
        severity=severity,
        recommendations=recommendations.build(header_report.findings, endpoint_findings, enumeration, site),
    )

    await _report(on_progress, "Done", 4)
    logger.info("Audit of %s finished: score=%d severity=%s", base_url, score, severity.severity)
    return result
