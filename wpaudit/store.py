# wpaudit/store.py
import json
import logging
from typing import Dict, List, MutableMapping, Optional

from . import config
from .models import AuditResult, HistoryEntry

logger = logging.getLogger(__name__)

# in-flight and finished audits, keyed by audit id
jobs: Dict[str, Dict] = {}


def add_job(audit_id: str, url: str, limit: int = config.MAX_JOBS) -> Dict:
    """Register an audit, evicting the oldest finished ones beyond `limit`. Running audits are kept."""
    job = {"status": "in_progress", "url": url, "progress": None}
    jobs[audit_id] = job
    finished = [k for k, v in jobs.items() if v["status"] != "in_progress"]
    for key in finished[:max(0, len(jobs) - limit)]:
        del jobs[key]
    return job


def get_status(audit_id: str) -> Dict:
    if audit_id not in jobs:
        return {"audit_id": audit_id, "status": "not_found"}
    job = jobs[audit_id]
    return {"audit_id": audit_id, "status": job["status"], "progress": job.get("progress"), "error": job.get("error")}


def get_result(audit_id: str) -> Optional[AuditResult]:
    job = jobs.get(audit_id)
    if not job:
        return None
    return job.get("result")


class HistoryStore:
    """
    Recent audits as {url, timestamp, score, is_wordpress} projections, newest
    first, one entry per URL. The backend is any string mapping; failures to
    read or write it are logged and otherwise ignored.
    """

    def __init__(self, backend: Optional[MutableMapping[str, str]] = None, key: str = config.HISTORY_KEY,
                 limit: int = config.MAX_HISTORY):
        self.backend = backend if backend is not None else {}
        self.key = key
        self.limit = limit

    def list(self) -> List[HistoryEntry]:
        try:
            raw = self.backend.get(self.key)
            if not raw:
                return []
            return [HistoryEntry(**item) for item in json.loads(raw)]
        except Exception as e:
            logger.warning("Could not read audit history: %s", e)
            return []

    def add(self, result: AuditResult) -> List[HistoryEntry]:
        entry = HistoryEntry(
            url=result.url,
            timestamp=result.timestamp.isoformat(),
            score=result.overall_score,
            is_wordpress=result.is_wordpress,
        )
        updated = [entry] + [h for h in self.list() if h.url != result.url]
        updated = updated[:self.limit]
        try:
            self.backend[self.key] = json.dumps([h.model_dump() for h in updated])
        except Exception as e:
            logger.warning("Could not save audit history: %s", e)
        return updated

    def clear(self) -> None:
        try:
            self.backend.pop(self.key, None)
        except Exception as e:
            logger.warning("Could not clear audit history: %s", e)


history = HistoryStore()
