# wpaudit/export.py
import json
from datetime import datetime, timezone
from typing import Optional, Tuple
from urllib.parse import urlparse

from .models import AuditResult


def export_filename(result: AuditResult, exported_at: datetime) -> str:
    host = urlparse(result.url).hostname or "site"
    return f"wp-audit-{host}-{int(exported_at.timestamp() * 1000)}.json"


def export_result(result: AuditResult, exported_at: Optional[datetime] = None) -> Tuple[str, str]:
    """Return (filename, JSON document) for a finished audit."""
    exported_at = exported_at or datetime.now(timezone.utc)
    data = result.model_dump(mode="json")
    data["timestamp"] = result.timestamp.isoformat()
    data["exported_at"] = exported_at.isoformat()
    return export_filename(result, exported_at), json.dumps(data, indent=2)
