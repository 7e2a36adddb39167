# wpaudit/router.py
import logging
from typing import List
from uuid import uuid4

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import Response

from .auditor import audit_site
from .errors import ConnectionFailed
from .export import export_result
from .models import AuditProgress, AuditRequest, AuditResult, AuditStatus, HistoryEntry
from .relay import RelayTransport, get_default_transport
from .store import HistoryStore, add_job, get_result, get_status, history, jobs

logger = logging.getLogger(__name__)

router = APIRouter(tags=["audit"])


def get_transport() -> RelayTransport:
    return get_default_transport()


def get_history() -> HistoryStore:
    return history


async def run_audit(audit_id: str, url: str, transport: RelayTransport, history_store: HistoryStore):
    job = jobs[audit_id]

    def on_progress(progress: AuditProgress):
        job["progress"] = progress.model_dump()

    try:
        result = await audit_site(url, on_progress, transport=transport)
    except ConnectionFailed as e:
        job["status"] = "failed"
        job["error"] = str(e)
        return
    except Exception as e:
        logger.exception("Audit %s failed unexpectedly: %s", audit_id, e)
        job["status"] = "failed"
        job["error"] = f"Unexpected error: {e}"
        return

    job["status"] = "done"
    job["result"] = result
    history_store.add(result)


@router.post("/audit", response_model=AuditStatus)
async def start_audit(
    request: AuditRequest,
    background_tasks: BackgroundTasks,
    transport: RelayTransport = Depends(get_transport),
    history_store: HistoryStore = Depends(get_history),
):
    audit_id = str(uuid4())
    add_job(audit_id, request.url)
    background_tasks.add_task(run_audit, audit_id, request.url, transport, history_store)
    return {"audit_id": audit_id, "status": "in_progress"}


@router.get("/audit/history", response_model=List[HistoryEntry])
async def list_history(history_store: HistoryStore = Depends(get_history)):
    return history_store.list()


@router.delete("/audit/history")
async def clear_history(history_store: HistoryStore = Depends(get_history)):
    history_store.clear()
    return {"status": "cleared"}


@router.get("/audit/{audit_id}/status", response_model=AuditStatus)
async def check_status(audit_id: str):
    return get_status(audit_id)


@router.get("/audit/{audit_id}/result", response_model=AuditResult)
async def check_result(audit_id: str):
    result = get_result(audit_id)
    if result is None:
        raise HTTPException(status_code=404, detail="audit not finished or unknown")
    return result


@router.get("/audit/{audit_id}/export")
async def export_audit(audit_id: str):
    result = get_result(audit_id)
    if result is None:
        raise HTTPException(status_code=404, detail="audit not finished or unknown")
    filename, document = export_result(result)
    return Response(
        content=document,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/relays")
async def relay_health(transport: RelayTransport = Depends(get_transport)):
    return {"relays": transport.health_snapshot()}


@router.delete("/relays")
async def reset_relays(transport: RelayTransport = Depends(get_transport)):
    """Forget relay failures and cached responses."""
    transport.reset_health()
    transport.clear_cache()
    return {"relays": transport.health_snapshot()}
