"""Research API routes for jobs, artifacts, history and settings.

Endpoints:
    POST /v1/research/jobs                          Start a research run
    GET  /v1/research/jobs                          List jobs
    GET  /v1/research/jobs/{job_id}                 Poll status + progress
    POST /v1/research/jobs/{job_id}/cancel          Cancel before the next phase
    GET  /v1/research/jobs/{job_id}/artifacts/{key} Download one artifact
    GET  /v1/research/history                       Stored history, newest first
    GET  /v1/research/settings                      Organization name and model
    PUT  /v1/research/settings                      Update settings
"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field

from research_agent.config import DEFAULT_MODEL, DEFAULT_ORGANIZATION, load_config
from research_agent.errors import ConfigurationError
from research_agent.executor.history_store import SqlSessionStore, get_session_store
from research_agent.executor.job_manager import (
    create_job,
    get_job,
    list_jobs,
    request_cancellation,
    start_research_thread,
)
from research_agent.executor.pipeline import ResearchPipeline
from research_agent.executor.schemas import SessionStatus
from research_agent.llm.factory import get_backend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/research", tags=["research"])


class StartResearchRequest(BaseModel):
    topic: str = Field(..., description="Technology area to research", examples=["Serverless Computing"])


class SettingsUpdate(BaseModel):
    organization_name: Optional[str] = None
    model: Optional[str] = None


def get_pipeline(store: SqlSessionStore = Depends(get_session_store)) -> ResearchPipeline:
    """Build a pipeline from the current configuration."""
    try:
        config = load_config(store=store)
        generator = get_backend(config)
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=e.message)
    return ResearchPipeline(generator, store, config)


def require_topic(request: StartResearchRequest) -> str:
    """Reject a blank topic before any pipeline is built."""
    topic = request.topic.strip()
    if not topic:
        raise HTTPException(status_code=400, detail="Topic is required")
    return topic


def _content_disposition(file_name: str) -> str:
    fallback = file_name.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


def _job_view(job: dict) -> dict:
    session = job.get("session")
    phases: list[str] = []
    artifacts: list[dict] = []
    if session is not None:
        phases = [phase.value for phase in session.phase_outputs]
        artifacts = [
            {
                "key": key,
                "kind": ref.kind.value,
                "file_name": ref.file_name,
                "media_type": ref.media_type,
                "size_bytes": ref.size_bytes,
                "retrieval_handle": ref.retrieval_handle,
                "url": f"/v1/research/jobs/{job['job_id']}/artifacts/{key}",
            }
            for key, ref in session.artifacts.items()
        ]
    return {
        "job_id": job["job_id"],
        "topic": job["topic"],
        "status": job["status"],
        "progress": job["progress"],
        "error": job["error"],
        "created_at": job["created_at"],
        "completed_at": job["completed_at"],
        "phases": phases,
        "artifacts": artifacts,
    }


# --- Job endpoints ---


@router.post("/jobs")
def start_job(
    topic: str = Depends(require_topic),
    pipeline: ResearchPipeline = Depends(get_pipeline),
):
    """Start a research run in a background thread and return the job ID for polling."""
    # Dependencies resolve in order: a blank topic is rejected before credentials are checked
    job = create_job(topic)
    start_research_thread(job["job_id"], pipeline)

    return {
        "job_id": job["job_id"],
        "topic": topic,
        "status": job["status"],
        "message": "Research started. Poll GET /v1/research/jobs/{job_id} for progress.",
    }


@router.get("/jobs")
def list_all_jobs():
    jobs = [_job_view(job) for job in list_jobs()]
    return {"jobs": jobs, "count": len(jobs)}


@router.get("/jobs/{job_id}")
def get_job_status(job_id: str):
    """Get job status, latest progress and, once completed, the artifact listing."""
    job = get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")
    return _job_view(job)


@router.post("/jobs/{job_id}/cancel")
def cancel_job(job_id: str):
    """Request cancellation. Honoured before the next phase starts."""
    job = get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")
    if not request_cancellation(job_id):
        raise HTTPException(
            status_code=409,
            detail=f"Job {job_id} is already {job['status']}",
        )
    return {"job_id": job_id, "cancelled": True}


@router.get("/jobs/{job_id}/artifacts/{key}")
def download_artifact(job_id: str, key: str):
    job = get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")
    session = job.get("session")
    if job["status"] != SessionStatus.COMPLETED.value or session is None:
        raise HTTPException(
            status_code=409,
            detail=f"Job {job_id} has no artifacts (status: {job['status']})",
        )
    ref = session.artifacts.get(key)
    if ref is None:
        raise HTTPException(status_code=404, detail=f"Artifact not found: {key}")

    return Response(
        content=ref.payload,
        media_type=ref.media_type,
        headers={"Content-Disposition": _content_disposition(ref.file_name)},
    )


# --- History and settings ---


@router.get("/history")
def get_history(
    limit: Optional[int] = Query(default=None, ge=1),
    store: SqlSessionStore = Depends(get_session_store),
):
    entries = store.load_history(limit)
    return {"history": [entry.model_dump(mode="json") for entry in entries], "count": len(entries)}


@router.get("/settings")
def get_settings(store: SqlSessionStore = Depends(get_session_store)):
    stored = store.get_settings()
    return {
        "organization_name": stored.get("organization_name") or DEFAULT_ORGANIZATION,
        "model": stored.get("model") or DEFAULT_MODEL,
    }


@router.put("/settings")
def update_settings(update: SettingsUpdate, store: SqlSessionStore = Depends(get_session_store)):
    changes = update.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No settings provided")
    store.save_settings(changes)
    return get_settings(store)
