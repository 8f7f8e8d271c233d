"""Job lifecycle management for API-driven research runs.

Handles:
- Job creation and lookup
- Progress updates (for client polling)
- Cancellation (flag-based, checked by the pipeline between phases)
- Background execution threads

Jobs live in process memory only. The durable record of a finished run is
its history entry. Artifacts stay retrievable until the job is evicted:
once more than MAX_FINISHED_JOBS jobs have finished, the oldest finished
jobs are dropped. Pending and running jobs are never evicted.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from research_agent.executor.schemas import AnalysisSession, ProgressEvent, SessionStatus

if TYPE_CHECKING:
    from research_agent.executor.pipeline import ResearchPipeline

logger = logging.getLogger(__name__)

# Finished jobs hold their artifact payloads; only the newest are kept
MAX_FINISHED_JOBS = 50

_jobs: dict[str, dict[str, Any]] = {}
_jobs_lock = threading.Lock()

# In-memory cancellation flags (per job_id)
_cancellation_flags: dict[str, bool] = {}
_flags_lock = threading.Lock()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_job(topic: str) -> dict:
    """Register a new pending job. Returns a copy of the job record."""
    job_id = f"job-{uuid.uuid4().hex[:12]}"
    job = {
        "job_id": job_id,
        "topic": topic,
        "status": SessionStatus.PENDING.value,
        "progress": {"message": "Waiting to start", "percent_complete": 0},
        "error": None,
        "session": None,
        "created_at": _now(),
        "completed_at": None,
    }
    with _jobs_lock:
        _jobs[job_id] = job
    logger.info(f"Created job {job_id} for '{topic}'")
    return dict(job)


def get_job(job_id: str) -> Optional[dict]:
    """Get a copy of a job record by ID."""
    with _jobs_lock:
        job = _jobs.get(job_id)
        return dict(job) if job is not None else None


def list_jobs() -> list[dict]:
    """All known jobs, newest first."""
    with _jobs_lock:
        jobs = [dict(job) for job in _jobs.values()]
    return sorted(jobs, key=lambda j: j["created_at"], reverse=True)


def update_job_status(job_id: str, status: SessionStatus, error: Optional[str] = None) -> None:
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job is None:
            return
        job["status"] = status.value
        if status.is_terminal:
            job["completed_at"] = _now()
            job["error"] = error
            _evict_finished_jobs()
    logger.info(f"Job {job_id} → {status.value}" + (f": {error}" if error else ""))


def _evict_finished_jobs() -> None:
    """Drop the oldest finished jobs beyond MAX_FINISHED_JOBS. Caller holds _jobs_lock."""
    finished = sorted(
        (job_id for job_id, job in _jobs.items() if SessionStatus(job["status"]).is_terminal),
        key=lambda job_id: _jobs[job_id]["completed_at"],
    )
    for job_id in finished[:max(0, len(finished) - MAX_FINISHED_JOBS)]:
        del _jobs[job_id]
        logger.debug(f"Evicted finished job {job_id}")


def update_job_progress(job_id: str, event: ProgressEvent) -> None:
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job is not None:
            job["progress"] = event.model_dump()


def save_job_session(job_id: str, session: AnalysisSession) -> None:
    with _jobs_lock:
        job = _jobs.get(job_id)
        if job is not None:
            job["session"] = session


def reset_jobs() -> None:
    """Forget all jobs and flags."""
    with _jobs_lock:
        _jobs.clear()
    with _flags_lock:
        _cancellation_flags.clear()


# --- Cancellation ---

def request_cancellation(job_id: str) -> bool:
    """Request cancellation of a pending or running job.

    The pipeline notices the flag before its next phase.
    Returns True if the job exists and had not finished yet.
    """
    job = get_job(job_id)
    if job is None:
        return False

    if SessionStatus(job["status"]).is_terminal:
        logger.warning(f"Cannot cancel job {job_id}: status is {job['status']}")
        return False

    with _flags_lock:
        _cancellation_flags[job_id] = True
    logger.info(f"Cancellation requested for job {job_id}")
    return True


def is_cancelled(job_id: str) -> bool:
    with _flags_lock:
        return bool(_cancellation_flags.get(job_id))


def clear_cancellation(job_id: str) -> None:
    with _flags_lock:
        _cancellation_flags.pop(job_id, None)


# --- Execution ---

def run_job(job_id: str, pipeline: "ResearchPipeline") -> None:
    """Run the pipeline for a job. Called from the background thread.

    Errors are recorded on the job, never raised: the thread has no caller
    to raise to.
    """
    job = get_job(job_id)
    if job is None:
        logger.warning(f"Job {job_id} not found, nothing to run")
        return

    update_job_status(job_id, SessionStatus.RUNNING)
    try:
        session = pipeline.run_research(
            job["topic"],
            progress_callback=lambda event: update_job_progress(job_id, event),
            cancellation_check=lambda: is_cancelled(job_id),
        )
        save_job_session(job_id, session)
        update_job_status(job_id, SessionStatus.COMPLETED)
    except Exception as e:
        logger.error(f"Job {job_id} failed: {e}", exc_info=True)
        update_job_status(job_id, SessionStatus.FAILED, error=getattr(e, "message", str(e)))
    finally:
        clear_cancellation(job_id)
        pipeline.close()


def start_research_thread(job_id: str, pipeline: "ResearchPipeline") -> threading.Thread:
    """Spawn a background thread to run the job.

    Returns the thread (for testing). In production, the caller
    doesn't need to join; the thread updates the job record directly.
    """
    thread = threading.Thread(
        target=run_job,
        args=(job_id, pipeline),
        name=f"research-{job_id}",
        daemon=True,
    )
    thread.start()
    logger.info(f"Started research thread for job {job_id}")
    return thread
