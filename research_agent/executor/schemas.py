"""Schemas for research sessions, phase requests, artifacts and history.

AnalysisSession is the only mutable record. It is owned by the pipeline for
the duration of one run and frozen once it reaches a terminal status.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionStatus(str, Enum):
    """Session lifecycle states."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.FAILED)


class ResearchPhase(str, Enum):
    """The four research phases, declared in execution order."""
    MARKET_RESEARCH = "market_research"
    VENDOR_ANALYSIS = "vendor_analysis"
    HYPE_CYCLE = "hype_cycle"
    SUMMARY = "summary"

    @property
    def display_name(self) -> str:
        return PHASE_TITLES[self]


PHASE_ORDER: tuple[ResearchPhase, ...] = tuple(ResearchPhase)

PHASE_TITLES = {
    ResearchPhase.MARKET_RESEARCH: "Market Research",
    ResearchPhase.VENDOR_ANALYSIS: "Vendor Analysis",
    ResearchPhase.HYPE_CYCLE: "Hype Cycle Analysis",
    ResearchPhase.SUMMARY: "Strategic Summary",
}


class ArtifactKind(str, Enum):
    DOCUMENT = "document"
    IMAGE = "image"
    DATA = "data"


class PhaseRequest(BaseModel):
    """One generation request. Built per phase invocation, then discarded."""

    prompt_text: str
    max_output_tokens: int = Field(gt=0)
    temperature: float = Field(ge=0.0, le=1.0)


class ArtifactRef(BaseModel):
    """A rendered, downloadable output of a completed session."""

    model_config = ConfigDict(frozen=True)

    kind: ArtifactKind
    file_name: str
    media_type: str
    payload: bytes = Field(repr=False)
    retrieval_handle: str

    @property
    def size_bytes(self) -> int:
        return len(self.payload)


class ProgressEvent(BaseModel):
    """Progress notification emitted at each phase transition."""

    message: str
    percent_complete: int = Field(ge=0, le=100)


class HistoryEntry(BaseModel):
    """Persisted summary of a completed session."""

    id: str
    topic: str
    timestamp: str
    status: SessionStatus
    artifact_count: int = 0


def _new_session_id() -> str:
    return f"analysis-{uuid.uuid4().hex[:12]}"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AnalysisSession(BaseModel):
    """State of one end-to-end research run.

    phase_outputs preserves insertion order, which always follows PHASE_ORDER.
    """

    id: str = Field(default_factory=_new_session_id)
    topic: str
    created_at: str = Field(default_factory=_utc_now)
    status: SessionStatus = SessionStatus.PENDING
    phase_outputs: dict[ResearchPhase, str] = Field(default_factory=dict)
    artifacts: dict[str, ArtifactRef] = Field(default_factory=dict)
    error: Optional[str] = None

    def _ensure_mutable(self) -> None:
        if self.status.is_terminal:
            raise RuntimeError(
                f"Session {self.id} is {self.status.value} and can no longer change"
            )

    @property
    def next_phase(self) -> Optional[ResearchPhase]:
        done = len(self.phase_outputs)
        return PHASE_ORDER[done] if done < len(PHASE_ORDER) else None

    def output_for(self, phase: ResearchPhase) -> str:
        """Text produced by an already-completed phase."""
        if phase not in self.phase_outputs:
            raise KeyError(f"Phase {phase.value} has not completed for session {self.id}")
        return self.phase_outputs[phase]

    def mark_running(self) -> None:
        self._ensure_mutable()
        self.status = SessionStatus.RUNNING

    def record_phase_output(self, phase: ResearchPhase, text: str) -> None:
        """Append a phase output. Phases must arrive in PHASE_ORDER."""
        self._ensure_mutable()
        expected = self.next_phase
        if phase != expected:
            raise ValueError(
                f"Out-of-order phase output: got {phase.value}, "
                f"expected {expected.value if expected else 'none'}"
            )
        self.phase_outputs[phase] = text

    def mark_completed(self, artifacts: dict[str, ArtifactRef]) -> None:
        self._ensure_mutable()
        if self.next_phase is not None:
            raise ValueError(
                f"Cannot complete session {self.id}: phase "
                f"{self.next_phase.value} has not run"
            )
        self.artifacts = dict(artifacts)
        self.status = SessionStatus.COMPLETED

    def mark_failed(self, error: str) -> None:
        """Terminal failure. Partial phase outputs are discarded."""
        self._ensure_mutable()
        self.phase_outputs = {}
        self.artifacts = {}
        self.error = error
        self.status = SessionStatus.FAILED

    def snapshot(self) -> "AnalysisSession":
        """Deep copy for read-only consumers such as history persistence."""
        return self.model_copy(deep=True)

    def to_history_entry(self) -> HistoryEntry:
        return HistoryEntry(
            id=self.id,
            topic=self.topic,
            timestamp=self.created_at,
            status=self.status,
            artifact_count=len(self.artifacts),
        )
