"""Research pipeline: runs the four phases in order and assembles artifacts.

    Pending -> Running(market -> vendor -> hype cycle -> summary) -> Completed
                                     \\ any error / cancellation -> Failed

Each phase's prompt embeds the text of earlier phases, so phase n+1 starts
only after phase n's call has returned. There is no retry and no partial
success: the first error fails the session, discards what was produced so far
and is re-raised to the caller after a final 0% progress event.

The pipeline object holds only collaborators. Every run creates its own
AnalysisSession and ProgressReporter, so one pipeline can serve concurrent
runs on separate threads.
"""

import logging
import time
from typing import Callable, Optional

from research_agent import prompts
from research_agent.artifacts.assembler import ArtifactAssembler
from research_agent.config import ResearchConfig
from research_agent.errors import ResearchCancelledError, ResearchError
from research_agent.executor.history_store import SessionStore
from research_agent.executor.phase_runner import run_phase
from research_agent.executor.progress import (
    PROGRESS_COMPLETE,
    PROGRESS_HYPE_CYCLE_DONE,
    PROGRESS_INIT,
    PROGRESS_MARKET_DONE,
    PROGRESS_SUMMARY_DONE,
    PROGRESS_VENDOR_DONE,
    CompletionCallback,
    ProgressCallback,
    ProgressReporter,
)
from research_agent.executor.schemas import PHASE_ORDER, AnalysisSession, ResearchPhase
from research_agent.llm.backends import TextGenerator

logger = logging.getLogger(__name__)

CancellationCheck = Callable[[], bool]

# (percent, message) reported after each phase returns
PHASE_CHECKPOINTS = {
    ResearchPhase.MARKET_RESEARCH: (PROGRESS_MARKET_DONE, "Completed market landscape analysis"),
    ResearchPhase.VENDOR_ANALYSIS: (PROGRESS_VENDOR_DONE, "Analyzed vendor ecosystem"),
    ResearchPhase.HYPE_CYCLE: (PROGRESS_HYPE_CYCLE_DONE, "Generated hype cycle positioning"),
    ResearchPhase.SUMMARY: (PROGRESS_SUMMARY_DONE, "Created strategic summary, generating artifacts"),
}


def _error_message(error: Exception) -> str:
    if isinstance(error, ResearchError):
        return error.message
    return str(error) or type(error).__name__


class ResearchPipeline:
    """Sequential four-phase research workflow over a TextGenerator."""

    def __init__(
        self,
        generator: TextGenerator,
        store: SessionStore,
        config: ResearchConfig,
        assembler: Optional[ArtifactAssembler] = None,
    ):
        self.generator = generator
        self.store = store
        self.config = config
        self.assembler = assembler or ArtifactAssembler()

    def close(self) -> None:
        """Release the generator's network client, if it holds one."""
        close = getattr(self.generator, "close", None)
        if callable(close):
            close()

    def run_research(
        self,
        topic: str,
        progress_callback: Optional[ProgressCallback] = None,
        completion_callback: Optional[CompletionCallback] = None,
        cancellation_check: Optional[CancellationCheck] = None,
    ) -> AnalysisSession:
        """Run the full workflow for `topic` and return the completed session.

        Raises:
            ValueError: If the topic is empty after stripping. Nothing is
                called and no progress is reported.
            ResearchCancelledError: If cancellation_check() returned true
                between two phases.
            UpstreamError, TransportError, ArtifactGenerationError: From the
                failing phase or from assembly.
        """
        topic = (topic or "").strip()
        if not topic:
            raise ValueError("Technology topic is required")

        session = AnalysisSession(topic=topic)
        reporter = ProgressReporter(progress_callback, completion_callback, label=session.id)
        organization = self.config.effective_organization
        start_time = time.time()

        try:
            session.mark_running()
            reporter.report(f"Initializing research for {topic}", PROGRESS_INIT)

            for phase in PHASE_ORDER:
                self._check_cancelled(cancellation_check, phase)
                prompt_text = self._build_prompt(phase, session, organization)
                text = run_phase(phase, prompt_text, self.generator, session_id=session.id)
                session.record_phase_output(phase, text)
                percent, message = PHASE_CHECKPOINTS[phase]
                reporter.report(message, percent)

            self._check_cancelled(cancellation_check, None)
            artifacts = self.assembler.assemble(session, organization)
            session.mark_completed(artifacts)

        except Exception as e:
            message = _error_message(e)
            logger.error(f"[{session.id}] Research for '{topic}' failed: {message}", exc_info=True)
            session.mark_failed(message)
            reporter.failed(message)
            raise

        self.store.append_history(session.snapshot().to_history_entry())

        duration_s = time.time() - start_time
        logger.info(
            f"[{session.id}] Research for '{topic}' completed in {duration_s:.1f}s: "
            f"{len(session.artifacts)} artifacts"
        )
        reporter.report("Analysis complete", PROGRESS_COMPLETE)
        reporter.completed(session)
        return session

    @staticmethod
    def _check_cancelled(
        cancellation_check: Optional[CancellationCheck],
        next_phase: Optional[ResearchPhase],
    ) -> None:
        if cancellation_check is not None and cancellation_check():
            where = f"before {next_phase.value}" if next_phase else "before artifact assembly"
            raise ResearchCancelledError(
                f"Research cancelled {where}",
                phase=next_phase.value if next_phase else None,
            )

    @staticmethod
    def _build_prompt(phase: ResearchPhase, session: AnalysisSession, organization: str) -> str:
        topic = session.topic
        if phase is ResearchPhase.MARKET_RESEARCH:
            return prompts.build_market_research_prompt(topic)
        if phase is ResearchPhase.VENDOR_ANALYSIS:
            return prompts.build_vendor_analysis_prompt(
                topic, session.output_for(ResearchPhase.MARKET_RESEARCH),
            )
        if phase is ResearchPhase.HYPE_CYCLE:
            return prompts.build_hype_cycle_prompt(
                topic, session.output_for(ResearchPhase.MARKET_RESEARCH),
            )
        return prompts.build_summary_prompt(
            topic,
            organization,
            session.output_for(ResearchPhase.MARKET_RESEARCH),
            session.output_for(ResearchPhase.VENDOR_ANALYSIS),
            session.output_for(ResearchPhase.HYPE_CYCLE),
        )
