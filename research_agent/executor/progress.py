"""Per-run progress reporting.

Observers are plain callables supplied by the caller for one run. Delivery is
synchronous on the pipeline's thread and fire-and-forget: nothing is awaited,
and an observer that raises is logged and ignored.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from research_agent.executor.schemas import ProgressEvent

if TYPE_CHECKING:
    from research_agent.executor.schemas import AnalysisSession

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]
CompletionCallback = Callable[["AnalysisSession"], None]

# Designated checkpoints
PROGRESS_INIT = 10
PROGRESS_MARKET_DONE = 30
PROGRESS_VENDOR_DONE = 50
PROGRESS_HYPE_CYCLE_DONE = 70
PROGRESS_SUMMARY_DONE = 90
PROGRESS_COMPLETE = 100
PROGRESS_FAILED = 0


class ProgressReporter:
    """Fans progress and completion events out to optional callbacks."""

    def __init__(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        completion_callback: Optional[CompletionCallback] = None,
        label: str = "",
    ):
        self._progress_callback = progress_callback
        self._completion_callback = completion_callback
        self._label = label

    def report(self, message: str, percent_complete: int) -> ProgressEvent:
        event = ProgressEvent(message=message, percent_complete=percent_complete)
        logger.info(f"[{self._label}] {percent_complete:3d}% {message}")
        if self._progress_callback is not None:
            try:
                self._progress_callback(event)
            except Exception as e:
                logger.warning(f"[{self._label}] Progress observer raised, ignoring: {e}")
        return event

    def failed(self, error_message: str) -> ProgressEvent:
        return self.report(f"Research failed: {error_message}", PROGRESS_FAILED)

    def completed(self, session: "AnalysisSession") -> None:
        if self._completion_callback is None:
            return
        try:
            self._completion_callback(session)
        except Exception as e:
            logger.warning(f"[{self._label}] Completion observer raised, ignoring: {e}")
