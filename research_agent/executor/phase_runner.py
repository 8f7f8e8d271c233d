"""Phase runner: executes a single research phase.

One phase is one request/response round trip: build the PhaseRequest from
the prompt and the phase policy, call the generator once, hand the text
back. Errors propagate untouched; the pipeline decides what failure means.
"""

import logging
import time

from research_agent.errors import TransportError
from research_agent.executor.schemas import ResearchPhase
from research_agent.llm.backends import TextGenerator, generate_request
from research_agent.prompts import phase_request

logger = logging.getLogger(__name__)


def run_phase(
    phase: ResearchPhase,
    prompt_text: str,
    generator: TextGenerator,
    *,
    session_id: str,
) -> str:
    """Run one phase and return the generated text.

    Raises:
        UpstreamError, TransportError: From the generator, unchanged.
        TransportError: If the generator returned only whitespace.
    """
    request = phase_request(phase, prompt_text)
    label = f"{session_id}:{phase.value}"
    start_time = time.time()

    logger.info(
        f"=== Phase {phase.value}: {phase.display_name} === "
        f"prompt={len(prompt_text):,} chars, max_tokens={request.max_output_tokens}, "
        f"temperature={request.temperature}"
    )

    text = generate_request(generator, request, label=label)
    if not text.strip():
        raise TransportError(f"[{label}] Empty response from completion service")

    duration_ms = int((time.time() - start_time) * 1000)
    logger.info(
        f"Phase {phase.value} completed in {duration_ms}ms: "
        f"{len(text):,} chars, {len(text.split()):,} words"
    )
    return text
