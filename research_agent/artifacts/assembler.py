"""Artifact assembly: turns a session's four phase outputs into downloads.

Produces, in order:
  executive_summary  -> {topic}_Executive_Summary.pdf
  hype_cycle_chart   -> {topic}_Hype_Cycle.png
  vendor_landscape   -> {topic}_Vendor_Landscape.png
  raw_data           -> {topic}_Analysis_Data.json

Any failure while rendering or serializing is raised as
ArtifactGenerationError; there are no partial artifact sets.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from research_agent.artifacts.charts import (
    render_hype_cycle_chart,
    render_vendor_landscape_chart,
)
from research_agent.artifacts.documents import (
    DocumentRenderer,
    render_executive_summary_pdf,
)
from research_agent.artifacts.hype_cycle import detect_stage
from research_agent.artifacts.summary import extract_summary
from research_agent.errors import ArtifactGenerationError
from research_agent.executor.schemas import (
    AnalysisSession,
    ArtifactKind,
    ArtifactRef,
    ResearchPhase,
)

logger = logging.getLogger(__name__)

AGENT_NAME = "Technology Research Agent"


@dataclass(frozen=True)
class ArtifactSpec:
    key: str
    label: str
    extension: str
    kind: ArtifactKind
    media_type: str


ARTIFACT_SPECS: tuple[ArtifactSpec, ...] = (
    ArtifactSpec("executive_summary", "Executive_Summary", "pdf", ArtifactKind.DOCUMENT, "application/pdf"),
    ArtifactSpec("hype_cycle_chart", "Hype_Cycle", "png", ArtifactKind.IMAGE, "image/png"),
    ArtifactSpec("vendor_landscape", "Vendor_Landscape", "png", ArtifactKind.IMAGE, "image/png"),
    ArtifactSpec("raw_data", "Analysis_Data", "json", ArtifactKind.DATA, "application/json"),
)

ARTIFACT_KEYS = tuple(spec.key for spec in ARTIFACT_SPECS)


def artifact_file_name(topic: str, spec: ArtifactSpec) -> str:
    return f"{topic}_{spec.label}.{spec.extension}"


def retrieval_handle(session_id: str, key: str) -> str:
    return f"artifact://{session_id}/{key}"


def build_raw_data(session: AnalysisSession, organization_name: str) -> dict:
    """The raw JSON document: session metadata plus all four phase texts."""
    return {
        "metadata": {
            "id": session.id,
            "technology": session.topic,
            "organization": organization_name,
            "timestamp": session.created_at,
            "agent": AGENT_NAME,
        },
        "analysis": {
            "market_research": session.output_for(ResearchPhase.MARKET_RESEARCH),
            "vendor_analysis": session.output_for(ResearchPhase.VENDOR_ANALYSIS),
            "hype_cycle": session.output_for(ResearchPhase.HYPE_CYCLE),
            "summary": session.output_for(ResearchPhase.SUMMARY),
        },
    }


class ArtifactAssembler:
    """Renders the artifact set for a session whose phases have all run."""

    def __init__(self, document_renderer: Optional[DocumentRenderer] = None):
        self.document_renderer = document_renderer

    def assemble(self, session: AnalysisSession, organization_name: str) -> dict[str, ArtifactRef]:
        """Build all four artifacts, keyed by artifact key in production order.

        Raises:
            ArtifactGenerationError: If any artifact fails to render.
        """
        try:
            payloads = self._render_payloads(session, organization_name)
        except Exception as e:
            logger.error(f"[{session.id}] Artifact generation failed: {e}", exc_info=True)
            raise ArtifactGenerationError(
                f"Failed to generate analysis artifacts: {e}"
            ) from e

        artifacts: dict[str, ArtifactRef] = {}
        for spec in ARTIFACT_SPECS:
            artifacts[spec.key] = ArtifactRef(
                kind=spec.kind,
                file_name=artifact_file_name(session.topic, spec),
                media_type=spec.media_type,
                payload=payloads[spec.key],
                retrieval_handle=retrieval_handle(session.id, spec.key),
            )

        total = sum(ref.size_bytes for ref in artifacts.values())
        logger.info(f"[{session.id}] Assembled {len(artifacts)} artifacts ({total:,} bytes)")
        return artifacts

    def _render_payloads(self, session: AnalysisSession, organization_name: str) -> dict[str, bytes]:
        topic = session.topic

        summary_text = extract_summary(session.output_for(ResearchPhase.SUMMARY))
        stage = detect_stage(session.output_for(ResearchPhase.HYPE_CYCLE))

        return {
            "executive_summary": render_executive_summary_pdf(
                topic, summary_text, organization_name, renderer=self.document_renderer,
            ),
            "hype_cycle_chart": render_hype_cycle_chart(topic, stage),
            "vendor_landscape": render_vendor_landscape_chart(topic),
            "raw_data": json.dumps(
                build_raw_data(session, organization_name), indent=2, ensure_ascii=False,
            ).encode("utf-8"),
        }
