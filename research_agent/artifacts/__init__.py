"""Artifact rendering for completed research sessions."""

from research_agent.artifacts.assembler import (
    ARTIFACT_KEYS,
    ARTIFACT_SPECS,
    ArtifactAssembler,
)

__all__ = ["ARTIFACT_KEYS", "ARTIFACT_SPECS", "ArtifactAssembler"]
