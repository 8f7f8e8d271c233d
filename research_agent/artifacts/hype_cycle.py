"""Hype cycle stages and stage detection from the hype cycle phase text.

The hype cycle prompt asks the model to open with a line

    Current Position: <stage name>

detect_stage() reads that line first. If the model ignored the instruction
it falls back to the "Current Position" section of the response, taking the
stage name that appears first in it. Anything else yields None and the chart
uses DEFAULT_STAGE, labelled as an estimate.
"""

import logging
import re
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class HypeCycleStage(str, Enum):
    INNOVATION_TRIGGER = "Innovation Trigger"
    PEAK_OF_INFLATED_EXPECTATIONS = "Peak of Inflated Expectations"
    TROUGH_OF_DISILLUSIONMENT = "Trough of Disillusionment"
    SLOPE_OF_ENLIGHTENMENT = "Slope of Enlightenment"
    PLATEAU_OF_PRODUCTIVITY = "Plateau of Productivity"


DEFAULT_STAGE = HypeCycleStage.TROUGH_OF_DISILLUSIONMENT

# Looser spellings the model tends to use, matched after normalization
_STAGE_ALIASES: dict[HypeCycleStage, tuple[str, ...]] = {
    HypeCycleStage.INNOVATION_TRIGGER: ("innovation trigger", "technology trigger"),
    HypeCycleStage.PEAK_OF_INFLATED_EXPECTATIONS: (
        "peak of inflated expectations",
        "peak of inflated expectation",
    ),
    HypeCycleStage.TROUGH_OF_DISILLUSIONMENT: ("trough of disillusionment",),
    HypeCycleStage.SLOPE_OF_ENLIGHTENMENT: ("slope of enlightenment",),
    HypeCycleStage.PLATEAU_OF_PRODUCTIVITY: ("plateau of productivity",),
}

_POSITION_LINE_RE = re.compile(r"current\s+position\s*:\s*(?P<value>.+)", re.IGNORECASE)
_HEADER_RE = re.compile(r"^(#{1,6}\s|\*\*|\d+\.\s+\*\*)")
_EMPHASIS_RE = re.compile(r"[*_`]+")


def _normalize(text: str) -> str:
    return " ".join(_EMPHASIS_RE.sub("", text).lower().split())


def _first_stage_in(text: str) -> Optional[HypeCycleStage]:
    normalized = _normalize(text)
    best: Optional[tuple[int, HypeCycleStage]] = None
    for stage, aliases in _STAGE_ALIASES.items():
        for alias in aliases:
            idx = normalized.find(alias)
            if idx != -1 and (best is None or idx < best[0]):
                best = (idx, stage)
    return best[1] if best else None


def _position_section(lines: list[str]) -> str:
    """Text under the first header that mentions the current position."""
    collected: list[str] = []
    in_section = False
    for line in lines:
        stripped = line.strip()
        is_header = bool(_HEADER_RE.match(stripped))
        if is_header and "current position" in _normalize(stripped):
            in_section = True
            continue
        if in_section:
            if is_header:
                break
            collected.append(stripped)
    return "\n".join(collected)


def detect_stage(text: str) -> Optional[HypeCycleStage]:
    """Infer the technology's stage from the hype cycle phase output."""
    if not text:
        return None

    lines = text.splitlines()
    for line in lines:
        match = _POSITION_LINE_RE.search(_EMPHASIS_RE.sub("", line))
        if match:
            stage = _first_stage_in(match.group("value"))
            if stage is not None:
                return stage

    section = _position_section(lines)
    if section:
        stage = _first_stage_in(section)
        if stage is not None:
            return stage

    logger.info("No hype cycle stage found in phase output")
    return None
