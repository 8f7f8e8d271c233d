"""Tests for hype cycle stage detection."""

import pytest

from research_agent.artifacts.hype_cycle import HypeCycleStage, detect_stage


@pytest.mark.parametrize(
    "line, expected",
    [
        ("Current Position: Peak of Inflated Expectations", HypeCycleStage.PEAK_OF_INFLATED_EXPECTATIONS),
        ("**Current Position:** Trough of Disillusionment", HypeCycleStage.TROUGH_OF_DISILLUSIONMENT),
        ("current position: slope of enlightenment.", HypeCycleStage.SLOPE_OF_ENLIGHTENMENT),
        ("Current Position: Technology Trigger", HypeCycleStage.INNOVATION_TRIGGER),
    ],
)
def test_position_line(line, expected):
    assert detect_stage(f"{line}\n\nMore analysis follows.") == expected


def test_position_line_wins_over_earlier_mentions():
    text = (
        "It has left the Peak of Inflated Expectations behind.\n"
        "Current Position: Plateau of Productivity\n"
    )
    assert detect_stage(text) == HypeCycleStage.PLATEAU_OF_PRODUCTIVITY


def test_falls_back_to_current_position_section():
    text = (
        "## Overview\n"
        "The Innovation Trigger happened years ago.\n"
        "## 1. Current Position Assessment\n"
        "The technology is sliding into the trough of disillusionment, after the "
        "peak of inflated expectations.\n"
        "## 2. Hype Cycle Phases Analysis\n"
        "Plateau of Productivity expected in 5 years."
    )
    assert detect_stage(text) == HypeCycleStage.TROUGH_OF_DISILLUSIONMENT


def test_no_stage_returns_none():
    assert detect_stage("A general discussion without any stage names.") is None
    assert detect_stage("") is None
