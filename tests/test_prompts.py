"""Tests for the phase prompt builders."""

import pytest

from research_agent import prompts
from research_agent.executor.schemas import ResearchPhase


def test_market_research_prompt_names_topic_and_word_limit():
    text = prompts.build_market_research_prompt("Edge AI")
    assert "Technology Area: Edge AI" in text
    assert "under 800 words" in text


def test_builders_are_deterministic():
    first = prompts.build_vendor_analysis_prompt("Edge AI", "market text")
    second = prompts.build_vendor_analysis_prompt("Edge AI", "market text")
    assert first == second


def test_vendor_prompt_embeds_market_research_verbatim():
    market = "Line one with *markdown*\n  indented line two {{ not_a_variable }}"
    text = prompts.build_vendor_analysis_prompt("Edge AI", market)
    assert market in text
    assert "under 650 words" in text


def test_hype_cycle_prompt_uses_market_research_and_asks_for_position():
    text = prompts.build_hype_cycle_prompt("Edge AI", "MARKET-ONLY-CONTEXT")
    assert "MARKET-ONLY-CONTEXT" in text
    assert "Current Position: <stage name>" in text
    for stage in prompts.HYPE_CYCLE_STAGE_NAMES:
        assert stage in text
    assert "under 500 words" in text


def test_summary_prompt_embeds_all_prior_outputs():
    text = prompts.build_summary_prompt("Edge AI", "Acme Corp", "MKT", "VND", "HYP")
    assert "Organization: Acme Corp" in text
    for fragment in ("Market Research: MKT", "Vendor Analysis: VND", "Hype Cycle Analysis: HYP"):
        assert fragment in text
    assert "**EXECUTIVE SUMMARY**" in text
    assert "under 650 words" in text


@pytest.mark.parametrize("organization", ["", "   ", None])
def test_summary_prompt_defaults_blank_organization(organization):
    text = prompts.build_summary_prompt("Edge AI", organization, "MKT", "VND", "HYP")
    assert "Organization: Your Organization" in text


def test_phase_request_carries_policy():
    request = prompts.phase_request(ResearchPhase.HYPE_CYCLE, "prompt")
    assert request.prompt_text == "prompt"
    assert request.max_output_tokens == 800
    assert request.temperature == 0.2


def test_every_phase_has_a_policy():
    assert set(prompts.PHASE_POLICIES) == set(ResearchPhase)
    budgets = {phase: policy.max_output_tokens for phase, policy in prompts.PHASE_POLICIES.items()}
    assert budgets == {
        ResearchPhase.MARKET_RESEARCH: 1200,
        ResearchPhase.VENDOR_ANALYSIS: 1000,
        ResearchPhase.HYPE_CYCLE: 800,
        ResearchPhase.SUMMARY: 1000,
    }
