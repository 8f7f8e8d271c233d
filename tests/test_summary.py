"""Tests for executive summary extraction."""

from research_agent.artifacts.summary import MAX_SUMMARY_CHARS, extract_summary


def test_no_marker_returns_empty():
    assert extract_summary("## Overview\nSome text\nMore text") == ""


def test_empty_input_returns_empty():
    assert extract_summary("") == ""


def test_marker_with_nothing_after_returns_empty():
    assert extract_summary("Intro\n**EXECUTIVE SUMMARY**\n\n**1. OVERVIEW**\nBody") == ""


def test_captures_until_next_header():
    text = (
        "**EXECUTIVE SUMMARY**\n"
        "First finding.\n"
        "\n"
        "  Second finding.  \n"
        "**1. TECHNOLOGY OVERVIEW**\n"
        "Not part of the summary."
    )
    assert extract_summary(text) == "First finding. Second finding...."


def test_markdown_heading_stops_capture():
    text = "# Executive Summary\nKey point.\n## Technology Overview\nOther."
    assert extract_summary(text) == "Key point...."


def test_marker_is_case_insensitive_and_not_captured():
    result = extract_summary("executive summary:\nAlpha\nBeta")
    assert result == "Alpha Beta..."
    assert "summary" not in result.lower()


def test_header_containing_marker_does_not_stop_capture():
    text = "Executive Summary\nAlpha\n**Executive Summary (continued)**\nBeta\n**Next**\nGamma"
    assert extract_summary(text) == "Alpha Beta..."


def test_only_first_ten_lines_are_used():
    lines = [f"line{i}" for i in range(15)]
    result = extract_summary("EXECUTIVE SUMMARY\n" + "\n".join(lines))
    assert result == " ".join(lines[:10]) + "..."


def test_long_summary_is_truncated():
    long_line = "x" * 2000
    result = extract_summary(f"**EXECUTIVE SUMMARY**\n{long_line}")
    assert len(result) == MAX_SUMMARY_CHARS + 3
    assert len(result) <= 803
    assert result.endswith("...")
