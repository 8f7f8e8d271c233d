"""Tests for the research pipeline."""

import pytest

from conftest import MARKET_TEXT, VENDOR_TEXT, HYPE_TEXT, StubGenerator, StubRenderer
from research_agent import prompts
from research_agent.artifacts.assembler import ArtifactAssembler
from research_agent.config import ResearchConfig
from research_agent.errors import (
    ArtifactGenerationError,
    ResearchCancelledError,
    TransportError,
    UpstreamError,
)
from research_agent.executor.pipeline import ResearchPipeline
from research_agent.executor.schemas import PHASE_ORDER, SessionStatus


@pytest.fixture
def config():
    return ResearchConfig(api_key="test-key", organization_name="Acme Corp")


def _pipeline(generator, store, config, renderer=None):
    return ResearchPipeline(generator, store, config, ArtifactAssembler(renderer or StubRenderer()))


def test_serverless_computing_scenario(store, config, stub_generator):
    events = []
    completed = []
    session = _pipeline(stub_generator, store, config).run_research(
        "  Serverless Computing  ",
        progress_callback=events.append,
        completion_callback=completed.append,
    )

    assert session.status == SessionStatus.COMPLETED
    assert session.topic == "Serverless Computing"
    assert list(session.phase_outputs) == list(PHASE_ORDER)
    assert [session.phase_outputs[p] for p in PHASE_ORDER] == [
        stub_generator.responses[p.value] for p in PHASE_ORDER
    ]
    assert sorted(ref.file_name for ref in session.artifacts.values()) == sorted([
        "Serverless Computing_Executive_Summary.pdf",
        "Serverless Computing_Hype_Cycle.png",
        "Serverless Computing_Vendor_Landscape.png",
        "Serverless Computing_Analysis_Data.json",
    ])
    assert [e.percent_complete for e in events] == [10, 30, 50, 70, 90, 100]
    assert events[0].message == "Initializing research for Serverless Computing"
    assert completed == [session]


def test_phases_run_in_order_with_policy(store, config, stub_generator):
    _pipeline(stub_generator, store, config).run_research("Edge AI")

    assert stub_generator.phases_called == [p.value for p in PHASE_ORDER]
    assert [(c["max_output_tokens"], c["temperature"]) for c in stub_generator.calls] == [
        (1200, 0.3), (1000, 0.3), (800, 0.2), (1000, 0.2),
    ]


def test_prior_outputs_are_threaded_into_prompts(store, config, stub_generator):
    _pipeline(stub_generator, store, config).run_research("Edge AI")
    market, vendor, hype, summary = (c["prompt"] for c in stub_generator.calls)

    assert MARKET_TEXT in vendor
    assert MARKET_TEXT in hype
    assert VENDOR_TEXT not in hype
    for text in (MARKET_TEXT, VENDOR_TEXT, HYPE_TEXT):
        assert text in summary
    assert "Organization: Acme Corp" in summary


def test_success_appends_history(store, config, stub_generator):
    session = _pipeline(stub_generator, store, config).run_research("Edge AI")

    history = store.load_history()
    assert len(history) == 1
    assert history[0].id == session.id
    assert history[0].topic == "Edge AI"
    assert history[0].status == SessionStatus.COMPLETED
    assert history[0].artifact_count == 4


def test_vendor_failure_stops_pipeline(store, config, monkeypatch):
    built = []
    monkeypatch.setattr(prompts, "build_hype_cycle_prompt", lambda *a: built.append("hype") or "x")
    monkeypatch.setattr(prompts, "build_summary_prompt", lambda *a: built.append("summary") or "x")
    generator = StubGenerator(fail_on="vendor_analysis", error=UpstreamError(500, "Internal error"))
    events = []

    with pytest.raises(UpstreamError) as excinfo:
        _pipeline(generator, store, config).run_research("Edge AI", progress_callback=events.append)

    assert excinfo.value.status_code == 500
    assert built == []
    assert generator.phases_called == ["market_research", "vendor_analysis"]
    assert events[-1].percent_complete == 0
    assert events[-1].message == "Research failed: Claude API error: 500 - Internal error"
    assert store.load_history() == []


def test_transport_error_propagates(store, config):
    generator = StubGenerator(fail_on="market_research", error=TransportError("timed out"))
    with pytest.raises(TransportError):
        _pipeline(generator, store, config).run_research("Edge AI")
    assert generator.phases_called == ["market_research"]


def test_whitespace_response_fails_phase(store, config):
    generator = StubGenerator(responses={"hype_cycle": "   \n"})
    with pytest.raises(TransportError):
        _pipeline(generator, store, config).run_research("Edge AI")
    assert generator.phases_called == ["market_research", "vendor_analysis", "hype_cycle"]


def test_artifact_failure_fails_run(store, config, stub_generator):
    events = []
    with pytest.raises(ArtifactGenerationError):
        _pipeline(stub_generator, store, config, StubRenderer(error=RuntimeError("no fonts"))).run_research(
            "Edge AI", progress_callback=events.append,
        )
    assert events[-1].percent_complete == 0
    assert store.load_history() == []


def test_empty_topic_rejected_before_any_call(store, config, stub_generator):
    events = []
    with pytest.raises(ValueError):
        _pipeline(stub_generator, store, config).run_research("   ", progress_callback=events.append)
    assert stub_generator.calls == []
    assert events == []


def test_cancellation_between_phases(store, config, stub_generator):
    events = []
    with pytest.raises(ResearchCancelledError) as excinfo:
        _pipeline(stub_generator, store, config).run_research(
            "Edge AI",
            progress_callback=events.append,
            cancellation_check=lambda: len(stub_generator.calls) >= 1,
        )

    assert excinfo.value.phase == "vendor_analysis"
    assert stub_generator.phases_called == ["market_research"]
    assert events[-1].percent_complete == 0
    assert store.load_history() == []


def test_observer_exceptions_are_ignored(store, config, stub_generator):
    def bad_progress(event):
        raise RuntimeError("observer broke")

    def bad_completion(session):
        raise RuntimeError("observer broke")

    session = _pipeline(stub_generator, store, config).run_research(
        "Edge AI", progress_callback=bad_progress, completion_callback=bad_completion,
    )
    assert session.status == SessionStatus.COMPLETED


def test_default_organization_used_when_unset(store, stub_generator):
    config = ResearchConfig(api_key="test-key")
    _pipeline(stub_generator, store, config).run_research("Edge AI")
    assert "Organization: Your Organization" in stub_generator.calls[-1]["prompt"]
