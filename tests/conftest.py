"""Shared fixtures: temporary database, stub generator, stub document renderer."""

import pytest

from research_agent.executor import db, job_manager
from research_agent.executor.history_store import SqlSessionStore

MARKET_TEXT = "Market landscape for the topic: growing adoption across industries."
VENDOR_TEXT = "Vendor analysis: AWS Lambda, Azure Functions, Google Cloud Functions."
HYPE_TEXT = (
    "Current Position: Slope of Enlightenment\n\n"
    "**Current Position Analysis**\n"
    "Adoption is maturing."
)
SUMMARY_TEXT = (
    "**EXECUTIVE SUMMARY**\n"
    "Serverless is ready for mainstream enterprise use.\n"
    "Adopt it for event-driven workloads.\n"
    "\n"
    "**2. STRATEGIC CONTEXT**\n"
    "Context that must not appear in the summary."
)

DEFAULT_RESPONSES = {
    "market_research": MARKET_TEXT,
    "vendor_analysis": VENDOR_TEXT,
    "hype_cycle": HYPE_TEXT,
    "summary": SUMMARY_TEXT,
}


class StubGenerator:
    """TextGenerator returning canned text per phase, optionally failing one phase."""

    def __init__(self, responses=None, fail_on=None, error=None):
        self.responses = dict(DEFAULT_RESPONSES, **(responses or {}))
        self.fail_on = fail_on
        self.error = error
        self.calls = []

    def generate(self, prompt_text, *, max_output_tokens, temperature, label=""):
        phase = label.rsplit(":", 1)[-1]
        self.calls.append({
            "phase": phase,
            "prompt": prompt_text,
            "max_output_tokens": max_output_tokens,
            "temperature": temperature,
        })
        if phase == self.fail_on:
            raise self.error
        return self.responses[phase]

    @property
    def phases_called(self):
        return [call["phase"] for call in self.calls]


class StubRenderer:
    """DocumentRenderer that records the HTML and returns a fixed payload."""

    def __init__(self, error=None):
        self.error = error
        self.rendered = []

    def render(self, html):
        self.rendered.append(html)
        if self.error is not None:
            raise self.error
        return b"%PDF-stub"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ANTHROPIC_API_KEY",
        "CLAUDE_API_KEY",
        "RESEARCH_SETTINGS_FILE",
        "RESEARCH_MODEL",
        "RESEARCH_ORGANIZATION",
        "RESEARCH_GATEWAY_URL",
        "RESEARCH_REQUEST_TIMEOUT",
        "RESEARCH_DATABASE_URL",
        "RESEARCH_OUTPUT_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the database layer at a fresh SQLite file."""
    path = tmp_path / "research.db"
    monkeypatch.setenv("RESEARCH_DB_PATH", str(path))
    db.configure(database_url="", sqlite_path=str(path))
    yield path
    db.configure()


@pytest.fixture
def store(temp_db):
    return SqlSessionStore()


@pytest.fixture
def stub_generator():
    return StubGenerator()


@pytest.fixture
def stub_renderer():
    return StubRenderer()


@pytest.fixture
def clean_jobs():
    job_manager.reset_jobs()
    yield
    job_manager.reset_jobs()
