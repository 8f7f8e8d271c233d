"""Tests for the research-agent command line."""

import pytest

from conftest import StubGenerator
from research_agent import cli
from research_agent.artifacts.documents import WeasyPrintRenderer
from research_agent.errors import UpstreamError


@pytest.fixture
def stub_backend(monkeypatch, temp_db):
    generator = StubGenerator()
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.setattr(cli, "get_backend", lambda config: generator)
    monkeypatch.setattr(WeasyPrintRenderer, "render", lambda self, html: b"%PDF-stub")
    return generator


def test_run_writes_artifacts(stub_backend, tmp_path, capsys):
    out_dir = tmp_path / "out"
    exit_code = cli.main(["run", "Serverless Computing", "--output-dir", str(out_dir)])

    assert exit_code == 0
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "Serverless Computing_Analysis_Data.json",
        "Serverless Computing_Executive_Summary.pdf",
        "Serverless Computing_Hype_Cycle.png",
        "Serverless Computing_Vendor_Landscape.png",
    ]
    output = capsys.readouterr().out
    assert "[ 10%] Initializing research for Serverless Computing" in output
    assert "[100%] Analysis complete" in output


def test_run_uses_organization_override(stub_backend, tmp_path):
    cli.main(["run", "Edge AI", "--output-dir", str(tmp_path), "--organization", "Initech"])
    assert "Organization: Initech" in stub_backend.calls[-1]["prompt"]


def test_history_after_run(stub_backend, tmp_path, capsys):
    cli.main(["run", "Edge AI", "--output-dir", str(tmp_path)])
    capsys.readouterr()

    assert cli.main(["history"]) == 0
    output = capsys.readouterr().out
    assert "Edge AI" in output
    assert "completed" in output


def test_empty_history(temp_db, capsys):
    assert cli.main(["history"]) == 0
    assert "No research history yet." in capsys.readouterr().out


def test_failure_exit_code(stub_backend, tmp_path, capsys):
    stub_backend.fail_on = "market_research"
    stub_backend.error = UpstreamError(401, "invalid x-api-key")

    assert cli.main(["run", "Edge AI", "--output-dir", str(tmp_path)]) == 1
    assert "Claude API error: 401 - invalid x-api-key" in capsys.readouterr().err


def test_missing_credentials_exit_code(temp_db, tmp_path, capsys):
    assert cli.main(["run", "Edge AI", "--output-dir", str(tmp_path)]) == 1
    assert "API key not configured" in capsys.readouterr().err


def test_topic_with_slash_writes_into_output_dir(stub_backend, tmp_path):
    out_dir = tmp_path / "out"
    assert cli.main(["run", "CI/CD Pipelines", "--output-dir", str(out_dir)]) == 0

    names = sorted(p.name for p in out_dir.iterdir())
    assert "CI_CD Pipelines_Executive_Summary.pdf" in names
    assert len(names) == 4


def test_topic_cannot_escape_output_dir(stub_backend, tmp_path):
    out_dir = tmp_path / "a" / "b"
    assert cli.main(["run", "../../escaped", "--output-dir", str(out_dir)]) == 0

    assert len(list(out_dir.iterdir())) == 4
    assert not list(tmp_path.glob("escaped_*"))
    assert all(p.parent == out_dir for p in out_dir.iterdir())


def test_safe_file_name_replaces_separators():
    assert cli.safe_file_name('a\\b/c:d*e?"<>|.png') == "a_b_c_d_e_____.png"
    assert cli.safe_file_name("Edge AI_Hype_Cycle.png") == "Edge AI_Hype_Cycle.png"
