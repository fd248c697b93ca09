"""Tests for the ``pdf-harvest`` CLI."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from cli.main import app
from harvester.config import Settings
from harvester.pipeline.report import Outcome, PhaseReport, TaskResult

runner = CliRunner()


@pytest.fixture
def cli_settings(tmp_path, monkeypatch) -> Settings:
    cfg = Settings(
        corpus_path=tmp_path / "index.html",
        output_dir=tmp_path / "PDFs",
        max_workers=2,
        phase_deadline=0,
    )
    monkeypatch.setattr("cli.main.settings", cfg)
    return cfg


def _report(phase: str, *outcomes: Outcome) -> PhaseReport:
    report = PhaseReport(phase)
    for i, outcome in enumerate(outcomes):
        report.record(TaskResult(str(i), outcome))
    report.close()
    return report


def test_no_arguments_runs_the_pipeline(cli_settings, monkeypatch):
    calls = []

    def fake_run(cfg):
        calls.append(cfg)
        return [_report("harvest", Outcome.SUCCESS), _report("download", Outcome.SUCCESS, Outcome.SKIPPED)]

    monkeypatch.setattr("cli.main.run_pipeline", fake_run)
    result = runner.invoke(app, [])

    assert result.exit_code == 0
    assert len(calls) == 1
    assert calls[0].corpus_path == cli_settings.corpus_path
    assert "[harvest] 1 task(s)" in result.stdout
    assert "[download] 2 task(s)" in result.stdout


def test_failures_do_not_change_exit_code(cli_settings, monkeypatch):
    monkeypatch.setattr(
        "cli.main.run_pipeline",
        lambda cfg: [_report("download", Outcome.NETWORK, Outcome.EMPTY_BODY)],
    )
    result = runner.invoke(app, ["run"])

    assert result.exit_code == 0
    assert "network-fail=1" in result.stdout


def test_global_options_override_settings(cli_settings, monkeypatch):
    seen = []
    monkeypatch.setattr("cli.main.run_pipeline", lambda cfg: seen.append(cfg) or [])

    result = runner.invoke(app, ["--workers", "0", "--deadline", "120", "run"])

    assert result.exit_code == 0
    assert seen[0].max_workers == 0
    assert seen[0].deadline == 120
    assert cli_settings.max_workers == 2


def test_links_prints_corpus_links(cli_settings):
    cli_settings.corpus_path.write_text(
        '<a href="https://cdn.example.com/a.pdf">a</a>\n'
        '<a href="https://cdn.example.com/b.pdf?rev=2">b</a>\n'
        '<a href="https://cdn.example.com/a.pdf">a</a>\n'
    )
    result = runner.invoke(app, ["links"])

    assert result.exit_code == 0
    printed = [line for line in result.stdout.splitlines() if line.startswith("https://")]
    assert printed == [
        "https://cdn.example.com/a.pdf",
        "https://cdn.example.com/b.pdf?rev=2",
    ]


def test_download_without_corpus(cli_settings):
    result = runner.invoke(app, ["download"])

    assert result.exit_code == 0
    assert "No PDF links" in result.stdout
    assert not cli_settings.output_dir.exists()


def test_harvest_with_existing_corpus(cli_settings):
    cli_settings.corpus_path.write_text("cached")
    result = runner.invoke(app, ["harvest"])

    assert result.exit_code == 0
    assert "already present" in result.stdout


def test_negative_workers_rejected(cli_settings, monkeypatch):
    seen = []
    monkeypatch.setattr("cli.main.run_pipeline", lambda cfg: seen.append(cfg) or [])

    result = runner.invoke(app, ["--workers", "-1", "run"])

    assert result.exit_code != 0
    assert seen == []
