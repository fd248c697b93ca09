"""PDF harvester CLI: entry-point for the harvest pipeline.

Usage:
    pdf-harvest            # full pipeline, same as `pdf-harvest run`
    pdf-harvest --help

Sub-commands map to pipeline phases:
    run       → harvest (unless the corpus file exists) → extract → download
    harvest   → page harvest only, writes the corpus file
    links     → print the PDF links found in the corpus file
    download  → extract + download from an existing corpus file
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

import typer

from harvester.config import Settings, settings
from harvester.pipeline import download_links, harvest_corpus, load_links, run_pipeline
from harvester.pipeline.report import PhaseReport

app = typer.Typer(
    name="pdf-harvest",
    help="Crawl search-result pages and download every linked PDF.",
    invoke_without_command=True,
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _echo_reports(*reports: Optional[PhaseReport]) -> None:
    for report in reports:
        if report is not None:
            typer.echo(report.summary())


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else settings


@app.callback()
def main(
    ctx: typer.Context,
    workers: Optional[int] = typer.Option(
        None, "--workers", min=0, help="Concurrent workers per phase (0 = one per task)."
    ),
    deadline: Optional[float] = typer.Option(
        None, "--deadline", help="Seconds before pending tasks of a phase are cancelled (0 = none)."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
) -> None:
    """Crawl search-result pages and download every linked PDF."""
    overrides = {}
    if workers is not None:
        overrides["max_workers"] = workers
    if deadline is not None:
        overrides["phase_deadline"] = deadline
    if log_level is not None:
        overrides["log_level"] = log_level
    cfg = dataclasses.replace(settings, **overrides)
    ctx.obj = cfg

    _configure_logging(cfg.log_level)

    if ctx.invoked_subcommand is None:
        _echo_reports(*run_pipeline(cfg))


@app.command("run")
def run(ctx: typer.Context) -> None:
    """Harvest pages (unless the corpus file exists), then download all PDFs."""
    _echo_reports(*run_pipeline(_settings(ctx)))


@app.command("harvest")
def harvest(ctx: typer.Context) -> None:
    """Harvest every search-result page into the corpus file."""
    cfg = _settings(ctx)
    report = harvest_corpus(cfg)
    if report is None:
        typer.echo(f"[harvest] Corpus {cfg.corpus_path} already present; nothing to do.")
        return
    _echo_reports(report)


@app.command("links")
def links(ctx: typer.Context) -> None:
    """Print the distinct PDF links found in the corpus file."""
    for link in load_links(_settings(ctx)):
        typer.echo(link)


@app.command("download")
def download(ctx: typer.Context) -> None:
    """Download every PDF linked from the existing corpus file."""
    cfg = _settings(ctx)
    found = load_links(cfg)
    if not found:
        typer.echo(f"[download] No PDF links in {cfg.corpus_path}.")
        return
    _echo_reports(download_links(found, cfg))


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
