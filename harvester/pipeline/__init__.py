"""End-to-end pipeline: harvest pages → extract PDF links → download PDFs.

Public helpers
--------------
``harvest_corpus``   run the page harvest into the corpus file (checkpointed).
``load_links``       read the corpus file and extract distinct PDF links.
``download_links``   ensure the output directory and download every link.
``run_pipeline``     all three in order.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from harvester.config import Settings, settings
from harvester.errors import FileIOError
from harvester.pipeline.download import download_all
from harvester.pipeline.harvest import harvest
from harvester.pipeline.report import Outcome, PhaseReport, TaskResult
from harvester.scraper.extractor import extract_pdf_links
from harvester.storage import FileCorpusSink, ensure_directory, file_exists, read_text

logger = logging.getLogger(__name__)

__all__ = [
    "harvest_corpus",
    "load_links",
    "download_links",
    "run_pipeline",
    "Outcome",
    "PhaseReport",
    "TaskResult",
]


def harvest_corpus(cfg: Optional[Settings] = None) -> Optional[PhaseReport]:
    """Harvest all search pages into ``cfg.corpus_path``.

    Returns ``None`` without any network traffic when the corpus file is
    already present; delete it by hand to force a fresh harvest.
    If the corpus file cannot be opened or committed, the returned report
    holds a single ``write-fail`` result.
    """
    cfg = cfg or settings
    if file_exists(cfg.corpus_path):
        logger.info("[pipeline] Corpus %s already present; skipping harvest", cfg.corpus_path)
        return None

    try:
        with FileCorpusSink(cfg.corpus_path) as sink:
            return harvest(
                cfg.categories,
                cfg.max_page_index,
                sink,
                template=cfg.search_url_template,
                timeout=cfg.page_timeout,
                max_workers=cfg.max_workers,
                deadline=cfg.deadline,
            )
    except FileIOError as exc:
        logger.warning("[pipeline] %s", exc)
        report = PhaseReport("harvest")
        report.record(TaskResult.failure(str(cfg.corpus_path), exc))
        report.close()
        return report


def load_links(cfg: Optional[Settings] = None) -> List[str]:
    """Return the distinct PDF links found in the corpus file (empty if absent)."""
    cfg = cfg or settings
    if not file_exists(cfg.corpus_path):
        logger.warning("[extract] Corpus %s not found; no links to extract", cfg.corpus_path)
        return []
    try:
        corpus = read_text(cfg.corpus_path)
    except OSError as exc:
        logger.warning("[extract] Could not read corpus %s: %s", cfg.corpus_path, exc)
        return []
    links = extract_pdf_links(corpus)
    logger.info("[extract] Found %d distinct PDF link(s) in %s", len(links), cfg.corpus_path)
    return links


def download_links(links: List[str], cfg: Optional[Settings] = None) -> PhaseReport:
    cfg = cfg or settings
    ensure_directory(cfg.output_dir)
    return download_all(
        links,
        cfg.output_dir,
        timeout=cfg.pdf_timeout,
        max_workers=cfg.max_workers,
        deadline=cfg.deadline,
    )


def run_pipeline(cfg: Optional[Settings] = None) -> List[PhaseReport]:
    """Run harvest (unless checkpointed), extraction and download.

    Returns the phase reports that ran, in order.
    """
    cfg = cfg or settings
    reports: List[PhaseReport] = []

    harvest_report = harvest_corpus(cfg)
    if harvest_report is not None:
        reports.append(harvest_report)

    reports.append(download_links(load_links(cfg), cfg))
    return reports
