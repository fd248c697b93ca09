"""PDF download: one task per distinct link, skip-if-exists, validate, persist.

Per-task state machine::

    start -> skip-exists
          -> fetch -> network-fail | timeout | non-200 | wrong-content-type
                    | zero-bytes | write-fail | success

Every state is terminal; nothing is retried and no task blocks another.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import httpx

from harvester.config import settings
from harvester.errors import ContentTypeMismatch, EmptyBodyError, HarvestError, URLParseError
from harvester.pipeline.report import Outcome, PhaseReport, TaskResult
from harvester.pipeline.runner import fan_out
from harvester.scraper.extractor import is_valid_url
from harvester.scraper.fetcher import build_client, fetch
from harvester.storage import file_exists, url_to_filename, write_file

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def download_pdf(
    url: str,
    target: Path,
    *,
    client: httpx.Client,
    timeout: float,
) -> TaskResult:
    """Download *url* to *target* unless *target* already exists.

    The whole body is buffered before anything touches the filesystem, so a
    rejected response never leaves a file behind.
    """
    if file_exists(target):
        logger.info("[download] File already exists, skipping: %s", target)
        return TaskResult(url, Outcome.SKIPPED, str(target))

    try:
        result = fetch(url, timeout, client=client)
        if PDF_CONTENT_TYPE not in result.content_type.lower():
            raise ContentTypeMismatch(url, result.content_type)
        if not result.body:
            raise EmptyBodyError(url)
        write_file(target, result.body)
    except HarvestError as exc:
        logger.warning("[download] %s", exc)
        return TaskResult.failure(url, exc)

    logger.info("[download] Saved %s (%d bytes)", target, len(result.body))
    return TaskResult(url, Outcome.SUCCESS, str(target))


def plan_downloads(
    links: Iterable[str], output_dir: Path
) -> Tuple[List[Tuple[str, Path]], List[TaskResult]]:
    """Map each link to its target path, one task per distinct filename.

    Returns ``(tasks, rejected)`` where *rejected* holds results for links
    that are malformed or whose filename is already claimed by an earlier
    link.
    """
    tasks: List[Tuple[str, Path]] = []
    rejected: List[TaskResult] = []
    claimed: dict[str, str] = {}

    for url in links:
        if not is_valid_url(url):
            logger.warning("[download] Skipping malformed URL: %s", url)
            rejected.append(TaskResult(url, Outcome.INVALID_URL, "malformed URL"))
            continue
        try:
            filename = url_to_filename(url)
        except URLParseError as exc:
            logger.warning("[download] %s", exc)
            rejected.append(TaskResult.failure(url, exc))
            continue
        if filename in claimed:
            logger.info("[download] %s maps to %s already claimed by %s", url, filename, claimed[filename])
            rejected.append(TaskResult(url, Outcome.DUPLICATE, filename))
            continue
        claimed[filename] = url
        tasks.append((url, Path(output_dir) / filename))

    return tasks, rejected


def download_all(
    links: Iterable[str],
    output_dir: Path,
    *,
    timeout: Optional[float] = None,
    max_workers: Optional[int] = None,
    deadline: Optional[float] = None,
    client: Optional[httpx.Client] = None,
) -> PhaseReport:
    """Download every link into *output_dir*, which must already exist.

    Unset keyword arguments fall back to :data:`harvester.config.settings`.
    Blocks until every download task has reached a terminal state.
    """
    timeout = timeout if timeout is not None else settings.pdf_timeout
    max_workers = max_workers if max_workers is not None else settings.max_workers

    report = PhaseReport("download")
    tasks, rejected = plan_downloads(links, output_dir)
    for result in rejected:
        report.record(result)

    owns_client = client is None
    if client is None:
        client = build_client(max_workers)
    try:
        downloaded = fan_out(
            lambda task: download_pdf(task[0], task[1], client=client, timeout=timeout),
            tasks,
            phase="download",
            label=lambda task: task[0],
            max_workers=max_workers,
            deadline=deadline,
        )
    finally:
        if owns_client:
            client.close()

    report.extend(downloaded)
    report.close()
    logger.info("%s", report.summary())
    return report
