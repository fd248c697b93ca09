"""Page harvest: fetch every search-result page and accumulate the bodies.

The workload is the Cartesian product of the category alphabet and the page
index range ``[0, max_page_index]``.  Every page is fetched regardless of
whether earlier pages were empty.  A failed page contributes nothing to the
corpus and never aborts the harvest.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Protocol

import httpx

from harvester.config import settings
from harvester.errors import HarvestError
from harvester.pipeline.report import Outcome, PhaseReport, TaskResult
from harvester.pipeline.runner import fan_out
from harvester.scraper.extractor import is_valid_url
from harvester.scraper.fetcher import build_client, fetch
from harvester.scraper.models import PageAddress

logger = logging.getLogger(__name__)


class CorpusSink(Protocol):
    def append(self, body: bytes) -> None: ...


def page_addresses(categories: Iterable[str], max_page_index: int) -> Iterator[PageAddress]:
    """Yield every (category, page) pair, category-major, pages ascending."""
    for category in categories:
        for page in range(max_page_index + 1):
            yield PageAddress(category=category, page=page)


def fetch_page(url: str, *, client: httpx.Client, timeout: float) -> TaskResult:
    """Fetch one search-result page; the body travels back as the payload."""
    try:
        result = fetch(url, timeout, client=client)
    except HarvestError as exc:
        logger.warning("[harvest] %s", exc)
        return TaskResult.failure(url, exc)

    logger.info("[harvest] Completed scraping URL: %s", result.final_url)
    return TaskResult(url, Outcome.SUCCESS, result.final_url, payload=result.body)


def harvest(
    categories: Iterable[str],
    max_page_index: int,
    sink: CorpusSink,
    *,
    template: Optional[str] = None,
    timeout: Optional[float] = None,
    max_workers: Optional[int] = None,
    deadline: Optional[float] = None,
    client: Optional[httpx.Client] = None,
) -> PhaseReport:
    """Fetch all search pages concurrently and append each 200 body to *sink*.

    Unset keyword arguments fall back to :data:`harvester.config.settings`.
    Blocks until every page task has finished (or been cancelled by the
    *deadline*).  Appends to *sink* happen on the calling thread only.
    """
    template = template if template is not None else settings.search_url_template
    timeout = timeout if timeout is not None else settings.page_timeout
    max_workers = max_workers if max_workers is not None else settings.max_workers

    report = PhaseReport("harvest")
    urls: list[str] = []
    for address in page_addresses(categories, max_page_index):
        url = address.url(template)
        if is_valid_url(url):
            urls.append(url)
        else:
            logger.warning("[harvest] Skipping malformed URL: %s", url)
            report.record(TaskResult(url, Outcome.INVALID_URL, "malformed URL"))

    def on_result(result: TaskResult) -> None:
        if result.payload is None:
            return
        try:
            sink.append(result.payload)
        except OSError as exc:
            logger.warning("[harvest] Failed to write body for %s: %s", result.target, exc)
            result.outcome = Outcome.WRITE_FAILED
            result.detail = str(exc)

    owns_client = client is None
    if client is None:
        client = build_client(max_workers)
    try:
        fetched = fan_out(
            lambda url: fetch_page(url, client=client, timeout=timeout),
            urls,
            phase="harvest",
            max_workers=max_workers,
            deadline=deadline,
            on_result=on_result,
        )
    finally:
        if owns_client:
            client.close()

    report.extend(fetched)
    report.close()
    logger.info("%s", report.summary())
    return report
