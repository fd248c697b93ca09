"""Scraper package: HTTP fetch & PDF link extraction."""

from harvester.scraper.extractor import extract_pdf_links, is_valid_url
from harvester.scraper.fetcher import build_client, fetch
from harvester.scraper.models import FetchResult, PageAddress

__all__ = [
    "fetch",
    "build_client",
    "extract_pdf_links",
    "is_valid_url",
    "FetchResult",
    "PageAddress",
]
