"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageAddress:
    """One search-result page: a (category, page index) pair."""

    category: str
    page: int

    def url(self, template: str) -> str:
        """Return the query URL for this page by substituting into *template*."""
        return template.format(category=self.category, page=self.page)


@dataclass(frozen=True)
class FetchResult:
    """The outcome of one successful HTTP GET."""

    final_url: str
    status_code: int
    body: bytes
    content_type: str = ""
