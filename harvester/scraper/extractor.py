"""PDF link extraction over a harvested text corpus."""

from __future__ import annotations

import re
from typing import List
from urllib.parse import urlsplit

# Absolute http(s) URL ending in ``.pdf``, with an optional query string.
_PDF_LINK = re.compile(r"""https?://[^\s"'<>]+?\.pdf(?:\?[^\s"'<>]*)?""")


def is_valid_url(url: str) -> bool:
    """Return ``True`` if *url* is an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def extract_pdf_links(corpus: str) -> List[str]:
    """Return the distinct PDF links in *corpus*, in first-seen order.

    The corpus is scanned one line at a time; a link never spans lines.
    """
    seen: set[str] = set()
    links: List[str] = []
    for line in corpus.split("\n"):
        for match in _PDF_LINK.findall(line):
            if match not in seen:
                seen.add(match)
                links.append(match)
    return links
