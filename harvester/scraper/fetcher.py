"""Single-shot HTTP GET used by both the page harvest and the PDF download."""

from __future__ import annotations

import logging

import httpx

from harvester import errors
from harvester.config import settings
from harvester.scraper.models import FetchResult

logger = logging.getLogger(__name__)


def build_client(max_connections: int | None = None) -> httpx.Client:
    """Return an ``httpx.Client`` shared by every worker of one phase.

    *max_connections* caps the connection pool; ``None`` leaves it
    unlimited so that an unbounded fan-out is not silently serialised by
    the pool.  Zero or negative values are treated as ``None``.
    """
    if max_connections is not None and max_connections <= 0:
        max_connections = None
    return httpx.Client(
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_connections,
        ),
    )


def fetch(url: str, timeout: float, *, client: httpx.Client | None = None) -> FetchResult:
    """GET *url* and return a :class:`FetchResult` for a 200 response.

    Redirects are followed; ``final_url`` is the post-redirect location.
    No retries are made.

    Raises:
        harvester.errors.TransportError: On connect/read failure or timeout.
        harvester.errors.HTTPStatusError: If the final status is not 200.
        harvester.errors.URLParseError: If httpx rejects the URL.
    """
    owns_client = client is None
    if client is None:
        client = build_client()

    try:
        response = client.get(url, timeout=timeout)
    except httpx.TimeoutException as exc:
        raise errors.TransportError(url, "timeout", f"timed out after {timeout}s") from exc
    except httpx.HTTPError as exc:
        raise errors.TransportError(url, "network", f"HTTP GET failed ({exc})") from exc
    except httpx.InvalidURL as exc:
        raise errors.URLParseError(url, f"malformed URL ({exc})") from exc
    finally:
        if owns_client:
            client.close()

    final_url = str(response.url)
    logger.debug("[fetch] Final URL after redirects: %s", final_url)

    if response.status_code != httpx.codes.OK:
        raise errors.HTTPStatusError(url, response.status_code, final_url)

    return FetchResult(
        final_url=final_url,
        status_code=response.status_code,
        body=response.content,
        content_type=response.headers.get("content-type", ""),
    )
