"""Tests for the single-shot HTTP fetcher.

``respx`` patches ``httpx`` at the transport layer so no real network calls
are made.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from harvester import errors
from harvester.scraper.fetcher import build_client, fetch
from harvester.scraper.models import FetchResult


class TestFetch:
    def test_successful_fetch_returns_result(self) -> None:
        with respx.mock:
            respx.get("https://example.com/doc.pdf").mock(
                return_value=httpx.Response(
                    200, content=b"%PDF-1.4", headers={"Content-Type": "application/pdf"}
                )
            )
            result = fetch("https://example.com/doc.pdf", 30)

        assert isinstance(result, FetchResult)
        assert result.status_code == 200
        assert result.body == b"%PDF-1.4"
        assert result.content_type == "application/pdf"
        assert result.final_url == "https://example.com/doc.pdf"

    def test_follows_redirects_and_reports_final_url(self) -> None:
        with respx.mock:
            respx.get("https://example.com/old.pdf").mock(
                return_value=httpx.Response(301, headers={"Location": "https://cdn.example.com/new.pdf"})
            )
            respx.get("https://cdn.example.com/new.pdf").mock(
                return_value=httpx.Response(200, content=b"%PDF")
            )
            with build_client() as client:
                result = fetch("https://example.com/old.pdf", 30, client=client)

        assert result.final_url == "https://cdn.example.com/new.pdf"
        assert result.body == b"%PDF"

    def test_non_200_raises_status_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/missing.pdf").mock(
                return_value=httpx.Response(404, text="Not Found")
            )
            with pytest.raises(errors.HTTPStatusError) as excinfo:
                fetch("https://example.com/missing.pdf", 30)

        assert excinfo.value.reason == "non-200"
        assert excinfo.value.status_code == 404
        assert excinfo.value.outcome == "non-200"

    def test_other_2xx_is_still_an_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/empty").mock(return_value=httpx.Response(204))
            with pytest.raises(errors.HTTPStatusError):
                fetch("https://example.com/empty", 30)

    def test_timeout_raises_transport_error(self) -> None:
        with respx.mock:
            respx.get("https://slow.example.com/").mock(side_effect=httpx.ReadTimeout)
            with pytest.raises(errors.TransportError) as excinfo:
                fetch("https://slow.example.com/", 0.1)

        assert excinfo.value.reason == "timeout"
        assert excinfo.value.outcome == "timeout"

    def test_connect_failure_raises_transport_error(self) -> None:
        with respx.mock:
            respx.get("https://down.example.com/").mock(side_effect=httpx.ConnectError)
            with pytest.raises(errors.TransportError) as excinfo:
                fetch("https://down.example.com/", 30)

        assert excinfo.value.reason == "network"
        assert excinfo.value.outcome == "network-fail"

    def test_shared_client_is_left_open(self) -> None:
        with respx.mock:
            respx.get("https://example.com/").mock(return_value=httpx.Response(200, text="ok"))
            client = build_client(4)
            fetch("https://example.com/", 30, client=client)
            assert not client.is_closed
            client.close()
