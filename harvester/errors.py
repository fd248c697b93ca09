"""Error taxonomy for the harvest pipeline.

Every error here is local to a single task: workers catch
:class:`HarvestError`, log it, and turn it into a failure outcome.  Nothing
in this module is ever allowed to abort a sibling task or a whole phase.
"""

from __future__ import annotations


class HarvestError(Exception):
    """Base class for all per-task failures."""

    outcome = "error"

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message}: {url}")
        self.url = url
        self.message = message


class URLParseError(HarvestError):
    """The URL is not an absolute http(s) URL or yields no filename."""

    outcome = "invalid-url"


class FetchError(HarvestError):
    """A fetch did not produce a usable 200 response."""

    def __init__(self, url: str, reason: str, message: str) -> None:
        super().__init__(url, message)
        self.reason = reason
        self.outcome = "network-fail" if reason == "network" else reason


class TransportError(FetchError):
    """Connect/read failure (``reason="network"``) or timeout (``reason="timeout"``)."""


class HTTPStatusError(FetchError):
    """The server answered with a status other than 200."""

    def __init__(self, url: str, status_code: int, final_url: str) -> None:
        super().__init__(url, "non-200", f"non-OK HTTP status {status_code} from {final_url}")
        self.status_code = status_code
        self.final_url = final_url


class ContentTypeMismatch(HarvestError):
    """A 200 response whose ``Content-Type`` is not ``application/pdf``."""

    outcome = "wrong-content-type"

    def __init__(self, url: str, content_type: str) -> None:
        super().__init__(
            url, f"invalid content type {content_type!r} (expected application/pdf)"
        )
        self.content_type = content_type


class EmptyBodyError(HarvestError):
    """A 200 response with a zero-byte body."""

    outcome = "zero-bytes"

    def __init__(self, url: str) -> None:
        super().__init__(url, "downloaded 0 bytes; not creating file")


class FileIOError(HarvestError):
    """Writing an output file failed."""

    outcome = "write-fail"
