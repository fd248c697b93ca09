"""Filesystem helpers: filename derivation, atomic writes and the corpus sink."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List
from urllib.parse import unquote, urlsplit

from harvester.errors import FileIOError, URLParseError

logger = logging.getLogger(__name__)

_INVALID_FILENAME_CHARS = '"\\/:*?<>|'
_SANITIZE = str.maketrans({ch: "_" for ch in _INVALID_FILENAME_CHARS})


# ---------------------------------------------------------------------------
# Filename derivation
# ---------------------------------------------------------------------------

def url_to_filename(url: str) -> str:
    """Derive a filesystem-safe, lower-case ``.pdf`` filename from *url*.

    ``https://EXAMPLE.com/Docs/File.PDF?x=1`` becomes
    ``example.com_docs_file.pdf_x=1.pdf``.

    Raises:
        URLParseError: If *url* cannot be parsed or has no host.
    """
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise URLParseError(url, f"cannot parse URL ({exc})") from exc

    host = parts.netloc.rpartition("@")[2]
    if not host:
        raise URLParseError(url, "URL has no host")

    name = host
    if parts.path:
        name += unquote(parts.path).replace("/", "_")
    if parts.query:
        name += "_" + parts.query.replace("&", "_")
    name = name.translate(_SANITIZE)

    if not name.lower().endswith(".pdf"):
        name += ".pdf"
    return name.lower()


# ---------------------------------------------------------------------------
# Predicates and directory bootstrap
# ---------------------------------------------------------------------------

def file_exists(path: Path) -> bool:
    """Return ``True`` if *path* exists and is not a directory.

    Paths the OS refuses to stat (too long, permission denied) count as absent.
    """
    try:
        return Path(path).is_file()
    except OSError:
        return False


def directory_exists(path: Path) -> bool:
    return Path(path).is_dir()


def ensure_directory(path: Path, mode: int = 0o755) -> Path:
    """Create *path* (and parents) with *mode* if it does not exist.

    A failure is logged, not raised; writes into *path* then fail one by one.
    """
    path = Path(path)
    if directory_exists(path):
        return path
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("[storage] Could not create directory %s: %s", path, exc)
        return path
    logger.info("[storage] Created directory %s", path)
    return path


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def write_file(path: Path, data: bytes) -> None:
    """Write *data* to *path* atomically.

    The payload goes to a temporary file in the same directory which is then
    renamed onto *path*, so readers never observe a partial file.

    Raises:
        FileIOError: If the file cannot be created or written.
    """
    path = Path(path)
    try:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".part")
    except OSError as exc:
        raise FileIOError(str(path), f"failed to create file ({exc})") from exc

    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise FileIOError(str(path), f"failed to write file ({exc})") from exc


def read_text(path: Path) -> str:
    """Return the contents of *path* decoded as UTF-8 (invalid bytes replaced)."""
    return Path(path).read_bytes().decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Corpus sinks
# ---------------------------------------------------------------------------

class MemoryCorpusSink:
    """Accumulates harvested page bodies in memory."""

    def __init__(self) -> None:
        self._chunks: List[bytes] = []

    def append(self, body: bytes) -> None:
        self._chunks.append(body)
        self._chunks.append(b"\n")

    @property
    def pages(self) -> int:
        return len(self._chunks) // 2

    def text(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")


class FileCorpusSink:
    """Appends harvested page bodies to a corpus file.

    Bodies are written to ``<path>.part``; on clean exit the part file is
    renamed onto *path* if at least one page was appended, otherwise it is
    removed.  An existing corpus file is the harvest checkpoint, so a failed
    or interrupted harvest must never leave one behind.

    Use as a context manager::

        with FileCorpusSink(Path("index.html")) as sink:
            sink.append(body)
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.part_path = self.path.with_name(self.path.name + ".part")
        self.pages = 0
        self._fh = None

    def __enter__(self) -> FileCorpusSink:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.part_path, "wb")
        except OSError as exc:
            raise FileIOError(str(self.part_path), f"cannot open corpus file ({exc})") from exc
        return self

    def append(self, body: bytes) -> None:
        if self._fh is None:
            raise RuntimeError("FileCorpusSink used outside of a with-block")
        self._fh.write(body)
        self._fh.write(b"\n")
        self.pages += 1

    def __exit__(self, exc_type, exc, tb) -> None:
        self._fh.close()
        self._fh = None
        if exc_type is None and self.pages:
            try:
                os.replace(self.part_path, self.path)
            except OSError as exc:
                self.part_path.unlink(missing_ok=True)
                raise FileIOError(str(self.path), f"cannot commit corpus file ({exc})") from exc
            logger.info("[storage] Wrote corpus %s (%d page(s))", self.path, self.pages)
            return
        self.part_path.unlink(missing_ok=True)
        if exc_type is None:
            logger.warning("[storage] No pages harvested; corpus %s not written", self.path)
