"""Harvest workload, timeouts, pool size and paths.

Every field reads a ``HARVEST_*`` environment variable and falls back to the
reference deployment: 26 letters x pages 0-300 of the SDS search, 90s page
and 30s PDF timeouts, ``index.html`` corpus and ``PDFs/`` output.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# A checkout-local .env may pre-set HARVEST_* variables; real env wins.
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_SEARCH_URL_TEMPLATE = (
    "https://www.airgas.com/sds-search?searchKeyWord={category}&sortOrder="
    "&searchPureGases=false&searchMixedGases=false&searchHardGoods=false"
    "&maintainType=true&page={page}"
)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Page harvest workload
    # ------------------------------------------------------------------
    search_url_template: str = field(
        default_factory=lambda: os.environ.get(
            "HARVEST_SEARCH_URL_TEMPLATE", _DEFAULT_SEARCH_URL_TEMPLATE
        )
    )
    categories: str = field(
        default_factory=lambda: os.environ.get(
            "HARVEST_CATEGORIES", "abcdefghijklmnopqrstuvwxyz"
        )
    )
    max_page_index: int = field(
        default_factory=lambda: int(os.environ.get("HARVEST_MAX_PAGE_INDEX", "300"))
    )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------
    page_timeout: float = field(
        default_factory=lambda: float(os.environ.get("HARVEST_PAGE_TIMEOUT", "90.0"))
    )
    pdf_timeout: float = field(
        default_factory=lambda: float(os.environ.get("HARVEST_PDF_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "HARVEST_USER_AGENT", "Mozilla/5.0 (compatible; PdfHarvest/1.0)"
        )
    )

    # ------------------------------------------------------------------
    # Concurrency
    # ------------------------------------------------------------------
    # 0 means one worker per task (no ceiling).
    max_workers: int = field(
        default_factory=lambda: int(os.environ.get("HARVEST_MAX_WORKERS", "32"))
    )
    # Seconds; 0 disables the per-phase deadline.
    phase_deadline: float = field(
        default_factory=lambda: float(os.environ.get("HARVEST_PHASE_DEADLINE", "0"))
    )

    # ------------------------------------------------------------------
    # Filesystem
    # ------------------------------------------------------------------
    corpus_path: Path = field(
        default_factory=lambda: Path(os.environ.get("HARVEST_CORPUS_PATH", "index.html"))
    )
    output_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("HARVEST_OUTPUT_DIR", "PDFs"))
    )

    log_level: str = field(
        default_factory=lambda: os.environ.get("HARVEST_LOG_LEVEL", "INFO")
    )

    @property
    def deadline(self) -> float | None:
        """Phase deadline in seconds, or ``None`` when disabled."""
        return self.phase_deadline if self.phase_deadline > 0 else None


# Module-level singleton: import this everywhere:
#   from harvester.config import settings
settings = Settings()
