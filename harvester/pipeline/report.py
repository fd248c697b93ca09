"""Per-task outcomes and per-phase reports."""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from harvester.errors import HarvestError


class Outcome(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skip-exists"
    DUPLICATE = "duplicate-filename"
    INVALID_URL = "invalid-url"
    NETWORK = "network-fail"
    TIMEOUT = "timeout"
    HTTP_STATUS = "non-200"
    CONTENT_TYPE = "wrong-content-type"
    EMPTY_BODY = "zero-bytes"
    WRITE_FAILED = "write-fail"
    CANCELLED = "cancelled"
    ERROR = "error"


_NOT_FAILED = {Outcome.SUCCESS, Outcome.SKIPPED, Outcome.DUPLICATE}


@dataclass
class TaskResult:
    """Terminal state of one task.

    ``payload`` carries a harvested page body back to the calling thread;
    it is dropped once the result is recorded in a :class:`PhaseReport`.
    """

    target: str
    outcome: Outcome
    detail: str = ""
    payload: bytes | None = None

    @classmethod
    def failure(cls, target: str, exc: HarvestError) -> TaskResult:
        return cls(target=target, outcome=Outcome(exc.outcome), detail=exc.message)

    @property
    def failed(self) -> bool:
        return self.outcome not in _NOT_FAILED


@dataclass
class PhaseReport:
    """Outcomes collected for one phase (harvest or download)."""

    phase: str
    results: List[TaskResult] = field(default_factory=list)
    started: float = field(default_factory=time.monotonic)
    finished: float | None = None

    def record(self, result: TaskResult) -> None:
        # Bodies are handed off before recording; keep none alive afterwards.
        result.payload = None
        self.results.append(result)

    def extend(self, other: PhaseReport) -> None:
        self.results.extend(other.results)

    def close(self) -> None:
        self.finished = time.monotonic()

    @property
    def elapsed(self) -> float:
        end = self.finished if self.finished is not None else time.monotonic()
        return end - self.started

    def counts(self) -> Counter:
        return Counter(r.outcome for r in self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.outcome is Outcome.SUCCESS)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.outcome in (Outcome.SKIPPED, Outcome.DUPLICATE))

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    def summary(self) -> str:
        """One-line ``[phase] N task(s) in Xs: outcome=count ...`` summary."""
        parts = " ".join(
            f"{outcome.value}={count}"
            for outcome, count in sorted(self.counts().items(), key=lambda kv: kv[0].value)
        )
        return (
            f"[{self.phase}] {len(self.results)} task(s) in {self.elapsed:.1f}s"
            + (f": {parts}" if parts else "")
        )
