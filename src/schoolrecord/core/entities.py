from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Subject:
    name: str
    unit: int
    rank: int
    same_rank: int
    completer: int


@dataclass(frozen=True)
class SkippedSubject:
    name: str
    reason: str
    kind: str = "validation"

    def __str__(self) -> str:
        return f"{self.name}: {self.reason}"


@dataclass(frozen=True)
class AggregateResult:
    average: float
    skipped: tuple[SkippedSubject, ...] = ()
    graded_count: int = 0

    @property
    def invalid_subjects(self) -> list[str]:
        return [str(item) for item in self.skipped]
