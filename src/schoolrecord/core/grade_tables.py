from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from schoolrecord.core.errors import ConfigurationError

RANGE_LOCALES = ("en", "ko")


@dataclass(frozen=True)
class GradeBoundary:
    max_percentile: float
    grade: int


@dataclass(frozen=True)
class GradeTable:
    """Ordered percentile ceilings for one grading scale.

    A percentile belongs to the first boundary whose ceiling is at least as
    large as it. Tables end at 100, so the last-boundary fallback in
    ``lookup`` only matters for hand-built tables.
    """

    boundaries: tuple[GradeBoundary, ...]

    def __post_init__(self) -> None:
        if not self.boundaries:
            raise ValueError("Grade table needs at least one boundary")
        ceilings = [b.max_percentile for b in self.boundaries]
        if ceilings != sorted(ceilings):
            raise ValueError("Grade boundaries must be sorted by max_percentile")

    @classmethod
    def from_ceilings(cls, ceilings: Iterable[float]) -> "GradeTable":
        return cls(tuple(GradeBoundary(c, grade) for grade, c in enumerate(ceilings, start=1)))

    def lookup(self, percentile: float) -> int:
        for boundary in self.boundaries:
            if percentile <= boundary.max_percentile:
                return boundary.grade
        return self.boundaries[-1].grade

    def describe_ranges(self, locale: str = "en") -> list[str]:
        if locale not in RANGE_LOCALES:
            raise ConfigurationError(f"Unsupported range locale: {locale!r}. Use en or ko.")

        ranges = []
        lower = None
        for boundary in self.boundaries:
            upper = _fmt(boundary.max_percentile)
            if lower is None:
                ranges.append(f"top {upper}% or better" if locale == "en" else f"상위 {upper}%이내")
            elif locale == "en":
                ranges.append(f"{lower}%–{upper}%")
            else:
                ranges.append(f"{lower}%~{upper}%구간")
            lower = upper
        return ranges


def _fmt(value: float) -> str:
    return f"{value:g}"


NINE_TIER_TABLE = GradeTable.from_ceilings((4, 11, 23, 40, 60, 77, 89, 96, 100))
FIVE_TIER_TABLE = GradeTable.from_ceilings((10, 34, 66, 90, 100))
