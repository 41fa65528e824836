from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from schoolrecord.config.settings import Settings, settings
from schoolrecord.core.entities import AggregateResult, SkippedSubject, Subject
from schoolrecord.core.errors import (
    AggregateError,
    CalculationError,
    ConfigurationError,
    ValidationError,
)
from schoolrecord.core.grade_tables import (
    FIVE_TIER_TABLE,
    NINE_TIER_TABLE,
    RANGE_LOCALES,
    GradeTable,
)

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "unknown error"


class GradeScale(str, Enum):
    NINE = "9"
    FIVE = "5"


GRADE_TABLES: Dict[GradeScale, GradeTable] = {
    GradeScale.NINE: NINE_TIER_TABLE,
    GradeScale.FIVE: FIVE_TIER_TABLE,
}


def resolve_scale(value: Union[GradeScale, str, int]) -> GradeScale:
    if isinstance(value, GradeScale):
        return value
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        try:
            return GradeScale(str(value).strip())
        except ValueError:
            pass
    raise ConfigurationError(f"Invalid grade type: {value!r}. Use 9 or 5.")


def validate_rank(rank: int, same_rank: int, completer: int) -> None:
    if completer <= 0:
        raise ValidationError("cohort size must be positive")
    if rank <= 0:
        raise ValidationError("rank must be positive")
    if same_rank <= 0:
        raise ValidationError("tie-count must be positive")
    if rank > completer:
        raise ValidationError("rank cannot exceed cohort size")
    if same_rank > completer - rank + 1:
        raise ValidationError("tie-count cannot exceed remaining cohort members")


def validate_unit(unit: int) -> None:
    if unit <= 0:
        raise ValidationError("unit must be positive")


def calculate_percentile(rank: int, same_rank: int, completer: int) -> float:
    """
    Percentile of the last position in the tie block:
    (rank + same_rank - 1) / completer * 100

    Every student in a tie gets the worst position of the block, so rank 1
    with a 3-way tie is placed at position 3.
    """
    return (rank + same_rank - 1) * 100 / completer


def grade_from_rank(table: GradeTable, rank: int, same_rank: int, completer: int) -> int:
    validate_rank(rank, same_rank, completer)
    return table.lookup(calculate_percentile(rank, same_rank, completer))


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _reason(exc: BaseException) -> str:
    return str(exc).strip() or UNKNOWN_ERROR


class GradeEngine:
    def __init__(self, scale: Union[GradeScale, str, int], *, range_locale: str = "en") -> None:
        self.scale = resolve_scale(scale)
        if range_locale not in RANGE_LOCALES:
            raise ConfigurationError(f"Unsupported range locale: {range_locale!r}. Use en or ko.")
        self.range_locale = range_locale
        self.table = GRADE_TABLES[self.scale]

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "GradeEngine":
        config = config or settings
        return cls(config.default_grade_scale, range_locale=config.range_locale)

    def grade_subject(self, subject: Subject) -> int:
        try:
            validate_rank(subject.rank, subject.same_rank, subject.completer)
        except (AttributeError, TypeError) as exc:
            raise ValidationError(f"malformed subject: {_reason(exc)}") from exc
        try:
            return grade_from_rank(self.table, subject.rank, subject.same_rank, subject.completer)
        except Exception as exc:
            raise CalculationError(_reason(exc)) from exc

    def average_grade(self, subjects: Iterable[Subject]) -> AggregateResult:
        graded, skipped = self._grade_each(subjects)
        total = sum(grade for _, grade in graded)
        average = round_half_up(total / len(graded))
        logger.debug("Averaged %d subject(s) to %.2f, skipped %d", len(graded), average, len(skipped))
        return AggregateResult(average=average, skipped=tuple(skipped), graded_count=len(graded))

    def weighted_average_grade(self, subjects: Iterable[Subject]) -> AggregateResult:
        """
        Unit-weighted average:
        sum(unit * grade) / sum(unit)
        """
        graded, skipped = self._grade_each(subjects, check_unit=True)
        weighted_sum = 0
        total_units = 0
        for subject, grade in graded:
            weighted_sum += subject.unit * grade
            total_units += subject.unit

        average = round_half_up(weighted_sum / total_units)
        return AggregateResult(average=average, skipped=tuple(skipped), graded_count=len(graded))

    def get_grade_boundaries(self) -> List[str]:
        return self.table.describe_ranges(self.range_locale)

    def _grade_each(
        self, subjects: Iterable[Subject], *, check_unit: bool = False
    ) -> Tuple[List[Tuple[Subject, int]], List[SkippedSubject]]:
        subjects = list(subjects)
        if not subjects:
            raise AggregateError("no subjects provided")

        graded: List[Tuple[Subject, int]] = []
        skipped: List[SkippedSubject] = []
        for index, subject in enumerate(subjects):
            name = getattr(subject, "name", None) or f"subject #{index}"
            try:
                grade = self.grade_subject(subject)
                if check_unit:
                    self._check_unit(subject)
            except ValidationError as exc:
                logger.warning("Skipping subject %r: %s", name, exc)
                skipped.append(SkippedSubject(name, _reason(exc), "validation"))
            except CalculationError as exc:
                logger.warning("Skipping subject %r after calculation failure: %s", name, exc)
                skipped.append(SkippedSubject(name, f"calculation error: {_reason(exc)}", "calculation"))
            else:
                graded.append((subject, grade))

        if not graded:
            raise AggregateError("no valid grades could be calculated")
        return graded, skipped

    @staticmethod
    def _check_unit(subject: Subject) -> None:
        try:
            validate_unit(subject.unit)
        except (AttributeError, TypeError) as exc:
            raise ValidationError(f"malformed subject: {_reason(exc)}") from exc
