from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PayloadValidationError

from schoolrecord.core.entities import AggregateResult, SkippedSubject, Subject
from schoolrecord.core.errors import AggregateError, ValidationError
from schoolrecord.core.grades import GradeEngine

logger = logging.getLogger(__name__)


class SubjectPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    unit: int = Field(ge=1)
    rank: int
    same_rank: int = Field(alias="sameRank")
    completer: int


def _describe(exc: PayloadValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "record"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_subject(record: Any) -> Subject:
    try:
        payload = SubjectPayload.model_validate(record)
    except PayloadValidationError as exc:
        raise ValidationError(f"malformed subject record: {_describe(exc)}") from exc
    return Subject(
        name=payload.name,
        unit=payload.unit,
        rank=payload.rank,
        same_rank=payload.same_rank,
        completer=payload.completer,
    )


def _record_name(record: Any, index: int) -> str:
    if isinstance(record, Mapping):
        name = record.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return f"record #{index}"


def build_report(engine: GradeEngine, records: Iterable[Any], *, weighted: bool = False) -> AggregateResult:
    records = list(records)
    if not records:
        raise AggregateError("no subjects provided")

    subjects: List[Subject] = []
    malformed: List[SkippedSubject] = []
    for index, record in enumerate(records):
        try:
            subjects.append(parse_subject(record))
        except ValidationError as exc:
            name = _record_name(record, index)
            logger.warning("Skipping record %r: %s", name, exc)
            malformed.append(SkippedSubject(name, str(exc), "validation"))

    if not subjects:
        raise AggregateError("no valid grades could be calculated")

    if weighted:
        result = engine.weighted_average_grade(subjects)
    else:
        result = engine.average_grade(subjects)
    return AggregateResult(
        average=result.average,
        skipped=tuple(malformed) + result.skipped,
        graded_count=result.graded_count,
    )
