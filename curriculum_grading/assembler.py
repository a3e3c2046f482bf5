"""Builds subject results from the marks recorded for a student.

The assembler merges assessment marks into the inputs a curriculum grader
needs, grades them and hands the record to an optional result store.
Uniqueness of (student, subject, term, year) belongs to the store.
"""

import logging
import re
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, assert_never

from pydantic import BaseModel, Field, field_validator, model_validator

from .curricula import Curriculum, curriculum_for_level, grader_for, normalize_level
from .exceptions import GradingError, MissingComponentError, NoGraderError
from .graders import GradeResult, GraderInputs, PaperMarks, WeightedMarks

logger = logging.getLogger(__name__)

PAPER_TYPE = re.compile(r"^PAPER([1-9][0-9]*)$")

# (component A, component B) assessment types per weighted curriculum.
WEIGHTED_COMPONENTS: dict[Curriculum, tuple[str, str]] = {
    Curriculum.LOWER_PRIMARY: ("CA", "EXAM"),
    Curriculum.LOWER_SECONDARY: ("SCHOOL_BASED", "EXTERNAL"),
}


class AssessmentMark(BaseModel):
    assessment_type: str = Field(pattern=r"^(CA|EXAM|SCHOOL_BASED|EXTERNAL|PAPER[1-9][0-9]*)$")
    marks_obtained: float = Field(..., ge=0, allow_inf_nan=False)
    max_marks: float = Field(..., ge=1, allow_inf_nan=False)

    @field_validator("assessment_type", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _within_maximum(self) -> "AssessmentMark":
        if self.marks_obtained > self.max_marks:
            raise ValueError(
                f"{self.assessment_type}: marks_obtained {self.marks_obtained:g} exceeds max_marks {self.max_marks:g}"
            )
        return self


class GradingRequest(BaseModel):
    student_id: str = Field(..., min_length=1)
    subject_id: str = Field(..., min_length=1)
    level: str = Field(..., min_length=1)
    term: str = Field(..., min_length=1)
    year: int
    marks: list[AssessmentMark] = Field(default_factory=list)
    # Fingerprint stored with an earlier result, used for drift checks.
    rule_version_hash: str | None = None


@dataclass(frozen=True)
class SubjectResult:
    student_id: str
    subject_id: str
    level: str
    term: str
    year: int
    raw_marks: dict[str, Any]
    result: GradeResult
    derived_codes: dict[str, int] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str, str, int]:
        return (self.student_id, self.subject_id, self.term, self.year)

    @property
    def final_grade(self) -> str:
        return self.result.final_grade

    def to_dict(self) -> dict[str, Any]:
        return {
            "student_id": self.student_id,
            "subject_id": self.subject_id,
            "level": self.level,
            "term": self.term,
            "year": self.year,
            "raw_marks": self.raw_marks,
            "derived_codes": self.derived_codes,
            **self.result.to_dict(),
            "paper_codes": self.derived_codes or None,
        }


class ResultStore(Protocol):
    def save(self, record: SubjectResult) -> None: ...


class InMemoryResultStore:
    """Keeps one record per (student, subject, term, year); later saves replace earlier ones."""

    def __init__(self):
        self._records: dict[tuple[str, str, str, int], SubjectResult] = {}
        self._lock = threading.Lock()

    def save(self, record: SubjectResult) -> None:
        with self._lock:
            self._records[record.key] = record

    def get(self, student_id: str, subject_id: str, term: str, year: int) -> SubjectResult | None:
        with self._lock:
            return self._records.get((student_id, subject_id, term, year))

    def all(self) -> list[SubjectResult]:
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _totals(marks: Iterable[AssessmentMark]) -> dict[str, tuple[float, float]]:
    """Sum obtained and maximum marks per assessment type."""
    totals: dict[str, tuple[float, float]] = {}
    for m in marks:
        obtained, maximum = totals.get(m.assessment_type, (0.0, 0.0))
        totals[m.assessment_type] = (obtained + m.marks_obtained, maximum + m.max_marks)
    return totals


def merge_weighted(
    level: str, components: tuple[str, str], marks: Iterable[AssessmentMark]
) -> tuple[WeightedMarks, dict[str, Any]]:
    totals = _totals(marks)
    for name in components:
        if name not in totals:
            logger.warning(f"Level {level} is missing its {name} mark")
            raise MissingComponentError(level, name)

    ignored = sorted(set(totals) - set(components))
    if ignored:
        logger.warning(f"Ignoring {ignored} marks for level {level}")

    (a, max_a), (b, max_b) = totals[components[0]], totals[components[1]]
    raw = {name: {"marks": totals[name][0], "max": totals[name][1]} for name in components}
    return WeightedMarks(component_a=a, component_b=b, max_a=max_a, max_b=max_b), raw


def merge_papers(level: str, marks: Iterable[AssessmentMark]) -> tuple[PaperMarks, dict[str, Any]]:
    totals = _totals(marks)
    papers: list[tuple[int, str, float]] = []
    for name, (obtained, maximum) in totals.items():
        found = PAPER_TYPE.match(name)
        if found is None:
            logger.warning(f"Ignoring {name} marks for level {level}")
            continue
        papers.append((int(found.group(1)), name, obtained / maximum * 100))
    papers.sort()

    raw = {
        name: {"marks": totals[name][0], "max": totals[name][1], "percent": percent}
        for _, name, percent in papers
    }
    return PaperMarks(marks=tuple(percent for _, _, percent in papers)), raw


def label_paper_codes(raw_marks: dict[str, Any], paper_codes: Mapping[str, int] | None) -> dict[str, int]:
    """Re-key positional grader codes by the paper numbers actually sat (PAPER1, PAPER3 -> Paper1, Paper3)."""
    if not paper_codes:
        return {}
    labels = [f"Paper{PAPER_TYPE.match(name).group(1)}" for name in raw_marks]
    return dict(zip(labels, paper_codes.values()))


class ResultAssembler:
    def __init__(self, store: ResultStore | None = None):
        self.store = store

    def _inputs_for(
        self, curriculum: Curriculum, request: GradingRequest
    ) -> tuple[GraderInputs, dict[str, Any]]:
        match curriculum:
            case Curriculum.LOWER_PRIMARY | Curriculum.LOWER_SECONDARY:
                return merge_weighted(request.level, WEIGHTED_COMPONENTS[curriculum], request.marks)
            case Curriculum.ADVANCED_SECONDARY:
                return merge_papers(request.level, request.marks)
            case _:
                assert_never(curriculum)

    def assemble(self, request: GradingRequest) -> SubjectResult:
        curriculum = curriculum_for_level(request.level)
        if curriculum is None:
            logger.warning(
                f"Rejected {request.student_id}/{request.subject_id}: no grader for level {request.level!r}"
            )
            raise NoGraderError(request.level)

        grader = grader_for(curriculum)
        logger.debug(f"Level {request.level} -> {grader.name}")
        inputs, raw_marks = self._inputs_for(curriculum, request)
        result = grader.grade(inputs)

        record = SubjectResult(
            student_id=request.student_id,
            subject_id=request.subject_id,
            level=normalize_level(request.level),
            term=request.term,
            year=request.year,
            raw_marks=raw_marks,
            result=result,
            derived_codes=label_paper_codes(raw_marks, result.paper_codes),
        )
        if self.store is not None:
            self.store.save(record)
        return record

    def grade_batch(
        self, requests: Iterable[GradingRequest]
    ) -> tuple[list[SubjectResult], list[tuple[GradingRequest, GradingError]]]:
        results: list[SubjectResult] = []
        failures: list[tuple[GradingRequest, GradingError]] = []
        for request in requests:
            try:
                results.append(self.assemble(request))
            except GradingError as e:
                failures.append((request, e))
        return results, failures
