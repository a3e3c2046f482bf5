import logging
from collections.abc import Sequence

from ..codes import WORST_CODE, map_mark_to_code
from .base import PAPER_ALPHABET, GradeResult, Grader, GraderInputs, PaperMarks

logger = logging.getLogger(__name__)

RULE_VERSION_UACE = "UACE_V1"

VALID_PAPER_COUNTS = (2, 3, 4)
INVALID_COUNT_GRADE = "F"
BEST_OF = 2

# (inclusive upper bound on the best-two code sum, letter). Above the last bound is O.
SUM_BANDS: tuple[tuple[int, str], ...] = (
    (6, "A"),
    (10, "B"),
    (12, "C"),
    (15, "D"),
    (18, "E"),
)
FAIL_LETTER = "O"

# Science exception: two best codes both 9 with the third at most 7 is an E.
EXCEPTION_THIRD_MAX = 7
EXCEPTION_GRADE = "E"


def grade_for_sum(total: int, label: str = "Sum") -> tuple[str, str]:
    """Return (letter, rule text) for a code sum under the threshold table."""
    for upper, letter in SUM_BANDS:
        if total <= upper:
            return letter, f"{label} {total} ≤ {upper}"
    return FAIL_LETTER, f"{label} {total} > {SUM_BANDS[-1][0]}"


def _format_marks(marks: Sequence[float]) -> str:
    return "[" + " ".join(f"{m:g}" for m in marks) + "]"


def _format_codes(codes: Sequence[int]) -> str:
    return "[" + " ".join(str(c) for c in codes) + "]"


class PaperAggregationGrader(Grader):
    """Advanced-secondary grading: 2-4 coded papers, best two summed."""

    name = "advanced-secondary"
    rule_version = RULE_VERSION_UACE
    alphabet = PAPER_ALPHABET

    def compute_grade_from_papers(self, paper_marks: Sequence[float]) -> GradeResult:
        count = len(paper_marks)
        if count not in VALID_PAPER_COUNTS:
            logger.debug(f"{self.name}: {count} papers is not gradeable")
            return self._result(INVALID_COUNT_GRADE, f"Invalid number of papers: {count}")

        codes = [map_mark_to_code(mark) for mark in paper_marks]
        paper_codes = {f"Paper{i}": code for i, code in enumerate(codes, 1)}
        ranked = sorted(codes)

        if count == 2:
            grade, rule = grade_for_sum(ranked[0] + ranked[1])
        elif count == 3:
            grade, rule = self._best_two_of_three(ranked)
        else:
            grade, rule = grade_for_sum(ranked[0] + ranked[1], "Best 2 sum")

        reason = f"Papers: {_format_marks(paper_marks)} → Codes: {_format_codes(codes)} → {rule}"
        logger.debug(f"{self.name}: codes {codes} -> {grade}")
        return self._result(grade, reason, paper_codes)

    def _best_two_of_three(self, ranked: list[int]) -> tuple[str, str]:
        best_two = ranked[0] + ranked[1]
        # Never true on ascending codes (third >= second == 9); the sum-18 band
        # gives the same E. Recorded separately in the reason when it fires.
        if ranked[0] == WORST_CODE and ranked[1] == WORST_CODE and ranked[2] <= EXCEPTION_THIRD_MAX:
            return EXCEPTION_GRADE, (
                f"Science exception: codes {_format_codes(ranked)}, "
                f"best 2 sum {best_two} but third ≤ {EXCEPTION_THIRD_MAX}"
            )
        return grade_for_sum(best_two, "Best 2 sum")

    def grade(self, inputs: GraderInputs) -> GradeResult:
        if not isinstance(inputs, PaperMarks):
            raise TypeError(f"{self.name} grades paper marks, got {type(inputs).__name__}")
        return self.compute_grade_from_papers(inputs.marks)
