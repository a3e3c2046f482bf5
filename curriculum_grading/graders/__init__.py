from .base import (
    PAPER_ALPHABET,
    WEIGHTED_ALPHABET,
    GradeResult,
    Grader,
    GraderInputs,
    PaperMarks,
    WeightedMarks,
)
from .papers import PaperAggregationGrader
from .weighted import LowerPrimaryGrader, LowerSecondaryGrader, WeightedComponentGrader

__all__ = [
    "GradeResult",
    "Grader",
    "GraderInputs",
    "WeightedMarks",
    "PaperMarks",
    "WEIGHTED_ALPHABET",
    "PAPER_ALPHABET",
    "WeightedComponentGrader",
    "LowerPrimaryGrader",
    "LowerSecondaryGrader",
    "PaperAggregationGrader",
]
