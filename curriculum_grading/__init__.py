from .assembler import (
    AssessmentMark,
    GradingRequest,
    InMemoryResultStore,
    ResultAssembler,
    ResultStore,
    SubjectResult,
)
from .codes import map_mark_to_code
from .curricula import Curriculum, curriculum_for_level, is_current, select_grader
from .exceptions import ConfigError, GradingError, MissingComponentError, NoGraderError
from .fingerprint import rule_version_hash
from .graders import (
    GradeResult,
    Grader,
    LowerPrimaryGrader,
    LowerSecondaryGrader,
    PaperAggregationGrader,
)

__all__ = [
    "map_mark_to_code",
    "rule_version_hash",
    "GradeResult",
    "Grader",
    "LowerPrimaryGrader",
    "LowerSecondaryGrader",
    "PaperAggregationGrader",
    "Curriculum",
    "curriculum_for_level",
    "select_grader",
    "is_current",
    "AssessmentMark",
    "GradingRequest",
    "SubjectResult",
    "ResultStore",
    "InMemoryResultStore",
    "ResultAssembler",
    "GradingError",
    "ConfigError",
    "NoGraderError",
    "MissingComponentError",
]
