from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from ..fingerprint import rule_version_hash

WEIGHTED_ALPHABET: tuple[str, ...] = ("A", "B", "C", "D", "E")
PAPER_ALPHABET: tuple[str, ...] = ("A", "B", "C", "D", "E", "O", "F")


@dataclass(frozen=True)
class GradeResult:
    final_grade: str
    computation_reason: str
    rule_version_hash: str
    paper_codes: Mapping[str, int] | None = None

    def __post_init__(self):
        if self.paper_codes is not None:
            object.__setattr__(self, "paper_codes", MappingProxyType(dict(self.paper_codes)))

    def to_dict(self) -> dict:
        return {
            "final_grade": self.final_grade,
            "computation_reason": self.computation_reason,
            "rule_version_hash": self.rule_version_hash,
            "paper_codes": dict(self.paper_codes) if self.paper_codes is not None else None,
        }


@dataclass(frozen=True)
class WeightedMarks:
    component_a: float
    component_b: float
    max_a: float
    max_b: float


@dataclass(frozen=True)
class PaperMarks:
    marks: tuple[float, ...]


GraderInputs = WeightedMarks | PaperMarks


class Grader(ABC):
    name: str = "base"
    rule_version: str = ""
    alphabet: tuple[str, ...] = ()

    @property
    def rule_version_hash(self) -> str:
        return rule_version_hash(self.rule_version)

    @abstractmethod
    def grade(self, inputs: GraderInputs) -> GradeResult:
        pass

    def _result(
        self, grade: str, reason: str, paper_codes: Mapping[str, int] | None = None
    ) -> GradeResult:
        if grade not in self.alphabet:
            raise ValueError(f"{self.name}: grade {grade!r} is outside {self.alphabet}")
        return GradeResult(
            final_grade=grade,
            computation_reason=reason,
            rule_version_hash=self.rule_version_hash,
            paper_codes=paper_codes,
        )
