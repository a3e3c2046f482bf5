import logging

from .base import WEIGHTED_ALPHABET, GradeResult, Grader, GraderInputs, WeightedMarks

logger = logging.getLogger(__name__)

RULE_VERSION_PRIMARY = "PRIMARY_V1"
RULE_VERSION_NCDC = "NCDC_V1"

# (inclusive lower bound on the weighted total, letter), best first.
LETTER_BANDS: tuple[tuple[float, str], ...] = (
    (80, "A"),
    (65, "B"),
    (50, "C"),
    (35, "D"),
)
LOWEST_LETTER = "E"


def letter_for_total(total: float) -> str:
    for lower, letter in LETTER_BANDS:
        if total >= lower:
            return letter
    return LOWEST_LETTER


class WeightedComponentGrader(Grader):
    """Two components, each scaled to its weight, summed to a 0-100 total.

    Maxima must be >= 1; that is checked where marks enter the system, not here.
    """

    alphabet = WEIGHTED_ALPHABET
    label_a: str = "A"
    label_b: str = "B"
    weight_a: float = 50
    weight_b: float = 50

    def compute_grade(
        self, component_a: float, component_b: float, max_a: float, max_b: float
    ) -> GradeResult:
        percent_a = (component_a / max_a) * self.weight_a
        percent_b = (component_b / max_b) * self.weight_b
        total = percent_a + percent_b
        grade = letter_for_total(total)

        reason = (
            f"{self.label_a}: {component_a:.10g}/{max_a:.10g} ({self.weight_a:g}%) = {percent_a:.10g}, "
            f"{self.label_b}: {component_b:.10g}/{max_b:.10g} ({self.weight_b:g}%) = {percent_b:.10g}, "
            f"Total: {total:.10g} → Grade {grade}"
        )
        logger.debug(f"{self.name}: total {total!r} -> {grade}")
        return self._result(grade, reason)

    def grade(self, inputs: GraderInputs) -> GradeResult:
        if not isinstance(inputs, WeightedMarks):
            raise TypeError(f"{self.name} grades two weighted components, got {type(inputs).__name__}")
        return self.compute_grade(inputs.component_a, inputs.component_b, inputs.max_a, inputs.max_b)


class LowerPrimaryGrader(WeightedComponentGrader):
    name = "lower-primary"
    rule_version = RULE_VERSION_PRIMARY
    label_a = "CA"
    label_b = "Exam"
    weight_a = 40
    weight_b = 60


class LowerSecondaryGrader(WeightedComponentGrader):
    name = "lower-secondary"
    rule_version = RULE_VERSION_NCDC
    label_a = "School-Based"
    label_b = "External"
    weight_a = 20
    weight_b = 80
