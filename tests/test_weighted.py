import dataclasses

import pytest

from curriculum_grading.fingerprint import rule_version_hash
from curriculum_grading.graders import (
    WEIGHTED_ALPHABET,
    LowerPrimaryGrader,
    LowerSecondaryGrader,
    PaperMarks,
    WeightedMarks,
)
from curriculum_grading.graders.weighted import letter_for_total


@pytest.mark.parametrize(
    "total,expected",
    [
        (100, "A"),
        (80.0, "A"),
        (79.999, "B"),
        (65.0, "B"),
        (64.999, "C"),
        (50.0, "C"),
        (49.999, "D"),
        (35.0, "D"),
        (34.999, "E"),
        (0, "E"),
    ],
)
def test_letter_bands_use_inclusive_lower_bounds(total, expected):
    assert letter_for_total(total) == expected


def test_lower_primary_literal_scenario():
    result = LowerPrimaryGrader().compute_grade(32, 48, 40, 60)
    assert result.final_grade == "A"
    assert result.computation_reason == (
        "CA: 32/40 (40%) = 32, Exam: 48/60 (60%) = 48, Total: 80 → Grade A"
    )
    assert result.rule_version_hash == rule_version_hash("PRIMARY_V1")
    assert result.paper_codes is None


def test_lower_secondary_literal_scenario():
    result = LowerSecondaryGrader().compute_grade(60, 70, 100, 100)
    assert result.final_grade == "B"
    assert result.computation_reason == (
        "School-Based: 60/100 (20%) = 12, External: 70/100 (80%) = 56, "
        "Total: 68 → Grade B"
    )
    assert result.rule_version_hash == rule_version_hash("NCDC_V1")


@pytest.mark.parametrize(
    "ca,exam,expected",
    [
        (40, 60, "A"),
        (30, 45, "B"),
        (24, 36, "C"),
        (16, 24, "D"),
        (10, 15, "E"),
        (0, 0, "E"),
    ],
)
def test_lower_primary_grades(ca, exam, expected):
    assert LowerPrimaryGrader().compute_grade(ca, exam, 40, 60).final_grade == expected


@pytest.mark.parametrize(
    "school_based,external,expected",
    [
        (100, 100, "A"),
        (90, 85, "A"),
        (50, 50, "C"),
        (40, 40, "D"),
        (20, 20, "E"),
    ],
)
def test_lower_secondary_grades(school_based, external, expected):
    assert LowerSecondaryGrader().compute_grade(school_based, external, 100, 100).final_grade == expected


def test_same_marks_differ_between_weightings():
    # 100% CA, 50% exam: 40 + 30 = 70 under 40/60, 20 + 40 = 60 under 20/80
    assert LowerPrimaryGrader().compute_grade(10, 10, 10, 20).final_grade == "B"
    assert LowerSecondaryGrader().compute_grade(10, 10, 10, 20).final_grade == "C"


def test_grade_accepts_weighted_marks():
    result = LowerPrimaryGrader().grade(WeightedMarks(component_a=32, component_b=48, max_a=40, max_b=60))
    assert result.final_grade == "A"


def test_grade_rejects_paper_marks():
    with pytest.raises(TypeError):
        LowerSecondaryGrader().grade(PaperMarks(marks=(50.0, 60.0)))


def test_results_are_fresh_and_frozen():
    grader = LowerPrimaryGrader()
    first = grader.compute_grade(32, 48, 40, 60)
    second = grader.compute_grade(32, 48, 40, 60)
    assert first == second
    assert first is not second
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.final_grade = "B"


def test_grade_always_in_alphabet():
    grader = LowerSecondaryGrader()
    for a in range(0, 101, 5):
        for b in range(0, 101, 5):
            assert grader.compute_grade(a, b, 100, 100).final_grade in WEIGHTED_ALPHABET


def test_reason_total_is_not_rounded_across_a_band():
    # 20 + 59.999 sits just under the A band
    result = LowerSecondaryGrader().compute_grade(100, 74.99875, 100, 100)
    assert result.final_grade == "B"
    assert result.computation_reason.endswith("Total: 79.999 → Grade B")
