"""Curriculum families and the level -> grader selector."""

import logging
from enum import Enum
from typing import assert_never

from .fingerprint import matches_rule_version
from .graders import (
    Grader,
    LowerPrimaryGrader,
    LowerSecondaryGrader,
    PaperAggregationGrader,
)
from .graders.papers import RULE_VERSION_UACE
from .graders.weighted import RULE_VERSION_NCDC, RULE_VERSION_PRIMARY

logger = logging.getLogger(__name__)


class Curriculum(Enum):
    LOWER_PRIMARY = ("lower-primary", ("P4", "P5", "P6", "P7"), RULE_VERSION_PRIMARY)
    LOWER_SECONDARY = ("lower-secondary", ("S1", "S2", "S3", "S4"), RULE_VERSION_NCDC)
    ADVANCED_SECONDARY = ("advanced-secondary", ("S5", "S6"), RULE_VERSION_UACE)

    def __init__(self, label: str, levels: tuple[str, ...], rule_version: str):
        self.label = label
        self.levels = levels
        self.rule_version = rule_version


_BY_LEVEL: dict[str, Curriculum] = {
    level: curriculum for curriculum in Curriculum for level in curriculum.levels
}


def normalize_level(level: str) -> str:
    return level.strip().upper()


def curriculum_for_level(level: str) -> Curriculum | None:
    return _BY_LEVEL.get(normalize_level(level))


def grader_for(curriculum: Curriculum) -> Grader:
    match curriculum:
        case Curriculum.LOWER_PRIMARY:
            return LowerPrimaryGrader()
        case Curriculum.LOWER_SECONDARY:
            return LowerSecondaryGrader()
        case Curriculum.ADVANCED_SECONDARY:
            return PaperAggregationGrader()
        case _:
            assert_never(curriculum)


def select_grader(level: str) -> Grader | None:
    """Return the grader for a class level, or None when no curriculum covers it.

    None is a configuration error for that level; callers must not fall back
    to another curriculum.
    """
    curriculum = curriculum_for_level(level)
    if curriculum is None:
        logger.debug(f"No curriculum covers level {level!r}")
        return None
    return grader_for(curriculum)


def is_current(stored_hash: str, curriculum: Curriculum) -> bool:
    """True when a stored result was computed under the rules now in effect."""
    return matches_rule_version(stored_hash, curriculum.rule_version)
