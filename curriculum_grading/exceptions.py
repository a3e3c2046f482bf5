"""Errors raised at the edges of the grading engine.

Expected grading outcomes (the sentinel F, the science-exception E) are
values on GradeResult and never show up here.
"""


class GradingError(Exception):
    """Base class for grading engine errors."""


class ConfigError(GradingError):
    pass


class NoGraderError(GradingError):
    def __init__(self, level: str):
        super().__init__(f"no grader for level {level!r}")
        self.level = level


class MissingComponentError(GradingError):
    def __init__(self, level: str, component: str):
        super().__init__(f"level {level!r} requires a {component} mark")
        self.level = level
        self.component = component
