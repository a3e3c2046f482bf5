# (lower bound, code), best first. Anything below the last bound is code 9.
CODE_BANDS: tuple[tuple[float, int], ...] = (
    (75, 1),
    (70, 2),
    (65, 3),
    (60, 4),
    (55, 5),
    (50, 6),
    (45, 7),
    (40, 8),
)
WORST_CODE = 9


def map_mark_to_code(mark: float) -> int:
    """Map a 0-100 paper mark to its 1-9 ordinal code (1 is best)."""
    for lower, code in CODE_BANDS:
        if mark >= lower:
            return code
    return WORST_CODE
