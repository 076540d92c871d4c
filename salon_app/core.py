# salon_app/core.py

import re

HHMM_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    # half-open intervals: touching ends do not overlap
    return a_start < b_end and b_start < a_end


def is_valid_hhmm(value) -> bool:
    return isinstance(value, str) and HHMM_RE.match(value) is not None


def parse_hhmm(value: str) -> int:
    """Return minutes since midnight for a ``HH:mm`` clock string."""
    match = HHMM_RE.match(value) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid time format: {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
