import re
from typing import NamedTuple

AGE_UPPER_BOUND = 120

ALL_AGES_MARKERS = (
    "רב גילאי",
    "רב-גילאי",
    "לכל המשפחה",
    "כל הגילאים",
    "לכל הגילאים",
)

AGE_AND_UP_RE = re.compile(r"(\d+)\s*(?:ומעלה|\+)")
AGE_FROM_RE = re.compile(r"מגיל\s*(\d+)")
AGE_RANGE_RE = re.compile(r"(\d+)\s*(?:-|–|—|עד)\s*(\d+)")
AGE_SINGLE_RE = re.compile(r"\d+")


class AgeRange(NamedTuple):
    min: int
    max: int


def parse_age_range(text: str | None) -> AgeRange | None:
    """Turn an editor-written age descriptor into an inclusive ``AgeRange``.

    Rules are tried in order and the first hit wins:

    1. an all-ages marker ("רב גילאי", "לכל המשפחה") -> ``(0, AGE_UPPER_BOUND)``
    2. "60 ומעלה" / "מגיל 60" / "60+" -> ``(60, AGE_UPPER_BOUND)``
    3. "גילאי 6-9" -> ``(6, 9)``, bounds kept as written even when inverted
    4. a bare number "8" -> ``(8, 9)``
    5. anything else -> ``None``
    """
    if not isinstance(text, str):
        return None
    blob = text.strip()
    if not blob:
        return None

    if any(marker in blob for marker in ALL_AGES_MARKERS):
        return AgeRange(0, AGE_UPPER_BOUND)

    and_up_match = AGE_AND_UP_RE.search(blob) or AGE_FROM_RE.search(blob)
    if and_up_match:
        return AgeRange(int(and_up_match.group(1)), AGE_UPPER_BOUND)

    range_match = AGE_RANGE_RE.search(blob)
    if range_match:
        return AgeRange(int(range_match.group(1)), int(range_match.group(2)))

    single_match = AGE_SINGLE_RE.search(blob)
    if single_match:
        age = int(single_match.group(0))
        return AgeRange(age, age + 1)

    return None
