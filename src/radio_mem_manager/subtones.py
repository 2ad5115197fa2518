"""
Subtone (CTCSS / DCS) tables and classification

Subtones are stored as integer text: CTCSS tones as Hz x 100 (88.5 Hz is
"8850") and DCS codes as their three octal digits read as a decimal number
(D023 is "23").
"""

from dataclasses import dataclass
from typing import Union

from .models import SubtoneKind, parse_int

# Standard CTCSS tone frequencies in Hz
CTCSS_TONES = (
    67.0, 69.3, 71.9, 74.4, 77.0, 79.7, 82.5, 85.4, 88.5, 91.5,
    94.8, 97.4, 100.0, 103.5, 107.2, 110.9, 114.8, 118.8, 123.0, 127.3,
    131.8, 136.5, 141.3, 146.2, 150.0, 151.4, 156.7, 159.8, 162.2, 165.5,
    167.9, 171.3, 173.8, 177.3, 179.9, 183.5, 186.2, 189.9, 192.8, 196.6,
    199.5, 203.5, 206.5, 210.7, 213.8, 218.1, 225.7, 229.1, 233.6, 237.1,
    241.8, 245.5, 250.3, 254.1,
)

CTCSS_STORED = tuple(round(tone * 100) for tone in CTCSS_TONES)

DCS_CODES = (
    23, 25, 26, 31, 32, 36, 43, 47, 51, 53, 54, 65, 71, 72, 73, 74,
    114, 115, 116, 122, 125, 131, 132, 134, 143, 145, 152, 155, 156, 162,
    165, 172, 174, 205, 212, 223, 225, 226, 243, 244, 245, 246, 251, 252,
    255, 261, 263, 265, 266, 271, 274, 306, 311, 315, 325, 331, 332, 343,
    346, 351, 356, 364, 365, 371, 411, 412, 413, 423, 431, 432, 445, 446,
    452, 454, 455, 462, 464, 465, 466, 503, 506, 516, 523, 526, 532, 546,
    565, 606, 612, 624, 627, 631, 632, 654, 662, 664, 703, 712, 723, 731,
    732, 734, 743, 754,
)

# Lowest CTCSS tone (67.0 Hz) scaled by 100; every DCS code sits below it
SUBTONE_FAMILY_THRESHOLD = 6700


@dataclass(frozen=True)
class Subtone:
    kind: SubtoneKind
    value: int = 0


OFF = Subtone(SubtoneKind.OFF, 0)


def _as_int(stored: Union[int, str, None]) -> int:
    if isinstance(stored, int):
        return stored
    value = parse_int(stored or "")
    return value if value is not None else 0


def classify(stored: Union[int, str, None]) -> Subtone:
    """Classify a stored subtone value.

    Permissive: anything outside both tables is reported as off.
    """
    value = _as_int(stored)
    if value == 0:
        return OFF
    if value in CTCSS_STORED:
        return Subtone(SubtoneKind.CTCSS, value)
    if value in DCS_CODES:
        return Subtone(SubtoneKind.DCS, value)
    return OFF


def is_valid_stored(stored: Union[int, str, None]) -> bool:
    """Strict check used before committing an edit"""
    value = parse_int(stored) if isinstance(stored, str) else stored
    if value is None:
        return False
    return value == 0 or value in CTCSS_STORED or value in DCS_CODES


def subtone_family(stored: Union[int, str, None]) -> str:
    """Display family by magnitude alone: "" (off), "DTS" or "CTC"."""
    value = _as_int(stored)
    if value == 0:
        return ""
    return "DTS" if value < SUBTONE_FAMILY_THRESHOLD else "CTC"


def format_subtone(stored: Union[int, str, None]) -> str:
    """Human readable subtone for edit forms ("Off", "88.5", "D023")"""
    subtone = classify(stored)
    if subtone.kind is SubtoneKind.CTCSS:
        return f"{subtone.value / 100:.1f}"
    if subtone.kind is SubtoneKind.DCS:
        return f"D{subtone.value:03d}"
    return "Off"


def parse_subtone(text: str) -> str:
    """Convert edit-form input back to stored integer text.

    Accepts "off", "0" or empty, a CTCSS tone in Hz ("88.5") or a DCS code
    ("D023", "d23"). Raises ValueError for anything else.
    """
    cleaned = (text or "").strip().upper()
    if cleaned in ("", "0", "OFF"):
        return "0"
    if cleaned.startswith("D"):
        digits = cleaned[1:].rstrip("N")
        if not digits.isdigit():
            raise ValueError(f"Invalid DCS code: {text}")
        return str(int(digits))
    try:
        hz = float(cleaned)
    except ValueError:
        raise ValueError(f"Invalid subtone: {text}") from None
    return str(round(hz * 100))
