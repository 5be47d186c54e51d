"""Lenient parsing and small text helpers shared by the organ modules.

Numeric finding fields are kept as the raw text the user typed and parsed
here at read time. Anything that is not a finite number reads as "no value".
"""

import math
import re

_WS_RE = re.compile(r"\s+")

# Plain decimals only, dot or comma separator: "3.2", "3,2", ".5", "-1"
_NUMBER_RE = re.compile(r"^-?(?:\d+(?:[.,]\d*)?|[.,]\d+)$")


def parse_number(text: str | float | int | None) -> float | None:
    """Parse a user-entered measurement. Returns None for empty or invalid input."""
    if text is None:
        return None
    if isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        value = float(text)
    else:
        cleaned = str(text).strip()
        if not _NUMBER_RE.match(cleaned):
            return None
        value = float(cleaned.replace(",", "."))
    if not math.isfinite(value):
        return None
    return value


def format_number(value: float) -> str:
    """Shortest exact display form: 6.0 -> '6', 3.2345678 -> '3.2345678'."""
    if value == int(value):
        return str(int(value))
    return repr(value)


def measurement(text: str, unit: str) -> str:
    """'3,2' + 'cm' -> '3.2 cm'; '' when the text holds no number."""
    value = parse_number(text)
    if value is None:
        return ""
    return f"{format_number(value)} {unit}"


def at_least(text: str, threshold: float) -> bool:
    value = parse_number(text)
    return value is not None and value >= threshold


def abc_volume(a: str | float | None, b: str | float | None, c: str | float | None) -> float | None:
    """ABC/2 ellipsoid estimate in mL (cm^3) from three axes in cm.

    Returns None when any axis is missing, non-numeric or not positive.
    """
    axes = [parse_number(a), parse_number(b), parse_number(c)]
    if any(v is None or v <= 0 for v in axes):
        return None
    volume = axes[0] * axes[1] * axes[2] / 2
    if not math.isfinite(volume):
        return None
    return volume


def format_volume(volume: float | None) -> str:
    if volume is None:
        return ""
    return f"{volume:.1f}"


def kv(label: str, value: str | None) -> str:
    if not value:
        return ""
    return f"{label}: {value}"


def join_nice(parts: list[str], sep: str = ", ") -> str:
    return sep.join(p for p in parts if p)


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def ensure_terminator(text: str) -> str:
    if not text:
        return text
    if text[-1] in ".!?":
        return text
    return text + "."
