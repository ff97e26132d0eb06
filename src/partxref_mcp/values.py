"""Physical-quantity parsing for parametric attribute values.

Each parser returns a float in base units (or a tuple for ranges), or None if
the text cannot be interpreted. Parsers never raise on garbage input.
"""

import re

# =============================================================================
# PRE-COMPILED REGEX PATTERNS
# =============================================================================

_SI_PREFIXES = {
    "p": 1e-12,
    "n": 1e-9,
    "u": 1e-6,
    "µ": 1e-6,
    "μ": 1e-6,
    "m": 1e-3,
    "k": 1e3,
    "K": 1e3,
    "M": 1e6,
    "G": 1e9,
}

# Unit suffixes recognised after an optional SI prefix
_UNITS = r"(?:F|H|V|A|W|Ω|R|[Oo]hms?|Hz|s|m|°C|C|%|ppm/°C|ppm/K|ppm|nV/√Hz|dB)?"

_QUANTITY_PATTERN = re.compile(
    r"([+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*([pnuµμmkKMG]?)\s*" + _UNITS
)
_FULL_QUANTITY_PATTERN = re.compile(
    r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*([pnuµμmkKMG]?)\s*" + _UNITS + r"\s*"
)
# European notation: 4k7, 0R05, 2M2
_EURO_PATTERN = re.compile(r"\s*(\d+)([RrkKM])(\d+)\s*(?:Ω|[Oo]hms?)?\s*")
_FRACTION_PATTERN = re.compile(r"(\d+)\s*/\s*(\d+)\s*W", re.IGNORECASE)
_PERCENT_PATTERN = re.compile(r"±?\s*(\d+(?:\.\d+)?)\s*%")
_RANGE_PATTERN = re.compile(
    r"([+-]?\d+(?:\.\d+)?)\s*([pnuµμmkKMG]?)[^\d~–+-]*?\s*(?:~|to|TO|–|\.\.|-)\s*"
    r"([+-]?\d+(?:\.\d+)?)\s*([pnuµμmkKMG]?)"
)
_MSL_PATTERN = re.compile(r"(\d)\s*([aA])?")
_WHITESPACE = re.compile(r"\s+")

_TRUE_VALUES = frozenset({"yes", "true", "1", "required", "y", "present", "supported"})


def _clean(text: str) -> str:
    # Unicode minus and "±" prefixes show up in distributor data
    return text.replace("−", "-").replace("±", "").replace("+/-", "").strip()


def _scale(number: str, prefix: str) -> float:
    value = float(number)
    if prefix:
        value *= _SI_PREFIXES[prefix]
    return value


# =============================================================================
# PARSERS
# =============================================================================


def normalize(text: str) -> str:
    """Normalize for string comparison: trim, upper-case, collapse whitespace."""
    return _WHITESPACE.sub(" ", text.strip().upper())


def parse_quantity(text: str | None, strict: bool = False) -> float | None:
    """Parse a physical quantity in base units.

    '100nF' -> 1e-7, '4.7 kΩ' -> 4700, '500mA' -> 0.5, '1/4W' -> 0.25, '4k7' -> 4700.

    With ``strict`` the whole string must be a single quantity ('0402' parses,
    '0402 (1005 Metric)' does not). Otherwise the first quantity found is used.
    """
    if not text:
        return None
    s = _clean(str(text))

    match = _EURO_PATTERN.fullmatch(s)
    if match:
        int_part, sep, frac_part = match.groups()
        value = float(f"{int_part}.{frac_part}")
        return value if sep in "Rr" else value * _SI_PREFIXES[sep]

    if strict:
        match = _FULL_QUANTITY_PATTERN.fullmatch(s)
        return _scale(match.group(1), match.group(2)) if match else None

    match = _FRACTION_PATTERN.search(s)
    if match and int(match.group(2)) != 0:
        return float(match.group(1)) / float(match.group(2))

    match = _QUANTITY_PATTERN.search(s)
    if not match:
        return None
    return _scale(match.group(1), match.group(2))


def parse_percentage(text: str | None) -> float | None:
    """Parse tolerance/accuracy: '±1%' -> 1, '±0.5%' -> 0.5."""
    if not text:
        return None
    match = _PERCENT_PATTERN.search(text)
    return float(match.group(1)) if match else None


def parse_range(text: str | None) -> tuple[float, float] | None:
    """Parse a range: '-55°C ~ 125°C' -> (-55, 125), '4.5V to 18V' -> (4.5, 18)."""
    if not text:
        return None
    match = _RANGE_PATTERN.search(_clean(str(text)))
    if not match:
        return None
    low = _scale(match.group(1), match.group(2))
    high = _scale(match.group(3), match.group(4))
    return (low, high) if low <= high else (high, low)


def parse_msl(text: str | None) -> float | None:
    """Parse moisture sensitivity level: 'MSL 1' -> 1, '2a' -> 2.5, '3 (168 Hours)' -> 3."""
    if not text:
        return None
    match = _MSL_PATTERN.search(text)
    if not match:
        return None
    level = float(match.group(1))
    return level + 0.5 if match.group(2) else level


def parse_boolean(text: str | None) -> bool:
    """Parse a yes/no style flag. Anything not clearly affirmative is False."""
    if not text:
        return False
    return text.strip().lower() in _TRUE_VALUES


def values_equal(a: float, b: float, rel: float = 1e-9) -> bool:
    if a == b:
        return True
    return abs(a - b) <= rel * max(abs(a), abs(b))
