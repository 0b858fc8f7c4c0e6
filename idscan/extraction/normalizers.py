"""Normalization helpers for noisy OCR text.

Pure string functions shared by the field rules: line splitting,
name-line cleanup and acceptance, name casing, date sanitization,
and gender canonicalization.
"""

import re
from collections.abc import Iterable

from idscan.models import NOT_FOUND

_LEADING_NOISE = re.compile(r"^[^A-Za-z]+")
# OCR regularly reads a trailing capital initial ("M", "S") as one or two digits.
_TRAILING_DIGITS = re.compile(r"\s+\d{1,2}$")
_NAME_CHARS = re.compile(r"^[A-Za-z][A-Za-z\s.]+$")
_DATE_SEPARATORS = ("/", "-", ".")


def split_lines(text: str) -> list[str]:
    """Split text into stripped, non-empty lines."""
    return [line.strip() for line in re.split(r"\r?\n", text) if line.strip()]


def strip_name_noise(line: str) -> str:
    """Drop leading non-letters and a trailing one- or two-digit token."""
    cleaned = _LEADING_NOISE.sub("", line).strip()
    return _TRAILING_DIGITS.sub("", cleaned).strip()


def looks_like_name(
    line: str,
    blacklist: Iterable[str] = (),
    min_length: int = 4,
    max_length: int = 50,
) -> bool:
    """Decide whether an OCR line plausibly holds a person's name.

    Args:
        line: Raw OCR line.
        blacklist: Lowercase terms that disqualify the line when present
            anywhere in it.
        min_length: Minimum length of the cleaned line.
        max_length: Maximum length of the cleaned line.

    Returns:
        ``True`` for two or more words with at least one of three or more
        letters, or for a single word of six or more letters.
    """
    candidate = strip_name_noise(line)
    lowered = candidate.lower()
    if any(term in lowered for term in blacklist):
        return False
    if not _NAME_CHARS.match(candidate):
        return False
    if not min_length <= len(candidate) <= max_length:
        return False

    words = candidate.split()
    if len(words) >= 2:
        return any(len(word.replace(".", "")) >= 3 for word in words)
    return len(words[0]) >= 6


def format_name(line: str) -> str:
    """Title-case a name line, upper-casing initials.

    Tokens of at most two letters (periods ignored) are treated as
    initials: ``"arun k."`` becomes ``"Arun K."``.
    """
    words = strip_name_noise(line).split()
    formatted = []
    for word in words:
        if len(word.replace(".", "")) <= 2:
            formatted.append(word.upper())
        else:
            formatted.append(word[0].upper() + word[1:].lower())
    return " ".join(formatted)


def sanitize_dob(raw: str, min_year: int = 1900, max_year: int = 2020) -> str | None:
    """Normalize a date-shaped token to ``DD/MM/YYYY``.

    The separator is the first of ``/``, ``-``, ``.`` present in the
    token. Normalizing an already normalized date returns it unchanged.

    Args:
        raw: Date-shaped token such as ``"5-7-1990"``.
        min_year: Earliest plausible birth year.
        max_year: Latest plausible birth year.

    Returns:
        The normalized date, or ``None`` when the token is not a date
        with exactly three numeric parts and a year in range.
    """
    raw = raw.strip()
    separator = next((sep for sep in _DATE_SEPARATORS if sep in raw), None)
    if separator is None:
        return None
    parts = raw.split(separator)
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        return None
    day, month, year = parts
    if not min_year <= int(year) <= max_year:
        return None
    return f"{day.zfill(2)}/{month.zfill(2)}/{year}"


def canonical_gender(token: str) -> str:
    """Map an English or Tamil gender token to ``Male`` or ``Female``."""
    lowered = token.strip().lower()
    if not lowered:
        return NOT_FOUND
    if lowered.startswith(("m", "ஆ")):
        return "Male"
    return "Female"
