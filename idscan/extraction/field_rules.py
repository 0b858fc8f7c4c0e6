"""Field extraction rules for Aadhaar and Voter ID text.

Every rule is a pure function from recognized text to a field value,
returning ``None`` when it finds nothing acceptable. Rules tolerate
truncated labels, digit/letter confusion, and mixed English/Tamil text.
"""

import re
from collections.abc import Iterable

from idscan.extraction.normalizers import (
    canonical_gender,
    format_name,
    looks_like_name,
    sanitize_dob,
    split_lines,
)

_DATE = r"\d{1,2}[\-/.]\d{1,2}[\-/.]\d{4}"

_LABELLED_DOB = re.compile(
    rf"(?:DOB|D0B|Date\s*of\s*Birth|Age)\s*[:/\-\s]+({_DATE})", re.IGNORECASE
)
_TAMIL_LABELLED_DOB = re.compile(rf"(?:பிறந்த\s*நாள்|பிறந்த)\s*[:/\-]?\s*({_DATE})")
_ANY_DATE = re.compile(rf"\b({_DATE})\b")
_ISSUE = re.compile(r"issue", re.IGNORECASE)

_TAMIL_LETTER = r"\u0b80-\u0bff"
_GENDER = re.compile(
    r"(?<![A-Za-z])(female|male)(?![A-Za-z])"
    rf"|(?<![{_TAMIL_LETTER}])(பெண்பால்|ஆண்பால்|பெண்|ஆண்)(?![{_TAMIL_LETTER}])",
    re.IGNORECASE,
)

_AADHAAR_NUMBER = re.compile(r"\b(\d{4})\s{0,6}(\d{4})\s{0,6}(\d{4})\b")
_VOTER_CARD_NUMBER = re.compile(r"\b([A-Z]{2,4}\d{6,10})\b")

_NAME_LABEL = re.compile(r"[Nn]ame\s*[:;\-.]?\s*([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]*\.?)+)")
_RELATION_LABEL = re.compile(r"father|husband|தந்தை|கணவர்", re.IGNORECASE)
_LABELLED_FATHER = re.compile(
    r"Father['’]?s?\s*N[a-z]*\s*[;:\-]\s*([A-Za-z][A-Za-z ]{2,30})", re.IGNORECASE
)
_FATHER_TRAILING_NOISE = re.compile(r"[0.\"'\s]+$")


def first_name_line(
    text: str,
    blacklist: Iterable[str] = (),
    min_length: int = 4,
    max_length: int = 50,
) -> str | None:
    """Return the first line that reads as a name, title-cased."""
    blacklist = tuple(blacklist)
    for line in split_lines(text):
        if looks_like_name(line, blacklist, min_length, max_length):
            return format_name(line)
    return None


def labelled_name(text: str) -> str | None:
    """Return the value after a ``Name:`` label, skipping relation lines."""
    for line in split_lines(text):
        if _RELATION_LABEL.search(line):
            continue
        match = _NAME_LABEL.search(line)
        if match:
            return match.group(1).strip()
    return None


def labelled_dob(text: str, min_year: int = 1900, max_year: int = 2020) -> str | None:
    """Return the date following a DOB / Date of Birth / Age label."""
    match = _LABELLED_DOB.search(text)
    if match:
        return sanitize_dob(match.group(1), min_year, max_year)
    return None


def tamil_labelled_dob(
    text: str, min_year: int = 1900, max_year: int = 2020
) -> str | None:
    """Return the date following the Tamil date-of-birth label."""
    match = _TAMIL_LABELLED_DOB.search(text)
    if match:
        return sanitize_dob(match.group(1), min_year, max_year)
    return None


def any_date_line(text: str, min_year: int = 1900, max_year: int = 2020) -> str | None:
    """Return the first plausible date on any line not about issue dates.

    Catches DOB labels that OCR mangled beyond recognition (``"908:"``).
    """
    for line in split_lines(text):
        if _ISSUE.search(line):
            continue
        for candidate in _ANY_DATE.findall(line):
            dob = sanitize_dob(candidate, min_year, max_year)
            if dob:
                return dob
    return None


def gender(text: str) -> str | None:
    """Return ``Male`` or ``Female`` from the first gender token present."""
    match = _GENDER.search(text)
    if match is None:
        return None
    return canonical_gender(match.group(0))


def aadhaar_number(text: str) -> str | None:
    """Return a 12-digit Aadhaar number as three space-separated groups."""
    match = _AADHAAR_NUMBER.search(text)
    if match is None:
        return None
    return " ".join(match.groups())


def voter_card_number(text: str) -> str | None:
    """Return an EPIC number: 2-4 capitals followed by 6-10 digits."""
    match = _VOTER_CARD_NUMBER.search(text)
    return match.group(1) if match else None


def labelled_father_name(text: str) -> str | None:
    """Return the value after a ``Father's Name:`` label on the same line."""
    match = _LABELLED_FATHER.search(text)
    if match is None:
        return None
    value = _FATHER_TRAILING_NOISE.sub("", match.group(1))
    return value or None


def father_name_below_label(
    text: str,
    blacklist: Iterable[str] = (),
    min_length: int = 4,
    max_length: int = 50,
) -> str | None:
    """Return the first name-like line after a father/husband label line.

    Covers cards where OCR splits the label and its value across lines.
    """
    blacklist = tuple(blacklist)
    lines = split_lines(text)
    for index, line in enumerate(lines):
        if not _RELATION_LABEL.search(line):
            continue
        for following in lines[index + 1 : index + 3]:
            if _RELATION_LABEL.search(following):
                break
            if looks_like_name(following, blacklist, min_length, max_length):
                return format_name(following)
    return None
