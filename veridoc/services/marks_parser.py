# services/marks_parser.py
"""
Recovers subject/marks rows from the OCR text of a mark sheet.

Rows are looked for in tiers, each tier only tried when the previous one found
too few rows:
- labeled rows: a known subject keyword plus two or more 2-3 digit numbers,
- coded rows: "[code] SUBJECT NAME total obtained",
- fallback enumeration: every 2-3 digit number zipped against common subjects.
"""
import re
from typing import List, NamedTuple, Optional, Sequence

from veridoc.models import SubjectRecord
from veridoc.services.text_normalizer import NormalizedText

DEFAULT_MIN_ROWS = 4

# Order matters: the first pattern found in a line names the subject.
# Multi-word subjects go first so "POLITICAL SCIENCE" is not read as "Science".
SUBJECT_PATTERNS = [
    (re.compile(r'\bPOLITICAL\s+SCIENCE\b', re.I), 'Political Science'),
    (re.compile(r'\bPHY(?:SICAL)?\.?\s*(?:&|AND)?\s*HEALTH\s+EDU', re.I), 'Physical Education'),
    (re.compile(r'\bPHYSICAL\s+EDUCATION\b', re.I), 'Physical Education'),
    (re.compile(r'\bBUSINESS\s+STUDIES\b', re.I), 'Business Studies'),
    (re.compile(r'\bHOME\s+SCIENCE\b', re.I), 'Home Science'),
    (re.compile(r'\bENGLISH', re.I), 'English'),
    (re.compile(r'\bMATH(?:EMATICS|S)?\b', re.I), 'Mathematics'),
    (re.compile(r'\bPHYSICS\b', re.I), 'Physics'),
    (re.compile(r'\bCHEMISTRY\b', re.I), 'Chemistry'),
    (re.compile(r'\bCOMPUTER', re.I), 'Computer'),
    (re.compile(r'\bBIOLOGY\b', re.I), 'Biology'),
    (re.compile(r'\bHINDI', re.I), 'Hindi'),
    (re.compile(r'\bSANSKRIT\b', re.I), 'Sanskrit'),
    (re.compile(r'\bSOCIAL', re.I), 'Social Science'),
    (re.compile(r'\bSCIENCE\b', re.I), 'Science'),
    (re.compile(r'\bPRACTICAL\b', re.I), 'Practical'),
    (re.compile(r'\bTHEORY\b', re.I), 'Theory'),
    # State board and elective subjects
    (re.compile(r'\bACCOUNTANCY\b', re.I), 'Accountancy'),
    (re.compile(r'\bECONOMICS\b', re.I), 'Economics'),
    (re.compile(r'\bGEOGRAPHY\b', re.I), 'Geography'),
    (re.compile(r'\bHISTORY\b', re.I), 'History'),
    (re.compile(r'\bPSYCHOLOGY\b', re.I), 'Psychology'),
    (re.compile(r'\bSOCIOLOGY\b', re.I), 'Sociology'),
    (re.compile(r'\bMARATHI\b', re.I), 'Marathi'),
    (re.compile(r'\bURDU\b', re.I), 'Urdu'),
    (re.compile(r'\bGUJARATI\b', re.I), 'Gujarati'),
    (re.compile(r'\bBENGALI\b', re.I), 'Bengali'),
    (re.compile(r'\bPUNJABI\b', re.I), 'Punjabi'),
    (re.compile(r'\bTAMIL\b', re.I), 'Tamil'),
    (re.compile(r'\bTELUGU\b', re.I), 'Telugu'),
    (re.compile(r'\bKANNADA\b', re.I), 'Kannada'),
    (re.compile(r'\bMALAYALAM\b', re.I), 'Malayalam'),
]

FALLBACK_SUBJECTS = ['English', 'Mathematics', 'Physics', 'Chemistry', 'Computer', 'Biology']

MARK_TOKEN = re.compile(r'\b\d{2,3}\b')
CODED_ROW = re.compile(
    r'^(?:(\d{3})\s+)?([A-Za-z][A-Za-z&.()/\- ]*?)\s+(\d{2,3})\s+(\d{2,3})(?:\s|$)'
)
# "410/500" style aggregate, never part of a date such as 01/01/1990.
AGGREGATE_PAIR = re.compile(r'(?<![\d/])(\d{2,4})\s*/\s*(\d{3,4})(?![\d/])')
# Month/year dates (03/2023) and sessions (2022/2023) share the aggregate shape.
YEAR_LIKE = re.compile(r'^(?:19|20)\d{2}$')
CODED_ROW_SKIP = ('SUBJECT', 'MAXIMUM', 'MINIMUM', 'TOTAL', 'ROLL', 'SEAT', 'CENTRE', 'CENTER')


class _Row(NamedTuple):
    name: str
    obtained: int
    maximum: int
    practical: bool


def match_subject(text: str) -> Optional[str]:
    """Returns the canonical subject name for the first keyword found in text."""
    for pattern, name in SUBJECT_PATTERNS:
        if pattern.search(text):
            return name
    return None


def _mark_limit(line: str) -> int:
    return 50 if 'PRACT' in line.upper() else 100


def _accept(line: str, name: str, obtained: int, maximum: int) -> Optional[_Row]:
    """Applies the numeric sanity filter to one candidate row."""
    limit = _mark_limit(line)
    if not (0 <= obtained <= limit) or not (0 < maximum <= 100):
        return None
    if obtained > maximum:
        return None
    return _Row(name, obtained, maximum, limit == 50)


def _labeled_rows(lines: Sequence[str]) -> List[_Row]:
    rows = []
    for line in lines:
        name = match_subject(line)
        if not name:
            continue
        numbers = [int(n) for n in MARK_TOKEN.findall(line)]
        if len(numbers) < 2:
            continue
        # Legacy column convention: [code] [maximum] [obtained] ...
        if len(numbers) >= 3:
            obtained, maximum = numbers[2], numbers[1]
        else:
            obtained, maximum = numbers[1], _mark_limit(line)
        row = _accept(line, name, obtained, maximum)
        if row:
            rows.append(row)
    return rows


def _coded_rows(lines: Sequence[str]) -> List[_Row]:
    rows = []
    for line in lines:
        upper = line.upper()
        if any(word in upper for word in CODED_ROW_SKIP):
            continue
        match = CODED_ROW.match(line)
        if not match:
            continue
        _, subject_tokens, total, obtained = match.groups()
        subject_tokens = ' '.join(subject_tokens.split())
        name = match_subject(subject_tokens) or subject_tokens.title()
        row = _accept(line, name, int(obtained), int(total))
        if row:
            rows.append(row)
    return rows


def _enumerated_rows(raw: str) -> List[_Row]:
    marks = [int(n) for n in MARK_TOKEN.findall(raw) if int(n) <= 100]
    return [_Row(name, mark, 100, False) for name, mark in zip(FALLBACK_SUBJECTS, marks)]


def _reconcile(rows: List[_Row]) -> List[_Row]:
    """Folds a practical row into the theory row directly before it."""
    merged: List[_Row] = []
    for row in rows:
        previous = merged[-1] if merged else None
        if (previous is not None and row.practical and not previous.practical
                and row.name in (previous.name, 'Practical')):
            merged[-1] = _Row(previous.name,
                              previous.obtained + row.obtained,
                              previous.maximum + row.maximum,
                              False)
        else:
            merged.append(row)
    return merged


def parse_subjects(text: NormalizedText, min_rows: int = DEFAULT_MIN_ROWS) -> List[SubjectRecord]:
    """Runs the row tiers in order and returns the best set of subject records.

    The coded-row tier only runs when the labeled tier found fewer than
    ``min_rows`` rows; the tier with more rows wins, the earlier one on ties.
    Enumeration is a last resort when both structured tiers found nothing.
    """
    best = _reconcile(_labeled_rows(text.lines))
    if len(best) < min_rows:
        coded = _reconcile(_coded_rows(text.lines))
        if len(coded) > len(best):
            best = coded
    if not best:
        best = _enumerated_rows(text.raw)
    return [SubjectRecord(row.name, row.obtained, row.maximum) for row in best]


def find_aggregate(raw: str) -> Optional[tuple]:
    """Finds an overall "obtained/maximum" pair, preferring the largest maximum."""
    best = None
    for match in AGGREGATE_PAIR.finditer(raw or ""):
        obtained, maximum = int(match.group(1)), int(match.group(2))
        if maximum <= 100 or obtained > maximum:
            continue
        if YEAR_LIKE.match(match.group(2)) or (maximum >= 1000 and obtained < 100):
            continue
        if best is None or maximum > best[1]:
            best = (obtained, maximum)
    return best


def compute_percentage(records: Sequence[SubjectRecord], raw: str = "") -> Optional[str]:
    """Percentage with two decimals. An aggregate pair in the text wins over the subject sum."""
    aggregate = find_aggregate(raw)
    if aggregate:
        obtained, maximum = aggregate
    else:
        obtained = sum(r.marks_obtained for r in records)
        maximum = sum(r.marks_maximum for r in records)
    if not maximum:
        return None
    return f"{obtained / maximum * 100:.2f}"


def format_subjects(records: Sequence[SubjectRecord]) -> str:
    return "\n".join(record.to_line() for record in records)
