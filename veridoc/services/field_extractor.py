# services/field_extractor.py
"""
Rule-based field extraction for the supported document types.

Every field is resolved by an ordered chain of strategies. A strategy is a
zero-argument callable returning the field value or None; the first strategy
that returns a value wins and the rest are never run. Extraction is total:
missing fields are simply left out of the result.
"""
import re
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from veridoc.models import DocumentClass
from veridoc.services import marks_parser
from veridoc.services.text_normalizer import NormalizedText, normalize

Strategy = Callable[[], Optional[str]]

ALL_CAPS_LINE = re.compile(r'^[A-Z][A-Z ]*$')
DATE_DMY = re.compile(r'\b\d{2}[-/]\d{2}[-/]\d{4}\b')
YEAR = re.compile(r'\b(?:19|20)\d{2}\b')
RELATIVE_WORDS = ('FATHER', 'MOTHER', 'GUARDIAN', 'HUSBAND', 'S/O', 'D/O', 'W/O')


def first_match(strategies: Iterable[Strategy]) -> Optional[str]:
    """Applies strategies in priority order and returns the first non-empty result."""
    for strategy in strategies:
        value = strategy()
        if value:
            return value
    return None


def _mentions(line: str, words: Sequence[str]) -> bool:
    upper = line.upper()
    return any(word in upper for word in words)


class BaseExtractor:
    """Holds the normalized text and the helpers shared by every document type."""
    document_class: Optional[DocumentClass] = None

    def __init__(self, text: NormalizedText):
        self.raw_text = text.raw
        self.lines = text.lines
        self.text = text

    def _search(self, pattern: "re.Pattern", group: int = 0) -> Optional[str]:
        match = pattern.search(self.raw_text)
        return match.group(group).strip() if match else None

    def _caps_lines(self) -> List[str]:
        return [line for line in self.lines if ALL_CAPS_LINE.match(line)]

    def _first_caps_line(self) -> Optional[str]:
        caps = self._caps_lines()
        return caps[0] if caps else None

    def _labeled_value(self, label: "re.Pattern", value: "re.Pattern",
                       skip_words: Sequence[str] = (), next_line: bool = False) -> Optional[str]:
        """Finds `value` right after `label` on the same line, or alone on the
        following line when `next_line` is set and the label stands by itself."""
        for i, line in enumerate(self.lines):
            if skip_words and _mentions(line, skip_words):
                continue
            found = label.search(line)
            if not found:
                continue
            rest = line[found.end():].strip(" :-/.")
            if rest:
                matched = value.fullmatch(rest)
                if matched:
                    return matched.group(0).strip()
            elif next_line and i + 1 < len(self.lines):
                candidate = self.lines[i + 1]
                if value.fullmatch(candidate):
                    return candidate
        return None

    def _date_of_birth(self) -> Optional[str]:
        return self._search(DATE_DMY)

    def extract(self) -> Dict[str, str]:
        raise NotImplementedError


class IdentityCardExtractor(BaseExtractor):
    document_class = DocumentClass.IDENTITY_CARD

    ID_NUMBER = re.compile(r'\b\d{4}[ \t]?\d{4}[ \t]?\d{4}\b')
    NAME_LABEL = re.compile(r'\bNAME\b', re.I)
    NAME_VALUE = re.compile(r'[A-Z][A-Za-z .]{2,29}')
    GENDER = re.compile(r'\b(MALE|FEMALE|TRANSGENDER)\b', re.I)
    ADDRESS_LABEL = re.compile(r'\bADDRESS\b', re.I)
    PIN_CODE = re.compile(r'\b\d{6}\s*$')
    MAX_ADDRESS_LINES = 4

    def _id_number(self) -> Optional[str]:
        found = self._search(self.ID_NUMBER)
        return re.sub(r'\D', '', found) if found else None

    def _labeled_name(self) -> Optional[str]:
        return self._labeled_value(self.NAME_LABEL, self.NAME_VALUE, skip_words=RELATIVE_WORDS)

    def _gender(self) -> Optional[str]:
        found = self._search(self.GENDER, 1)
        return found.title() if found else None

    def _address(self) -> Optional[str]:
        for i, line in enumerate(self.lines):
            label = self.ADDRESS_LABEL.search(line)
            if not label:
                continue
            parts = []
            rest = line[label.end():].strip(" :-")
            if rest:
                parts.append(rest)
            for following in self.lines[i + 1:]:
                if len(parts) >= self.MAX_ADDRESS_LINES or self.ID_NUMBER.search(following):
                    break
                parts.append(following)
                if self.PIN_CODE.search(following):
                    break
            return ", ".join(part.rstrip(",") for part in parts) or None
        return None

    def extract(self) -> Dict[str, str]:
        chains = {
            'aadharNumber': (self._id_number,),
            'name': (self._labeled_name, self._first_caps_line),
            'dateOfBirth': (self._date_of_birth,),
            'gender': (self._gender,),
            'address': (self._address,),
        }
        return _resolve(chains)


class TaxCardExtractor(BaseExtractor):
    document_class = DocumentClass.TAX_CARD

    TAX_ID = re.compile(r'\b[A-Z]{5}\d{4}[A-Z]\b', re.I)
    NAME_LABEL = re.compile(r'\bNAME\b', re.I)
    FATHER_LABEL = re.compile(r"\bFATHER'?S?\s*NAME\b", re.I)
    NAME_VALUE = re.compile(r'[A-Z][A-Za-z .]{2,29}')

    def _tax_id(self) -> Optional[str]:
        found = self._search(self.TAX_ID)
        return found.upper() if found else None

    def _labeled_name(self) -> Optional[str]:
        return self._labeled_value(self.NAME_LABEL, self.NAME_VALUE,
                                   skip_words=RELATIVE_WORDS, next_line=True)

    def _labeled_father(self) -> Optional[str]:
        return self._labeled_value(self.FATHER_LABEL, self.NAME_VALUE, next_line=True)

    def _name(self) -> Optional[str]:
        return first_match((self._labeled_name, self._first_caps_line))

    def _second_caps_line(self) -> Optional[str]:
        name = self._name()
        distinct = list(dict.fromkeys(self._caps_lines()))
        for line in distinct[1:]:
            if line != name:
                return line
        return None

    def extract(self) -> Dict[str, str]:
        chains = {
            'panNumber': (self._tax_id,),
            'name': (self._name,),
            'fatherName': (self._labeled_father, self._second_caps_line),
            # First date in the text wins, label or not.
            'dateOfBirth': (self._date_of_birth,),
        }
        return _resolve(chains)


# Canonical board names for the regional detector, first hit in this order wins.
REGIONAL_BOARDS = [
    (re.compile(r'\bCENTRAL\s+BOARD\s+OF\s+SECONDARY\s+EDUCATION\b|\bCBSE\b', re.I),
     'Central Board of Secondary Education (CBSE)'),
    (re.compile(r'\bCOUNCIL\s+FOR\s+THE\s+INDIAN\s+SCHOOL\b|\bICSE\b|\bCISCE\b', re.I),
     'Council for the Indian School Certificate Examinations (CISCE)'),
    (re.compile(r'\bMAHARASHTRA\b', re.I),
     'Maharashtra State Board of Secondary and Higher Secondary Education'),
    (re.compile(r'\bKERALA\b', re.I), 'Kerala Board of Public Examinations'),
    (re.compile(r'\bBIHAR\b', re.I), 'Bihar School Examination Board'),
    (re.compile(r'\bGUJARAT\b', re.I), 'Gujarat Secondary and Higher Secondary Education Board'),
    (re.compile(r'\bRAJASTHAN\b', re.I), 'Board of Secondary Education, Rajasthan'),
    (re.compile(r'\bWEST\s+BENGAL\b', re.I), 'West Bengal Board of Secondary Education'),
    (re.compile(r'\bUTTAR\s+PRADESH\b', re.I), 'Board of High School and Intermediate Education, Uttar Pradesh'),
]


class TranscriptExtractor(BaseExtractor):
    document_class = DocumentClass.TRANSCRIPT

    LABELED_ROLL = [
        re.compile(r'\b(?:ROLL\s*NUMBER|SEAT\s*NUMBER|ROLL\s*NO|SEAT\s*NO)\b\.?[\s:.\-]*(\d+)', re.I),
        re.compile(r'\b(?:STUDENT\s*ID|ID\s*NO)\b\.?[\s:.\-]*(\d+)', re.I),
    ]
    LETTER_SEAT = re.compile(r'\b[A-Z] ?\d{6}\b')
    STANDALONE_NUMBER = re.compile(r'^\d{4,8}$')
    NAME_LABEL = re.compile(
        r"\b(?:NAME\s+OF\s+(?:THE\s+)?(?:STUDENT|CANDIDATE)|STUDENT'?S?\s+NAME|CANDIDATE'?S?\s+NAME|NAME|STUDENT)\b",
        re.I)
    NAME_VALUE = re.compile(r'[A-Za-z][A-Za-z .]{9,49}')
    NAME_SKIP = RELATIVE_WORDS + ('SCHOOL', 'COLLEGE', 'VIDYALAYA')
    CAPS_NAME_EXCLUDE = ('BOARD', 'UNIVERSITY', 'SCHOOL', 'COLLEGE', 'VIDYALAYA', 'INSTITUTE',
                         'ACADEMY', 'EXAMINATION', 'CERTIFICATE', 'STATEMENT', 'MARKS', 'RESULT',
                         'CENTRE', 'CENTER', 'ROLL', 'SEAT')
    BOARD_TOP = re.compile(
        r'\b(?:BOARD|UNIVERSITY|CBSE|ICSE|STATE|KERALA|MAHARASHTRA|(?-i:UP)|BIHAR|WEST BENGAL|GUJARAT|RAJASTHAN)\b',
        re.I)
    INSTITUTION = re.compile(r'\b(?:VIDYALAYA|SCHOOL|COLLEGE|BOARD|UNIVERSITY|INSTITUTE|ACADEMY)\b', re.I)
    SENIOR_LEVEL = re.compile(r'\b(?:SENIOR|HIGHER)\s+SECONDARY\b|\bCLASS\s*(?:XII|12)\b', re.I)
    LOWER_LEVEL = re.compile(r'\bSECONDARY\b|\bCLASS\s*(?:X|10)\b', re.I)

    def __init__(self, text: NormalizedText, min_subject_rows: int = marks_parser.DEFAULT_MIN_ROWS):
        super().__init__(text)
        self.min_subject_rows = min_subject_rows

    def _labeled_roll(self) -> Optional[str]:
        for pattern in self.LABELED_ROLL:
            found = self._search(pattern, 1)
            if found:
                return found
        return None

    def _letter_seat_number(self) -> Optional[str]:
        found = self._search(self.LETTER_SEAT)
        return found.replace(' ', '') if found else None

    def _is_centre_number(self, number: str) -> bool:
        pattern = r'\b(?:CENTRE|CENTER)\b(?:\s*(?:NO|CODE|NUMBER)\b)?\.?\s*[:\-]?\s*' + number + r'\b'
        return re.search(pattern, self.raw_text, re.I) is not None

    def _standalone_number(self) -> Optional[str]:
        for line in self.lines:
            if not self.STANDALONE_NUMBER.match(line):
                continue
            if len(line) == 4 and YEAR.fullmatch(line):
                continue
            if not self._is_centre_number(line):
                return line
        return None

    def _labeled_name(self) -> Optional[str]:
        return self._labeled_value(self.NAME_LABEL, self.NAME_VALUE, skip_words=self.NAME_SKIP)

    def _caps_name(self) -> Optional[str]:
        half = len(self.lines) / 2
        candidates = []
        for index, line in enumerate(self.lines):
            if not (ALL_CAPS_LINE.match(line) and 8 <= len(line) <= 50):
                continue
            if _mentions(line, self.CAPS_NAME_EXCLUDE) or marks_parser.match_subject(line):
                continue
            candidates.append((index, line))
        if not candidates:
            return None
        for index, line in candidates:
            if index < half:
                return line
        return candidates[0][1]

    def _top_board(self) -> Optional[str]:
        for line in self.lines[:5]:
            if self.BOARD_TOP.search(line):
                return line
        return None

    def _institution(self) -> Optional[str]:
        for line in self.lines:
            if self.INSTITUTION.search(line):
                return line
        return None

    def _regional_board(self) -> Optional[str]:
        for pattern, board in REGIONAL_BOARDS:
            if pattern.search(self.raw_text):
                return board
        return None

    def _year(self) -> Optional[str]:
        return self._search(YEAR)

    def _level(self) -> Optional[str]:
        if self.SENIOR_LEVEL.search(self.raw_text):
            return '12th'
        if self.LOWER_LEVEL.search(self.raw_text):
            return '10th'
        return None

    def extract(self) -> Dict[str, str]:
        chains = {
            'rollNumber': (self._labeled_roll, self._letter_seat_number, self._standalone_number),
            'studentName': (self._labeled_name, self._caps_name),
            'board': (self._regional_board, self._top_board, self._institution),
            'year': (self._year,),
            'class': (self._level,),
        }
        results = _resolve(chains)

        subjects = marks_parser.parse_subjects(self.text, self.min_subject_rows)
        if subjects:
            results['subjects'] = marks_parser.format_subjects(subjects)
            percentage = marks_parser.compute_percentage(subjects, self.raw_text)
            if percentage:
                results['percentage'] = percentage
        return results


def _resolve(chains: Dict[str, Sequence[Strategy]]) -> Dict[str, str]:
    results = {}
    for field_name, strategies in chains.items():
        value = first_match(strategies)
        if value:
            results[field_name] = value
    return results


EXTRACTORS = {
    DocumentClass.IDENTITY_CARD: IdentityCardExtractor,
    DocumentClass.TAX_CARD: TaxCardExtractor,
    DocumentClass.TRANSCRIPT: TranscriptExtractor,
}


def extract_fields(document_class, raw_text: Optional[str],
                   min_subject_rows: int = marks_parser.DEFAULT_MIN_ROWS) -> Dict[str, str]:
    """Pure function of (document class, raw text) -> field map. Unknown classes yield {}."""
    doc_class = DocumentClass.lookup(document_class)
    if doc_class is None:
        return {}
    text = normalize(raw_text)
    if not text.lines:
        return {}
    if doc_class is DocumentClass.TRANSCRIPT:
        extractor = TranscriptExtractor(text, min_subject_rows)
    else:
        extractor = EXTRACTORS[doc_class](text)
    return extractor.extract()
