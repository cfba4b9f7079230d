# services/verification_service.py
"""
Rule-based (mock) verification of an extracted field map.

Each document type has a fixed, ordered list of checks. A passing check adds
its points to the confidence score; a failing hard check marks the document
invalid, a failing soft check only adds partial credit and a warning.
"""
import re
from datetime import date
from typing import Callable, Dict, NamedTuple, Optional

from flask import current_app

from veridoc.models import DocumentClass, VerificationResult

SUCCESS_MESSAGE = "Document verification successful ({confidence}% confidence)"
FAILURE_MESSAGE = "Document verification failed - please check the details"
UNSUPPORTED_MESSAGE = "Unsupported document type"

ID_NUMBER_FORMAT = re.compile(r'^\d{12}$')
TAX_ID_FORMAT = re.compile(r'^[A-Z]{5}\d{4}[A-Z]$')
LEADING_INT = re.compile(r'^\s*(\d+)')
MIN_PASSING_YEAR = 1990


class Check(NamedTuple):
    predicate: Callable[[Dict[str, str], int], bool]
    pass_points: int
    pass_detail: str
    fail_detail: str
    hard: bool = True
    fail_points: int = 0


def _value(fields: Dict[str, str], key: str) -> str:
    value = fields.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _min_length(key: str, length: int) -> Callable[[Dict[str, str], int], bool]:
    return lambda fields, _: len(_value(fields, key)) >= length


def _present(key: str) -> Callable[[Dict[str, str], int], bool]:
    return lambda fields, _: bool(_value(fields, key))


def _valid_id_number(fields, _):
    return bool(ID_NUMBER_FORMAT.match(re.sub(r'\s', '', _value(fields, 'aadharNumber'))))


def _valid_tax_id(fields, _):
    return bool(TAX_ID_FORMAT.match(_value(fields, 'panNumber').upper()))


def _valid_year(fields, current_year):
    match = LEADING_INT.match(_value(fields, 'year'))
    return bool(match) and MIN_PASSING_YEAR <= int(match.group(1)) <= current_year


CHECKS = {
    DocumentClass.IDENTITY_CARD: (
        Check(_valid_id_number, 25, "Aadhar number format is valid", "Invalid Aadhar number format"),
        Check(_min_length('name', 2), 25, "Name field verified", "Name is required"),
        Check(_present('dateOfBirth'), 25, "Date of birth format verified", "Date of birth is required"),
        Check(_min_length('address', 10), 25, "Address format verified",
              "Address should be more detailed", hard=False, fail_points=10),
    ),
    DocumentClass.TAX_CARD: (
        Check(_valid_tax_id, 30, "PAN number format is valid", "Invalid PAN number format"),
        Check(_min_length('name', 2), 25, "Name field verified", "Name is required"),
        Check(_present('fatherName'), 20, "Father's name verified",
              "Father's name not provided", hard=False, fail_points=10),
        Check(_present('dateOfBirth'), 15, "Date of birth verified",
              "Date of birth not provided", hard=False, fail_points=10),
    ),
    DocumentClass.TRANSCRIPT: (
        Check(_present('rollNumber'), 20, "Roll number verified", "Roll number is required"),
        Check(_min_length('studentName', 2), 20, "Student name verified", "Student name is required"),
        Check(_present('board'), 20, "Board information verified", "Board/University is required"),
        Check(_valid_year, 20, "Passing year verified", "Invalid passing year"),
        Check(_present('percentage'), 15, "Marks information verified",
              "Percentage/CGPA not provided", hard=False, fail_points=5),
    ),
}


def score(document_class, field_map: Optional[Dict[str, str]],
          current_year: Optional[int] = None) -> VerificationResult:
    """Scores a field map against the checks of its document type. Never raises."""
    doc_class = DocumentClass.lookup(document_class)
    if doc_class is None:
        return VerificationResult(False, UNSUPPORTED_MESSAGE, ("Document type not recognized",))

    fields = field_map if isinstance(field_map, dict) else {}
    year = current_year or date.today().year
    is_valid = True
    confidence = 0
    details = []
    for check in CHECKS[doc_class]:
        if check.predicate(fields, year):
            confidence += check.pass_points
            details.append(check.pass_detail)
        else:
            confidence += check.fail_points
            details.append(check.fail_detail)
            if check.hard:
                is_valid = False

    message = SUCCESS_MESSAGE.format(confidence=confidence) if is_valid else FAILURE_MESSAGE
    return VerificationResult(is_valid, message, tuple(details), confidence)


def verify_document(document_class, field_map: Optional[Dict[str, str]],
                    verification_api_key: str = "") -> VerificationResult:
    """Entry point used by the routes. Real registry lookups are not available,
    so a configured verification key only gets logged before the mock checks run."""
    if verification_api_key:
        current_app.logger.warning(
            f"Real verification API is not integrated; using rule-based checks for '{document_class}'.")
    return score(document_class, field_map)
