# veridoc/models.py
import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class DocumentClass(str, enum.Enum):
    """The document types the verifier knows how to extract and score.
    Values are the identifiers used by the web front end."""
    IDENTITY_CARD = "aadhar"
    TAX_CARD = "pan"
    TRANSCRIPT = "marksheet"

    @classmethod
    def lookup(cls, value) -> Optional["DocumentClass"]:
        """Returns the member for a member or a value string, or None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


DOCUMENT_TITLES = {
    DocumentClass.IDENTITY_CARD: "Aadhar Card Verification",
    DocumentClass.TAX_CARD: "PAN Card Verification",
    DocumentClass.TRANSCRIPT: "Marksheet Verification",
}

# Field vocabulary per document class: key -> human readable label.
DOCUMENT_FIELDS: Dict[DocumentClass, Dict[str, str]] = {
    DocumentClass.IDENTITY_CARD: {
        "aadharNumber": "Aadhar Number",
        "name": "Full Name",
        "dateOfBirth": "Date of Birth",
        "gender": "Gender",
        "address": "Address",
    },
    DocumentClass.TAX_CARD: {
        "panNumber": "PAN Number",
        "name": "Full Name",
        "fatherName": "Father's Name",
        "dateOfBirth": "Date of Birth",
    },
    DocumentClass.TRANSCRIPT: {
        "rollNumber": "Roll Number",
        "studentName": "Student Name",
        "board": "Board/University",
        "year": "Passing Year",
        "class": "Class",
        "percentage": "Percentage/CGPA",
        "subjects": "Subjects & Marks",
    },
}


@dataclass(frozen=True)
class SubjectRecord:
    subject_name: str
    marks_obtained: int
    marks_maximum: int = 100

    def to_line(self) -> str:
        return f"{self.subject_name}: {self.marks_obtained}/{self.marks_maximum}"


@dataclass(frozen=True)
class VerificationResult:
    is_valid: bool
    message: str
    details: Tuple[str, ...] = field(default_factory=tuple)
    confidence: Optional[int] = None

    def to_dict(self):
        result = {
            "isValid": self.is_valid,
            "message": self.message,
            "details": list(self.details),
        }
        if self.confidence is not None:
            result["confidence"] = self.confidence
        return result


class ProofCode(db.Model):
    __tablename__ = "proof_codes"
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), unique=True, nullable=False, index=True)
    doc_type = db.Column(db.Enum(DocumentClass), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "code": self.code,
            "docType": self.doc_type.value,
            "createdAt": self.created_at.isoformat(),
        }
