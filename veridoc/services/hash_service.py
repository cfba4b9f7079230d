# services/hash_service.py
"""
Hashing helpers: file digests and deterministic proof codes over field maps.
"""
import base64
import hashlib
import json
from typing import Optional, Dict, Any

from veridoc.models import DocumentClass


def sha256_of_bytes(data: bytes) -> str:
    """SHA-256 hex digest of an uploaded file's raw bytes."""
    return hashlib.sha256(data or b"").hexdigest()


def normalize_field_map(field_map: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Strips values and drops keys without a value, so an absent field and a
    blanked-out field hash the same."""
    normalized = {}
    for key, value in (field_map or {}).items():
        if value is None:
            continue
        text = str(value).strip()
        if text:
            normalized[str(key)] = text
    return normalized


def fingerprint(document_class, field_map: Optional[Dict[str, Any]], file_digest: Optional[str] = None) -> str:
    """
    Proof code for a verified document: SHA-256 over
    "docClass|canonical-json(field map)|file digest", base64url without padding.
    """
    doc_class = DocumentClass.lookup(document_class)
    class_tag = doc_class.value if doc_class else str(document_class or "")
    serialized = json.dumps(normalize_field_map(field_map), sort_keys=True,
                            separators=(',', ':'), ensure_ascii=False)
    payload = f"{class_tag}|{serialized}|{file_digest or ''}"
    digest = hashlib.sha256(payload.encode('utf-8')).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode('ascii')


def verify_fingerprint(code: str, document_class, field_map: Optional[Dict[str, Any]],
                       file_digest: Optional[str] = None) -> bool:
    """Checks a proof code against a field map without needing the original file."""
    return code == fingerprint(document_class, field_map, file_digest)
