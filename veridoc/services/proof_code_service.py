# services/proof_code_service.py
"""
Bounded, newest-first history of issued proof codes.
"""
from typing import List

from flask import current_app

from veridoc.models import db, DocumentClass, ProofCode

DEFAULT_HISTORY_LIMIT = 20


def _history_limit() -> int:
    return current_app.config.get('PROOF_CODE_HISTORY_LIMIT', DEFAULT_HISTORY_LIMIT)


def list_proof_codes() -> List[ProofCode]:
    return ProofCode.query.order_by(ProofCode.created_at.desc(), ProofCode.id.desc()).all()


def save_proof_code(code: str, doc_type: DocumentClass) -> ProofCode:
    """Stores a code at the front of the history. Saving a known code replaces
    the old entry instead of duplicating it; entries beyond the limit are dropped."""
    existing = ProofCode.query.filter_by(code=code).first()
    if existing:
        db.session.delete(existing)
        db.session.flush()

    entry = ProofCode(code=code, doc_type=doc_type)
    db.session.add(entry)
    db.session.flush()

    for stale in list_proof_codes()[_history_limit():]:
        db.session.delete(stale)
    db.session.commit()
    current_app.logger.info(f"Stored proof code {code} for {doc_type.value}")
    return entry


def remove_proof_code(code: str) -> bool:
    entry = ProofCode.query.filter_by(code=code).first()
    if not entry:
        return False
    db.session.delete(entry)
    db.session.commit()
    return True
