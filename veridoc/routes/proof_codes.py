# veridoc/routes/proof_codes.py
from flask import Blueprint, request, jsonify, current_app, Response

from veridoc.models import DocumentClass, ProofCode
from veridoc.services import hash_service, proof_code_service, qr_service

proof_bp = Blueprint("proof_codes", __name__, url_prefix='/proof-codes')


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@proof_bp.route("", methods=["GET"])
def list_codes():
    return jsonify([entry.to_dict() for entry in proof_code_service.list_proof_codes()])


@proof_bp.route("", methods=["POST"])
def create_code():
    """Fingerprints the (possibly user-edited) field map and stores the code."""
    data = _json_body()
    doc_class = DocumentClass.lookup(data.get("documentType"))
    if doc_class is None:
        return jsonify(error="Bad Request", message="Unsupported document type"), 400
    document_data = data.get("documentData")
    if not isinstance(document_data, dict) or not document_data:
        return jsonify(error="Missing Information", message="documentData must be a non-empty object."), 400

    code = hash_service.fingerprint(doc_class, document_data, data.get("fileHash"))
    entry = proof_code_service.save_proof_code(code, doc_class)
    return jsonify(entry.to_dict()), 201


@proof_bp.route("/verify", methods=["GET"])
def lookup_code():
    code = request.args.get("code", "").strip()
    if not code:
        return jsonify(error="Bad Request", message="Missing 'code' query parameter."), 400
    entry = ProofCode.query.filter_by(code=code).first()
    if not entry:
        return jsonify(found=False, code=code), 404
    return jsonify(found=True, entry=entry.to_dict())


@proof_bp.route("/verify", methods=["POST"])
def check_code():
    """Recomputes the fingerprint of the submitted data and compares it with a code."""
    data = _json_body()
    code = data.get("code")
    if not isinstance(code, str) or not code.strip():
        return jsonify(error="Bad Request", message="'code' must be a non-empty string."), 400
    code = code.strip()
    document_data = data.get("documentData")
    if document_data is not None and not isinstance(document_data, dict):
        return jsonify(error="Bad Request", message="documentData must be an object."), 400
    matches = hash_service.verify_fingerprint(
        code, data.get("documentType"), document_data, data.get("fileHash"))
    return jsonify(code=code, matches=matches)


@proof_bp.route("/<string:code>", methods=["DELETE"])
def delete_code(code):
    if not proof_code_service.remove_proof_code(code):
        return jsonify(error="Not Found", message="Proof code not found."), 404
    return jsonify(message="Proof code removed.", code=code)


@proof_bp.route("/<string:code>/qr", methods=["GET"])
def code_qr(code):
    if not ProofCode.query.filter_by(code=code).first():
        return jsonify(error="Not Found", message="Proof code not found."), 404
    current_app.logger.info(f"Rendering QR for proof code {code}")
    return Response(qr_service.proof_code_qr_png(code), mimetype="image/png")
