# veridoc/routes/verify.py

from flask import Blueprint, request, jsonify, current_app

from veridoc.models import DocumentClass, DOCUMENT_FIELDS, DOCUMENT_TITLES
from veridoc.services import (
    ai_parser_service,
    field_extractor,
    hash_service,
    ocr_service,
    verification_service,
)

ALLOWED_EXTENSIONS = {'pdf', 'png', 'jpg', 'jpeg', 'gif', 'bmp'}

verify_bp = Blueprint("verify_bp", __name__, url_prefix='/verify')


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() in ('1', 'true', 'yes', 'on')


def _parse_document_text(doc_class: DocumentClass, text: str, use_ai: bool):
    """
    Turns extracted text into a field map. The AI parser is tried first when
    requested; when it is unavailable or comes back empty the rule-based
    extractor takes over.
    """
    if use_ai:
        fields = ai_parser_service.parse_with_ai(text, doc_class, current_app.config)
        if fields:
            return fields, "ai"
        current_app.logger.info(f"AI parsing unavailable for {doc_class.value}; using rule-based extraction.")
    fields = field_extractor.extract_fields(
        doc_class, text, min_subject_rows=current_app.config.get('MIN_SUBJECT_ROWS', 4))
    return fields, "rules"


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _uploaded_file():
    if 'file' not in request.files:
        return None, (jsonify(error="Bad Request", message="No file part in the request"), 400)
    file = request.files['file']
    if file.filename == '' or not allowed_file(file.filename):
        return None, (jsonify(error="Bad Request", message="No file selected or file type not allowed"), 400)
    return file, None


def _extract_upload_text(file):
    data = file.read()
    file_hash = hash_service.sha256_of_bytes(data)
    text = ocr_service.extract_text(data, file.mimetype, current_app.config)
    return text, file_hash


@verify_bp.route("/document-types", methods=["GET"])
def document_types():
    return jsonify([
        {
            "id": doc_class.value,
            "title": DOCUMENT_TITLES[doc_class],
            "fields": [{"key": key, "label": label} for key, label in DOCUMENT_FIELDS[doc_class].items()],
        }
        for doc_class in DocumentClass
    ])


@verify_bp.route("/extract-text", methods=["POST"])
def extract_text():
    file, error = _uploaded_file()
    if error:
        return error
    try:
        text, file_hash = _extract_upload_text(file)
    except ocr_service.TextExtractionError as e:
        current_app.logger.error(f"Text extraction failed for {file.filename}: {e}")
        return jsonify(error="Extraction Failed",
                       message="Failed to extract text from the document. Please try again or use manual entry."), 422
    return jsonify(text=text, fileHash=file_hash, originalFilename=file.filename)


@verify_bp.route("/parse", methods=["POST"])
def parse_text():
    data = _json_body()
    doc_class = DocumentClass.lookup(data.get("documentType"))
    if doc_class is None:
        return jsonify(error="Bad Request", message="Unsupported document type"), 400
    text = data.get("extractedText") or ""
    if not isinstance(text, str):
        return jsonify(error="Bad Request", message="extractedText must be a string."), 400

    fields, source = _parse_document_text(doc_class, text, _truthy(data.get("useAi")))
    return jsonify(documentType=doc_class.value, source=source, fields=fields)


@verify_bp.route("/upload", methods=["POST"])
def upload_for_verification():
    doc_class = DocumentClass.lookup(request.form.get("documentType"))
    if doc_class is None:
        return jsonify(error="Bad Request", message="Unsupported document type"), 400
    file, error = _uploaded_file()
    if error:
        return error

    try:
        text, file_hash = _extract_upload_text(file)
    except ocr_service.TextExtractionError as e:
        current_app.logger.error(f"Text extraction failed for {file.filename}: {e}")
        return jsonify(error="Extraction Failed",
                       message="Failed to extract text from the document. Please try manual entry."), 422

    fields, source = _parse_document_text(doc_class, text, _truthy(request.form.get("useAi")))
    return jsonify(
        documentType=doc_class.value,
        originalFilename=file.filename,
        fileHash=file_hash,
        extractedText=text,
        source=source,
        fields=fields,
    )


@verify_bp.route("/score", methods=["POST"])
def score_document():
    data = _json_body()
    document_data = data.get("documentData")
    if not isinstance(document_data, dict) or not document_data:
        return jsonify(error="Missing Information", message="Please fill in the required document details."), 400

    result = verification_service.verify_document(
        data.get("documentType"), document_data, current_app.config.get('VERIFICATION_API_KEY', ''))
    return jsonify(result.to_dict())
