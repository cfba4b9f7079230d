# veridoc/routes/settings.py
from flask import Blueprint, jsonify, current_app

settings_bp = Blueprint("settings", __name__)

CREDENTIAL_KEYS = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "verification": "VERIFICATION_API_KEY",
    "backup": "BACKUP_API_KEY",
}
ENDPOINT_KEYS = {
    "aadhar": ("AADHAR_VERIFICATION_URL", "AADHAR_VERIFICATION_KEY"),
    "pan": ("PAN_VERIFICATION_URL", "PAN_VERIFICATION_KEY"),
    "marksheet": ("MARKSHEET_VERIFICATION_URL", "MARKSHEET_VERIFICATION_KEY"),
}


@settings_bp.route("/settings", methods=["GET"])
def get_settings():
    """Reports which credentials are configured. Secret values are never returned."""
    config = current_app.config
    return jsonify(
        credentials={name: bool(config.get(key)) for name, key in CREDENTIAL_KEYS.items()},
        endpoints={
            doc_type: {"url": bool(config.get(url_key)), "key": bool(config.get(key_key))}
            for doc_type, (url_key, key_key) in ENDPOINT_KEYS.items()
        },
        ocr={"language": config.get("OCR_LANG"), "aiTextExtraction": bool(config.get("GEMINI_API_KEY"))},
        proofCodeHistoryLimit=config.get("PROOF_CODE_HISTORY_LIMIT"),
    )
