# services/qr_service.py
"""
Renders proof codes as QR images so a verified document can be checked later
by scanning instead of re-uploading it.
"""
import io
from urllib.parse import urlencode

from flask import current_app
import qrcode


def proof_code_url(code: str) -> str:
    """Public URL a scanned QR code points at."""
    base_url = current_app.config.get("BASE_VERIFICATION_URL", "http://127.0.0.1:5000")
    return f"{base_url}/proof-codes/verify?{urlencode({'code': code})}"


def proof_code_qr_png(code: str) -> bytes:
    """
    Generates a PNG QR code encoding the verification URL for a proof code.

    Args:
        code: The proof code (base64url SHA-256 fingerprint).

    Returns:
        The PNG image bytes.
    """
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(proof_code_url(code))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer)
    current_app.logger.info(f"Generated QR code for proof code '{code}'")
    return buffer.getvalue()
