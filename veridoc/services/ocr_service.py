# veridoc/services/ocr_service.py
"""
Text extraction from uploaded documents.

A hosted vision model (Gemini) is tried first when an API key is configured;
any failure there falls back to local Tesseract OCR. PDFs with a usable text
layer skip OCR altogether.
"""
import base64
from typing import Any, Mapping, Optional

import cv2
import numpy as np
import pytesseract
import requests
from flask import current_app

from veridoc.services import pdf_service

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GEMINI_OCR_PROMPT = (
    "Extract all text from this document image. Focus on identity information, numbers, "
    "dates, and addresses. Return only the extracted text without any formatting or analysis."
)
MIN_TEXT_LAYER_LENGTH = 50


class TextExtractionError(Exception):
    """Raised when no extraction path produced any text."""


def _correct_orientation(image: np.ndarray) -> np.ndarray:
    try:
        osd = pytesseract.image_to_osd(image, output_type=pytesseract.Output.DICT)
    except pytesseract.TesseractError:
        # OSD needs enough text to decide; leave the page as it is.
        return image
    rotation = osd.get('rotate', 0)
    if rotation != 0:
        (h, w) = image.shape[:2]
        center = (w // 2, h // 2)
        M = cv2.getRotationMatrix2D(center, -rotation, 1.0)
        image = cv2.warpAffine(image, M, (w, h), flags=cv2.INTER_CUBIC, borderMode=cv2.BORDER_REPLICATE)
    return image


def _deskew(image: np.ndarray) -> np.ndarray:
    gray = cv2.bitwise_not(image)
    thresh = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)[1]
    coords = np.column_stack(np.where(thresh > 0))
    if len(coords) == 0:
        return image
    angle = cv2.minAreaRect(coords)[-1]
    angle = -(90 + angle) if angle < -45 else -angle
    if abs(angle) > 0.5:
        (h, w) = image.shape[:2]
        center = (w // 2, h // 2)
        M = cv2.getRotationMatrix2D(center, angle, 1.0)
        image = cv2.warpAffine(image, M, (w, h), flags=cv2.INTER_CUBIC, borderMode=cv2.BORDER_REPLICATE)
    return image


def extract_text_with_tesseract(data: bytes, media_type: Optional[str] = None, lang: str = 'eng',
                                tesseract_cmd: str = '') -> str:
    """Preprocesses the first page (grayscale, orientation, deskew) and runs Tesseract."""
    if tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
    image, _ = pdf_service.load_image(data, media_type)
    if image is None:
        raise TextExtractionError("Could not read the uploaded file as an image or PDF.")

    gray_image = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY) if len(image.shape) == 3 else image
    deskewed_image = _deskew(_correct_orientation(gray_image))
    try:
        custom_config = r'--oem 3 --psm 4'
        return pytesseract.image_to_string(deskewed_image, lang=lang, config=custom_config)
    except pytesseract.TesseractNotFoundError as e:
        raise TextExtractionError("'tesseract' is not installed or not in your PATH.") from e
    except pytesseract.TesseractError as e:
        raise TextExtractionError(f"Tesseract failed: {e}") from e


def extract_text_with_gemini(data: bytes, media_type: str, api_key: str,
                             model: str = 'gemini-1.5-flash', timeout: int = 30) -> str:
    payload = {
        "contents": [{
            "parts": [
                {"text": GEMINI_OCR_PROMPT},
                {"inline_data": {"mime_type": media_type, "data": base64.b64encode(data).decode('ascii')}},
            ]
        }],
        "generationConfig": {"temperature": 0.1, "maxOutputTokens": 2048},
    }
    response = requests.post(GEMINI_URL.format(model=model), params={"key": api_key},
                             json=payload, timeout=timeout)
    if not response.ok:
        raise TextExtractionError(f"Gemini API error: {response.status_code} {response.reason}")

    body = response.json()
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = ""
    if not text or not text.strip():
        raise TextExtractionError("No text extracted from Gemini API")
    return text


def extract_text(data: bytes, media_type: Optional[str], config: Mapping[str, Any]) -> str:
    """Returns the document text, trying the PDF text layer, Gemini and Tesseract in turn."""
    if not data:
        raise TextExtractionError("The uploaded file is empty.")

    if pdf_service.is_pdf(data, media_type):
        try:
            layer = pdf_service.extract_text_layer(data)
        except Exception as e:
            current_app.logger.warning(f"Could not read PDF text layer, falling back to OCR: {e}")
            layer = ""
        if len(layer.strip()) >= MIN_TEXT_LAYER_LENGTH:
            return layer
        media_type = pdf_service.PDF_MEDIA_TYPE

    api_key = config.get('GEMINI_API_KEY')
    if api_key:
        try:
            return extract_text_with_gemini(
                data, media_type or 'application/octet-stream', api_key,
                model=config.get('GEMINI_MODEL', 'gemini-1.5-flash'),
                timeout=config.get('AI_REQUEST_TIMEOUT', 30))
        except (requests.RequestException, ValueError, TextExtractionError) as e:
            current_app.logger.warning(f"Gemini API failed, falling back to Tesseract: {e}")

    return extract_text_with_tesseract(data, media_type, lang=config.get('OCR_LANG', 'eng'),
                                       tesseract_cmd=config.get('TESSERACT_CMD', ''))
