# test_ocr.py
# A unittest-based test suite for services.pdf_service and services.ocr_service.
# - The PDF text layer, Gemini and Tesseract paths are patched, so neither the
#   tesseract binary nor network access is required.
# - Checks the order in which extraction paths are tried and how failures fall through.

import unittest
from unittest import mock

import numpy as np
import requests

from veridoc.app import create_app
from veridoc.services import ocr_service, pdf_service

LAYER_TEXT = "CENTRAL BOARD OF SECONDARY EDUCATION\nRoll No: 23226443\nName: MOHD NASAR KHAN"


class TestPdfService(unittest.TestCase):

    def test_is_pdf(self):
        self.assertTrue(pdf_service.is_pdf(b"%PDF-1.7 ..."))
        self.assertTrue(pdf_service.is_pdf(b"", "application/pdf"))
        self.assertFalse(pdf_service.is_pdf(b"\x89PNG", "image/png"))

    def test_unreadable_image(self):
        self.assertEqual(pdf_service.load_image(b"", "image/png"), (None, 0))
        image, pages = pdf_service.load_image(b"definitely not an image", "image/png")
        self.assertIsNone(image)
        self.assertEqual(pages, 0)

    def test_unreadable_pdf(self):
        self.assertEqual(pdf_service.load_image(b"%PDF-broken", "application/pdf"), (None, 0))


class TestExtractText(unittest.TestCase):

    def setUp(self):
        self.app = create_app('testing')
        self.app_context = self.app.app_context()
        self.app_context.push()
        self.config = dict(self.app.config)

    def tearDown(self):
        self.app_context.pop()

    def test_empty_upload(self):
        with self.assertRaises(ocr_service.TextExtractionError):
            ocr_service.extract_text(b"", "image/png", self.config)

    def test_pdf_text_layer_skips_ocr(self):
        with mock.patch.object(pdf_service, "extract_text_layer", return_value=LAYER_TEXT), \
                mock.patch.object(ocr_service, "extract_text_with_tesseract") as tesseract:
            text = ocr_service.extract_text(b"%PDF-1.4", "application/pdf", self.config)
        self.assertEqual(text, LAYER_TEXT)
        tesseract.assert_not_called()

    def test_scanned_pdf_goes_to_ocr(self):
        with mock.patch.object(pdf_service, "extract_text_layer", return_value="  "), \
                mock.patch.object(ocr_service, "extract_text_with_tesseract", return_value="OCR TEXT") as tesseract:
            text = ocr_service.extract_text(b"%PDF-1.4", None, self.config)
        self.assertEqual(text, "OCR TEXT")
        self.assertEqual(tesseract.call_args[0][1], "application/pdf")

    def test_tesseract_is_used_without_gemini_key(self):
        with mock.patch.object(ocr_service, "extract_text_with_gemini") as gemini, \
                mock.patch.object(ocr_service, "extract_text_with_tesseract", return_value="TESSERACT TEXT"):
            text = ocr_service.extract_text(b"\x89PNG....", "image/png", self.config)
        self.assertEqual(text, "TESSERACT TEXT")
        gemini.assert_not_called()

    def test_gemini_result_is_preferred(self):
        self.config["GEMINI_API_KEY"] = "gemini-key"
        with mock.patch.object(ocr_service, "extract_text_with_gemini", return_value="GEMINI TEXT"), \
                mock.patch.object(ocr_service, "extract_text_with_tesseract") as tesseract:
            text = ocr_service.extract_text(b"\x89PNG....", "image/png", self.config)
        self.assertEqual(text, "GEMINI TEXT")
        tesseract.assert_not_called()

    def test_gemini_failure_falls_back_to_tesseract(self):
        self.config["GEMINI_API_KEY"] = "gemini-key"
        for failure in (requests.Timeout("timed out"), ocr_service.TextExtractionError("no text")):
            with self.subTest(failure=failure), \
                    mock.patch.object(ocr_service, "extract_text_with_gemini", side_effect=failure), \
                    mock.patch.object(ocr_service, "extract_text_with_tesseract", return_value="LOCAL TEXT"):
                self.assertEqual(ocr_service.extract_text(b"\x89PNG....", "image/png", self.config), "LOCAL TEXT")

    def test_unreadable_file_raises(self):
        with mock.patch.object(pdf_service, "load_image", return_value=(None, 0)):
            with self.assertRaises(ocr_service.TextExtractionError):
                ocr_service.extract_text_with_tesseract(b"garbage", "image/png")

    def test_tesseract_runs_on_preprocessed_image(self):
        page = np.full((60, 200, 3), 255, dtype=np.uint8)
        with mock.patch.object(pdf_service, "load_image", return_value=(page, 1)), \
                mock.patch.object(ocr_service, "_correct_orientation", side_effect=lambda image: image), \
                mock.patch.object(ocr_service.pytesseract, "image_to_string", return_value="HELLO") as to_string:
            self.assertEqual(ocr_service.extract_text_with_tesseract(b"img", "image/png", lang="eng+hin"), "HELLO")
        self.assertEqual(to_string.call_args[1]["lang"], "eng+hin")


if __name__ == "__main__":
    unittest.main(verbosity=2)
