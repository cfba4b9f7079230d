# veridoc/services/pdf_service.py

from typing import Optional, Tuple

import pypdfium2 as pdfium
import cv2
import numpy as np

PDF_MEDIA_TYPE = 'application/pdf'


def is_pdf(data: bytes, media_type: Optional[str] = None) -> bool:
    return media_type == PDF_MEDIA_TYPE or (data or b"").startswith(b"%PDF")


def extract_text_layer(data: bytes) -> str:
    """Returns the embedded text of every page, or "" for scanned PDFs."""
    pdf = pdfium.PdfDocument(data)
    try:
        pages = []
        for index in range(len(pdf)):
            page = pdf[index]
            textpage = page.get_textpage()
            try:
                pages.append(textpage.get_text_range())
            finally:
                textpage.close()
                page.close()
        return "\n".join(pages)
    finally:
        pdf.close()


def load_image(data: bytes, media_type: Optional[str] = None) -> Tuple[Optional[np.ndarray], int]:
    """
    Renders the first page of a PDF, or decodes an image upload, into an OpenCV image.
    Returns (image, page_count); the image is None if the bytes cannot be read.
    """
    if is_pdf(data, media_type):
        pdf = None
        try:
            pdf = pdfium.PdfDocument(data)
            page_count = len(pdf)
            page = pdf[0]
            pil_image = page.render(scale=2).to_pil()
            image = cv2.cvtColor(np.array(pil_image), cv2.COLOR_RGB2BGR)
            return image, page_count
        except pdfium.PdfiumError:
            return None, 0
        finally:
            if pdf is not None:
                pdf.close()

    if not data:
        return None, 0
    image = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)
    if image is None:
        return None, 0
    return image, 1
