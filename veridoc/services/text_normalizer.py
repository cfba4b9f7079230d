# services/text_normalizer.py
"""
Turns raw OCR or manually entered text into the line sequence every extractor reads.
"""
from typing import NamedTuple, Optional, Tuple


class NormalizedText(NamedTuple):
    raw: str
    lines: Tuple[str, ...]


def normalize(raw: Optional[str]) -> NormalizedText:
    """Splits on line breaks, trims each line and drops the blank ones.
    A missing or empty input yields an empty line sequence."""
    raw = raw or ""
    lines = tuple(line.strip() for line in raw.splitlines() if line.strip())
    return NormalizedText(raw, lines)
