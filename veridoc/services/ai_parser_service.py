# veridoc/services/ai_parser_service.py
"""
Optional AI-assisted field parsing.

Sends the extracted text to a hosted language model (Gemini first, OpenAI as a
fallback) and asks for a JSON object in the field vocabulary of the document
type. Whatever comes back is treated as untrusted: unknown keys are dropped,
empty values are left out. Every failure is reported as None so the caller
can fall back to the rule-based extractor.
"""
import json
import re
from typing import Any, Dict, Mapping, Optional

import requests
from dateutil import parser as date_parser
from flask import current_app

from veridoc.models import DOCUMENT_FIELDS, DocumentClass

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"
SYSTEM_PROMPT = ("You parse Indian academic documents and identity cards from OCR text. "
                 "Return only valid JSON responses.")
JSON_OBJECT = re.compile(r'\{[\s\S]*\}')

PROMPT_RULES = {
    DocumentClass.TRANSCRIPT: """
Rules:
- studentName follows "Name:" or "Student Name:"; never use the mother's, father's or school name.
- rollNumber is the student's roll or seat number (usually 6-8 digits), never the centre or school code.
- class is "12th" for SENIOR SECONDARY / CLASS XII examinations and "10th" for SECONDARY / CLASS X.
- subjects lists one subject per line as "SUBJECT: obtained/maximum" using the total marks column;
  treat "XXX" or "-" practical marks as 0 and skip non-scoring subjects such as WORK EXPERIENCE,
  PHYSICAL EDUCATION, GENERAL STUDIES and ART EDUCATION.
- percentage is total obtained / total maximum * 100 over the listed subjects, two decimals.""",
    DocumentClass.TAX_CARD: """
Rules:
- panNumber has 10 characters: 5 letters, 4 digits, 1 letter (e.g. ABCDE1234F).
- name is the cardholder, not the father.
- fatherName follows the "Father's Name" label.
- dateOfBirth in DD/MM/YYYY; it may appear as DD-MM-YYYY or DD.MM.YYYY.""",
    DocumentClass.IDENTITY_CARD: """
Rules:
- aadharNumber is the 12-digit number, often printed as three groups of four digits.
- dateOfBirth in DD/MM/YYYY.
- address only if it is visible.""",
}


class AiParseError(Exception):
    """A collaborator call failed or returned something unusable."""


def build_prompt(raw_text: str, doc_class: DocumentClass) -> str:
    keys = ", ".join(f'"{key}": "{label}"' for key, label in DOCUMENT_FIELDS[doc_class].items())
    return (
        f"Analyze the following text extracted from a document and identify its key information. "
        f"The text may contain OCR errors.\n\nEXTRACTED TEXT:\n{raw_text}\n\n"
        f"Return ONLY a JSON object with these keys (omit anything not present): {{{keys}}}\n"
        f"{PROMPT_RULES[doc_class]}\n\nReturn only the JSON object, no additional text."
    )


def strip_json_code_fences(s: str) -> str:
    """Remove JSON code fences from string."""
    s = s.strip()
    if s.startswith("```"):
        first_nl = s.find("\n")
        if first_nl != -1:
            s = s[first_nl+1:]
        if s.endswith("```"):
            s = s[:-3].strip()
    return s


def parse_json_payload(generated_text: str) -> Dict[str, Any]:
    """Pulls the first JSON object out of a model response."""
    text = strip_json_code_fences(generated_text or "")
    match = JSON_OBJECT.search(text)
    try:
        payload = json.loads(match.group(0) if match else text)
    except ValueError as e:
        raise AiParseError(f"Failed to parse AI response: {e}") from e
    if not isinstance(payload, dict):
        raise AiParseError("AI response is not a JSON object")
    if payload.get("error"):
        raise AiParseError(f"AI service returned an error payload: {payload['error']}")
    return payload


def _normalize_date(value: str) -> str:
    try:
        return date_parser.parse(value, dayfirst=True).strftime("%d/%m/%Y")
    except (date_parser.ParserError, ValueError, OverflowError):
        return value


def coerce_field_map(payload: Mapping[str, Any], document_class) -> Dict[str, str]:
    """Keeps only the vocabulary keys of the document class, with non-empty string values."""
    doc_class = DocumentClass.lookup(document_class)
    if doc_class is None or not isinstance(payload, Mapping):
        return {}
    fields = {}
    for key in DOCUMENT_FIELDS[doc_class]:
        value = payload.get(key)
        if value is None or isinstance(value, (dict, list, bool)):
            continue
        text = str(value).strip()
        if not text:
            continue
        if key == 'dateOfBirth':
            text = _normalize_date(text)
        elif key == 'panNumber':
            text = text.upper()
        elif key == 'aadharNumber':
            text = re.sub(r'\s', '', text)
        fields[key] = text
    return fields


def _response_json(response: requests.Response, service: str) -> Dict[str, Any]:
    data = response.json()
    if not isinstance(data, dict):
        raise AiParseError(f"{service} API returned an unexpected body")
    error = data.get("error")
    if not response.ok or error:
        message = error.get("message") if isinstance(error, dict) else error
        raise AiParseError(message or f"{service} API failed with status {response.status_code}")
    return data


def call_gemini(prompt: str, api_key: str, model: str, timeout: int) -> str:
    payload = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": 0.1, "maxOutputTokens": 1000},
    }
    response = requests.post(GEMINI_URL.format(model=model), params={"key": api_key},
                             json=payload, timeout=timeout)
    data = _response_json(response, "Gemini")
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise AiParseError("No generated text in Gemini response") from e


def call_openai(prompt: str, api_key: str, model: str, timeout: int) -> str:
    response = requests.post(
        OPENAI_URL,
        headers={"Authorization": f"Bearer {api_key}"},
        json={
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.1,
            "max_tokens": 1000,
        },
        timeout=timeout,
    )
    data = _response_json(response, "OpenAI")
    try:
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise AiParseError("No generated text in OpenAI response") from e


def parse_with_ai(raw_text: Optional[str], document_class, config: Mapping[str, Any]) -> Optional[Dict[str, str]]:
    """
    Returns a field map from the first AI service that answers with usable JSON,
    or None when no service is configured or every call failed.
    """
    doc_class = DocumentClass.lookup(document_class)
    if doc_class is None or not raw_text or not raw_text.strip():
        return None

    prompt = build_prompt(raw_text, doc_class)
    timeout = config.get('AI_REQUEST_TIMEOUT', 30)
    services = []
    if config.get('GEMINI_API_KEY'):
        services.append(("Gemini", call_gemini, config['GEMINI_API_KEY'], config.get('GEMINI_MODEL', 'gemini-1.5-flash')))
    if config.get('OPENAI_API_KEY'):
        services.append(("OpenAI", call_openai, config['OPENAI_API_KEY'], config.get('OPENAI_MODEL', 'gpt-4o-mini')))

    for name, call, api_key, model in services:
        try:
            generated_text = call(prompt, api_key, model, timeout)
            fields = coerce_field_map(parse_json_payload(generated_text), doc_class)
        except (requests.RequestException, ValueError, AiParseError) as e:
            current_app.logger.warning(f"{name} field parsing failed: {e}")
            continue
        current_app.logger.info(f"{name} parsed {len(fields)} fields for {doc_class.value}")
        return fields
    return None
