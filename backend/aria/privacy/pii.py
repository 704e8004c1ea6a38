"""PII and PHI detection with patterns and a language model."""

import re
from collections import Counter
from typing import Any, Optional

from ..errors import ParseError, ProviderError
from ..llm import ProviderRouter, extract_json_array
from ..logging import get_logger

logger = get_logger(__name__)

PATTERN_CONFIDENCE = 0.9
MODEL_DEFAULT_CONFIDENCE = 0.8
MODEL_TEXT_LIMIT = 4000

PII_PATTERNS = {
    "ssn": re.compile(r"\b(?:\d{3}-\d{2}-\d{4}|\d{9})\b"),
    "phone": re.compile(r"(?<!\w)(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b"),
    "email": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
    "credit_card": re.compile(
        r"\b(?:4\d{12}(?:\d{3})?|5[1-5]\d{14}|3[47]\d{13}|3\d{13}|6(?:011|5\d{2})\d{12})\b"
    ),
    "date_of_birth": re.compile(r"\b(?:0[1-9]|1[0-2])[-/.](?:0[1-9]|[12]\d|3[01])[-/.](?:19|20)\d{2}\b"),
    "address": re.compile(
        r"\b\d+\s+[A-Za-z]+\s+(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Lane|Ln|Boulevard|Blvd)\b",
        re.IGNORECASE,
    ),
}

PII_MODEL_PROMPT = """Analyze the following text for PII, PHI, and sensitive information. Return a JSON array of findings with this format:
[{{
  "entity_type": "ssn|phone|email|credit_card|medical_record|patient_name|etc",
  "text_content": "the actual sensitive text found",
  "confidence": 0.0-1.0,
  "detection_type": "pii|phi|secrets"
}}]

Text to analyze:
{text}"""


def luhn_valid(number: str) -> bool:
    """Check a card number's Luhn checksum."""
    digits = [int(d) for d in number if d.isdigit()]
    if len(digits) < 12:
        return False
    total = 0
    for i, digit in enumerate(reversed(digits)):
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def detect_pii(text: str) -> list[dict[str, Any]]:
    """
    Find PII with regular expressions. Card numbers must pass the Luhn check.

    Args:
        text: Text to scan.

    Returns:
        Detections in pattern order, each with its character span.
    """
    detections = []
    for entity_type, pattern in PII_PATTERNS.items():
        for match in pattern.finditer(text):
            if entity_type == "credit_card" and not luhn_valid(match.group(0)):
                continue
            detections.append(
                {
                    "entity_type": entity_type,
                    "detection_type": "pii",
                    "text_content": match.group(0),
                    "confidence": PATTERN_CONFIDENCE,
                    "status": "detected",
                    "start": match.start(),
                    "end": match.end(),
                }
            )
    return detections


def detect_pii_with_model(text: str, router: Optional[ProviderRouter] = None) -> list[dict[str, Any]]:
    """Ask Claude for PII/PHI findings. Failures yield an empty list."""
    router = router or ProviderRouter()
    try:
        completion = router.complete(
            "anthropic",
            PII_MODEL_PROMPT.format(text=text[:MODEL_TEXT_LIMIT]),
            max_tokens=2000,
        )
        findings = extract_json_array(completion.text)
    except (ProviderError, ParseError) as e:
        logger.warning(f"Model PII detection skipped: {e}")
        return []

    detections = []
    for finding in findings:
        if not isinstance(finding, dict) or not finding.get("text_content"):
            continue
        detections.append(
            {
                "entity_type": finding.get("entity_type") or "unknown",
                "detection_type": finding.get("detection_type") or "pii",
                "text_content": str(finding["text_content"]),
                "confidence": finding.get("confidence") or MODEL_DEFAULT_CONFIDENCE,
                "status": "detected",
            }
        )
    return detections


def summarize_detections(detections: list[dict[str, Any]]) -> dict[str, Any]:
    counts = Counter(d["entity_type"] for d in detections)
    return {"total": len(detections), "by_type": dict(counts)}
