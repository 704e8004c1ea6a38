"""Sensitive data detection."""

from .pii import detect_pii, detect_pii_with_model, summarize_detections

__all__ = ["detect_pii", "detect_pii_with_model", "summarize_detections"]
