"""Vision-model text extraction for scans and images."""

from dataclasses import dataclass
from typing import Optional

from ..errors import ExtractionError, ProviderError
from ..llm import ProviderRouter
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass
class ExtractedPage:
    """Text recovered from one page or image."""
    page_number: int
    text: str
    confidence: float
    method: str


class VisionTextExtractor:
    """Extracts text with Gemini, then GPT-4o, then Claude.

    Each model has a fixed confidence that is stored with the extracted text so
    that downstream search can weigh OCR output against native text layers.
    """

    EXTRACTION_PROMPT = (
        "Extract all text from this document with high accuracy. "
        "Preserve formatting and structure. If there are images with text, "
        "perform OCR on them. Return only the extracted text."
    )

    # (provider, confidence)
    CHAIN = (
        ("google", 0.9),
        ("openai", 0.85),
        ("anthropic", 0.88),
    )

    def __init__(self, router: Optional[ProviderRouter] = None):
        self.router = router or ProviderRouter()

    def extract(self, data: bytes, mime_type: str, page_number: int = 1) -> ExtractedPage:
        """
        Extract text from image or PDF bytes.

        Args:
            data: File content.
            mime_type: MIME type sent with the file.
            page_number: Page number recorded on the result.

        Returns:
            ExtractedPage from the first model that returns text.

        Raises:
            ExtractionError: Every model failed.
        """
        errors = []
        for provider, confidence in self.CHAIN:
            try:
                completion = self.router.complete_with_file(
                    provider, self.EXTRACTION_PROMPT, data, mime_type
                )
            except ProviderError as e:
                logger.warning(f"OCR with {provider} failed: {e}")
                errors.append(str(e))
                continue

            return ExtractedPage(
                page_number=page_number,
                text=completion.text.strip(),
                confidence=confidence,
                method=completion.model,
            )

        raise ExtractionError("All OCR methods failed: " + "; ".join(errors))
