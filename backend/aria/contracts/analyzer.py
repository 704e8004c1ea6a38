"""Structured extraction of contract terms."""

from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import get_settings
from ..db import contracts as contracts_db
from ..errors import AllProvidersFailed, ParseError, ProviderError
from ..llm import Completion, ProviderRouter, extract_json_object
from ..logging import get_logger
from ..models import ContractExtraction
from .prompts import ANALYSIS_PROMPT, ANALYSIS_SYSTEM_PROMPT, EXTRACTION_SCHEMA

logger = get_logger(__name__)

EXTRACTION_CONFIDENCE = 0.9


def _extract(router: ProviderRouter, prompt: str) -> tuple[ContractExtraction, Completion]:
    """Claude first, then GPT-4o. An answer without a usable extraction moves on to the next model."""
    settings = get_settings()
    attempts = [
        ("anthropic", None),
        ("openai", settings.contract_model),
    ]
    errors: dict[str, Exception] = {}
    for provider, model in attempts:
        try:
            completion = router.complete(
                provider,
                prompt,
                system=ANALYSIS_SYSTEM_PROMPT,
                max_tokens=4000,
                temperature=0.1,
                model=model,
            )
            extraction = ContractExtraction.model_validate(extract_json_object(completion.text))
            return extraction, completion
        except (ProviderError, ParseError, PydanticValidationError) as e:
            logger.warning(f"Contract analysis with {provider} failed: {e}")
            errors[provider] = e
    raise AllProvidersFailed(errors)


def analyze_contract(
    document_id: str,
    user_id: str,
    extracted_text: str,
    router: Optional[ProviderRouter] = None,
) -> dict[str, Any]:
    """
    Extract parties, terms, pricing and risk from contract text and store it.

    Args:
        document_id: Document the text came from.
        user_id: Owner of the extraction.
        extracted_text: Full contract text.
        router: Provider router.

    Returns:
        Dict with the stored extraction row and the model that produced it.

    Raises:
        AllProvidersFailed: Neither Claude nor GPT-4o gave a usable extraction.
    """
    router = router or ProviderRouter()
    prompt = ANALYSIS_PROMPT.format(schema=EXTRACTION_SCHEMA, text=extracted_text)

    extraction, completion = _extract(router, prompt)

    record = contracts_db.insert_extraction(
        {
            "document_id": document_id,
            "user_id": user_id,
            **extraction.model_dump(),
            "extraction_model": completion.model,
            "extraction_confidence": EXTRACTION_CONFIDENCE,
        }
    )
    logger.info(
        f"Contract analysis completed for document {document_id} "
        f"using {completion.model} (risk {extraction.risk_score})"
    )
    return {"extraction": record, "model_used": completion.model}
