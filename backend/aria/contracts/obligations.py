"""Contract obligations and due-date reminders."""

import json
from datetime import date, timedelta
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import get_settings
from ..db import contracts as contracts_db
from ..errors import ProviderError
from ..llm import ProviderRouter, extract_json_array
from ..logging import get_logger
from ..models import Obligation
from .prompts import (
    OBLIGATIONS_PROMPT,
    OBLIGATIONS_SYSTEM_PROMPT,
    REMINDER_PROMPT,
    REMINDER_SYSTEM_PROMPT,
)

logger = get_logger(__name__)


def _parse_obligations(items: list[Any]) -> list[Obligation]:
    obligations = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            obligations.append(Obligation.model_validate(item))
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed obligation: {e}")
    return obligations


def extract_obligations(
    extraction_id: str,
    user_id: str,
    router: Optional[ProviderRouter] = None,
) -> list[dict[str, Any]]:
    """
    Derive dated obligations from a stored contract extraction.

    Raises:
        NotFoundError: The extraction does not belong to the user.
        ParseError: The model answer held no JSON array.
    """
    router = router or ProviderRouter()
    extraction = contracts_db.get_extraction(extraction_id, user_id)

    prompt = OBLIGATIONS_PROMPT.format(analysis=json.dumps(extraction, indent=2, default=str))
    completion = router.complete(
        "openai",
        prompt,
        system=OBLIGATIONS_SYSTEM_PROMPT,
        max_tokens=3000,
        temperature=0.1,
        model=get_settings().contract_model,
    )
    obligations = _parse_obligations(extract_json_array(completion.text))

    rows = [
        {
            **obligation.model_dump(),
            "contract_extraction_id": extraction_id,
            "user_id": user_id,
            "status": "pending",
        }
        for obligation in obligations
    ]
    saved = contracts_db.insert_obligations(rows)
    logger.info(f"Extracted {len(saved)} obligations from extraction {extraction_id}")
    return saved


def _draft_reminder(router: ProviderRouter, obligation: dict[str, Any]) -> str:
    extraction = obligation.get("contract_extractions") or {}
    prompt = REMINDER_PROMPT.format(
        description=obligation.get("description", ""),
        due_date=obligation.get("due_date", ""),
        priority=obligation.get("priority", "medium"),
        responsible_party=obligation.get("responsible_party") or "Unknown",
        parties=json.dumps(extraction.get("parties") or {}),
    )
    return router.complete(
        "openai",
        prompt,
        system=REMINDER_SYSTEM_PROMPT,
        max_tokens=500,
        temperature=0.3,
        model=get_settings().contract_model,
    ).text


def check_due_obligations(
    user_id: str,
    today: Optional[date] = None,
    window_days: int = 7,
    router: Optional[ProviderRouter] = None,
) -> dict[str, Any]:
    """
    Queue reminders for pending obligations due within the window.

    Obligations whose reminder draft fails are left untouched so the next
    check picks them up again.

    Returns:
        Dict with the number of queued reminders and the work items.
    """
    today = today or date.today()
    cutoff = (today + timedelta(days=window_days)).isoformat()

    due = contracts_db.list_due_obligations(user_id, cutoff)
    if not due:
        return {"count": 0, "work_items": []}

    router = router or ProviderRouter()
    work_items = []
    notified = []
    for obligation in due:
        try:
            email = _draft_reminder(router, obligation)
        except ProviderError as e:
            logger.warning(f"Reminder draft for obligation {obligation['id']} failed: {e}")
            continue

        work_items.append(
            {
                "user_id": user_id,
                "task_type": "obligation_reminder",
                "obligation_id": obligation["id"],
                "title": f"Upcoming: {obligation.get('description', '')}",
                "description": f"Contract obligation due {obligation.get('due_date')}",
                "priority": obligation.get("priority", "medium"),
                "due_date": obligation.get("due_date"),
                "email_draft": email,
            }
        )
        notified.append(obligation["id"])

    saved = contracts_db.insert_work_items(work_items)
    contracts_db.mark_obligations_notified(notified)
    logger.info(f"Queued {len(saved)} obligation reminders for user {user_id}")
    return {"count": len(saved), "work_items": saved}
