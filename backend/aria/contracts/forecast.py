"""Revenue terms and month-by-month revenue forecasts."""

import csv
import io
import json
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import get_settings
from ..db import contracts as contracts_db
from ..errors import ProviderError, ValidationError
from ..llm import ProviderRouter, extract_json_array
from ..logging import get_logger
from ..models import RevenueTerm
from .prompts import NARRATIVE_PROMPT, NARRATIVE_SYSTEM_PROMPT, REVENUE_PROMPT, REVENUE_SYSTEM_PROMPT

logger = get_logger(__name__)

FIXED_CONFIDENCE = 0.95
USAGE_CONFIDENCE = 0.7

CSV_HEADERS = [
    "Month",
    "Projected Revenue",
    "ARR",
    "ACV",
    "Variance from Previous",
    "Variance %",
    "Confidence Score",
    "Contract Parties",
]


@dataclass
class ForecastMonth:
    """Projected revenue for one calendar month."""
    forecast_month: str
    projected_revenue: float
    arr: float
    acv: float
    confidence_score: float
    variance_from_previous: float
    variance_percentage: float


def extract_revenue_terms(
    extraction_id: str,
    user_id: str,
    router: Optional[ProviderRouter] = None,
) -> list[dict[str, Any]]:
    """
    Derive billable revenue terms from a stored contract extraction.

    Raises:
        NotFoundError: The extraction does not belong to the user.
        ParseError: The model answer held no JSON array.
    """
    router = router or ProviderRouter()
    extraction = contracts_db.get_extraction(extraction_id, user_id)

    prompt = REVENUE_PROMPT.format(analysis=json.dumps(extraction, indent=2, default=str))
    completion = router.complete(
        "openai",
        prompt,
        system=REVENUE_SYSTEM_PROMPT,
        max_tokens=3000,
        temperature=0.1,
        model=get_settings().contract_model,
    )

    rows = []
    for item in extract_json_array(completion.text):
        if not isinstance(item, dict):
            continue
        try:
            term = RevenueTerm.model_validate(item)
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed revenue term: {e}")
            continue
        rows.append({**term.model_dump(), "contract_extraction_id": extraction_id, "user_id": user_id})

    saved = contracts_db.insert_revenue_terms(rows)
    logger.info(f"Extracted {len(saved)} revenue terms from extraction {extraction_id}")
    return saved


# Forecast arithmetic

def _month_index(value: date) -> int:
    return value.year * 12 + value.month - 1


def _month_start(index: int) -> date:
    return date(index // 12, index % 12 + 1, 1)


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def parse_start_month(value: Optional[str]) -> date:
    """Parse ``YYYY-MM`` (or a full ISO date) into the first of that month."""
    if not value:
        return date.today().replace(day=1)
    try:
        year, month = str(value)[:7].split("-")
        return date(int(year), int(month), 1)
    except ValueError as e:
        raise ValidationError(f"Invalid start month: {value}") from e


def tiered_amount(quantity: float, tiers: dict[str, dict[str, Optional[float]]]) -> float:
    """Price ``quantity`` units through graduated tiers."""
    total = 0.0
    for tier in sorted(tiers.values(), key=lambda t: t.get("min") or 0):
        lower = tier.get("min") or 0
        upper = tier.get("max")
        rate = tier.get("rate") or 0
        ceiling = quantity if upper is None else min(quantity, upper)
        if ceiling > lower:
            total += (ceiling - lower) * rate
    return total


def ramp_factor(schedule: Optional[dict[str, float]], month_number: int) -> float:
    """Factor for the ``month_number``-th month of a term; the last step carries forward."""
    if not schedule:
        return 1.0
    steps = []
    for key, factor in schedule.items():
        try:
            steps.append((int(str(key).rsplit("_", 1)[-1]), float(factor)))
        except ValueError:
            continue
    applicable = [factor for number, factor in sorted(steps) if number <= month_number]
    return applicable[-1] if applicable else 1.0


def _term_window(term: RevenueTerm, default_start: date) -> tuple[int, Optional[int]]:
    """First and last (inclusive) month index during which a term bills."""
    start = _month_index(_parse_date(term.start_date) or default_start)
    end_date = _parse_date(term.end_date)
    if end_date:
        return start, _month_index(end_date)
    if term.term_months:
        return start, start + term.term_months - 1
    return start, None


def term_amount(term: RevenueTerm, month_number: int) -> float:
    """Revenue a term contributes in the ``month_number``-th month since it started."""
    if term.usage_based and term.usage_tiers:
        base = tiered_amount(term.quantity, term.usage_tiers)
    else:
        base = term.quantity * term.unit_price

    if term.billing_frequency == "one-time":
        return base if month_number == 1 else 0.0

    divisor = {"monthly": 1, "quarterly": 3, "annually": 12}[term.billing_frequency]
    amount = base / divisor
    amount *= ramp_factor(term.ramp_schedule, month_number)
    amount *= (1 + term.escalation_rate) ** ((month_number - 1) // 12)
    if term.minimum_commitment:
        amount = max(amount, term.minimum_commitment / 12)
    return amount


def compute_forecast(terms: list[RevenueTerm], start_month: date, months: int = 12) -> list[ForecastMonth]:
    """
    Project revenue month by month.

    ARR is recurring revenue times twelve. ACV is the revenue of the trailing
    twelve forecast months. Confidence is weighted by revenue, with fixed
    pricing more certain than usage-based pricing.
    """
    first = _month_index(start_month)
    windows = [_term_window(term, start_month) for term in terms]

    results: list[ForecastMonth] = []
    history: list[float] = []
    for offset in range(months):
        index = first + offset
        total = recurring = weighted = 0.0
        for term, (term_start, term_end) in zip(terms, windows):
            if index < term_start or (term_end is not None and index > term_end):
                continue
            amount = term_amount(term, index - term_start + 1)
            total += amount
            if term.billing_frequency != "one-time":
                recurring += amount
            weighted += amount * (USAGE_CONFIDENCE if term.usage_based else FIXED_CONFIDENCE)

        history.append(total)
        previous = history[-2] if len(history) > 1 else 0.0
        variance = total - previous if len(history) > 1 else 0.0
        results.append(
            ForecastMonth(
                forecast_month=_month_start(index).isoformat(),
                projected_revenue=round(total, 2),
                arr=round(recurring * 12, 2),
                acv=round(sum(history[-12:]), 2),
                confidence_score=round(weighted / total, 3) if total else 0.0,
                variance_from_previous=round(variance, 2),
                variance_percentage=round(variance / previous * 100, 2) if previous > 0 else 0.0,
            )
        )
    return results


def _load_terms(extraction_id: str) -> list[RevenueTerm]:
    terms = []
    for row in contracts_db.list_revenue_terms(extraction_id):
        try:
            terms.append(RevenueTerm.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(f"Ignoring stored revenue term {row.get('id')}: {e}")
    return terms


def generate_forecast(
    extraction_id: str,
    user_id: str,
    months: int = 12,
    start_month: Optional[str] = None,
    router: Optional[ProviderRouter] = None,
) -> dict[str, Any]:
    """
    Recompute and store the forecast for an extraction, with a narrative.

    The narrative is best effort; a provider failure leaves it empty.
    """
    contracts_db.get_extraction(extraction_id, user_id)
    forecast = compute_forecast(_load_terms(extraction_id), parse_start_month(start_month), months)

    rows = [
        {**asdict(month), "contract_extraction_id": extraction_id, "user_id": user_id}
        for month in forecast
    ]
    saved = contracts_db.replace_forecasts(extraction_id, rows)

    router = router or ProviderRouter()
    narrative = ""
    try:
        narrative = router.complete(
            "openai",
            NARRATIVE_PROMPT.format(forecast=json.dumps(rows, indent=2)),
            system=NARRATIVE_SYSTEM_PROMPT,
            max_tokens=1000,
            temperature=0.3,
            model=get_settings().contract_model,
        ).text
        contracts_db.set_forecast_narrative(extraction_id, narrative)
    except ProviderError as e:
        logger.warning(f"Forecast narrative failed for extraction {extraction_id}: {e}")

    total = round(sum(month.projected_revenue for month in forecast), 2)
    logger.info(f"Generated {len(forecast)}-month forecast for extraction {extraction_id}: {total}")
    return {"forecasts": saved, "ai_narrative": narrative, "total_projected": total}


def export_csv(extraction_id: str, user_id: str) -> str:
    """Render stored forecast months as CSV."""
    extraction = contracts_db.get_extraction(extraction_id, user_id)
    parties = json.dumps(extraction.get("parties") or {})

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in contracts_db.list_forecasts(extraction_id):
        writer.writerow(
            [
                row.get("forecast_month"),
                row.get("projected_revenue"),
                row.get("arr"),
                row.get("acv"),
                row.get("variance_from_previous") or 0,
                row.get("variance_percentage") or 0,
                row.get("confidence_score"),
                parties,
            ]
        )
    return buffer.getvalue()
