"""Tests for revenue terms and forecasting."""

import csv
import io
import json
from datetime import date

import pytest

from aria.contracts import compute_forecast, export_csv, extract_revenue_terms, generate_forecast
from aria.contracts.forecast import (
    CSV_HEADERS,
    parse_start_month,
    ramp_factor,
    term_amount,
    tiered_amount,
)
from aria.errors import NotFoundError, ValidationError
from aria.models import RevenueTerm
from tests.fakes.fake_llm import FakeRouter

TIERS = {
    "tier_1": {"min": 0, "max": 100, "rate": 1.0},
    "tier_2": {"min": 100, "max": None, "rate": 0.5},
}


def _term(**fields) -> RevenueTerm:
    return RevenueTerm(**{"product_name": "Platform", "quantity": 10, "unit_price": 100, **fields})


@pytest.fixture
def extraction(fake_supabase):
    (row,) = fake_supabase.seed(
        "contract_extractions",
        {"document_id": "doc-1", "user_id": "user-1", "parties": {"customer": "Acme Corp"}},
    )
    return row


# Per-term arithmetic


@pytest.mark.parametrize("frequency,unit_price", [("monthly", 100), ("quarterly", 300), ("annually", 1200)])
def test_frequencies_normalise_to_monthly(frequency, unit_price):
    term = _term(billing_frequency=frequency, unit_price=unit_price)
    assert term_amount(term, 1) == pytest.approx(1000)
    assert term_amount(term, 7) == pytest.approx(1000)


def test_one_time_bills_in_first_month_only():
    term = _term(billing_frequency="one-time", quantity=1, unit_price=500)
    assert term_amount(term, 1) == 500
    assert term_amount(term, 2) == 0


def test_ramp_schedule_carries_forward():
    schedule = {"month_1": 0.5, "month_4": 1.0}
    assert ramp_factor(schedule, 1) == 0.5
    assert ramp_factor(schedule, 3) == 0.5
    assert ramp_factor(schedule, 9) == 1.0
    assert ramp_factor({"month_3": 0.8}, 1) == 1.0
    assert ramp_factor(None, 5) == 1.0
    assert term_amount(_term(ramp_schedule=schedule), 2) == pytest.approx(500)


def test_escalation_applies_each_contract_year():
    term = _term(escalation_rate=0.1)
    assert term_amount(term, 12) == pytest.approx(1000)
    assert term_amount(term, 13) == pytest.approx(1100)
    assert term_amount(term, 25) == pytest.approx(1210)


def test_minimum_commitment_is_a_floor():
    term = _term(quantity=1, unit_price=100, minimum_commitment=2400)
    assert term_amount(term, 1) == pytest.approx(200)


def test_usage_tiers_are_graduated():
    assert tiered_amount(150, TIERS) == pytest.approx(125)
    assert tiered_amount(40, TIERS) == pytest.approx(40)
    usage = _term(usage_based=True, usage_tiers=TIERS, quantity=150)
    assert term_amount(usage, 1) == pytest.approx(125)


def test_frequency_aliases():
    assert _term(billing_frequency="Annual").billing_frequency == "annually"
    assert _term(billing_frequency="one_time").billing_frequency == "one-time"


def test_parse_start_month():
    assert parse_start_month("2024-03") == date(2024, 3, 1)
    assert parse_start_month("2024-03-17") == date(2024, 3, 1)
    assert parse_start_month(None) == date.today().replace(day=1)
    with pytest.raises(ValidationError):
        parse_start_month("March")


# Monthly rollup


def test_forecast_rollup():
    terms = [
        _term(start_date="2024-01-01", term_months=3),
        _term(billing_frequency="one-time", quantity=1, unit_price=500, start_date="2024-01-01"),
        _term(usage_based=True, usage_tiers=TIERS, quantity=150, start_date="2024-02-01"),
    ]

    months = compute_forecast(terms, date(2024, 1, 1), months=4)

    assert [m.forecast_month for m in months] == ["2024-01-01", "2024-02-01", "2024-03-01", "2024-04-01"]
    assert [m.projected_revenue for m in months] == [1500, 1125, 1125, 125]
    assert [m.arr for m in months] == [12000, 13500, 13500, 1500]
    assert [m.acv for m in months] == [1500, 2625, 3750, 3875]
    assert [m.confidence_score for m in months] == [0.95, 0.922, 0.922, 0.7]
    assert [m.variance_from_previous for m in months] == [0, -375, 0, -1000]
    assert [m.variance_percentage for m in months] == [0, -25.0, 0, -88.89]


def test_end_date_stops_billing():
    months = compute_forecast([_term(start_date="2024-01-01", end_date="2024-02-15")], date(2024, 1, 1), 3)
    assert [m.projected_revenue for m in months] == [1000, 1000, 0]
    assert months[2].confidence_score == 0
    assert months[2].variance_percentage == -100.0


def test_acv_covers_trailing_twelve_months():
    months = compute_forecast([_term()], date(2024, 1, 1), months=14)
    assert months[11].acv == 12000
    assert months[13].acv == 12000


def test_no_terms_gives_zero_months():
    months = compute_forecast([], date(2024, 1, 1), months=2)
    assert [m.projected_revenue for m in months] == [0, 0]
    assert months[1].variance_percentage == 0


# Stored workflow


def test_revenue_terms_are_extracted(fake_supabase, extraction):
    reply = json.dumps(
        [
            {"product_name": "Seats", "quantity": 25, "unit_price": 40, "billing_frequency": "Annual"},
            {"product_name": "Setup", "quantity": None, "unit_price": 5000, "billing_frequency": "one-time"},
            {"product_name": "Bad", "billing_frequency": "fortnightly"},
        ]
    )
    router = FakeRouter({"openai": reply})

    saved = extract_revenue_terms(extraction["id"], "user-1", router)

    assert [t["product_name"] for t in saved] == ["Seats", "Setup"]
    assert saved[0]["billing_frequency"] == "annually"
    assert saved[1]["quantity"] == 0
    assert all(t["contract_extraction_id"] == extraction["id"] for t in saved)


def test_generate_forecast_replaces_previous_months(fake_supabase, extraction):
    fake_supabase.seed("revenue_terms", {"contract_extraction_id": extraction["id"], **_term().model_dump()})
    fake_supabase.seed("revenue_forecasts", {"contract_extraction_id": extraction["id"], "forecast_month": "2020-01-01"})
    router = FakeRouter({"openai": "Steady recurring revenue."})

    result = generate_forecast(extraction["id"], "user-1", months=6, start_month="2024-01", router=router)

    assert result["total_projected"] == 6000
    assert result["ai_narrative"] == "Steady recurring revenue."
    stored = fake_supabase.tables["revenue_forecasts"]
    assert len(stored) == 6
    assert all(row["ai_narrative"] == "Steady recurring revenue." for row in stored)
    assert stored[0]["forecast_month"] == "2024-01-01"


def test_narrative_failure_keeps_forecast(fake_supabase, extraction):
    fake_supabase.seed("revenue_terms", {"contract_extraction_id": extraction["id"], **_term().model_dump()})

    result = generate_forecast(extraction["id"], "user-1", months=2, start_month="2024-01", router=FakeRouter())

    assert result["ai_narrative"] == ""
    assert len(result["forecasts"]) == 2


def test_forecast_requires_owned_extraction(fake_supabase, extraction):
    with pytest.raises(NotFoundError):
        generate_forecast(extraction["id"], "intruder", router=FakeRouter())


def test_export_csv(fake_supabase, extraction):
    fake_supabase.seed(
        "revenue_forecasts",
        {"contract_extraction_id": extraction["id"], "forecast_month": "2024-02-01", "projected_revenue": 900,
         "arr": 10800, "acv": 1900, "variance_from_previous": -100, "variance_percentage": -10.0,
         "confidence_score": 0.95},
        {"contract_extraction_id": extraction["id"], "forecast_month": "2024-01-01", "projected_revenue": 1000,
         "arr": 12000, "acv": 1000, "variance_from_previous": None, "variance_percentage": None,
         "confidence_score": 0.95},
    )

    rows = list(csv.reader(io.StringIO(export_csv(extraction["id"], "user-1"))))

    assert rows[0] == CSV_HEADERS
    assert rows[1][:6] == ["2024-01-01", "1000", "12000", "1000", "0", "0"]
    assert rows[2][0] == "2024-02-01"
    assert json.loads(rows[1][7]) == {"customer": "Acme Corp"}
