from .analyzer import analyze_contract
from .forecast import compute_forecast, export_csv, extract_revenue_terms, generate_forecast
from .obligations import check_due_obligations, extract_obligations
from .schema_suggest import approve_schema, implement_schema, render_migration, suggest_schema

__all__ = [
    "analyze_contract",
    "approve_schema",
    "check_due_obligations",
    "compute_forecast",
    "export_csv",
    "extract_obligations",
    "extract_revenue_terms",
    "generate_forecast",
    "implement_schema",
    "render_migration",
    "suggest_schema",
]
