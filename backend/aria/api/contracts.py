"""Contract intelligence endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..contracts import (
    analyze_contract,
    approve_schema,
    check_due_obligations,
    export_csv,
    extract_obligations,
    extract_revenue_terms,
    generate_forecast,
    implement_schema,
    suggest_schema,
)
from ..llm import ProviderRouter
from ..models.schemas import (
    AnalyzeContractRequest,
    AnalyzeContractResponse,
    ForecastRequest,
    ObligationRequest,
    SchemaRequest,
)
from .deps import get_router

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.post("/analyze", response_model=AnalyzeContractResponse)
def analyze(request: AnalyzeContractRequest, provider_router: ProviderRouter = Depends(get_router)):
    result = analyze_contract(
        request.document_id,
        request.user_id,
        request.extracted_text,
        router=provider_router,
    )
    return AnalyzeContractResponse(**result)


@router.post("/obligations")
def obligations(request: ObligationRequest, provider_router: ProviderRouter = Depends(get_router)):
    """Extract obligations from an extraction, or queue reminders for due ones."""
    if request.action == "check_due":
        result = check_due_obligations(
            request.user_id,
            window_days=request.window_days,
            router=provider_router,
        )
        return {"success": True, "reminders_created": result["count"], "work_items": result["work_items"]}

    saved = extract_obligations(request.extraction_id, request.user_id, router=provider_router)
    return {"success": True, "obligations": saved, "count": len(saved)}


@router.post("/forecast")
def forecast(request: ForecastRequest, provider_router: ProviderRouter = Depends(get_router)):
    if request.action == "export_csv":
        content = export_csv(request.extraction_id, request.user_id)
        return Response(
            content=content,
            media_type="text/csv",
            headers={
                "Content-Disposition": f'attachment; filename="revenue_forecast_{request.extraction_id}.csv"'
            },
        )

    if request.action == "generate_forecast":
        result = generate_forecast(
            request.extraction_id,
            request.user_id,
            months=request.forecast_months,
            start_month=request.start_month,
            router=provider_router,
        )
        return {"success": True, **result}

    saved = extract_revenue_terms(request.extraction_id, request.user_id, router=provider_router)
    return {"success": True, "revenue_terms": saved, "count": len(saved)}


@router.post("/schema")
def schema(request: SchemaRequest, provider_router: ProviderRouter = Depends(get_router)):
    """Suggest, approve or implement a schema derived from a document."""
    if request.action == "approve":
        record = approve_schema(request.schema_history_id or "", request.user_id)
        return {"success": True, "message": "Schema approved successfully", "schema_history": record}

    if request.action == "implement":
        result = implement_schema(request.schema_history_id or "", request.user_id)
        return {"success": True, "message": "Schema implemented successfully", **result}

    result = suggest_schema(
        request.document_id or "",
        request.user_id,
        request.extracted_text or "",
        router=provider_router,
    )
    return {"success": True, **result}
