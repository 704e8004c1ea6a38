"""Pydantic schemas for the ARIA API."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator


ModelProvider = Literal["anthropic", "openai", "google", "perplexity"]


# Retrieval


class ChunkHit(BaseModel):
    """A stored chunk returned by search."""
    id: str = Field(..., description="Chunk identifier")
    document_id: str
    file_name: str = ""
    file_type: str = ""
    text_content: str = ""
    chunk_index: int = 0
    source_page: Optional[int] = None
    confidence: Optional[float] = None
    processing_method: Optional[str] = None
    org_id: Optional[str] = None
    room_id: Optional[str] = None
    score: float = Field(..., description="Similarity, or 0.7 for keyword matches")
    score_type: Literal["vector", "text"] = "vector"


class Source(BaseModel):
    """A numbered source cited by a generated answer."""
    id: str
    title: str
    snippet: str
    page: int
    document_id: str
    citation_number: int
    confidence: Optional[float] = None
    processing_method: Optional[str] = None


class Verification(BaseModel):
    """Cross-model check of an answer against its sources."""
    model: str
    supported: Optional[bool] = None
    notes: str = ""


# Query


class QueryRequest(BaseModel):
    """Document question from a signed-in user."""
    query: str = Field(..., description="Natural language query", min_length=1)
    user_id: str = Field(..., min_length=1)
    session_id: Optional[str] = None
    org_id: Optional[str] = None
    room_ids: list[str] = Field(default_factory=list)
    top_k: int = Field(default=10, ge=1, le=50)
    verifier: bool = False


class QueryResponse(BaseModel):
    answer: str
    sources: list[Source] = Field(default_factory=list)
    chunks_found: int = 0
    session_id: Optional[str] = None
    verification: Optional[Verification] = None


class EnhancedQueryRequest(BaseModel):
    """Query with room scoping, share tokens and PII detection."""
    query: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    session_id: Optional[str] = None
    room_id: Optional[str] = None
    org_id: Optional[str] = None
    answer_only_mode: bool = False
    token: Optional[str] = Field(None, description="Room share token")
    action: Literal["query", "detect_pii"] = "query"
    top_k: int = Field(default=10, ge=1, le=50)


class EnhancedQueryResponse(QueryResponse):
    answer_only_mode: bool = False
    search_metadata: dict[str, Any] = Field(default_factory=dict)


class PIIDetection(BaseModel):
    entity_type: str
    detection_type: str = "pii"
    text_content: str
    confidence: float
    status: str = "detected"
    start: Optional[int] = None
    end: Optional[int] = None


class PIIDetectionResponse(BaseModel):
    detections: list[PIIDetection]
    summary: dict[str, Any]


class SearchChunksRequest(BaseModel):
    query_embedding: list[float] = Field(..., min_length=1)
    match_threshold: float = 0.5
    match_count: int = Field(default=10, ge=1, le=100)
    filter_org_id: Optional[str] = None
    filter_room_ids: list[str] = Field(default_factory=list)
    filter_owner_id: Optional[str] = None


class SearchChunksResponse(BaseModel):
    results: list[ChunkHit]


# Documents


class DocumentRecord(BaseModel):
    """A documents row as returned to clients."""
    model_config = {"extra": "allow"}

    id: str
    user_id: str
    file_name: str
    file_type: str
    file_size: int = 0
    storage_path: str = ""
    is_folder: bool = False
    parent_folder_id: Optional[str] = None
    processing_status: Optional[str] = None
    ai_summary: Optional[str] = None


class CreateFolderRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    parent_folder_id: Optional[str] = None


class CreateVersionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    title: str
    storage_path: str
    size_bytes: int = Field(..., ge=0)
    mime_type: str


class SummaryResponse(BaseModel):
    summary: Optional[str] = None


# Ingestion


class ProcessDocumentsRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class ProcessDocumentsResponse(BaseModel):
    success: bool = True
    total_documents: int
    processed_documents: int
    skipped_documents: int


class EmbedRequest(BaseModel):
    document_id: str = Field(..., min_length=1)
    org_id: Optional[str] = None
    room_id: Optional[str] = None


class EmbedResponse(BaseModel):
    success: bool = True
    chunks_processed: int
    chunks_failed: int
    total_chunks: int


class OcrResponse(BaseModel):
    success: bool = True
    pages_processed: int
    chunks_processed: int
    chunks_failed: int


# Sharing


class RoomTokenRequest(BaseModel):
    room_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    expires_in_hours: int = Field(default=24, ge=1)
    permissions: dict[str, Any] = Field(default_factory=lambda: {"query_only": True})


class RoomTokenResponse(BaseModel):
    success: bool = True
    token: str
    share_url: str
    expires_at: str
    permissions: dict[str, Any]
    room_name: Optional[str] = None


class QAShareRequest(BaseModel):
    org_id: str = Field(..., min_length=1)
    room_id: Optional[str] = None
    expires_in_hours: int = Field(default=24, ge=1)


class QAShareResponse(BaseModel):
    token: str
    expires_at: str
    share_url: str


# Assistant


class DocCitation(BaseModel):
    title: str = "Unknown Document"
    snippet: str = ""
    page: Optional[int] = None
    document_id: Optional[str] = None


class WebResult(BaseModel):
    title: str = ""
    url: str
    snippet: str = ""


class AnswerRequest(BaseModel):
    question: str = Field(..., min_length=1)
    model: str = "anthropic"
    mode: str = "docs"
    doc_citations: list[DocCitation] = Field(default_factory=list)
    web_results: list[WebResult] = Field(default_factory=list)
    verifier: bool = False


class AnswerResponse(BaseModel):
    answer: str
    citations: list[DocCitation] = Field(default_factory=list)
    web_results: list[WebResult] = Field(default_factory=list)
    verification: Optional[Verification] = None
    search_results_count: int = 0


class WebSearchRequest(BaseModel):
    question: str = Field(..., min_length=1)


class WebSearchResponse(BaseModel):
    answer: str
    web_results: list[WebResult] = Field(default_factory=list)
    search_results_count: int = 0


class PerplexitySearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    include_images: bool = False
    search_domain: Optional[str] = None
    recency_filter: Literal["hour", "day", "week", "month", "year"] = "month"


class PerplexitySearchResponse(BaseModel):
    content: str
    citations: list[str] = Field(default_factory=list)
    related_questions: list[str] = Field(default_factory=list)
    images: list[Any] = Field(default_factory=list)
    usage: Optional[dict[str, Any]] = None


class ChatDocument(BaseModel):
    name: str
    summary: Optional[str] = None


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    user_id: Optional[str] = Field(None, description="Load this user's document summaries as context")
    documents: list[ChatDocument] = Field(default_factory=list)


class ChatResponse(BaseModel):
    response: str


class CodeRequest(BaseModel):
    instruction: str = Field(..., min_length=1)
    model: str = "anthropic"
    language: Optional[str] = None
    constraints: Optional[str] = None


class CodeFile(BaseModel):
    path: str
    content: str


class CodeOutput(BaseModel):
    files: list[CodeFile] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)
    tests: Optional[str] = None


class CodeResponse(BaseModel):
    content: str
    code_output: CodeOutput
    model: str


class ProviderHealth(BaseModel):
    provider: str
    model: Optional[str] = None
    status: Literal["healthy", "error"]
    latency_ms: Optional[int] = None
    error: Optional[str] = None


class HealthReport(BaseModel):
    timestamp: str
    results: list[ProviderHealth]


# Contracts


class ContractExtraction(BaseModel):
    """Structured terms extracted from a contract."""
    parties: dict[str, Any] = Field(default_factory=dict)
    term_details: dict[str, Any] = Field(default_factory=dict)
    pricing: dict[str, Any] = Field(default_factory=dict)
    renewal_terms: Optional[dict[str, Any]] = None
    termination_clauses: Optional[dict[str, Any]] = None
    ip_provisions: Optional[dict[str, Any]] = None
    indemnity_clauses: Optional[dict[str, Any]] = None
    liability_cap: Optional[dict[str, Any]] = None
    governing_law: Optional[dict[str, Any]] = None
    unusual_clauses: Optional[dict[str, Any]] = None
    risk_score: int = Field(default=0, ge=0, le=100)
    risk_rationale: str = ""

    @field_validator("parties", "term_details", "pricing", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return value or {}

    @field_validator(
        "renewal_terms",
        "termination_clauses",
        "ip_provisions",
        "indemnity_clauses",
        "liability_cap",
        "governing_law",
        "unusual_clauses",
        mode="before",
    )
    @classmethod
    def _clause_to_dict(cls, value: Any) -> Any:
        # Models sometimes answer a clause with plain text or a list
        if value in (None, "", [], {}):
            return None
        if isinstance(value, dict):
            return value
        if isinstance(value, list):
            return {"items": value}
        return {"text": str(value)}

    @field_validator("risk_score", mode="before")
    @classmethod
    def _clamp_risk(cls, value: Any) -> int:
        try:
            score = int(round(float(value)))
        except (TypeError, ValueError):
            return 0
        return max(0, min(100, score))

    @field_validator("risk_rationale", mode="before")
    @classmethod
    def _rationale(cls, value: Any) -> str:
        return value or ""


class AnalyzeContractRequest(BaseModel):
    document_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    extracted_text: str = Field(..., min_length=1)


class AnalyzeContractResponse(BaseModel):
    success: bool = True
    extraction: dict[str, Any]
    model_used: str


class Obligation(BaseModel):
    obligation_type: str = "review"
    description: str
    due_date: Optional[str] = None
    threshold_amount: Optional[float] = None
    threshold_metric: Optional[str] = None
    responsible_party: Optional[str] = None
    priority: Literal["low", "medium", "high", "critical"] = "medium"

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> str:
        value = str(value or "medium").lower()
        return value if value in ("low", "medium", "high", "critical") else "medium"

    @field_validator("threshold_metric", mode="before")
    @classmethod
    def _metric(cls, value: Any) -> Optional[str]:
        return None if value in (None, "", "null") else value


class ObligationRequest(BaseModel):
    extraction_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    action: Literal["extract", "check_due"] = "extract"
    window_days: int = Field(default=7, ge=0)


class RevenueTerm(BaseModel):
    """A billable line extracted from a contract."""
    sku: Optional[str] = None
    product_name: str = ""
    quantity: float = 1
    unit_price: float = 0
    currency: str = "USD"
    billing_frequency: Literal["monthly", "quarterly", "annually", "one-time"] = "monthly"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    term_months: Optional[int] = None
    usage_based: bool = False
    usage_tiers: Optional[dict[str, dict[str, Optional[float]]]] = None
    ramp_schedule: Optional[dict[str, float]] = None
    escalation_rate: float = 0
    minimum_commitment: Optional[float] = None

    @field_validator("billing_frequency", mode="before")
    @classmethod
    def _frequency(cls, value: Any) -> str:
        value = str(value or "monthly").lower().replace("_", "-")
        aliases = {"annual": "annually", "yearly": "annually", "onetime": "one-time", "once": "one-time"}
        return aliases.get(value, value)

    @field_validator("quantity", "unit_price", "escalation_rate", mode="before")
    @classmethod
    def _zero_default(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("usage_based", mode="before")
    @classmethod
    def _bool_default(cls, value: Any) -> Any:
        return bool(value)


class ForecastRequest(BaseModel):
    extraction_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    action: Literal["extract_revenue", "generate_forecast", "export_csv"] = "extract_revenue"
    forecast_months: int = Field(default=12, ge=1, le=120)
    start_month: Optional[str] = Field(None, description="YYYY-MM; defaults to the current month")


class SchemaColumn(BaseModel):
    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    default: Optional[str] = None
    constraints: list[str] = Field(default_factory=list)

    @field_validator("default", mode="before")
    @classmethod
    def _default(cls, value: Any) -> Optional[str]:
        if value is None or value == "" or value == "null":
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    @field_validator("constraints", mode="before")
    @classmethod
    def _constraints(cls, value: Any) -> list:
        return value or []


class SchemaTable(BaseModel):
    name: str
    description: str = ""
    columns: list[SchemaColumn]


class SuggestedSchema(BaseModel):
    tables: list[SchemaTable]
    description: str = ""
    confidence: float = 0.8


class SchemaRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    action: Literal["suggest", "approve", "implement"] = "suggest"
    document_id: Optional[str] = None
    extracted_text: Optional[str] = None
    schema_history_id: Optional[str] = None
