"""Prompt templates for contract analysis."""

EXTRACTION_SCHEMA = """{
  "parties": {
    "primary_party": "string",
    "counterparty": "string",
    "other_parties": ["string"]
  },
  "term_details": {
    "start_date": "YYYY-MM-DD or null",
    "end_date": "YYYY-MM-DD or null",
    "term_length": "string description",
    "auto_renewal": boolean
  },
  "pricing": {
    "amount": number,
    "currency": "string",
    "payment_terms": "string",
    "escalations": "string"
  },
  "renewal_terms": {
    "notice_period": "string",
    "renewal_conditions": "string",
    "auto_renewal": boolean
  },
  "termination_clauses": {
    "termination_rights": "string",
    "notice_periods": "string",
    "penalties": "string"
  },
  "ip_provisions": {
    "ownership": "string",
    "licensing": "string",
    "restrictions": "string"
  },
  "indemnity_clauses": {
    "scope": "string",
    "limitations": "string",
    "carve_outs": "string"
  },
  "liability_cap": {
    "cap_amount": number,
    "exceptions": "string",
    "mutual_caps": boolean
  },
  "governing_law": {
    "jurisdiction": "string",
    "dispute_resolution": "string",
    "venue": "string"
  },
  "unusual_clauses": {
    "description": "string",
    "risk_level": "low|medium|high|critical",
    "notes": "string"
  },
  "risk_score": "integer from 0-100",
  "risk_rationale": "detailed explanation of risk score"
}"""

ANALYSIS_SYSTEM_PROMPT = (
    "You are a contract analysis expert. Return only valid JSON that matches the "
    "requested schema exactly."
)

ANALYSIS_PROMPT = """Analyze the following contract text and extract structured information according to this exact JSON schema:

{schema}

Contract Text:
{text}

Return only valid JSON that matches the schema exactly. For missing fields, use null values. The risk_score should reflect overall contract risk considering terms, penalties, limitations, and unusual provisions."""

OBLIGATIONS_SYSTEM_PROMPT = (
    "You are a contract management expert. Extract specific, actionable obligations "
    "with accurate due dates."
)

OBLIGATIONS_PROMPT = """Based on the following contract analysis, extract all specific obligations, deadlines, and actionable items. Return as JSON array:

Contract Analysis:
{analysis}

Return a JSON array of obligations in this format:
[
  {{
    "obligation_type": "payment|delivery|review|renewal_notice|termination|reporting",
    "description": "Clear description of the obligation",
    "due_date": "YYYY-MM-DD (calculate based on contract terms)",
    "threshold_amount": number_or_null,
    "threshold_metric": "revenue|usage|time|units|null",
    "responsible_party": "party responsible for this obligation",
    "priority": "low|medium|high|critical"
  }}
]

Focus on payment due dates and amounts, renewal and termination notice periods, delivery deadlines, review milestones, reporting requirements and performance thresholds.
Calculate specific due dates where possible based on contract start date and term details."""

REMINDER_SYSTEM_PROMPT = "You are a professional contract manager. Write clear, actionable email reminders."

REMINDER_PROMPT = """Generate a professional email reminder for this contract obligation:

Obligation: {description}
Due Date: {due_date}
Priority: {priority}
Responsible Party: {responsible_party}
Contract Parties: {parties}

Create a concise, professional email that states the upcoming obligation with its due date, mentions any relevant amounts or thresholds and ends with a call to action.

Return only the email content (subject and body):"""

REVENUE_SYSTEM_PROMPT = (
    "You are a financial analyst expert in contract revenue recognition. "
    "Extract precise revenue terms."
)

REVENUE_PROMPT = """Extract all revenue-related terms from this contract analysis and convert to structured revenue terms:

Contract Analysis:
{analysis}

Return a JSON array of revenue terms in this format:
[
  {{
    "sku": "product/service identifier",
    "product_name": "descriptive name",
    "quantity": number,
    "unit_price": number,
    "currency": "USD|EUR|GBP etc",
    "billing_frequency": "monthly|quarterly|annually|one-time",
    "start_date": "YYYY-MM-DD",
    "end_date": "YYYY-MM-DD or null",
    "term_months": number_or_null,
    "usage_based": boolean,
    "usage_tiers": {{"tier_1": {{"min": 0, "max": 1000, "rate": 10}}}} or null,
    "ramp_schedule": {{"month_1": 0.5, "month_2": 0.75, "month_3": 1.0}} or null,
    "escalation_rate": 0.03 or 0,
    "minimum_commitment": number_or_null
  }}
]

Extract from pricing information, payment terms, and any usage-based or tiered pricing structures mentioned in the contract."""

NARRATIVE_SYSTEM_PROMPT = (
    "You are a financial analyst. Provide clear, executive-level revenue forecast analysis."
)

NARRATIVE_PROMPT = """Analyze this revenue forecast data and provide a concise executive summary:

Forecast Data:
{forecast}

Provide a 2-3 paragraph summary covering total projected revenue and growth trends, key observations about seasonality or patterns, risk factors and confidence level, and recommendations for revenue optimization.
Keep it executive-level and actionable."""

SCHEMA_SYSTEM_PROMPT = (
    "You are a database design expert. Create well-normalized, practical database schemas."
)

SCHEMA_PROMPT = """Analyze the following document and suggest a normalized database schema to store the data it contains:

Document Content:
{text}

Create a database schema that normalizes the data into logical tables, defines appropriate column types and constraints, and establishes proper relationships between tables.
Every table must include a user_id UUID column.

Return as JSON in this exact format:
{{
  "tables": [
    {{
      "name": "table_name",
      "description": "Purpose of this table",
      "columns": [
        {{
          "name": "column_name",
          "type": "TEXT|INTEGER|DECIMAL|DATE|TIMESTAMP|BOOLEAN|UUID|JSONB",
          "nullable": true,
          "primary_key": false,
          "default": "default_value_or_null",
          "constraints": ["UNIQUE", "CHECK (condition)", "REFERENCES other_table(column)"]
        }}
      ]
    }}
  ],
  "description": "Overall description of the schema and its purpose",
  "confidence": 0.95
}}"""
