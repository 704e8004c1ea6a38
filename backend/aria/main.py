"""FastAPI main entry point for ARIA."""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import router as api_router
from .config import get_settings
from .errors import AriaError
from .logging import get_logger

logger = get_logger(__name__)

settings = get_settings()

# Initialize FastAPI app
app = FastAPI(
    title="ARIA",
    description="Document intelligence: hybrid search, cited answers and contract analysis",
    version="0.1.0",
)

# Add CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AriaError)
async def aria_error_handler(request: Request, exc: AriaError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "details": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "ValidationError", "details": jsonable_encoder(exc.errors())},
    )


@app.get("/")
async def root():
    return {"status": "healthy", "service": "ARIA"}


@app.get("/health")
async def health_check():
    """Report which backing services are configured."""
    return {
        "status": "healthy",
        "qdrant_configured": bool(settings.qdrant_location or settings.qdrant_host),
        "supabase_configured": bool(settings.supabase_url),
        "anthropic_configured": bool(settings.anthropic_api_key),
        "openai_configured": bool(settings.openai_api_key),
        "google_configured": bool(settings.google_api_key),
        "perplexity_configured": bool(settings.perplexity_api_key),
    }


app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
