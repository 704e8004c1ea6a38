"""HTTP routers."""

from fastapi import APIRouter

from . import assistant, contracts, documents, ingestion, search

router = APIRouter()

router.include_router(documents.router)
router.include_router(ingestion.router)
router.include_router(search.router)
router.include_router(assistant.router)
router.include_router(contracts.router)
