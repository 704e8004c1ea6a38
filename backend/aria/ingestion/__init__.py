"""Ingestion module for document processing."""

from .chunker import chunk_text
from .embedder import DocumentEmbedder
from .ocr import ExtractedPage, VisionTextExtractor
from .pdf_processor import PDFProcessor
from .pipeline import IngestionPipeline

__all__ = [
    "chunk_text",
    "DocumentEmbedder",
    "ExtractedPage",
    "VisionTextExtractor",
    "PDFProcessor",
    "IngestionPipeline",
]
