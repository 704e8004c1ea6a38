"""PDF text extraction and page rendering."""

import fitz  # PyMuPDF
from dataclasses import dataclass
from typing import Generator, Optional


@dataclass
class PdfPage:
    """A single page extracted from a PDF."""
    page_number: int
    text_content: str
    png_bytes: Optional[bytes] = None


class PDFProcessor:
    """Reads PDFs from memory, optionally rendering pages for OCR."""

    def __init__(self, dpi: int = 150):
        """
        Initialize the PDF processor.

        Args:
            dpi: Resolution for rendering pages as images.
        """
        self.dpi = dpi
        self.zoom = dpi / 72  # 72 is the default PDF resolution

    def extract_pages(
        self,
        data: bytes,
        render_textless: bool = False,
    ) -> Generator[PdfPage, None, None]:
        """
        Extract the text layer of every page.

        Args:
            data: PDF bytes.
            render_textless: Also render pages without a text layer to PNG
                so they can be sent to OCR.

        Yields:
            PdfPage objects, 1-indexed.
        """
        with fitz.open(stream=data, filetype="pdf") as doc:
            for page_num in range(len(doc)):
                page = doc[page_num]
                text_content = page.get_text()

                png_bytes = None
                if render_textless and not text_content.strip():
                    mat = fitz.Matrix(self.zoom, self.zoom)
                    png_bytes = page.get_pixmap(matrix=mat).tobytes("png")

                yield PdfPage(
                    page_number=page_num + 1,
                    text_content=text_content,
                    png_bytes=png_bytes,
                )

    def extract_text(self, data: bytes) -> str:
        """Concatenate the text layer of all pages."""
        return "\n\n".join(
            page.text_content.strip()
            for page in self.extract_pages(data)
            if page.text_content.strip()
        )
