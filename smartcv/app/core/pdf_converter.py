# smartcv/app/core/pdf_converter.py

import logging
import re
from dataclasses import dataclass

import fitz  # PyMuPDF

from smartcv.app.core.result import Ok, Result, Unavailable
from smartcv.app.models.platform_models import Document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedImage:
    name: str
    content: bytes
    width: int
    height: int

    def as_document(self) -> Document:
        return Document(name=self.name, content=self.content, content_type="image/png")


class PDFConverter:
    """Renders the first page of a PDF to PNG."""

    def __init__(self, scale: float = 4.0):
        self.scale = scale

    def convert_to_image(self, document: Document) -> Result[RenderedImage]:
        try:
            with fitz.open(stream=document.content, filetype="pdf") as doc:
                if doc.page_count == 0:
                    return Unavailable("PDF has no pages")
                pix = doc.load_page(0).get_pixmap(matrix=fitz.Matrix(self.scale, self.scale))
                png = pix.tobytes("png")
        # PyMuPDF reports unreadable input as FileDataError, a RuntimeError
        except (RuntimeError, ValueError) as e:
            logger.warning("Could not render %s: %s", document.name, e)
            return Unavailable(f"Failed to convert PDF to image: {e}")

        return Ok(RenderedImage(
            name=self.image_name(document.name),
            content=png,
            width=pix.width,
            height=pix.height,
        ))

    @staticmethod
    def image_name(pdf_name: str) -> str:
        stem = re.sub(r"\.pdf$", "", pdf_name or "document", flags=re.IGNORECASE)
        return f"{stem}.png"
