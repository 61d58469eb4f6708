#smartcv/app/core/pdf_parser.py
from io import BytesIO
from PyPDF2 import PdfReader


class PDFParser:
    """Handles PDF and plain text extraction."""

    def extract_text(self, content: bytes) -> str:
        reader = PdfReader(BytesIO(content))
        return "\n".join(t for t in (page.extract_text() for page in reader.pages) if t).strip()

    def extract_any(self, content: bytes, name: str = "") -> str:
        """PDF text for PDFs, UTF-8 decoded text for anything else."""
        if content.startswith(b"%PDF") or name.lower().endswith(".pdf"):
            return self.extract_text(content)
        return content.decode("utf-8", errors="replace")
