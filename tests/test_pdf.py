"""Tests for PDF rendering and text extraction."""

from __future__ import annotations

from smartcv.app.core.pdf_converter import PDFConverter
from smartcv.app.core.pdf_parser import PDFParser
from smartcv.app.core.result import Ok, Unavailable
from smartcv.app.models.platform_models import Document

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_first_page_rendered_as_png(sample_pdf):
    res = PDFConverter(scale=2.0).convert_to_image(Document(name="Resume.PDF", content=sample_pdf))

    assert isinstance(res, Ok)
    image = res.value
    assert image.name == "Resume.png"
    assert image.content.startswith(PNG_SIGNATURE)
    # default fitz page is 595x842 points
    assert image.width == 1190
    assert image.as_document().content_type == "image/png"


def test_garbage_is_not_converted():
    res = PDFConverter().convert_to_image(Document(name="resume.pdf", content=b"definitely not a pdf"))
    assert isinstance(res, Unavailable)


def test_image_name():
    assert PDFConverter.image_name("cv.pdf") == "cv.png"
    assert PDFConverter.image_name("cv") == "cv.png"
    assert PDFConverter.image_name("") == "document.png"


def test_parser_extracts_pdf_text(sample_pdf):
    assert "Jane Doe" in PDFParser().extract_text(sample_pdf)


def test_parser_falls_back_to_plain_text():
    assert PDFParser().extract_any(b"plain resume", name="cv.txt") == "plain resume"
