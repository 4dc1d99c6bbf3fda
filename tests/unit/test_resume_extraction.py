from io import BytesIO

import pytest
from docx import Document
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from resume_parsing import ExtractionError, InvalidUploadError, detect_kind, extract_text, validate_upload


def _docx_bytes(*lines):
    document = Document()
    for line in lines:
        document.add_paragraph(line)
    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _pdf_bytes(*lines):
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=12)
    for line in lines:
        pdf.cell(0, 10, line, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return bytes(pdf.output())


def test_detect_kind_by_extension_and_mime():
    assert detect_kind("cv.PDF") == "pdf"
    assert detect_kind("upload", "application/pdf") == "pdf"
    assert detect_kind("cv.docx") == "docx"
    assert detect_kind("upload", "application/vnd.openxmlformats-officedocument.wordprocessingml.document") == "docx"
    with pytest.raises(InvalidUploadError):
        detect_kind("cv.txt", "text/plain")


def test_validate_upload_limits():
    with pytest.raises(InvalidUploadError, match="No file"):
        validate_upload("cv.pdf", b"", max_bytes=10)
    with pytest.raises(InvalidUploadError, match="too large"):
        validate_upload("cv.pdf", b"x" * 11, max_bytes=10)
    assert validate_upload("cv.docx", b"x", max_bytes=10) == "docx"


def test_docx_text():
    text = extract_text("cv.docx", _docx_bytes("Jane Doe", "jane@x.com", "555-123-4567"))
    assert text.splitlines() == ["Jane Doe", "jane@x.com", "555-123-4567"]


def test_pdf_text():
    text = extract_text("cv.pdf", _pdf_bytes("Jane Doe", "jane@x.com"))
    assert "Jane Doe" in text
    assert "jane@x.com" in text


def test_garbage_document_is_extraction_error():
    with pytest.raises(ExtractionError):
        extract_text("cv.docx", b"definitely not a zip archive")
    with pytest.raises(ExtractionError):
        extract_text("cv.pdf", b"not a pdf")
