"""
Unit tests for text extraction: dispatch by media type and per-format readers.
"""

import io

import docx
import pypdf
import pytest

from app.core.config import MIME_DOCX, MIME_PDF, MIME_PPTX
from app.core.errors import ExtractionError
from app.ingest.loader import FileKind, classify, extract_text
from conftest import make_pptx


class TestClassify:
    """Tests for classify()."""

    def test_known_types(self) -> None:
        assert classify(MIME_PDF) is FileKind.PDF
        assert classify(MIME_DOCX) is FileKind.DOCX
        assert classify(MIME_PPTX) is FileKind.PPTX

    def test_unknown_or_missing_types(self) -> None:
        assert classify("text/plain") is FileKind.UNSUPPORTED
        assert classify("application/vnd.google-apps.document") is FileKind.UNSUPPORTED
        assert classify("") is FileKind.UNSUPPORTED
        assert classify(None) is FileKind.UNSUPPORTED


class TestExtractText:
    """Tests for extract_text()."""

    def test_unsupported_type_returns_placeholder(self) -> None:
        assert extract_text(b"hello", "text/plain", "notes.txt") == "[Unsupported file type: notes.txt]"

    def test_pptx_runs_joined_by_space_slides_by_newline(self) -> None:
        raw = make_pptx(["Week 1", "Intro"], ["Late policy:", "10% per day"])
        assert extract_text(raw, MIME_PPTX, "deck.pptx") == "Week 1 Intro\nLate policy: 10% per day"

    def test_pptx_strips_nested_tags_and_ignores_rels(self) -> None:
        raw = make_pptx(["<b>Bold</b> text"])
        assert extract_text(raw, MIME_PPTX, "deck.pptx") == "Bold text"

    def test_pptx_slide_without_runs_gives_empty_line(self) -> None:
        raw = make_pptx([], ["Only slide two"])
        assert extract_text(raw, MIME_PPTX, "deck.pptx") == "\nOnly slide two"

    def test_docx_paragraphs(self) -> None:
        document = docx.Document()
        document.add_paragraph("Office hours: Monday 2pm")
        document.add_paragraph("Room 101")
        buf = io.BytesIO()
        document.save(buf)
        text = extract_text(buf.getvalue(), MIME_DOCX, "syllabus.docx")
        assert "Office hours: Monday 2pm\nRoom 101" in text

    def test_docx_table_cells_in_body_order(self) -> None:
        document = docx.Document()
        document.add_paragraph("Grading")
        table = document.add_table(rows=1, cols=2)
        table.cell(0, 0).text = "Late policy"
        table.cell(0, 1).text = "10% per day"
        document.add_paragraph("Contact the TA")
        buf = io.BytesIO()
        document.save(buf)
        text = extract_text(buf.getvalue(), MIME_DOCX, "syllabus.docx")
        lines = [line for line in text.splitlines() if line]
        assert lines == ["Grading", "Late policy", "10% per day", "Contact the TA"]

    def test_docx_nested_and_merged_cells(self) -> None:
        document = docx.Document()
        table = document.add_table(rows=1, cols=3)
        merged = table.cell(0, 0).merge(table.cell(0, 1))
        merged.text = "Exams"
        inner = table.cell(0, 2).add_table(rows=1, cols=1)
        inner.cell(0, 0).text = "Week 10"
        buf = io.BytesIO()
        document.save(buf)
        text = extract_text(buf.getvalue(), MIME_DOCX, "syllabus.docx")
        assert text.count("Exams") == 1
        assert "Week 10" in text

    def test_docx_vertically_merged_cell_read_once(self) -> None:
        document = docx.Document()
        table = document.add_table(rows=2, cols=2)
        merged = table.cell(0, 0).merge(table.cell(1, 0))
        merged.text = "Midterm"
        table.cell(0, 1).text = "Week 5"
        table.cell(1, 1).text = "Room 101"
        buf = io.BytesIO()
        document.save(buf)
        text = extract_text(buf.getvalue(), MIME_DOCX, "syllabus.docx")
        assert text.count("Midterm") == 1
        assert "Week 5" in text and "Room 101" in text

    def test_pdf_without_text_layer_is_empty_string(self) -> None:
        writer = pypdf.PdfWriter()
        writer.add_blank_page(width=200, height=200)
        buf = io.BytesIO()
        writer.write(buf)
        assert extract_text(buf.getvalue(), MIME_PDF, "scan.pdf").strip() == ""

    @pytest.mark.parametrize("mime", [MIME_PDF, MIME_DOCX, MIME_PPTX])
    def test_corrupt_file_raises_extraction_error(self, mime: str) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            extract_text(b"definitely not a document", mime, "bad.bin")
        assert exc_info.value.file_name == "bad.bin"
        assert "bad.bin" in exc_info.value.message
