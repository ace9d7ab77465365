# Document text extraction. Single place for "file bytes + declared media type → text".
# Supports PDF, Word (.docx) and PowerPoint (.pptx); anything else gets a placeholder.

import enum
import io
import re
import zipfile

from app.core.config import MIME_DOCX, MIME_PDF, MIME_PPTX
from app.core.errors import ExtractionError

SLIDES_PREFIX = "ppt/slides/"
_TEXT_RUN = re.compile(r"<a:t>.*?</a:t>", re.DOTALL)
_TAG = re.compile(r"<.*?>", re.DOTALL)


class FileKind(enum.Enum):
    PDF = "pdf"
    DOCX = "docx"
    PPTX = "pptx"
    UNSUPPORTED = "unsupported"


_KIND_BY_MIME = {
    MIME_PDF: FileKind.PDF,
    MIME_DOCX: FileKind.DOCX,
    MIME_PPTX: FileKind.PPTX,
}


def classify(mime_type: str | None) -> FileKind:
    """Map a declared media type to the extractor that handles it."""
    return _KIND_BY_MIME.get((mime_type or "").strip().lower(), FileKind.UNSUPPORTED)


def unsupported_placeholder(file_name: str) -> str:
    return f"[Unsupported file type: {file_name}]"


def extract_text(raw: bytes, mime_type: str | None, file_name: str) -> str:
    """
    Convert raw file bytes to text by declared media type.

    Raises:
        ExtractionError: If the parser for a supported type fails. Callers
            decide how to degrade; nothing is caught here beyond re-wrapping.
    """
    kind = classify(mime_type)
    if kind is FileKind.UNSUPPORTED:
        return unsupported_placeholder(file_name)
    try:
        if kind is FileKind.PDF:
            return _read_pdf(raw)
        if kind is FileKind.DOCX:
            return _read_docx(raw)
        return _read_pptx(raw)
    except ExtractionError:
        raise
    except Exception as e:
        raise ExtractionError(file_name, str(e)) from e


def _read_pdf(raw: bytes) -> str:
    from pypdf import PdfReader
    reader = PdfReader(io.BytesIO(raw))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _read_docx(raw: bytes) -> str:
    import docx
    document = docx.Document(io.BytesIO(raw))
    return "\n".join(_docx_lines(document))


def _docx_lines(container) -> list[str]:
    """Paragraph text in body order, descending into table cells (and tables inside cells)."""
    from docx.text.paragraph import Paragraph

    lines: list[str] = []
    for block in container.iter_inner_content():
        if isinstance(block, Paragraph):
            lines.append(block.text)
            continue
        seen = []
        for row in block.rows:
            for cell in row.cells:
                # merged cells come back once per spanned grid position
                if any(cell._tc is tc for tc in seen):
                    continue
                seen.append(cell._tc)
                lines.extend(_docx_lines(cell))
    return lines


def _read_pptx(raw: bytes) -> str:
    """
    Pull text runs out of every slide part. Slides come in archive order,
    which is not guaranteed to match the order they are shown in.
    """
    slides: list[str] = []
    with zipfile.ZipFile(io.BytesIO(raw)) as archive:
        for info in archive.infolist():
            name = info.filename
            if not name.startswith(SLIDES_PREFIX) or not name.endswith(".xml"):
                continue
            xml = archive.read(name).decode("utf-8", errors="replace")
            runs = [_TAG.sub("", run) for run in _TEXT_RUN.findall(xml)]
            slides.append(" ".join(runs))
    return "\n".join(slides)
