import io
import os
from typing import Optional

from docx import Document
from pypdf import PdfReader

from app.errors import ExtractionError, UnsupportedFileTypeError
from app.services.logging import get_logger


logger = get_logger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_EXTENSIONS = ("txt", "md")


def file_extension(filename: Optional[str]) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()


def extract_text_from_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    # one line per page
    return "".join((page.extract_text() or "") + "\n" for page in reader.pages)


def extract_text_from_docx(data: bytes) -> str:
    """Paragraph text followed by table cell text"""
    doc = Document(io.BytesIO(data))
    parts = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                parts.append(cell.text)
    return "\n".join(parts)


def extract_text_from_upload(filename: Optional[str], content_type: Optional[str], data: bytes) -> str:
    """
    Turn an uploaded PDF, DOCX or plain-text file into a flat string.

    Raises UnsupportedFileTypeError for anything else and ExtractionError when
    a recognised document cannot be parsed.
    """
    ext = file_extension(filename)
    mime = (content_type or "").lower()

    if mime == PDF_MIME or ext == "pdf":
        kind, parser = "pdf", extract_text_from_pdf
    elif mime == DOCX_MIME or ext == "docx":
        kind, parser = "docx", extract_text_from_docx
    elif mime.startswith("text/") or ext in TEXT_EXTENSIONS:
        return data.decode("utf-8", errors="replace")
    else:
        raise UnsupportedFileTypeError(f"Unsupported file type: {content_type or ext or 'unknown'}")

    try:
        text = parser(data)
    except Exception as e:
        logger.error("file_parse_failed", filename=filename, kind=kind, error=str(e))
        raise ExtractionError(f"Failed to parse {kind.upper()} file: {e}") from e
    logger.info("file_parsed", filename=filename, kind=kind, chars=len(text))
    return text
