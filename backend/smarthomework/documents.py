from __future__ import annotations
from io import BytesIO

from docx import Document
from pypdf import PdfReader

from .errors import FileReadFailed


def _read_docx(content: bytes) -> str:
    doc = Document(BytesIO(content))
    lines = [p.text for p in doc.paragraphs if p.text.strip()]
    # Worksheets often put questions inside tables
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                if cell.text.strip():
                    lines.append(cell.text)
    return "\n".join(lines)


def _read_pdf(content: bytes) -> str:
    reader = PdfReader(BytesIO(content))
    pages = []
    for i, page in enumerate(reader.pages, start=1):
        pages.append(f"--- Page {i} ---\n{page.extract_text() or ''}\n")
    return "".join(pages)


def extract_text(filename: str, content: bytes) -> str:
    """Plain text of a .docx / .pdf / text upload."""
    name = (filename or "").lower()
    try:
        if name.endswith(".docx"):
            return _read_docx(content)
        if name.endswith(".pdf"):
            return _read_pdf(content)
        return content.decode("utf-8-sig")
    except Exception as e:
        raise FileReadFailed(f"Failed to read {filename or 'file'}: {e}") from e
