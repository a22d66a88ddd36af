"""
Text extraction for uploaded trial documents (PDF, Word, Excel, plain text).
"""
import io
import logging
from pathlib import Path
from typing import Union

import docx
import pandas as pd
import PyPDF2

from .exceptions import UnsupportedFormatError
from .models import FileType, RawDocument

logger = logging.getLogger(__name__)


def classify_file_type(file_name: str) -> FileType:
    name = file_name.lower()
    if name.endswith('.pdf'):
        return FileType.PDF
    if name.endswith('.xlsx') or name.endswith('.xls'):
        return FileType.EXCEL
    if name.endswith('.docx') or name.endswith('.doc'):
        return FileType.WORD
    return FileType.UNKNOWN


def extract_text_from_pdf(data: bytes) -> str:
    pdf_reader = PyPDF2.PdfReader(io.BytesIO(data))
    text = ""
    for page in pdf_reader.pages:
        text += (page.extract_text() or "") + " "
    return text


def extract_text_from_docx(data: bytes) -> str:
    doc = docx.Document(io.BytesIO(data))
    text = ""
    for paragraph in doc.paragraphs:
        text += paragraph.text + "\n"
    for table in doc.tables:
        for row in table.rows:
            text += " ".join(cell.text for cell in row.cells) + "\n"
    return text


def extract_text_from_excel(data: bytes) -> str:
    """Every sheet rendered as one line per row: header cells, then values."""
    sheets = pd.read_excel(io.BytesIO(data), sheet_name=None, dtype=str)
    lines = []
    for sheet_name, frame in sheets.items():
        lines.append(str(sheet_name))
        frame = frame.fillna("")
        for _, row in frame.iterrows():
            cells = [f"{column} {value}".strip() for column, value in row.items() if value != ""]
            if cells:
                lines.append(" ".join(cells))
    return "\n".join(lines)


def extract_text_from_plain(data: bytes) -> str:
    return data.decode('utf-8')


EXTRACTORS = {
    FileType.PDF: extract_text_from_pdf,
    FileType.WORD: extract_text_from_docx,
    FileType.EXCEL: extract_text_from_excel,
    FileType.UNKNOWN: extract_text_from_plain,
}


def extract_text(data: bytes, declared_type: FileType, file_name: str = "<document>") -> str:
    """Return the plain text of a document or raise UnsupportedFormatError."""
    if not data:
        return ""
    try:
        return EXTRACTORS[declared_type](data)
    except Exception as e:
        raise UnsupportedFormatError(file_name, f"{type(e).__name__}: {e}") from e


def load_document(file_name: str, data: bytes) -> RawDocument:
    declared_type = classify_file_type(file_name)
    text = extract_text(data, declared_type, file_name)
    logger.debug("Extracted %d characters from %s (%s)", len(text), file_name, declared_type.value)
    return RawDocument(name=file_name, byte_size=len(data), declared_type=declared_type, text=text)


def read_file(path: Union[str, Path]) -> RawDocument:
    path = Path(path)
    return load_document(path.name, path.read_bytes())
