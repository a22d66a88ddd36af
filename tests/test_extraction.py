import io

import docx
import pandas as pd
import pytest
from xlrd.compdoc import CompDocError

from disruption_analyzer.exceptions import AnalyzerError, UnsupportedFormatError
from disruption_analyzer.extraction import classify_file_type, extract_text, load_document, read_file
from disruption_analyzer.models import FileType


def make_docx() -> bytes:
    document = docx.Document()
    document.add_paragraph("Site 001 protocol: biopsy at week 4")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Storage"
    table.rows[0].cells[1].text = "2-8°C"
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def make_xlsx() -> bytes:
    frame = pd.DataFrame({"Site": ["001", "002"], "Inventory": ["40", "15"]})
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False, sheet_name="Stock")
    return buffer.getvalue()


@pytest.mark.parametrize("name, expected", [
    ("protocol.PDF", FileType.PDF),
    ("stock.xlsx", FileType.EXCEL),
    ("legacy.xls", FileType.EXCEL),
    ("notes.docx", FileType.WORD),
    ("old.doc", FileType.WORD),
    ("notes.txt", FileType.UNKNOWN),
    ("README", FileType.UNKNOWN),
])
def test_classify_file_type(name, expected):
    assert classify_file_type(name) == expected


def test_extract_docx_paragraphs_and_tables():
    text = extract_text(make_docx(), FileType.WORD)
    assert "Site 001 protocol: biopsy at week 4" in text
    assert "Storage 2-8°C" in text


def test_extract_excel_rows():
    text = extract_text(make_xlsx(), FileType.EXCEL)
    lines = text.splitlines()
    assert lines[0] == "Stock"
    assert "Site 001 Inventory 40" in lines
    assert "Site 002 Inventory 15" in lines


def test_legacy_xls_is_handed_to_xlrd():
    # OLE2 compound-file header of a .xls workbook, body truncated
    data = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504
    with pytest.raises(UnsupportedFormatError) as excinfo:
        load_document("stock.xls", data)
    assert isinstance(excinfo.value.__cause__, CompDocError)


def test_extract_plain_text():
    assert extract_text("Site 3 delay".encode("utf-8"), FileType.UNKNOWN) == "Site 3 delay"


def test_empty_bytes_give_empty_text():
    assert extract_text(b"", FileType.PDF) == ""


def test_corrupt_pdf_is_unsupported():
    with pytest.raises(UnsupportedFormatError) as excinfo:
        extract_text(b"definitely not a pdf", FileType.PDF, "broken.pdf")
    assert excinfo.value.file_name == "broken.pdf"
    assert isinstance(excinfo.value, AnalyzerError)


def test_binary_unknown_is_unsupported():
    with pytest.raises(UnsupportedFormatError):
        extract_text(b"\xff\xfe\x00\x81", FileType.UNKNOWN)


def test_legacy_doc_is_unsupported():
    with pytest.raises(UnsupportedFormatError):
        extract_text(b"\xd0\xcf\x11\xe0 legacy", FileType.WORD, "old.doc")


def test_load_document():
    document = load_document("trial.docx", make_docx())
    assert document.declared_type == FileType.WORD
    assert document.byte_size > 0
    assert "biopsy" in document.text


def test_read_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("Site 5 staff shortage", encoding="utf-8")
    document = read_file(path)
    assert document.name == "notes.txt"
    assert document.text == "Site 5 staff shortage"
    assert document.byte_size == len("Site 5 staff shortage")
