import pytest

from disruption_analyzer.models import FileType, RawDocument

PROTOCOL_TEXT = (
    "Store IMP at 2-8°C. Each patient undergoes a tumour biopsy at screening.\n"
    + "\n".join(f"Week {i} visit" for i in range(1, 16))
)

SUPPLY_TEXT = (
    "Site 3 Drug A inventory: 40 units reorder point 50\n"
    "Site 4 enrolled 45 of 60 patients, 5 per month, predicted end 2025-06-30\n"
    "FDA approval for Site 5 in United States due 2025-03-01 pending review\n"
    "Personnel costs $12,500.50 for Site 2 on 2025-01-15\n"
)


def make_document(text: str, name: str = "protocol.txt") -> RawDocument:
    return RawDocument(name=name, byte_size=len(text.encode("utf-8")), declared_type=FileType.UNKNOWN, text=text)


@pytest.fixture
def protocol_text():
    return PROTOCOL_TEXT


@pytest.fixture
def supply_text():
    return SUPPLY_TEXT


@pytest.fixture
def protocol_document():
    return make_document(PROTOCOL_TEXT, "protocol.txt")


@pytest.fixture
def supply_document():
    return make_document(SUPPLY_TEXT, "site_report.txt")
