import pytest

from disruption_analyzer.keywords import extract_keywords
from disruption_analyzer.models import (
    BudgetImpact,
    FinanceData,
    FinanceStatus,
    InventoryStatus,
    Level,
    LogisticsData,
    RegulatoryStatus,
)
from disruption_analyzer.protocol import analyze_protocol
from disruption_analyzer.records import (
    build_sector_insights,
    content_preview,
    extract_enrollment,
    extract_finance,
    extract_logistics,
    extract_records,
    extract_regulatory,
    is_finance_file,
)


@pytest.mark.parametrize("line, reorder_point, status", [
    ("Site 3 Drug A inventory: 40 units reorder point 50", 50, InventoryStatus.WARNING),
    ("Site 1 Drug B inventory 100", 60, InventoryStatus.OK),
    ("Site 2 IMP X inventory 10 reorder point 30", 30, InventoryStatus.CRITICAL),
])
def test_extract_logistics(line, reorder_point, status):
    (record,) = extract_logistics(line)
    assert record.reorder_point == reorder_point
    assert record.status == status


def test_logistics_fields():
    (record,) = extract_logistics("Site 3 Drug A inventory: 40 units reorder point 50")
    assert record.site_id == "SITE003"
    assert record.product == "Drug A"
    assert record.inventory == 40


def test_logistics_needs_site_product_and_inventory():
    assert extract_logistics("Drug A inventory 40") == []
    assert extract_logistics("Site 3 inventory 40") == []
    assert extract_logistics("Site 3 Drug A") == []


def test_logistics_status_must_match_levels():
    with pytest.raises(ValueError):
        LogisticsData("SITE001", "Drug A", 10, 30, InventoryStatus.OK)
    assert LogisticsData.status_for(30, 30) == InventoryStatus.WARNING
    assert LogisticsData.status_for(15, 30) == InventoryStatus.CRITICAL


def test_extract_enrollment():
    (record,) = extract_enrollment("Site 4 enrolled 45 of 60 patients, 5 per month, predicted end 2025-06-30")
    assert record.site_id == "SITE004"
    assert (record.actual, record.target) == (45, 60)
    assert record.rate == 5.0
    assert record.predicted_end == "2025-06-30"
    assert record.completion == pytest.approx(0.75)


def test_extract_enrollment_with_target_keyword():
    (record,) = extract_enrollment("Site 9: 12 patients enrolled, target 30")
    assert (record.actual, record.target) == (12, 30)
    assert record.rate == 0.0
    assert record.predicted_end == ""


def test_extract_regulatory():
    (record,) = extract_regulatory("FDA approval for Site 5 in United States due 2025-03-01 pending review")
    assert record.id == "REG001"
    assert record.site_id == "SITE005"
    assert record.regulatory_body == "FDA"
    assert record.country == "United States"
    assert record.requirement_type == "approval"
    assert record.status == RegulatoryStatus.AT_RISK
    assert record.due_date == "2025-03-01"
    assert record.impact == Level.MEDIUM


def test_regulatory_ids_are_sequential():
    records = extract_regulatory("EMA inspection completed\nIRB report overdue, critical")
    assert [r.id for r in records] == ["REG001", "REG002"]
    assert records[0].requirement_type == "inspection"
    assert records[0].status == RegulatoryStatus.COMPLIANT
    assert records[1].requirement_type == "reporting"
    assert records[1].status == RegulatoryStatus.NON_COMPLIANT
    assert records[1].impact == Level.HIGH


def test_regulatory_terms_match_whole_words():
    follow_up, disapproved = extract_regulatory(
        "IRB follow-up highlight review due 2025-01-01\nEMA disapproved the amendment"
    )
    assert follow_up.impact == Level.MEDIUM
    assert follow_up.status == RegulatoryStatus.PENDING
    assert disapproved.requirement_type == "documentation"
    assert disapproved.status == RegulatoryStatus.PENDING


def test_extract_finance():
    records = extract_finance(
        "Personnel costs $12,500.50 for Site 2 on 2025-01-15\nMedication overrun 3000 EUR",
        "site_budget_actuals.xlsx",
    )
    personnel, medication = records
    assert personnel.category == "Personnel"
    assert personnel.amount == 12500.5
    assert personnel.currency == "USD"
    assert personnel.status == FinanceStatus.ACTUAL
    assert personnel.budget_impact == BudgetImpact.NEUTRAL
    assert personnel.site_id == "SITE002"
    assert personnel.date == "2025-01-15"

    assert medication.amount == 3000.0
    assert medication.currency == "EUR"
    assert medication.status == FinanceStatus.OVERBUDGET
    assert medication.budget_impact == BudgetImpact.NEGATIVE


def test_finance_defaults_to_projected():
    (record,) = extract_finance("Equipment £800", "plan.txt")
    assert record.status == FinanceStatus.PROJECTED
    assert record.currency == "GBP"


def test_overbudget_must_be_negative():
    with pytest.raises(ValueError):
        FinanceData("", "Personnel", "", 1.0, "USD", "", FinanceStatus.OVERBUDGET, BudgetImpact.NEUTRAL)


def test_is_finance_file():
    assert is_finance_file("Q3_Budget.xlsx")
    assert is_finance_file("expenses.csv")
    assert not is_finance_file("protocol.pdf")


def test_extract_records(supply_text):
    data = extract_records(supply_text, "site_report.txt")
    assert len(data.logistics) == 1
    assert len(data.enrollment) == 1
    assert len(data.regulatory) == 1
    assert len(data.finance) == 1
    assert data.finance[0].status == FinanceStatus.ACTUAL


def test_extract_records_empty_text():
    data = extract_records("")
    assert data.logistics == data.enrollment == data.regulatory == data.finance == ()


def test_sector_insights(supply_text):
    keywords = extract_keywords(supply_text)
    protocol = analyze_protocol(supply_text, keywords)
    insights = build_sector_insights(
        "site_report.txt", protocol, extract_records(supply_text), keywords.regulatory_bodies
    )
    assert insights.logistics[0] == "Storage: standard conditions"
    assert "1 inventory positions at or below reorder point" in insights.logistics
    assert "Enrollment 45/60 across 1 sites" in insights.cro
    assert "Regulators referenced: FDA" in insights.regulatory
    assert "1 requirements at risk or non-compliant" in insights.regulatory
    assert insights.finance == ("1 budget lines extracted",)


def test_finance_insights_for_finance_files_only():
    protocol = analyze_protocol("", extract_keywords(""))
    empty = extract_records("")
    assert build_sector_insights("budget.xlsx", protocol, empty).finance == ("0 budget lines extracted",)
    assert build_sector_insights("protocol.pdf", protocol, empty).finance == ()


def test_content_preview():
    assert content_preview("abcdef", 3) == "abc..."
    assert content_preview("abc", 3) == "abc"
    assert content_preview("", 3) == ""
