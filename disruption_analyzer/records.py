"""
Line-oriented extraction of structured trial records (inventory, enrollment,
regulatory requirements, budget lines) and per-sector insight strings.
"""
import re
from typing import List, Optional

from .keywords import COUNTRIES, REGULATORY_BODIES, alternation
from .models import (
    BudgetImpact,
    EnrollmentData,
    ExtractedData,
    FinanceData,
    FinanceStatus,
    InventoryStatus,
    Level,
    LogisticsData,
    ProtocolAnalysisResult,
    RegulatoryData,
    RegulatoryStatus,
    SectorInsights,
)

SITE = re.compile(r'site\s+(\d+)', re.IGNORECASE)
PRODUCT = re.compile(r'\b(?:drug|product|imp|medication)\s+[A-Za-z0-9-]+', re.IGNORECASE)
INVENTORY = re.compile(r'inventory\s*(?:of|:|=)?\s*(\d+)|(\d+)\s+units', re.IGNORECASE)
REORDER_POINT = re.compile(r'reorder(?:\s+point|\s+level)?\s*(?:of|:|=|at)?\s*(\d+)', re.IGNORECASE)

ENROLLED_OF_TARGET = re.compile(r'enrolled\s*:?\s*(\d+)\s+(?:of|/)\s*(\d+)', re.IGNORECASE)
ENROLLED = re.compile(r'(\d+)\s+(?:patients\s+|subjects\s+)?enrolled|enrolled\s*(?:patients)?\s*[:=]?\s*(\d+)',
                      re.IGNORECASE)
TARGET = re.compile(r'target\s*(?:of|:|=)?\s*(\d+)', re.IGNORECASE)
RATE = re.compile(r'(\d+(?:\.\d+)?)\s+(?:patients\s+|subjects\s+)?per\s+month', re.IGNORECASE)

ISO_DATE = re.compile(r'\b\d{4}-\d{2}-\d{2}\b')
ANY_DATE = re.compile(r'\b\d{4}-\d{2}-\d{2}\b|\b\d{1,2}[-/]\d{1,2}[-/]\d{2,4}\b')

BODY = re.compile(r'\b(' + alternation(REGULATORY_BODIES) + r')\b', re.IGNORECASE)
COUNTRY = re.compile(r'\b(' + alternation(COUNTRIES) + r')\b', re.IGNORECASE)
REGION = re.compile(r'\b(northeast|northwest|southeast|southwest|midwest|west|east|north|south|central)\b',
                    re.IGNORECASE)
STAGE = re.compile(r'\b(screening|enrollment|enrolment|treatment|follow-up|close-out)\b', re.IGNORECASE)

FINANCE_CATEGORIES = ['Personnel', 'Equipment', 'Medication', 'Patient Compensation', 'Site Costs',
                      'Regulatory Fees']
CATEGORY = re.compile(r'\b(' + alternation([c.lower() for c in FINANCE_CATEGORIES]) + r')\b', re.IGNORECASE)
AMOUNT = re.compile(r'(\$|€|£|usd|eur|gbp)\s*(\d[\d,]*(?:\.\d+)?)|(\d[\d,]*(?:\.\d+)?)\s*(usd|eur|gbp)\b',
                    re.IGNORECASE)
CURRENCIES = {'$': 'USD', '€': 'EUR', '£': 'GBP', 'usd': 'USD', 'eur': 'EUR', 'gbp': 'GBP'}

FINANCE_FILE_HINTS = ['finance', 'budget', 'cost', 'expense']
ACTUALS_FILE_HINTS = ['actual', 'report']


def _site_id(line: str) -> Optional[str]:
    match = SITE.search(line)
    return f"SITE{match.group(1).zfill(3)}" if match else None


def _first_int(pattern, line: str) -> Optional[int]:
    match = pattern.search(line)
    if not match:
        return None
    value = next(g for g in match.groups() if g is not None)
    return int(value)


def _lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def is_finance_file(file_name: str) -> bool:
    name = file_name.lower()
    return any(hint in name for hint in FINANCE_FILE_HINTS)


# -----------------------------
# Record extractors
# -----------------------------

def extract_logistics(text: str) -> List[LogisticsData]:
    records = []
    for line in _lines(text):
        site_id = _site_id(line)
        product = PRODUCT.search(line)
        inventory = _first_int(INVENTORY, line)
        if site_id is None or product is None or inventory is None:
            continue

        reorder_point = _first_int(REORDER_POINT, line)
        if reorder_point is None:
            reorder_point = int(inventory * 0.6)

        records.append(LogisticsData.from_levels(
            site_id=site_id,
            product=re.sub(r'\s+', ' ', product.group(0)),
            inventory=inventory,
            reorder_point=reorder_point,
        ))
    return records


def extract_enrollment(text: str) -> List[EnrollmentData]:
    records = []
    for line in _lines(text):
        site_id = _site_id(line)
        if site_id is None:
            continue

        of_target = ENROLLED_OF_TARGET.search(line)
        if of_target:
            actual, target = int(of_target.group(1)), int(of_target.group(2))
        else:
            actual = _first_int(ENROLLED, line)
            target = _first_int(TARGET, line)
            if actual is None or target is None:
                continue

        rate = RATE.search(line)
        predicted_end = ISO_DATE.search(line)
        records.append(EnrollmentData(
            site_id=site_id,
            actual=actual,
            target=target,
            rate=float(rate.group(1)) if rate else 0.0,
            predicted_end=predicted_end.group(0) if predicted_end else "",
        ))
    return records


def _requirement_type(line: str) -> str:
    lowered = line.lower()
    if re.search(r'\b(?:inspect|audit)', lowered):
        return "inspection"
    if re.search(r'\breport|\bsae\b', lowered):
        return "reporting"
    if re.search(r'\b(?:approv|authori[sz])', lowered):
        return "approval"
    return "documentation"


def _regulatory_status(line: str) -> RegulatoryStatus:
    lowered = line.lower()
    if re.search(r'\b(?:non-compliant|not met|overdue|missed)\b', lowered):
        return RegulatoryStatus.NON_COMPLIANT
    if re.search(r'\b(?:at[\s-]risk|delayed|pending review|outstanding)\b', lowered):
        return RegulatoryStatus.AT_RISK
    if re.search(r'\b(?:compliant|approved|completed|received)\b', lowered):
        return RegulatoryStatus.COMPLIANT
    return RegulatoryStatus.PENDING


def _impact(line: str) -> Level:
    lowered = line.lower()
    if re.search(r'\b(?:critical|high|major|severe)\b', lowered):
        return Level.HIGH
    if re.search(r'\b(?:minor|low|routine)\b', lowered):
        return Level.LOW
    return Level.MEDIUM


def extract_regulatory(text: str) -> List[RegulatoryData]:
    records = []
    for line in _lines(text):
        body = BODY.search(line)
        if body is None:
            continue

        country = COUNTRY.search(line)
        region = REGION.search(line)
        stage = STAGE.search(line)
        due_date = ANY_DATE.search(line)
        records.append(RegulatoryData(
            id=f"REG{len(records) + 1:03d}",
            site_id=_site_id(line) or "",
            country=COUNTRIES[country.group(1).lower()] if country else "",
            region=region.group(1).title() if region else "",
            regulatory_body=REGULATORY_BODIES[body.group(1).lower()],
            requirement_type=_requirement_type(line),
            stage=stage.group(1).lower() if stage else "",
            status=_regulatory_status(line),
            due_date=due_date.group(0) if due_date else "",
            description=line[:200],
            impact=_impact(line),
        ))
    return records


def extract_finance(text: str, file_name: str = "") -> List[FinanceData]:
    name = file_name.lower()
    default_status = FinanceStatus.ACTUAL if any(h in name for h in ACTUALS_FILE_HINTS) else FinanceStatus.PROJECTED

    records = []
    for line in _lines(text):
        category = CATEGORY.search(line)
        amount = AMOUNT.search(line)
        if category is None or amount is None:
            continue

        if amount.group(2) is not None:
            symbol, value = amount.group(1), amount.group(2)
        else:
            value, symbol = amount.group(3), amount.group(4)

        lowered = line.lower()
        if re.search(r'over\s*budget|overrun|exceed', lowered):
            status = FinanceStatus.OVERBUDGET
        elif re.search(r'\bactual|spent|invoiced|paid', lowered):
            status = FinanceStatus.ACTUAL
        else:
            status = default_status

        if status == FinanceStatus.OVERBUDGET:
            budget_impact = BudgetImpact.NEGATIVE
        elif re.search(r'under\s*budget|saving', lowered):
            budget_impact = BudgetImpact.POSITIVE
        else:
            budget_impact = BudgetImpact.NEUTRAL

        date = ISO_DATE.search(line)
        records.append(FinanceData(
            site_id=_site_id(line) or "",
            category=next(c for c in FINANCE_CATEGORIES if c.lower() == category.group(1).lower()),
            description=line[:200],
            amount=float(value.replace(',', '')),
            currency=CURRENCIES[symbol.lower()],
            date=date.group(0) if date else "",
            status=status,
            budget_impact=budget_impact,
        ))
    return records


def extract_records(text: str, file_name: str = "") -> ExtractedData:
    return ExtractedData(
        logistics=tuple(extract_logistics(text)),
        enrollment=tuple(extract_enrollment(text)),
        regulatory=tuple(extract_regulatory(text)),
        finance=tuple(extract_finance(text, file_name)),
    )


# -----------------------------
# Sector insights
# -----------------------------

def build_sector_insights(file_name: str, protocol: ProtocolAnalysisResult, data: ExtractedData,
                          regulatory_bodies=frozenset()) -> SectorInsights:
    logistics = [f"Storage: {protocol.logistics.storage_conditions}"]
    if data.logistics:
        logistics.append(f"{len(data.logistics)} inventory records extracted")
        below = [r for r in data.logistics if r.status != InventoryStatus.OK]
        if below:
            logistics.append(f"{len(below)} inventory positions at or below reorder point")
    logistics.extend(protocol.logistics.distribution_challenges)

    schedule = protocol.cro.visit_schedule
    cro = [
        f"{schedule.visit_count} distinct visits over {schedule.duration_weeks} weeks",
        f"Patient burden {protocol.cro.patient_burden:.1f}/10",
    ]
    if data.enrollment:
        enrolled = sum(r.actual for r in data.enrollment)
        target = sum(r.target for r in data.enrollment)
        cro.append(f"Enrollment {enrolled}/{target} across {len(data.enrollment)} sites")

    regulatory = []
    if regulatory_bodies:
        regulatory.append("Regulators referenced: " + ", ".join(sorted(regulatory_bodies)))
    if data.regulatory:
        regulatory.append(f"{len(data.regulatory)} regulatory requirements extracted")
        flagged = [r for r in data.regulatory if r.status in (RegulatoryStatus.AT_RISK, RegulatoryStatus.NON_COMPLIANT)]
        if flagged:
            regulatory.append(f"{len(flagged)} requirements at risk or non-compliant")

    finance = []
    if data.finance or is_finance_file(file_name):
        finance.append(f"{len(data.finance)} budget lines extracted")
        over = sorted({r.category for r in data.finance if r.status == FinanceStatus.OVERBUDGET})
        if over:
            finance.append("Over budget: " + ", ".join(over))

    return SectorInsights(
        logistics=tuple(logistics),
        cro=tuple(cro),
        regulatory=tuple(regulatory),
        finance=tuple(finance),
    )


def content_preview(text: str, limit: int) -> str:
    text = text or ""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
