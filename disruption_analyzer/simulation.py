import re

from .models import DisruptionSimulationParams, Level

DEFAULT_SITE_ID = "001"
DEFAULT_PRODUCT = "Drug A"

IMP_DELAY = "IMP Delay"
SITE_CLOSURE = "Site Closure"
STAFF_SHORTAGE = "Staff Shortage"

DISRUPTION_TERMS = {
    IMP_DELAY: r'delay|shipment|supply|inventory',
    SITE_CLOSURE: r'closure|close|shut|suspend',
    STAFF_SHORTAGE: r'staff|personnel|shortage|resource',
}
HIGH_SEVERITY_TERMS = r'critical|severe|urgent|high|major'
LOW_SEVERITY_TERMS = r'minor|low|slight|minimal'


def _count(pattern: str, text: str) -> int:
    return len(re.findall(pattern, text, re.IGNORECASE))


def _disruption_type(text: str) -> str:
    counts = {name: _count(pattern, text) for name, pattern in DISRUPTION_TERMS.items()}
    for candidate in (SITE_CLOSURE, STAFF_SHORTAGE):
        others = [count for name, count in counts.items() if name != candidate]
        if all(counts[candidate] > count for count in others):
            return candidate
    # Ties fall back to the supply scenario
    return IMP_DELAY


def _severity(text: str) -> Level:
    high = _count(HIGH_SEVERITY_TERMS, text)
    low = _count(LOW_SEVERITY_TERMS, text)
    if high > low * 2:
        return Level.HIGH
    if low > high:
        return Level.LOW
    return Level.MEDIUM


def analyze_trial_text(text: str) -> DisruptionSimulationParams:
    """Derive the disruption scenario (site, type, severity, product) from raw text."""
    text = text or ""

    site_id = DEFAULT_SITE_ID
    site_match = re.search(r'site\s+(\d+)', text, re.IGNORECASE)
    if site_match:
        site_id = site_match.group(1).zfill(3)

    product = DEFAULT_PRODUCT
    # A lone letter only: "IMP Delay" must not become "Drug D"
    product_match = re.search(r'\b(drug|product|imp)\s+([A-Za-z])\b', text, re.IGNORECASE)
    if product_match:
        product = f"Drug {product_match.group(2).upper()}"

    return DisruptionSimulationParams(
        site_id=site_id,
        disruption_type=_disruption_type(text),
        severity=_severity(text),
        product=product,
    )


def is_default(params: DisruptionSimulationParams) -> bool:
    """True when neither the site nor the product was found in the text."""
    return params.site_id == DEFAULT_SITE_ID and params.product == DEFAULT_PRODUCT
