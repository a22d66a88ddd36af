import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Pattern, Set

from .models import KeywordSet

REGULATORY_BODIES = {
    'fda': 'FDA',
    'ema': 'EMA',
    'mhra': 'MHRA',
    'pmda': 'PMDA',
    'health canada': 'Health Canada',
    'tga': 'TGA',
    'nmpa': 'NMPA',
    'anvisa': 'ANVISA',
    'swissmedic': 'Swissmedic',
    'irb': 'IRB',
    'iec': 'IEC',
    'ethics committee': 'Ethics Committee',
}

COUNTRIES = {
    'united states': 'United States',
    'usa': 'United States',
    'canada': 'Canada',
    'mexico': 'Mexico',
    'brazil': 'Brazil',
    'argentina': 'Argentina',
    'united kingdom': 'United Kingdom',
    'uk': 'United Kingdom',
    'germany': 'Germany',
    'france': 'France',
    'spain': 'Spain',
    'italy': 'Italy',
    'netherlands': 'Netherlands',
    'belgium': 'Belgium',
    'poland': 'Poland',
    'switzerland': 'Switzerland',
    'sweden': 'Sweden',
    'japan': 'Japan',
    'china': 'China',
    'india': 'India',
    'australia': 'Australia',
    'south korea': 'South Korea',
    'south africa': 'South Africa',
}


def alternation(terms) -> str:
    # Longest first so "united states" wins over a shorter prefix
    return '|'.join(re.escape(t) for t in sorted(terms, key=len, reverse=True))


def canonical_spelling(names: Dict[str, str]) -> Callable[[str], str]:
    """
    Canonical capitalisation for a matched name. Abbreviations such as "USA"
    stay as written since keywords must occur in the text.
    """
    def normalize(value: str) -> str:
        canonical = names[value.lower()]
        return canonical if canonical.lower() == value.lower() else value.upper()
    return normalize


@dataclass(frozen=True)
class KeywordRule:
    """One pattern -> field rule of the keyword extractor."""
    name: str
    target: str
    pattern: Pattern
    group: int = 0
    normalize: Optional[Callable[[str], str]] = None

    def matches(self, text: str) -> List[str]:
        found = []
        for match in self.pattern.finditer(text):
            value = match.group(self.group)
            if not value:
                continue
            found.append(self.normalize(value) if self.normalize else value)
        return found


KEYWORD_RULES = [
    KeywordRule('site_id', 'sites', re.compile(r'site\s+(\d+)', re.IGNORECASE), group=1),
    KeywordRule('product_name', 'products',
                re.compile(r'(drug|product|imp|medication)\s+([A-Za-z0-9-]+)', re.IGNORECASE), group=2),
    KeywordRule('calendar_date', 'dates', re.compile(r'\d{1,2}[-/]\d{1,2}[-/]\d{2,4}')),
    KeywordRule('study_week', 'dates', re.compile(r'week\s+\d+', re.IGNORECASE)),
    KeywordRule('study_day', 'dates', re.compile(r'day\s+-?\d+', re.IGNORECASE)),
    KeywordRule('procedure', 'procedures',
                re.compile(r'\b(blood draw|biopsy|scan|mri|ct|questionnaire|assessment)\b', re.IGNORECASE),
                group=1, normalize=str.lower),
    KeywordRule('regulatory_body', 'regulatory_bodies',
                re.compile(r'\b(' + alternation(REGULATORY_BODIES) + r')\b', re.IGNORECASE),
                group=1, normalize=canonical_spelling(REGULATORY_BODIES)),
    KeywordRule('country', 'countries',
                re.compile(r'\b(' + alternation(COUNTRIES) + r')\b', re.IGNORECASE),
                group=1, normalize=canonical_spelling(COUNTRIES)),
]


def extract_keywords(text: str) -> KeywordSet:
    """Scan raw document text for sites, products, timepoints, procedures, regulators and countries."""
    collected: Dict[str, Set[str]] = {
        'sites': set(),
        'products': set(),
        'dates': set(),
        'procedures': set(),
        'regulatory_bodies': set(),
        'countries': set(),
    }
    if not text:
        return KeywordSet.empty()

    for rule in KEYWORD_RULES:
        collected[rule.target].update(rule.matches(text))

    return KeywordSet(**{name: frozenset(values) for name, values in collected.items()})
