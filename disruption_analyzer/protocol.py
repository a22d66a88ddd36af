import re
from typing import List, Optional

from .models import (
    CROAnalysis,
    DemandEstimate,
    KeywordSet,
    LogisticsAnalysis,
    ProtocolAnalysisResult,
    StaffingRequirements,
    VisitSchedule,
)

MAX_SCORE = 10.0

COLD_CHAIN = r'\b2\s*(?:°\s*c)?\s*(?:-|–|to)\s*8\s*°?\s*c\b|refrigerat|cold[\s-]chain'
FROZEN = r'(?<![\d.])-\s*(?:20|70|80)\s*°?\s*c\b|\bfrozen\b|\bfreezer\b'
ROOM_TEMPERATURE = r'\b15\s*(?:-|–|to)\s*(?:25|30)\s*°?\s*c\b|room temperature|\bambient\b'
CONTROLLED_SUBSTANCE = r'controlled substance|schedule\s+ii\b|narcotic|opioid'

COLD_CHAIN_STORAGE = "Cold chain (2-8°C)"
FROZEN_STORAGE = "Frozen (-20°C/-70°C)"
ROOM_TEMPERATURE_STORAGE = "Room temperature (15-30°C)"
STANDARD_STORAGE = "standard conditions"

INVASIVE_PROCEDURES = "Invasive procedures"
HIGH_VISIT_BURDEN = "High visit burden"


def clamp(value: float, upper: float = MAX_SCORE) -> float:
    return max(0.0, min(upper, value))


class ProtocolAnalyzer:
    """Rule-based feature scoring over one protocol text and its keywords."""

    def __init__(self, text: str, keywords: KeywordSet):
        self.text = (text or "").lower()
        self.keywords = keywords

    def _has(self, pattern: str) -> bool:
        return re.search(pattern, self.text) is not None

    # -----------------------------
    # Logistics
    # -----------------------------

    def analyze_supply_requirements(self) -> List[str]:
        supply_terms = [
            (COLD_CHAIN, "Cold chain storage (2-8°C)"),
            (CONTROLLED_SUBSTANCE, "Controlled substance handling"),
            (r'reconstitut|preparation|dilut|compounding', "Reconstitution/preparation required"),
            (r'light[\s-]sensitiv|protect(?:ed)? from light|photosensitiv', "Light-sensitive packaging"),
            (r'humidity|moisture|desiccant', "Humidity control"),
        ]
        requirements = [label for pattern, label in supply_terms if self._has(pattern)]
        return requirements if requirements else ["standard storage"]

    def classify_storage(self) -> str:
        """First matching storage class wins."""
        for pattern, label in [
            (COLD_CHAIN, COLD_CHAIN_STORAGE),
            (FROZEN, FROZEN_STORAGE),
            (ROOM_TEMPERATURE, ROOM_TEMPERATURE_STORAGE),
        ]:
            if self._has(pattern):
                return label
        return STANDARD_STORAGE

    def analyze_distribution_challenges(self) -> List[str]:
        challenges = []
        if self._has(COLD_CHAIN) or self._has(r'temperature[\s-]controlled|temperature monitoring|data logger'):
            challenges.append("Temperature-controlled shipping required")
        if self._has(r'shelf[\s-]life|expir|stability'):
            challenges.append("Limited shelf life")
        if len(self.keywords.sites) > 3:
            challenges.append("Multiple site distribution")
        if self._has(r'international|cross-border|customs|\bimport(?:ation)?\b|\bexport\b|multinational'):
            challenges.append("International shipping and customs clearance")
        return challenges

    def _patient_count(self) -> Optional[int]:
        counts = [int(m) for m in re.findall(r'(\d+)\s+patients', self.text)]
        counts += [int(m) for m in re.findall(r'\bn\s*=\s*(\d+)', self.text)]
        return max(counts) if counts else None

    def estimate_demand(self) -> DemandEstimate:
        patient_count = self._patient_count()
        duration = re.search(r'(\d+)\s+(weeks|months)', self.text)

        high = (patient_count or 0) > 100 or len(self.keywords.sites) > 5

        if patient_count is None:
            estimate = "Unknown demand"
        elif duration:
            estimate = f"{patient_count} patients over {duration.group(1)} {duration.group(2)}"
        else:
            estimate = f"{patient_count} patients"

        return DemandEstimate(high=high, estimate=estimate)

    # -----------------------------
    # CRO
    # -----------------------------

    def analyze_visit_schedule(self) -> VisitSchedule:
        visit_matches = re.findall(r'\b(?:visit|screening|baseline|follow-up|week\s+\d+|day\s+\d+)', self.text)
        visit_count = len({re.sub(r'\s+', ' ', m) for m in visit_matches})

        weeks = [int(w) for w in re.findall(r'week\s+(\d+)', self.text)]
        weeks += [int(m) * 4 for m in re.findall(r'month\s+(\d+)', self.text)]
        duration_weeks = max(weeks) if weeks else 0

        if visit_count == 0:
            complexity = 0.0
        else:
            per_visit = duration_weeks / visit_count if duration_weeks > 0 else 1
            complexity = clamp(visit_count * per_visit / 4)

        return VisitSchedule(visit_count=visit_count, duration_weeks=duration_weeks, complexity=complexity)

    def score_procedure_complexity(self) -> float:
        procedure_weights = {
            r'biops': 3,
            r'\bmri\b|magnetic resonance': 2,
            r'\bct\b|computed tomography': 2,
            r'\bpet\b|positron emission': 3,
            r'spinal|lumbar puncture': 3,
            r'infusion': 1,
            r'blood draw|blood sample|venipuncture': 0.5,
        }
        score = sum(weight for pattern, weight in procedure_weights.items() if self._has(pattern))
        score += 0.5 * len(self.keywords.procedures)
        return clamp(score)

    def analyze_staffing(self) -> StaffingRequirements:
        roles = [
            (r'principal investigator|\bpi\b', "Principal Investigator", 1),
            (r'sub-?\s?investigator', "Sub-Investigator", 1),
            (r'research nurse|study nurse|\bnurses?\b', "Research Nurse", 2),
            (r'coordinator', "Study Coordinator", 2),
            (r'pharmacist|pharmacy', "Pharmacist", 2),
            (r'imaging specialist|radiologist|imaging', "Imaging Specialist", 2),
            (r'lab(?:oratory)?\s+tech', "Lab Technician", 1),
        ]

        staff = []
        complexity = 0.0
        for pattern, role, increment in roles:
            if self._has(pattern):
                staff.append(role)
                complexity += increment

        if not staff:
            return StaffingRequirements(staff=("Study Coordinator", "Principal Investigator"), complexity=3.0)
        return StaffingRequirements(staff=tuple(staff), complexity=clamp(complexity))

    def score_patient_burden(self, schedule: VisitSchedule) -> float:
        burden = 0.3 * schedule.visit_count

        burden_terms = {
            r'biops': 2,
            r'\bmri\b|magnetic resonance': 1.5,
            r'\bct\b|computed tomography': 1.5,
            r'questionnaire': 0.5,
            r'diary|diaries': 1,
            r'fasting': 1,
            r'overnight|admission': 2,
        }
        burden += sum(weight for pattern, weight in burden_terms.items() if self._has(pattern))

        if schedule.duration_weeks > 52:
            burden += 2
        elif schedule.duration_weeks > 24:
            burden += 1.5
        elif schedule.duration_weeks > 12:
            burden += 1

        return clamp(burden)

    # -----------------------------
    # Challenges & overall
    # -----------------------------

    def identify_challenges(self, schedule: VisitSchedule) -> List[str]:
        challenges = []
        if len(re.findall(r'inclusion|exclusion', self.text)) > 10:
            challenges.append("Complex eligibility criteria")
        if schedule.visit_count > 10:
            challenges.append(HIGH_VISIT_BURDEN)
        if len(self.keywords.procedures) > 5:
            challenges.append("Multiple complex procedures")
        if schedule.duration_weeks > 52:
            challenges.append("Extended study duration")
        if self._has(r'biops|spinal|lumbar'):
            challenges.append(INVASIVE_PROCEDURES)
        if self._has(r'pediatric|paediatric|\bchild(?:ren)?\b'):
            challenges.append("Pediatric population")
        if self._has(r'elderly|geriatric|older adults'):
            challenges.append("Elderly population")
        if self._has(r'rare disease|orphan'):
            challenges.append("Rare disease population")
        return challenges

    def logistics_term_score(self) -> float:
        score = 0.0
        if self._has(COLD_CHAIN):
            score += 2
        if self._has(CONTROLLED_SUBSTANCE):
            score += 2
        return score

    def analyze(self) -> ProtocolAnalysisResult:
        schedule = self.analyze_visit_schedule()
        distribution = self.analyze_distribution_challenges()
        procedure_complexity = self.score_procedure_complexity()
        staffing = self.analyze_staffing()
        patient_burden = self.score_patient_burden(schedule)
        challenges = self.identify_challenges(schedule)

        complexity = clamp((
            self.logistics_term_score()
            + len(distribution)
            + procedure_complexity / 2
            + staffing.complexity
            + patient_burden / 2
            + len(challenges)
        ) / 4)

        return ProtocolAnalysisResult(
            logistics=LogisticsAnalysis(
                supply_requirements=tuple(self.analyze_supply_requirements()),
                storage_conditions=self.classify_storage(),
                distribution_challenges=tuple(distribution),
                estimated_demand=self.estimate_demand(),
            ),
            cro=CROAnalysis(
                visit_schedule=schedule,
                procedure_complexity=procedure_complexity,
                staffing_requirements=staffing,
                patient_burden=patient_burden,
            ),
            protocol_challenges=tuple(challenges),
            complexity=complexity,
        )


def analyze_protocol(text: str, keywords: KeywordSet) -> ProtocolAnalysisResult:
    return ProtocolAnalyzer(text, keywords).analyze()
