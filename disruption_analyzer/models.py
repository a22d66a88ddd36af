from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


class FileType(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    WORD = "word"
    UNKNOWN = "unknown"


class Level(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        return {"low": 1, "medium": 2, "high": 3}[self.value]


class InventoryStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"


class FinanceStatus(str, Enum):
    PROJECTED = "projected"
    ACTUAL = "actual"
    OVERBUDGET = "overbudget"


class BudgetImpact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class RegulatoryStatus(str, Enum):
    COMPLIANT = "compliant"
    AT_RISK = "at-risk"
    NON_COMPLIANT = "non-compliant"
    PENDING = "pending"


@dataclass(frozen=True)
class RawDocument:
    name: str
    byte_size: int
    declared_type: FileType
    text: str

    def to_dict(self) -> Dict[str, object]:
        return {
            'name': self.name,
            'byteSize': self.byte_size,
            'declaredType': self.declared_type.value,
        }


@dataclass(frozen=True)
class KeywordSet:
    sites: FrozenSet[str] = frozenset()
    products: FrozenSet[str] = frozenset()
    dates: FrozenSet[str] = frozenset()
    procedures: FrozenSet[str] = frozenset()
    regulatory_bodies: FrozenSet[str] = frozenset()
    countries: FrozenSet[str] = frozenset()

    @classmethod
    def empty(cls) -> "KeywordSet":
        return cls()

    def union(self, other: "KeywordSet") -> "KeywordSet":
        """Field-wise set union."""
        return KeywordSet(
            sites=self.sites | other.sites,
            products=self.products | other.products,
            dates=self.dates | other.dates,
            procedures=self.procedures | other.procedures,
            regulatory_bodies=self.regulatory_bodies | other.regulatory_bodies,
            countries=self.countries | other.countries,
        )

    def is_empty(self) -> bool:
        return not any([self.sites, self.products, self.dates, self.procedures,
                        self.regulatory_bodies, self.countries])

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            'sites': sorted(self.sites),
            'products': sorted(self.products),
            'dates': sorted(self.dates),
            'procedures': sorted(self.procedures),
            'regulatoryBodies': sorted(self.regulatory_bodies),
            'countries': sorted(self.countries),
        }


# -----------------------------
# Protocol analysis
# -----------------------------

@dataclass(frozen=True)
class DemandEstimate:
    high: bool
    estimate: str


@dataclass(frozen=True)
class LogisticsAnalysis:
    supply_requirements: Tuple[str, ...]
    storage_conditions: str
    distribution_challenges: Tuple[str, ...]
    estimated_demand: DemandEstimate


@dataclass(frozen=True)
class VisitSchedule:
    visit_count: int
    duration_weeks: int
    complexity: float


@dataclass(frozen=True)
class StaffingRequirements:
    staff: Tuple[str, ...]
    complexity: float


@dataclass(frozen=True)
class CROAnalysis:
    visit_schedule: VisitSchedule
    procedure_complexity: float
    staffing_requirements: StaffingRequirements
    patient_burden: float


@dataclass(frozen=True)
class ProtocolAnalysisResult:
    logistics: LogisticsAnalysis
    cro: CROAnalysis
    protocol_challenges: Tuple[str, ...]
    complexity: float

    def to_dict(self) -> Dict[str, object]:
        return {
            'logistics': {
                'supplyRequirements': list(self.logistics.supply_requirements),
                'storageConditions': self.logistics.storage_conditions,
                'distributionChallenges': list(self.logistics.distribution_challenges),
                'estimatedDemand': {
                    'high': self.logistics.estimated_demand.high,
                    'estimate': self.logistics.estimated_demand.estimate,
                },
            },
            'cro': {
                'visitSchedule': {
                    'visitCount': self.cro.visit_schedule.visit_count,
                    'durationWeeks': self.cro.visit_schedule.duration_weeks,
                    'complexity': self.cro.visit_schedule.complexity,
                },
                'procedureComplexity': self.cro.procedure_complexity,
                'staffingRequirements': {
                    'staff': list(self.cro.staffing_requirements.staff),
                    'complexity': self.cro.staffing_requirements.complexity,
                },
                'patientBurden': self.cro.patient_burden,
            },
            'protocolChallenges': list(self.protocol_challenges),
            'complexity': self.complexity,
        }


# -----------------------------
# Risk assessment
# -----------------------------

@dataclass(frozen=True)
class Risk:
    category: str
    description: str
    severity: Level
    probability: Level
    impact: str
    mitigation: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'category': self.category,
            'description': self.description,
            'severity': self.severity.value,
            'probability': self.probability.value,
            'impact': self.impact,
            'mitigation': self.mitigation,
        }


@dataclass(frozen=True)
class OverallRisk:
    risk_score: float
    summary: str
    mitigation_strategies: Tuple[str, ...]


@dataclass(frozen=True)
class RiskAssessment:
    logistics: Tuple[Risk, ...]
    cro: Tuple[Risk, ...]
    regulatory: Tuple[Risk, ...]
    overall: OverallRisk

    @property
    def all_risks(self) -> Tuple[Risk, ...]:
        return self.logistics + self.cro + self.regulatory

    def to_dict(self) -> Dict[str, object]:
        return {
            'logistics': [r.to_dict() for r in self.logistics],
            'cro': [r.to_dict() for r in self.cro],
            'regulatory': [r.to_dict() for r in self.regulatory],
            'overall': {
                'riskScore': self.overall.risk_score,
                'summary': self.overall.summary,
                'mitigationStrategies': list(self.overall.mitigation_strategies),
            },
        }


@dataclass(frozen=True)
class DisruptionSimulationParams:
    site_id: str
    disruption_type: str
    severity: Level
    product: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        result = {
            'siteId': self.site_id,
            'disruptionType': self.disruption_type,
            'severity': self.severity.value,
        }
        if self.product is not None:
            result['product'] = self.product
        return result


# -----------------------------
# Structured records
# -----------------------------

@dataclass(frozen=True)
class LogisticsData:
    site_id: str
    product: str
    inventory: int
    reorder_point: int
    status: InventoryStatus

    def __post_init__(self):
        expected = self.status_for(self.inventory, self.reorder_point)
        if self.status != expected:
            raise ValueError(
                f"status {self.status.value!r} inconsistent with inventory {self.inventory} "
                f"and reorder point {self.reorder_point} (expected {expected.value!r})"
            )

    @staticmethod
    def status_for(inventory: int, reorder_point: int) -> InventoryStatus:
        if inventory > reorder_point:
            return InventoryStatus.OK
        if inventory > reorder_point * 0.5:
            return InventoryStatus.WARNING
        return InventoryStatus.CRITICAL

    @classmethod
    def from_levels(cls, site_id: str, product: str, inventory: int, reorder_point: int) -> "LogisticsData":
        return cls(site_id, product, inventory, reorder_point, cls.status_for(inventory, reorder_point))

    def to_dict(self) -> Dict[str, object]:
        return {
            'siteId': self.site_id,
            'product': self.product,
            'inventory': self.inventory,
            'reorderPoint': self.reorder_point,
            'status': self.status.value,
        }


@dataclass(frozen=True)
class EnrollmentData:
    site_id: str
    actual: int
    target: int
    rate: float
    predicted_end: str

    @property
    def completion(self) -> float:
        if self.target == 0:
            return 0.0
        return self.actual / self.target

    def to_dict(self) -> Dict[str, object]:
        return {
            'siteId': self.site_id,
            'actual': self.actual,
            'target': self.target,
            'rate': self.rate,
            'predictedEnd': self.predicted_end,
        }


@dataclass(frozen=True)
class RegulatoryData:
    id: str
    site_id: str
    country: str
    region: str
    regulatory_body: str
    requirement_type: str
    stage: str
    status: RegulatoryStatus
    due_date: str
    description: str
    impact: Level

    def to_dict(self) -> Dict[str, object]:
        return {
            'id': self.id,
            'siteId': self.site_id,
            'country': self.country,
            'region': self.region,
            'regulatoryBody': self.regulatory_body,
            'requirementType': self.requirement_type,
            'stage': self.stage,
            'status': self.status.value,
            'dueDate': self.due_date,
            'description': self.description,
            'impact': self.impact.value,
        }


@dataclass(frozen=True)
class FinanceData:
    site_id: str
    category: str
    description: str
    amount: float
    currency: str
    date: str
    status: FinanceStatus
    budget_impact: BudgetImpact

    def __post_init__(self):
        if self.status == FinanceStatus.OVERBUDGET and self.budget_impact != BudgetImpact.NEGATIVE:
            raise ValueError("overbudget finance records must have a negative budget impact")

    def to_dict(self) -> Dict[str, object]:
        return {
            'siteId': self.site_id,
            'category': self.category,
            'description': self.description,
            'amount': self.amount,
            'currency': self.currency,
            'date': self.date,
            'status': self.status.value,
            'budgetImpact': self.budget_impact.value,
        }


@dataclass(frozen=True)
class ExtractedData:
    logistics: Tuple[LogisticsData, ...] = ()
    enrollment: Tuple[EnrollmentData, ...] = ()
    regulatory: Tuple[RegulatoryData, ...] = ()
    finance: Tuple[FinanceData, ...] = ()

    def concat(self, other: "ExtractedData") -> "ExtractedData":
        """Append another document's records; records are never deduplicated."""
        return ExtractedData(
            logistics=self.logistics + other.logistics,
            enrollment=self.enrollment + other.enrollment,
            regulatory=self.regulatory + other.regulatory,
            finance=self.finance + other.finance,
        )

    def to_dict(self) -> Dict[str, List[Dict[str, object]]]:
        return {
            'logistics': [r.to_dict() for r in self.logistics],
            'enrollment': [r.to_dict() for r in self.enrollment],
            'regulatory': [r.to_dict() for r in self.regulatory],
            'finance': [r.to_dict() for r in self.finance],
        }


# -----------------------------
# Per-document and batch envelopes
# -----------------------------

@dataclass(frozen=True)
class SectorInsights:
    logistics: Tuple[str, ...] = ()
    cro: Tuple[str, ...] = ()
    regulatory: Tuple[str, ...] = ()
    finance: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            'logistics': list(self.logistics),
            'cro': list(self.cro),
            'regulatory': list(self.regulatory),
            'finance': list(self.finance),
        }


@dataclass(frozen=True)
class DocumentAnalysis:
    keywords: KeywordSet
    protocol: ProtocolAnalysisResult
    risk: RiskAssessment
    simulation_params: DisruptionSimulationParams


@dataclass(frozen=True)
class DocumentSource:
    document: RawDocument
    file_type: FileType
    extracted_content: str
    sector_insights: SectorInsights
    extracted_data: ExtractedData
    analysis: DocumentAnalysis

    @property
    def file_name(self) -> str:
        return self.document.name

    @property
    def file_size(self) -> int:
        return self.document.byte_size

    def to_dict(self) -> Dict[str, object]:
        return {
            'fileName': self.file_name,
            'fileType': self.file_type.value,
            'fileSize': self.file_size,
            'extractedContent': self.extracted_content,
            'sectorInsights': self.sector_insights.to_dict(),
            'extractedData': self.extracted_data.to_dict(),
        }


@dataclass(frozen=True)
class DocumentFailure:
    file_name: str
    reason: str


@dataclass(frozen=True)
class AnalysisMetadata:
    engine: str
    version: str
    documents_analyzed: int
    skipped: Tuple[DocumentFailure, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            'engine': self.engine,
            'version': self.version,
            'documentsAnalyzed': self.documents_analyzed,
            'skipped': [{'fileName': f.file_name, 'reason': f.reason} for f in self.skipped],
        }


@dataclass(frozen=True)
class MultiDocumentAnalysisResult:
    combined_simulation_params: DisruptionSimulationParams
    protocol_analysis: ProtocolAnalysisResult
    risk_assessment: RiskAssessment
    sources: Tuple[DocumentSource, ...]
    keywords: KeywordSet
    extracted_data: ExtractedData
    metadata: AnalysisMetadata

    def to_dict(self) -> Dict[str, object]:
        return {
            'combinedSimulationParams': self.combined_simulation_params.to_dict(),
            'protocolAnalysis': self.protocol_analysis.to_dict(),
            'riskAssessment': self.risk_assessment.to_dict(),
            'sources': [s.to_dict() for s in self.sources],
            'keywords': self.keywords.to_dict(),
            'extractedData': self.extracted_data.to_dict(),
            'metadata': self.metadata.to_dict(),
        }
