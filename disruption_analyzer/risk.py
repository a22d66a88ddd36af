from typing import List, Tuple

from .models import (
    KeywordSet,
    Level,
    OverallRisk,
    ProtocolAnalysisResult,
    Risk,
    RiskAssessment,
)
from .protocol import COLD_CHAIN_STORAGE

HIGH_RISK_THRESHOLD = 2.5
MEDIUM_RISK_THRESHOLD = 1.5

RISK_TIERS = [
    (HIGH_RISK_THRESHOLD,
     "High risk protocol: significant logistics and operational challenges require active mitigation",
     ("Establish a dedicated risk management team with weekly review",
      "Qualify backup depots and secondary IMP supply routes before first patient in",
      "Implement risk-based monitoring with centralized data surveillance")),
    (MEDIUM_RISK_THRESHOLD,
     "Medium risk protocol: moderate operational challenges should be monitored",
     ("Define key risk indicators and review them monthly",
      "Train site staff on protocol-specific procedures before activation")),
]

LOW_RISK_SUMMARY = "Low to moderate risk protocol: standard oversight should be sufficient"
LOW_RISK_MITIGATIONS = ("Follow standard monitoring plan and routine site communication",)


def _logistics_risks(protocol: ProtocolAnalysisResult) -> List[Risk]:
    risks = []
    if protocol.logistics.storage_conditions == COLD_CHAIN_STORAGE:
        risks.append(Risk(
            category="Cold Chain",
            description="IMP requires cold chain storage (2-8°C); temperature excursions may render product unusable",
            severity=Level.HIGH,
            probability=Level.MEDIUM,
            impact="Product loss and missed dosing visits",
            mitigation="Use qualified shippers with temperature loggers and an excursion management procedure",
        ))
    if len(protocol.logistics.distribution_challenges) > 2:
        risks.append(Risk(
            category="Distribution",
            description=f"{len(protocol.logistics.distribution_challenges)} concurrent distribution challenges identified",
            severity=Level.MEDIUM,
            probability=Level.HIGH,
            impact="Delayed resupply to sites",
            mitigation="Pre-position buffer stock at regional depots",
        ))
    return risks


def _cro_risks(protocol: ProtocolAnalysisResult) -> List[Risk]:
    risks = []
    if protocol.cro.procedure_complexity > 7:
        risks.append(Risk(
            category="Procedure Complexity",
            description="Protocol includes several complex procedures that sites may perform inconsistently",
            severity=Level.MEDIUM,
            probability=Level.HIGH,
            impact="Protocol deviations and data quality issues",
            mitigation="Provide procedure-specific site training and central review of key assessments",
        ))
    if protocol.cro.patient_burden > 6:
        risks.append(Risk(
            category="Patient Burden",
            description="High patient burden is likely to slow enrollment and increase dropout",
            severity=Level.HIGH,
            probability=Level.MEDIUM,
            impact="Enrollment delays and reduced retention",
            mitigation="Offer travel support, remote visits and consolidated visit days",
        ))
    return risks


def _regulatory_risks(keywords: KeywordSet) -> List[Risk]:
    risks = []
    if any("biopsy" in procedure for procedure in keywords.procedures):
        risks.append(Risk(
            category="Invasive Procedure Oversight",
            description="Biopsy procedures require additional ethics committee scrutiny and consent language",
            severity=Level.MEDIUM,
            probability=Level.MEDIUM,
            impact="Longer ethics review and approval timelines",
            mitigation="Prepare procedure-specific consent and justification for ethics submissions",
        ))
    return risks


def _overall(risks: Tuple[Risk, ...]) -> OverallRisk:
    if not risks:
        score = 0.0
    else:
        score = sum(risk.severity.weight for risk in risks) / len(risks)

    for threshold, summary, mitigations in RISK_TIERS:
        if score > threshold:
            return OverallRisk(risk_score=score, summary=summary, mitigation_strategies=mitigations)
    return OverallRisk(risk_score=score, summary=LOW_RISK_SUMMARY, mitigation_strategies=LOW_RISK_MITIGATIONS)


def assess_risks(protocol: ProtocolAnalysisResult, keywords: KeywordSet) -> RiskAssessment:
    """Apply the logistics, CRO and regulatory risk rules and score the result."""
    logistics = tuple(_logistics_risks(protocol))
    cro = tuple(_cro_risks(protocol))
    regulatory = tuple(_regulatory_risks(keywords))

    return RiskAssessment(
        logistics=logistics,
        cro=cro,
        regulatory=regulatory,
        overall=_overall(logistics + cro + regulatory),
    )
