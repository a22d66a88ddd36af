"""
Per-document analysis and the batch fold that merges documents into one result.

Each document is analyzed in isolation. The batch result unions keyword sets,
concatenates structured records and re-scores the protocol and risks against
the whole batch's text and keywords.
"""
import logging
from functools import reduce
from typing import Iterable, List, Optional, Sequence, Tuple

from . import __version__
from .config import Settings, settings as default_settings
from .exceptions import EmptyInputError, UnsupportedFormatError
from .extraction import load_document
from .keywords import extract_keywords
from .models import (
    AnalysisMetadata,
    DisruptionSimulationParams,
    DocumentAnalysis,
    DocumentFailure,
    DocumentSource,
    ExtractedData,
    KeywordSet,
    MultiDocumentAnalysisResult,
    RawDocument,
)
from .protocol import analyze_protocol
from .records import build_sector_insights, content_preview, extract_records
from .risk import assess_risks
from .simulation import analyze_trial_text, is_default

logger = logging.getLogger(__name__)

ENGINE = "rule-based"


def analyze_text(text: str) -> DocumentAnalysis:
    """Run the keyword -> protocol -> risk chain and the simulation deriver over one text."""
    keywords = extract_keywords(text)
    protocol = analyze_protocol(text, keywords)
    return DocumentAnalysis(
        keywords=keywords,
        protocol=protocol,
        risk=assess_risks(protocol, keywords),
        simulation_params=analyze_trial_text(text),
    )


def analyze_document(document: RawDocument, settings: Optional[Settings] = None) -> DocumentSource:
    settings = settings or default_settings
    logger.debug("Analyzing %s (%s, %d bytes)", document.name, document.declared_type.value, document.byte_size)

    analysis = analyze_text(document.text)
    extracted = extract_records(document.text, document.name)
    logger.debug(
        "%s: %d sites, %d risks, %d records",
        document.name, len(analysis.keywords.sites), len(analysis.risk.all_risks),
        len(extracted.logistics) + len(extracted.enrollment) + len(extracted.regulatory) + len(extracted.finance),
    )
    return DocumentSource(
        document=document,
        file_type=document.declared_type,
        extracted_content=content_preview(document.text, settings.content_preview_chars),
        sector_insights=build_sector_insights(
            document.name, analysis.protocol, extracted, analysis.keywords.regulatory_bodies
        ),
        extracted_data=extracted,
        analysis=analysis,
    )


def select_simulation_params(sources: Sequence[DocumentSource]) -> DisruptionSimulationParams:
    """First document (input order) whose site or product differs from the defaults, else the first one."""
    for source in sources:
        if not is_default(source.analysis.simulation_params):
            return source.analysis.simulation_params
    return sources[0].analysis.simulation_params


def _fold(sources: Tuple[DocumentSource, ...], keywords: KeywordSet, extracted: ExtractedData,
          skipped: Tuple[DocumentFailure, ...]) -> MultiDocumentAnalysisResult:
    batch_text = "\n".join(source.document.text for source in sources)
    protocol = analyze_protocol(batch_text, keywords)
    risk = assess_risks(protocol, keywords)

    result = MultiDocumentAnalysisResult(
        combined_simulation_params=select_simulation_params(sources),
        protocol_analysis=protocol,
        risk_assessment=risk,
        sources=sources,
        keywords=keywords,
        extracted_data=extracted,
        metadata=AnalysisMetadata(
            engine=ENGINE,
            version=__version__,
            documents_analyzed=len(sources),
            skipped=skipped,
        ),
    )
    logger.info(
        "Analyzed %d documents (%d skipped): complexity %.1f, %d risks, risk score %.2f",
        len(sources), len(skipped), protocol.complexity, len(risk.all_risks), risk.overall.risk_score,
    )
    return result


def _merge(sources: Tuple[DocumentSource, ...], base_keywords: KeywordSet,
           base_extracted: ExtractedData) -> Tuple[KeywordSet, ExtractedData]:
    keywords = reduce(lambda acc, s: acc.union(s.analysis.keywords), sources, base_keywords)
    extracted = reduce(lambda acc, s: acc.concat(s.extracted_data), sources, base_extracted)
    return keywords, extracted


def analyze_documents(documents: Sequence[RawDocument], settings: Optional[Settings] = None,
                      skipped: Iterable[DocumentFailure] = ()) -> MultiDocumentAnalysisResult:
    if not documents:
        logger.warning("Batch analysis requested without documents")
        raise EmptyInputError("At least one document is required for analysis")

    sources = tuple(analyze_document(document, settings) for document in documents)
    keywords, extracted = _merge(sources, KeywordSet.empty(), ExtractedData())
    return _fold(sources, keywords, extracted, tuple(skipped))


def add_documents(result: MultiDocumentAnalysisResult, documents: Sequence[RawDocument],
                  settings: Optional[Settings] = None,
                  skipped: Iterable[DocumentFailure] = ()) -> MultiDocumentAnalysisResult:
    """Fold more documents into an existing result, keeping every record already accumulated."""
    if not documents:
        logger.warning("Incremental analysis requested without documents")
        raise EmptyInputError("At least one document is required to extend an analysis")

    new_sources = tuple(analyze_document(document, settings) for document in documents)
    keywords, extracted = _merge(new_sources, result.keywords, result.extracted_data)
    return _fold(
        result.sources + new_sources,
        keywords,
        extracted,
        result.metadata.skipped + tuple(skipped),
    )


def analyze_files(files: Iterable[Tuple[str, bytes]], settings: Optional[Settings] = None,
                  existing: Optional[MultiDocumentAnalysisResult] = None) -> MultiDocumentAnalysisResult:
    """
    Extract and analyze (file name, bytes) pairs.

    Files whose text cannot be extracted are left out of the batch and listed
    in ``metadata.skipped``. When ``existing`` is given the new files are
    added to it.
    """
    documents: List[RawDocument] = []
    skipped: List[DocumentFailure] = []
    for file_name, data in files:
        try:
            documents.append(load_document(file_name, data))
        except UnsupportedFormatError as e:
            logger.warning("Skipping %s: %s", file_name, e.reason)
            skipped.append(DocumentFailure(file_name=file_name, reason=e.reason))

    if not documents:
        raise EmptyInputError(
            f"No analyzable documents ({len(skipped)} skipped: "
            + ", ".join(f.file_name for f in skipped) + ")"
        )

    if existing is not None:
        return add_documents(existing, documents, settings, skipped)
    return analyze_documents(documents, settings, skipped)
