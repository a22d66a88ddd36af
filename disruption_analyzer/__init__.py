"""Rule-based clinical trial document analysis and disruption risk inference."""
__version__ = "0.1.0"

from .aggregator import add_documents, analyze_document, analyze_documents, analyze_files, analyze_text
from .exceptions import AnalyzerError, EmptyInputError, UnsupportedFormatError
from .extraction import load_document, read_file
from .keywords import extract_keywords
from .models import KeywordSet, MultiDocumentAnalysisResult, RawDocument
from .protocol import analyze_protocol
from .risk import assess_risks
from .simulation import analyze_trial_text

__all__ = [
    "__version__",
    "add_documents",
    "analyze_document",
    "analyze_documents",
    "analyze_files",
    "analyze_protocol",
    "analyze_text",
    "analyze_trial_text",
    "assess_risks",
    "extract_keywords",
    "load_document",
    "read_file",
    "AnalyzerError",
    "EmptyInputError",
    "KeywordSet",
    "MultiDocumentAnalysisResult",
    "RawDocument",
    "UnsupportedFormatError",
]
