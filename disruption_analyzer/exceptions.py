"""Exception hierarchy for the disruption analyzer."""


class AnalyzerError(Exception):
    """Base exception for all analyzer errors."""


class EmptyInputError(AnalyzerError, ValueError):
    """Raised when a batch analysis is invoked without any analyzable document."""


class UnsupportedFormatError(AnalyzerError):
    """Raised when a document's bytes cannot be turned into text."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"Cannot extract text from {file_name!r}: {reason}")
        self.file_name = file_name
        self.reason = reason
