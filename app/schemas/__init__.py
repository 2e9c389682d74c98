from .authenticity import (
    AuthenticityReport,
    AuthenticitySignals,
    QuickAuthenticityCheck,
    Recommendation,
    RedFlag,
)
from .candidate import CandidateRecord, Certification, Education, Experience
from .job import JobProfile
from .match import MatchResult
from .parsing import (
    BatchItem,
    BatchItemResult,
    BatchReport,
    ParseAttempt,
    ParseOutcome,
    TokenUsage,
    ValidationResult,
    ValidationSummary,
)

__all__ = [
    "AuthenticityReport",
    "AuthenticitySignals",
    "BatchItem",
    "BatchItemResult",
    "BatchReport",
    "CandidateRecord",
    "Certification",
    "Education",
    "Experience",
    "JobProfile",
    "MatchResult",
    "ParseAttempt",
    "ParseOutcome",
    "QuickAuthenticityCheck",
    "Recommendation",
    "RedFlag",
    "TokenUsage",
    "ValidationResult",
    "ValidationSummary",
]
