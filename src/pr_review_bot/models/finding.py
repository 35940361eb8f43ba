"""
Finding Data Models

Observations emitted by the analysis engines
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import uuid


class Severity(str, Enum):
    """Finding severity, most severe first"""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @classmethod
    def rank(cls, severity: str) -> int:
        """Numeric rank for sorting; unknown severities rank lowest (-1)"""
        value = getattr(severity, 'value', severity)
        return _SEVERITY_RANKS.get(value, -1)


_SEVERITY_RANKS = {
    Severity.CRITICAL.value: 4,
    Severity.HIGH.value: 3,
    Severity.MEDIUM.value: 2,
    Severity.LOW.value: 1,
    Severity.INFO.value: 0,
}


class FindingSource(str, Enum):
    """Engine that produced a finding"""
    HEURISTIC = "HEURISTIC"
    LLM = "LLM"


@dataclass(frozen=True)
class Finding:
    """One observation about one line of one file"""
    id: str
    file_path: str
    line_number: int
    severity: str
    category: str
    message: str
    suggestion: Optional[str]
    source: str
    confidence: float
    precedence_score: int

    def __post_init__(self):
        """Data validation"""
        if self.line_number < 1:
            raise ValueError("Line number must be positive")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Confidence must be between 0.0 and 1.0")
        if self.precedence_score < 0:
            raise ValueError("Precedence score must be non-negative")

    @classmethod
    def create(
        cls,
        file_path: str,
        line_number: int,
        severity: str,
        category: str,
        message: str,
        source: str,
        confidence: float,
        precedence_score: int,
        suggestion: Optional[str] = None,
    ) -> "Finding":
        """Create a finding with a fresh id"""
        return cls(
            id=str(uuid.uuid4()),
            file_path=file_path,
            line_number=line_number,
            severity=getattr(severity, 'value', severity),
            category=category,
            message=message,
            suggestion=suggestion,
            source=getattr(source, 'value', source),
            confidence=confidence,
            precedence_score=precedence_score,
        )

    @property
    def location(self) -> str:
        """``path:line`` string"""
        return f"{self.file_path}:{self.line_number}"
