"""
Structured scan result. Single format for the rule-based and generative evaluators.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class VerdictStatus(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


class ConditionCategory(str, Enum):
    DIET = "diet"
    ALLERGY = "allergy"
    HEALTH = "health"
    # Only used as an evaluation condition; verdicts fall back to "diet"
    AVOID = "avoid"


VERDICT_CATEGORIES = ("diet", "allergy", "health")

# riskScore implied by a severity when the evaluator does not supply one
SEVERITY_RISK_SCORE = {
    Severity.LOW: 10,
    Severity.MEDIUM: 50,
    Severity.HIGH: 80,
    Severity.CRITICAL: 100,
}


@dataclass
class Verdict:
    category: str
    name: str
    status: VerdictStatus
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "name": self.name,
            "status": self.status.value,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Verdict":
        return cls(
            category=d.get("category", "diet"),
            name=d.get("name", ""),
            status=VerdictStatus(d.get("status", "warning")),
            reason=d.get("reason", ""),
        )


@dataclass
class Alternative:
    name: str
    brand: str
    reason: str = ""
    search_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "brand": self.brand,
            "reason": self.reason,
            "searchUrl": self.search_url,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Alternative":
        return cls(
            name=d.get("name", ""),
            brand=d.get("brand", ""),
            reason=d.get("reason", ""),
            search_url=d.get("searchUrl", ""),
        )


@dataclass
class ScanResult:
    """
    Canonical Result. Invariant: safe => alternatives is empty
    (enforced by enforce_invariants, called by every producer).
    """
    safe: bool = False
    severity: Severity = Severity.LOW
    risk_score: int = 50
    confidence: int = 50
    issues: List[str] = field(default_factory=list)
    verdicts: List[Verdict] = field(default_factory=list)
    alternatives: List[Alternative] = field(default_factory=list)
    summary: str = ""
    detailed_explanation: str = ""

    def enforce_invariants(self) -> "ScanResult":
        if self.safe:
            self.alternatives = []
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "safe": self.safe,
            "severity": self.severity.value,
            "riskScore": self.risk_score,
            "confidence": self.confidence,
            "issues": list(self.issues),
            "verdicts": [v.to_dict() for v in self.verdicts],
            "alternatives": [a.to_dict() for a in self.alternatives],
            "summary": self.summary,
            "detailedExplanation": self.detailed_explanation,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ScanResult":
        """Load a stored result. Stored results were written by to_dict, so no coercion here."""
        return cls(
            safe=bool(d.get("safe", False)),
            severity=Severity(d.get("severity", "low")),
            risk_score=int(d.get("riskScore", 50)),
            confidence=int(d.get("confidence", 50)),
            issues=list(d.get("issues") or []),
            verdicts=[Verdict.from_dict(v) for v in d.get("verdicts") or []],
            alternatives=[Alternative.from_dict(a) for a in d.get("alternatives") or []],
            summary=d.get("summary", ""),
            detailed_explanation=d.get("detailedExplanation", ""),
        )
