"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class DecisionOutcome(str, Enum):
    """Closed set of outcomes a verdict or decision can carry"""

    APPROVE = "Approve"
    REJECT = "Reject"
    MANUAL_REVIEW = "Up to the bank"
    ERROR = "Error"


class BalanceTrend(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    STABLE = "stable"


class FallbackCause(str, Enum):
    """Why a risk assessment fell back to the neutral placeholder"""

    NOT_CONFIGURED = "not_configured"
    QUOTA_EXCEEDED = "quota_exceeded"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    MALFORMED_RESPONSE = "malformed_response"


class ConflictPolicy(str, Enum):
    """How the arbiter resolves a rule Reject paired with a low risk score"""

    AFFORDABILITY_FLOOR = "affordability_floor"
    RISK_OVERRIDE = "risk_override"
    MANUAL_REVIEW = "manual_review"


@dataclass(frozen=True)
class Transaction:
    """Bank transaction supplied by the caller"""

    category: str
    description: str
    amount: float
    currency: str
    date: str  # ISO-8601 as received from the aggregator

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.category,
            "description": self.description,
            "amount": self.amount,
            "currency": self.currency,
            "date": self.date,
        }


@dataclass(frozen=True)
class FinancialProfile:
    """Applicant aggregates with every field filled in"""

    monthly_income: float
    monthly_debt: float
    current_balance: float
    balance_trend: BalanceTrend
    transactions: Tuple[Transaction, ...] = ()
    missing_fields: FrozenSet[str] = frozenset()

    def is_present(self, field_name: str) -> bool:
        return field_name not in self.missing_fields


@dataclass(frozen=True)
class ComplianceResult:
    """Outcome of the compliance screen"""

    compliant: bool
    violations: Tuple[Transaction, ...] = ()
    activities: Tuple[str, ...] = ()  # matched category, or "KEYWORD" for description hits

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compliant": self.compliant,
            "non_compliant_activities": list(self.activities),
            "violations": [t.to_dict() for t in self.violations],
        }


@dataclass(frozen=True)
class RuleVerdict:
    """Explainable output of the affordability rule engine"""

    decision: DecisionOutcome  # APPROVE or REJECT only
    reason: str
    dti_ratio: float
    liquidity_ratio: float
    balance_trend: str
    explanation: Dict[str, Any]

    @property
    def approved(self) -> bool:
        return self.decision == DecisionOutcome.APPROVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decision": self.decision.value,
            "reason": self.reason,
            "metrics": {
                "dti_ratio": self.dti_ratio,
                "liquidity_ratio": self.liquidity_ratio,
                "balance_trend": self.balance_trend,
            },
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class RiskRequest:
    """Fixed-schema input sent to the risk model"""

    monthly_income: float
    recent_transactions: List[Dict[str, Any]]
    loan_amount: float
    current_balance: float
    balance_trend: str
    currency: str


@dataclass(frozen=True)
class RiskAssessment:
    """
    Risk model output.

    available=False marks a fallback; its risk_score is a neutral placeholder
    and must not be weighed as real risk.
    """

    risk_score: int
    reason: str
    available: bool
    details: Optional[Dict[str, Any]] = None
    cause: Optional[FallbackCause] = None

    @classmethod
    def fallback(
        cls,
        cause: FallbackCause,
        message: str,
        score: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> "RiskAssessment":
        """Build a non-authoritative placeholder assessment"""
        return cls(
            risk_score=score,
            reason=f"{message} (risk model unavailable)",
            available=False,
            details=details,
            cause=cause,
        )


@dataclass(frozen=True)
class Decision:
    """
    Terminal output of the pipeline; reason and details are always present.

    details is built completely before construction and must not be mutated
    afterwards.
    """

    decision: DecisionOutcome
    reason: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decision": self.decision.value,
            "reason": self.reason,
            "details": self.details,
        }
