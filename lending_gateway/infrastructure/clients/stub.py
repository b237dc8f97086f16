"""Deterministic risk provider for tests and offline development"""

from typing import Any, Dict, List, Optional

from lending_gateway.domain.models import RiskAssessment, RiskRequest


class StubRiskProvider:
    """
    Returns a fixed score, or raises a preset error.

    Every request received is kept in ``requests`` so tests can inspect
    what the assessor sent.
    """

    def __init__(
        self,
        risk_score: int = 30,
        reason: str = "Stable income and positive balance trend",
        details: Optional[Dict[str, Any]] = None,
        error: Optional[Exception] = None,
    ):
        self.risk_score = risk_score
        self.reason = reason
        self.details = details
        self.error = error
        self.requests: List[RiskRequest] = []

    async def score(self, request: RiskRequest) -> RiskAssessment:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return RiskAssessment(
            risk_score=self.risk_score,
            reason=self.reason,
            available=True,
            details=self.details,
        )
