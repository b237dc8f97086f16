"""Risk assessor - wraps the external risk model and never raises"""

import asyncio
import logging
import time
from typing import Any, Optional, Protocol

from lending_gateway.config import settings
from lending_gateway.domain.exceptions import RiskProviderUnavailable
from lending_gateway.domain.models import FallbackCause, FinancialProfile, RiskAssessment, RiskRequest
from lending_gateway.infrastructure.observability.metrics import record_risk_fallback, risk_model_latency_histogram

logger = logging.getLogger(__name__)

QUOTA_RECOMMENDATION = "Check the risk model provider's billing status and quota limits"


class RiskProvider(Protocol):
    """Anything that can turn a RiskRequest into a genuine RiskAssessment"""

    async def score(self, request: RiskRequest) -> RiskAssessment:
        ...


def build_risk_request(
    profile: FinancialProfile,
    loan_amount: Any,
    sample_size: int | None = None,
    currency: str | None = None,
) -> RiskRequest:
    """Fixed-schema request: income, first N transactions, loan, balance, trend"""
    sample_size = settings.risk_sample_size if sample_size is None else sample_size
    try:
        loan = float(loan_amount)
    except (TypeError, ValueError):
        loan = 0.0

    return RiskRequest(
        monthly_income=profile.monthly_income,
        recent_transactions=[t.to_dict() for t in profile.transactions[:sample_size]],
        loan_amount=loan,
        current_balance=profile.current_balance,
        balance_trend=profile.balance_trend.value,
        currency=currency or settings.currency,
    )


def _cause_of(error: RiskProviderUnavailable) -> FallbackCause:
    try:
        return FallbackCause(error.cause)
    except ValueError:
        return FallbackCause.PROVIDER_ERROR


def _is_genuine(assessment: Any) -> bool:
    """A real assessment carries an integer score in [0, 100]"""
    if not isinstance(assessment, RiskAssessment):
        return False
    score = assessment.risk_score
    if isinstance(score, bool) or not isinstance(score, int):
        return False
    return 0 <= score <= 100


class RiskAssessor:
    """
    Adapter around an optional RiskProvider.

    One attempt per evaluation, bounded by ``timeout``. Every failure mode
    (no provider, quota, timeout, transport fault, malformed reply) resolves to
    a fallback assessment with available=False and a neutral score.
    """

    def __init__(
        self,
        provider: Optional[RiskProvider],
        timeout: float | None = None,
        fallback_score: int | None = None,
    ):
        self.provider = provider
        self.timeout = settings.risk_model_timeout_seconds if timeout is None else timeout
        self.fallback_score = settings.fallback_risk_score if fallback_score is None else fallback_score

    def _fallback(self, cause: FallbackCause, message: str, details: dict | None = None) -> RiskAssessment:
        record_risk_fallback(cause.value)
        logger.warning(
            f"Risk model fallback: {message}",
            extra={"step": "risk_assessment", "fallback_cause": cause.value},
        )
        return RiskAssessment.fallback(cause, message, self.fallback_score, details)

    async def assess(self, profile: FinancialProfile, loan_amount: Any) -> RiskAssessment:
        if self.provider is None:
            return self._fallback(FallbackCause.NOT_CONFIGURED, "Risk model not configured")

        start_time = time.time()
        try:
            request = build_risk_request(profile, loan_amount)
            assessment = await asyncio.wait_for(self.provider.score(request), timeout=self.timeout)

        except asyncio.TimeoutError:
            return self._fallback(FallbackCause.TIMEOUT, f"Risk model timed out after {self.timeout}s")

        except RiskProviderUnavailable as e:
            cause = _cause_of(e)
            details = None
            if cause == FallbackCause.QUOTA_EXCEEDED:
                details = {"error": str(e), "recommendation": QUOTA_RECOMMENDATION}
            return self._fallback(cause, str(e), details)

        except Exception as e:
            return self._fallback(FallbackCause.PROVIDER_ERROR, f"Risk model error: {e}")

        finally:
            risk_model_latency_histogram.observe(time.time() - start_time)

        if not _is_genuine(assessment):
            return self._fallback(FallbackCause.MALFORMED_RESPONSE, "Malformed risk model response")

        logger.info(
            "Risk assessment completed",
            extra={"step": "risk_assessment", "risk_score": assessment.risk_score},
        )
        return assessment
