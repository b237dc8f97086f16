"""Affordability rule engine - deterministic, explainable loan checks"""

import logging
import math
from typing import Any, Dict

from lending_gateway.config import settings
from lending_gateway.domain.exceptions import RuleEngineFault
from lending_gateway.domain.models import BalanceTrend, DecisionOutcome, FinancialProfile, RuleVerdict

logger = logging.getLogger(__name__)

# Sentinels: no income is maximal debt burden, no loan amount is zero liquidity
NO_INCOME_DTI = 100.0
NO_LOAN_LIQUIDITY = 0.0


def _value_status(profile: FinancialProfile, field_name: str, amount: float) -> Dict[str, Any]:
    return {"amount": amount, "status": "Present" if profile.is_present(field_name) else "Missing"}


def _finite_non_negative(value: float, sentinel: float) -> float:
    if not math.isfinite(value):
        return sentinel
    return max(value, 0.0)


def calculate_dti(monthly_debt: float, monthly_income: float) -> float:
    """Debt as a percentage of income; income <= 0 yields the 100% sentinel"""
    if monthly_income <= 0:
        return NO_INCOME_DTI
    return _finite_non_negative((monthly_debt / monthly_income) * 100, NO_INCOME_DTI)


def calculate_liquidity_ratio(current_balance: float, loan_amount: float) -> float:
    """Balance as a percentage of the loan; loan <= 0 yields 0"""
    if loan_amount <= 0:
        return NO_LOAN_LIQUIDITY
    return _finite_non_negative((current_balance / loan_amount) * 100, NO_LOAN_LIQUIDITY)


def _apply_rules(
    dti: float,
    liquidity_ratio: float,
    balance_trend: BalanceTrend,
    max_dti: float,
    min_liquidity: float,
) -> tuple[DecisionOutcome, str]:
    """
    Ordered threshold rules, first match wins:
    1. DTI above max_dti (default 40%)
    2. Liquidity below min_liquidity (default 50%)
    3. Negative balance trend
    """
    if dti > max_dti:
        return DecisionOutcome.REJECT, f"High DTI (>{max_dti:g}%)"
    if liquidity_ratio < min_liquidity:
        return DecisionOutcome.REJECT, f"Low liquidity (<{min_liquidity:g}%)"
    if balance_trend == BalanceTrend.NEGATIVE:
        return DecisionOutcome.REJECT, "Negative balance trend"
    return DecisionOutcome.APPROVE, "Passed all rules"


def _build_verdict(
    profile: FinancialProfile,
    loan_amount: Any,
    max_dti: float,
    min_liquidity: float,
) -> RuleVerdict:
    try:
        loan = float(loan_amount)
    except (TypeError, ValueError) as e:
        raise RuleEngineFault(f"Invalid loan amount: {loan_amount!r}") from e
    if not math.isfinite(loan):
        raise RuleEngineFault(f"Invalid loan amount: {loan_amount!r}")

    income = profile.monthly_income
    debt = profile.monthly_debt
    balance = profile.current_balance
    trend = profile.balance_trend

    dti = calculate_dti(debt, income)
    liquidity_ratio = calculate_liquidity_ratio(balance, loan)
    decision, reason = _apply_rules(dti, liquidity_ratio, trend, max_dti, min_liquidity)

    explanation = {
        "income": _value_status(profile, "monthly_income", income),
        "debt": _value_status(profile, "monthly_debt", debt),
        "balance": _value_status(profile, "current_balance", balance),
        "loan_amount": {"amount": loan, "status": "Present" if loan > 0 else "Missing"},
        "dti": {
            "value": round(dti, 2),
            "threshold": max_dti,
            "status": "Fail" if dti > max_dti else "Pass",
        },
        "liquidity": {
            "value": round(liquidity_ratio, 2),
            "threshold": min_liquidity,
            "status": "Fail" if liquidity_ratio < min_liquidity else "Pass",
        },
        "balance_trend": {
            "value": trend.value,
            "status": "Fail" if trend == BalanceTrend.NEGATIVE else "Pass",
        },
    }

    return RuleVerdict(
        decision=decision,
        reason=reason,
        dti_ratio=dti,
        liquidity_ratio=liquidity_ratio,
        balance_trend=trend.value,
        explanation=explanation,
    )


def evaluate(
    profile: FinancialProfile,
    loan_amount: Any,
    max_dti: float | None = None,
    min_liquidity: float | None = None,
) -> RuleVerdict:
    """
    Main entry point: compute affordability metrics and apply threshold rules.

    Never raises. Any calculation fault degrades to a Reject verdict with the
    sentinel metrics (DTI 100, liquidity 0) and an ``explanation.error`` entry,
    so arbitration always has a verdict to work with.
    """
    max_dti = settings.max_dti_percent if max_dti is None else max_dti
    min_liquidity = settings.min_liquidity_percent if min_liquidity is None else min_liquidity

    try:
        return _build_verdict(profile, loan_amount, max_dti, min_liquidity)
    except Exception as e:
        logger.error(f"Rule engine fault: {e}", extra={"step": "rule_engine"})
        trend = getattr(profile, "balance_trend", BalanceTrend.NEUTRAL)
        return RuleVerdict(
            decision=DecisionOutcome.REJECT,
            reason="Error in financial analysis",
            dti_ratio=NO_INCOME_DTI,
            liquidity_ratio=NO_LOAN_LIQUIDITY,
            balance_trend=getattr(trend, "value", str(trend)),
            explanation={"error": str(e)},
        )
