"""Unit tests for the affordability rule engine"""

import math
import pytest
from lending_gateway.domain.affordability import calculate_dti, calculate_liquidity_ratio, evaluate
from lending_gateway.domain.models import BalanceTrend, DecisionOutcome, FinancialProfile


def make_profile(
    income: float = 25000.0,
    debt: float = 2000.0,
    balance: float = 75000.0,
    trend: BalanceTrend = BalanceTrend.POSITIVE,
    missing: frozenset = frozenset(),
) -> FinancialProfile:
    return FinancialProfile(
        monthly_income=income,
        monthly_debt=debt,
        current_balance=balance,
        balance_trend=trend,
        missing_fields=missing,
    )


@pytest.mark.parametrize("income,debt", [(25000, 2000), (3000, 2000), (1, 0), (4000, 1600)])
def test_dti_is_debt_over_income(income, debt):
    assert calculate_dti(debt, income) == debt / income * 100


@pytest.mark.parametrize("income", [0, -500])
def test_dti_sentinel_without_income(income):
    assert calculate_dti(2000, income) == 100.0


def test_liquidity_ratio():
    assert calculate_liquidity_ratio(75000, 50000) == 150.0


@pytest.mark.parametrize("loan", [0, -10])
def test_liquidity_sentinel_without_loan(loan):
    assert calculate_liquidity_ratio(75000, loan) == 0.0


def test_ratios_are_never_negative():
    assert calculate_liquidity_ratio(-100, 1000) == 0.0
    assert calculate_dti(-100, 1000) == 0.0


def test_approve_passes_all_rules():
    verdict = evaluate(make_profile(), 50000)

    assert verdict.decision == DecisionOutcome.APPROVE
    assert verdict.reason == "Passed all rules"
    assert verdict.dti_ratio == 8.0
    assert verdict.liquidity_ratio == 150.0
    assert verdict.balance_trend == "positive"


def test_high_dti_wins_over_other_rules():
    """DTI 45%, liquidity 80%, positive trend: first rule decides"""
    verdict = evaluate(make_profile(income=10000, debt=4500, balance=40000), 50000)

    assert verdict.decision == DecisionOutcome.REJECT
    assert verdict.reason == "High DTI (>40%)"
    assert verdict.dti_ratio == 45.0
    assert verdict.liquidity_ratio == 80.0


def test_low_liquidity_rejects():
    verdict = evaluate(make_profile(balance=10000), 50000)
    assert verdict.decision == DecisionOutcome.REJECT
    assert verdict.reason == "Low liquidity (<50%)"


def test_negative_trend_rejects():
    verdict = evaluate(make_profile(trend=BalanceTrend.NEGATIVE), 50000)
    assert verdict.decision == DecisionOutcome.REJECT
    assert verdict.reason == "Negative balance trend"


def test_dti_exactly_at_threshold_passes():
    verdict = evaluate(make_profile(income=10000, debt=4000), 50000)
    assert verdict.decision == DecisionOutcome.APPROVE


def test_explanation_is_complete_on_rejection():
    verdict = evaluate(make_profile(income=0, missing=frozenset({"monthly_income"})), 50000)

    assert verdict.reason == "High DTI (>40%)"
    explanation = verdict.explanation
    assert explanation["income"] == {"amount": 0, "status": "Missing"}
    assert explanation["debt"]["status"] == "Present"
    assert explanation["dti"]["status"] == "Fail"
    assert explanation["liquidity"]["status"] == "Pass"
    assert explanation["balance_trend"] == {"value": "positive", "status": "Pass"}


def test_custom_thresholds():
    verdict = evaluate(make_profile(income=10000, debt=4500), 50000, max_dti=50)
    assert verdict.decision == DecisionOutcome.APPROVE


def test_invalid_loan_amount_degrades_to_reject():
    verdict = evaluate(make_profile(), "not a number")

    assert verdict.decision == DecisionOutcome.REJECT
    assert verdict.reason == "Error in financial analysis"
    assert "error" in verdict.explanation
    assert verdict.dti_ratio == 100.0
    assert verdict.liquidity_ratio == 0.0
    assert math.isfinite(verdict.dti_ratio) and verdict.dti_ratio >= 0
    assert math.isfinite(verdict.liquidity_ratio) and verdict.liquidity_ratio >= 0


def test_to_dict_shape():
    data = evaluate(make_profile(), 50000).to_dict()
    assert data["decision"] == "Approve"
    assert data["metrics"] == {"dti_ratio": 8.0, "liquidity_ratio": 150.0, "balance_trend": "positive"}
    assert "explanation" in data
