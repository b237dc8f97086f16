"""Unit tests for the arbitration matrix"""

import pytest
from lending_gateway.domain.arbiter import arbitrate, CONFLICT_REASON, MANUAL_REVIEW_NOTE, NON_COMPLIANT_REASON
from lending_gateway.domain.models import (
    ComplianceResult,
    DecisionOutcome,
    FallbackCause,
    RiskAssessment,
    RuleVerdict,
    Transaction,
)

COMPLIANT = ComplianceResult(compliant=True)


def rule(decision: DecisionOutcome, reason: str | None = None) -> RuleVerdict:
    return RuleVerdict(
        decision=decision,
        reason=reason or ("Passed all rules" if decision == DecisionOutcome.APPROVE else "High DTI (>40%)"),
        dti_ratio=8.0 if decision == DecisionOutcome.APPROVE else 66.67,
        liquidity_ratio=150.0,
        balance_trend="positive",
        explanation={"dti": {"value": 8.0, "threshold": 40.0, "status": "Pass"}},
    )


def risk(score: int, reason: str = "Model reason", details=None) -> RiskAssessment:
    return RiskAssessment(risk_score=score, reason=reason, available=True, details=details)


FALLBACK = RiskAssessment.fallback(FallbackCause.NOT_CONFIGURED, "Risk model not configured", 50)

APPROVE = DecisionOutcome.APPROVE
REJECT = DecisionOutcome.REJECT


def test_non_compliance_is_terminal():
    violation = Transaction("POS", "Casino Night Deposit", 500.0, "SAR", "2024-01-01")
    compliance = ComplianceResult(compliant=False, violations=(violation,), activities=("KEYWORD",))

    decision = arbitrate(compliance, rule(APPROVE), risk(10))

    assert decision.decision == REJECT
    assert decision.reason == NON_COMPLIANT_REASON
    assert decision.details["sharia_compliant"] is False
    assert decision.details["non_compliant_activities"] == ["KEYWORD"]


@pytest.mark.parametrize("rule_decision", [APPROVE, REJECT])
def test_unavailable_risk_mirrors_rule(rule_decision):
    verdict = rule(rule_decision)
    decision = arbitrate(COMPLIANT, verdict, FALLBACK)

    assert decision.decision == rule_decision
    assert decision.reason == f"{verdict.reason} (risk model unavailable)"
    assert decision.details["llm_available"] is False
    assert decision.details["rule_based_approved"] is (rule_decision == APPROVE)
    assert decision.details["llm_fallback_cause"] == "not_configured"


def test_both_approve():
    decision = arbitrate(COMPLIANT, rule(APPROVE), risk(30))
    assert decision.decision == APPROVE
    assert decision.reason == "Passed all checks"


def test_both_reject_concatenates_reasons():
    decision = arbitrate(COMPLIANT, rule(REJECT), risk(80, "Irregular income"))
    assert decision.decision == REJECT
    assert "High DTI (>40%)" in decision.reason
    assert "Irregular income" in decision.reason


def test_rule_approves_risk_rejects():
    decision = arbitrate(COMPLIANT, rule(APPROVE), risk(71, "Gambling-like pattern"), policy="affordability_floor")
    assert decision.decision == REJECT
    assert decision.reason == "Rule-based approved but risk model rejected: Gambling-like pattern"


def test_threshold_is_inclusive_for_approval():
    assert arbitrate(COMPLIANT, rule(APPROVE), risk(70)).decision == APPROVE


def test_rule_rejects_risk_approves_affordability_floor():
    decision = arbitrate(COMPLIANT, rule(REJECT), risk(20), policy="affordability_floor")
    assert decision.decision == REJECT
    assert "recommendation" not in decision.details


def test_rule_rejects_risk_approves_risk_override():
    decision = arbitrate(COMPLIANT, rule(REJECT), risk(20), policy="risk_override")
    assert decision.decision == APPROVE
    assert "recommendation" in decision.details


@pytest.mark.parametrize("rule_decision,score", [(REJECT, 20), (APPROVE, 90)])
def test_manual_review_on_disagreement(rule_decision, score):
    decision = arbitrate(COMPLIANT, rule(rule_decision), risk(score), policy="manual_review")
    assert decision.decision == DecisionOutcome.MANUAL_REVIEW
    assert decision.decision.value == "Up to the bank"
    assert decision.reason == CONFLICT_REASON
    assert decision.details["recommendation"] == MANUAL_REVIEW_NOTE


def test_manual_review_policy_keeps_agreement_outcomes():
    assert arbitrate(COMPLIANT, rule(APPROVE), risk(10), policy="manual_review").decision == APPROVE
    assert arbitrate(COMPLIANT, rule(REJECT), risk(90), policy="manual_review").decision == REJECT


def test_details_never_drop_explainability_fields():
    for verdict in (rule(APPROVE), rule(REJECT)):
        for assessment in (risk(10, details={"income_risk": "low"}), risk(90, details={"income_risk": "high"}), FALLBACK):
            details = arbitrate(COMPLIANT, verdict, assessment).details
            assert details["sharia_compliant"] is True
            assert details["rule_based"]["metrics"]["dti_ratio"] == verdict.dti_ratio
            assert details["rule_based"]["explanation"] == verdict.explanation
            assert details["llm_risk_score"] == assessment.risk_score
            assert details["llm_available"] is assessment.available
            if assessment.details is not None:
                assert details["llm_details"] == assessment.details


def test_custom_risk_threshold():
    assert arbitrate(COMPLIANT, rule(APPROVE), risk(60), risk_threshold=55).decision == REJECT


def test_decision_is_complete_and_frozen_when_returned():
    import dataclasses

    first = arbitrate(COMPLIANT, rule(REJECT), risk(20), policy="manual_review")
    second = arbitrate(COMPLIANT, rule(REJECT), risk(20), policy="affordability_floor")

    assert first.details["recommendation"] == MANUAL_REVIEW_NOTE
    assert "recommendation" not in second.details
    assert first.details is not second.details
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.details = {}
