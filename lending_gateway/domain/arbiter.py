"""Decision arbiter - combines compliance, affordability and risk into one decision"""

from typing import Any, Dict

from lending_gateway.config import settings
from lending_gateway.domain.models import (
    ComplianceResult,
    ConflictPolicy,
    Decision,
    DecisionOutcome,
    RiskAssessment,
    RuleVerdict,
)

NON_COMPLIANT_REASON = "Non-Sharia-compliant transactions detected"
CONFLICT_REASON = "Conflicting assessments between rule-based and risk model"
MANUAL_REVIEW_NOTE = (
    "This application requires manual review by a credit officer due to conflicting assessments."
)
OVERRIDE_NOTE = "Risk model overrode the affordability rejection; verify affordability before disbursement."


def compliance_rejection(compliance: ComplianceResult) -> Decision:
    """Terminal gate decision; no other signal is consulted"""
    return Decision(
        decision=DecisionOutcome.REJECT,
        reason=NON_COMPLIANT_REASON,
        details={
            "sharia_compliant": False,
            "non_compliant_activities": list(compliance.activities),
            "compliance": compliance.to_dict(),
        },
    )


def _details(rule: RuleVerdict, risk: RiskAssessment, recommendation: str | None = None) -> Dict[str, Any]:
    details: Dict[str, Any] = {
        "sharia_compliant": True,
        "rule_based": rule.to_dict(),
        "rule_based_approved": rule.approved,
        "llm_risk_score": risk.risk_score,
        "llm_reason": risk.reason,
        "llm_available": risk.available,
    }
    if risk.details is not None:
        details["llm_details"] = risk.details
    if risk.cause is not None:
        details["llm_fallback_cause"] = risk.cause.value
    if recommendation is not None:
        details["recommendation"] = recommendation
    return details


def _manual_review(rule: RuleVerdict, risk: RiskAssessment) -> Decision:
    return Decision(
        decision=DecisionOutcome.MANUAL_REVIEW,
        reason=CONFLICT_REASON,
        details=_details(rule, risk, MANUAL_REVIEW_NOTE),
    )


def arbitrate(
    compliance: ComplianceResult,
    rule: RuleVerdict,
    risk: RiskAssessment,
    policy: ConflictPolicy | str | None = None,
    risk_threshold: int | None = None,
) -> Decision:
    """
    Arbitration matrix (risk_threshold defaults to 70):

    - non-compliant                     -> Reject (terminal)
    - risk unavailable                  -> mirror the rule verdict
    - rule Reject,  risk > threshold    -> Reject
    - rule Reject,  risk <= threshold   -> per ConflictPolicy
    - rule Approve, risk > threshold    -> Reject (Up to the bank under MANUAL_REVIEW)
    - rule Approve, risk <= threshold   -> Approve
    """
    if not compliance.compliant:
        return compliance_rejection(compliance)

    policy = ConflictPolicy(policy or settings.conflict_policy)
    risk_threshold = settings.risk_reject_threshold if risk_threshold is None else risk_threshold

    if not risk.available:
        return Decision(
            decision=rule.decision,
            reason=f"{rule.reason} (risk model unavailable)",
            details=_details(rule, risk),
        )

    risk_rejects = risk.risk_score > risk_threshold

    if not rule.approved and risk_rejects:
        return Decision(
            decision=DecisionOutcome.REJECT,
            reason=f"Rejected by both rule-based ({rule.reason}) and risk model ({risk.reason}) assessments",
            details=_details(rule, risk),
        )

    if not rule.approved:
        if policy == ConflictPolicy.RISK_OVERRIDE:
            return Decision(
                decision=DecisionOutcome.APPROVE,
                reason=f"Risk model approved despite rule-based rejection: {rule.reason}",
                details=_details(rule, risk, OVERRIDE_NOTE),
            )
        if policy == ConflictPolicy.MANUAL_REVIEW:
            return _manual_review(rule, risk)
        return Decision(
            decision=DecisionOutcome.REJECT,
            reason=f"Rule-based rejected: {rule.reason}",
            details=_details(rule, risk),
        )

    if risk_rejects:
        if policy == ConflictPolicy.MANUAL_REVIEW:
            return _manual_review(rule, risk)
        return Decision(
            decision=DecisionOutcome.REJECT,
            reason=f"Rule-based approved but risk model rejected: {risk.reason}",
            details=_details(rule, risk),
        )

    return Decision(decision=DecisionOutcome.APPROVE, reason="Passed all checks", details=_details(rule, risk))
