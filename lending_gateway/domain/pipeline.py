"""Hybrid loan decision pipeline - main entry point for evaluating an application"""

import logging
import time
from typing import Any, Mapping, Optional

from lending_gateway.domain import affordability, compliance
from lending_gateway.domain.arbiter import arbitrate, compliance_rejection
from lending_gateway.domain.models import ConflictPolicy, Decision, DecisionOutcome
from lending_gateway.domain.profile import normalize_profile
from lending_gateway.domain.risk import RiskAssessor
from lending_gateway.infrastructure.observability.logging import log_decision
from lending_gateway.infrastructure.observability.metrics import record_decision, record_rule_verdict

logger = logging.getLogger(__name__)


class DecisionPipeline:
    """
    Evaluate one application end to end.

    Flow:
    1. Fill defaults into the aggregator payload
    2. Compliance screen (a violation ends evaluation with Reject)
    3. Affordability rules
    4. Risk model assessment (only blocking step, bounded by timeout)
    5. Arbitration

    Never raises: unexpected faults surface as an Error decision.
    """

    def __init__(self, risk_assessor: RiskAssessor, policy: ConflictPolicy | str | None = None):
        self.risk_assessor = risk_assessor
        self.policy = policy

    async def evaluate(
        self,
        account_data: Optional[Mapping[str, Any]],
        loan_amount: Any,
        request_id: Optional[str] = None,
    ) -> Decision:
        start_time = time.time()
        risk_available = None

        try:
            profile = normalize_profile(account_data)

            screen_result = compliance.screen(profile.transactions)
            if not screen_result.compliant:
                logger.info(
                    "Compliance screen rejected application",
                    extra={
                        "request_id": request_id,
                        "step": "compliance",
                        "non_compliant_activities": list(screen_result.activities),
                    },
                )
                decision = compliance_rejection(screen_result)
            else:
                rule = affordability.evaluate(profile, loan_amount)
                record_rule_verdict(rule.decision.value)

                risk = await self.risk_assessor.assess(profile, loan_amount)
                risk_available = risk.available

                decision = arbitrate(screen_result, rule, risk, policy=self.policy)

        except Exception as e:
            logger.exception(
                f"Unexpected error in decision pipeline: {e}",
                extra={"request_id": request_id, "step": "pipeline"},
            )
            decision = Decision(
                decision=DecisionOutcome.ERROR,
                reason="Error processing application",
                details={"error": str(e)},
            )

        duration_ms = (time.time() - start_time) * 1000
        record_decision(decision.decision.value, decision.details.get("sharia_compliant", True))
        log_decision(request_id, decision.decision.value, decision.reason, risk_available, duration_ms)

        return decision
