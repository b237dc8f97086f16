"""Prometheus metrics for monitoring decision outcomes, compliance rejections, and risk model health"""

from prometheus_client import Counter, Histogram

# Decision metrics
decision_counter = Counter(
    "lending_decision_total",
    "Total loan decisions made",
    ["outcome"],  # Approve | Reject | Up to the bank | Error
)

compliance_rejection_counter = Counter(
    "lending_compliance_rejections_total",
    "Applications rejected by the compliance screen",
)

rule_verdict_counter = Counter(
    "lending_rule_verdict_total",
    "Affordability rule engine verdicts",
    ["decision"],
)

# Risk model metrics
risk_model_latency_histogram = Histogram(
    "risk_model_latency_seconds",
    "Risk model response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

risk_fallback_counter = Counter(
    "risk_model_fallbacks_total",
    "Risk assessments that fell back to the neutral score",
    ["cause"],  # not_configured | quota_exceeded | timeout | provider_error | malformed_response
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_decision(outcome: str, sharia_compliant: bool = True) -> None:
    """Record decision outcome for monitoring approval and rejection rates"""
    decision_counter.labels(outcome=outcome).inc()
    if not sharia_compliant:
        compliance_rejection_counter.inc()


def record_rule_verdict(decision: str) -> None:
    rule_verdict_counter.labels(decision=decision).inc()


def record_risk_fallback(cause: str) -> None:
    risk_fallback_counter.labels(cause=cause).inc()
