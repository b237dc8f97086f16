"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from lending_gateway.config import settings
from lending_gateway.domain.pipeline import DecisionPipeline
from lending_gateway.domain.risk import RiskAssessor
from lending_gateway.infrastructure.clients.risk_model import build_risk_model_client


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_risk_assessor() -> RiskAssessor:
    """Provide a risk assessor; without an API key it always falls back"""
    return RiskAssessor(build_risk_model_client(settings))


def get_decision_pipeline() -> DecisionPipeline:
    """Provide a fresh pipeline per request"""
    return DecisionPipeline(get_risk_assessor(), policy=settings.conflict_policy)
