"""Pytest fixtures for testing"""

import pytest
from typing import Any, Dict, List
from fastapi.testclient import TestClient
from lending_gateway.api.main import create_app
from lending_gateway.api.dependencies import get_decision_pipeline
from lending_gateway.domain.pipeline import DecisionPipeline
from lending_gateway.domain.risk import RiskAssessor
from lending_gateway.infrastructure.clients.stub import StubRiskProvider


def make_account_data(
    income: Any = "25000.00",
    debt: Any = "2000.00",
    balance: Any = 75000,
    trend: str = "positive",
    transactions: List[Dict[str, Any]] | None = None,
) -> Dict[str, Any]:
    """Aggregator-shaped payload with the given aggregates"""
    if transactions is None:
        transactions = [
            {
                "transactionId": "0318cbb4",
                "transactionDescription": "Online Purchase from Meal at Al Baik, Jeddah",
                "transactionType": "POS",
                "creditDebitIndicator": "Debit",
                "amount": {"value": 20, "currency": "SAR"},
                "bookingDateTime": "2023-01-11T00:00:00.000Z",
            },
            {
                "transactionId": "91a2cc10",
                "transactionDescription": "Monthly Salary from ABC Corp",
                "transactionType": "SALARY",
                "creditDebitIndicator": "Credit",
                "amount": {"value": 25000, "currency": "SAR"},
                "bookingDateTime": "2023-01-27T00:00:00.000Z",
            },
        ]
    return {
        "transactions": transactions,
        "incomeInsights": {"recurringCreditSummary": [{"streamType": "Salary", "avgAmount": income}]},
        "spendingInsights": {"recurringDebitSummary": [{"streamType": "Groceries", "avgAmount": debt}]},
        "accountBalance": {"balances": [{"type": "ClosingAvailable", "amount": {"value": balance, "currency": "SAR"}}]},
        "balanceInsights": {"trend": trend},
    }


@pytest.fixture
def account_data() -> Dict[str, Any]:
    """Healthy applicant: DTI 8%, balance 75000 SAR, positive trend"""
    return make_account_data()


@pytest.fixture
def stub_provider() -> StubRiskProvider:
    return StubRiskProvider(risk_score=30)


@pytest.fixture
def pipeline(stub_provider: StubRiskProvider) -> DecisionPipeline:
    return DecisionPipeline(RiskAssessor(stub_provider, timeout=1.0), policy="affordability_floor")


@pytest.fixture
def client(pipeline: DecisionPipeline) -> TestClient:
    """Create FastAPI test client backed by the stub risk provider"""
    app = create_app()
    app.dependency_overrides[get_decision_pipeline] = lambda: pipeline
    return TestClient(app)
