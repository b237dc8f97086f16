"""Pydantic schemas for API request/response validation"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class DecisionRequest(BaseModel):
    """Request body for POST /v1/decision"""

    account_data: Dict[str, Any] = Field(
        default_factory=dict,
        description="Aggregator payload: transactions, income/spending/balance insights, account balance",
    )
    loan_amount: float = Field(..., description="Requested loan amount")


class DecisionResponse(BaseModel):
    """Response for POST /v1/decision"""

    decision: str = Field(..., description="Approve | Reject | Up to the bank | Error")
    reason: str
    details: Dict[str, Any]
