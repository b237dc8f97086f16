"""POST /v1/decision - hybrid loan decision endpoint"""

from fastapi import APIRouter, Depends, Request, Response

from lending_gateway.api.dependencies import get_decision_pipeline, get_request_id
from lending_gateway.api.v1.schemas import DecisionRequest, DecisionResponse
from lending_gateway.domain.models import DecisionOutcome
from lending_gateway.domain.pipeline import DecisionPipeline

router = APIRouter()


@router.post("/decision", response_model=DecisionResponse)
async def create_decision(
    request_body: DecisionRequest,
    request: Request,
    response: Response,
    pipeline: DecisionPipeline = Depends(get_decision_pipeline),
):
    """
    Decide a loan application from the applicant's financial signals.

    Approve, Reject and "Up to the bank" are business outcomes (HTTP 200).
    An Error decision means the pipeline itself failed (HTTP 500), and still
    carries reason and details.
    """
    decision = await pipeline.evaluate(
        request_body.account_data,
        request_body.loan_amount,
        request_id=get_request_id(request),
    )

    if decision.decision == DecisionOutcome.ERROR:
        response.status_code = 500

    return DecisionResponse(**decision.to_dict())
