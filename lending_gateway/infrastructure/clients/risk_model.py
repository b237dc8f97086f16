"""Risk model HTTP client for an OpenAI-compatible chat completions API"""

import json
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field, StrictFloat, ValidationError

from lending_gateway.config import Settings, settings
from lending_gateway.domain.exceptions import MalformedRiskResponse, RiskProviderUnavailable, RiskQuotaExceeded
from lending_gateway.domain.models import FallbackCause, RiskAssessment, RiskRequest

PROMPT_TEMPLATE = """You are a financial risk assessment AI. Analyze this Saudi user's financial data for loan risk assessment.

Financial Data:
- Monthly Income: {income} {currency}
- Recent Transactions: {transactions}
- Requested Loan Amount: {loan_amount} {currency}
- Current Balance: {balance} {currency}
- Balance Trend: {trend}

Assessment Tasks:
1. Calculate risk score (0-100) based on:
   - Income stability and amount
   - Transaction patterns
   - Balance trends
   - Loan amount relative to income
2. Identify any risky patterns (gambling, overdrafts, etc.)
3. Check if spending aligns with income
4. Consider Sharia compliance of transactions

Return a JSON object with:
{{
  "risk_score": number (0-100),
  "reason": "string explaining the risk assessment",
  "details": {{
    "income_risk": "string",
    "transaction_risk": "string",
    "balance_risk": "string"
  }}
}}"""


class RiskReply(BaseModel):
    """
    Expected JSON reply from the risk model.

    risk_score is any JSON number in [0, 100]; booleans and numeric strings are
    rejected. Fractional scores are rounded to the nearest integer.
    """

    risk_score: StrictFloat = Field(..., ge=0, le=100, allow_inf_nan=False)
    reason: str = Field(..., min_length=1)
    details: Optional[Dict[str, Any]] = None


def build_prompt(request: RiskRequest) -> str:
    return PROMPT_TEMPLATE.format(
        income=request.monthly_income,
        currency=request.currency,
        transactions=json.dumps(request.recent_transactions, ensure_ascii=False),
        loan_amount=request.loan_amount,
        balance=request.current_balance,
        trend=request.balance_trend,
    )


def parse_reply(data: Dict[str, Any]) -> RiskAssessment:
    """
    Extract the message content from a chat completion and validate it.

    Raises:
        MalformedRiskResponse: Unexpected envelope, invalid JSON, or schema mismatch
    """
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedRiskResponse("Unexpected response structure from risk model") from e

    if not isinstance(content, str):
        raise MalformedRiskResponse("Risk model returned no message content")

    try:
        reply = RiskReply.model_validate_json(content)
    except ValidationError as e:
        raise MalformedRiskResponse(f"Malformed risk model response: {e.error_count()} validation error(s)") from e

    return RiskAssessment(
        risk_score=int(round(reply.risk_score)),
        reason=reply.reason,
        available=True,
        details=reply.details,
    )


def _is_quota_error(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return "insufficient_quota" in response.text


class RiskModelClient:
    """Client for the external risk model; one attempt per call, no retries"""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or settings.risk_model_base_url).rstrip("/")
        self.model = model or settings.risk_model_name
        self.timeout = settings.risk_model_timeout_seconds if timeout is None else timeout
        self.temperature = settings.risk_model_temperature
        self.max_tokens = settings.risk_model_max_tokens
        self._transport = transport

    async def score(self, request: RiskRequest) -> RiskAssessment:
        """
        Ask the risk model for a score.

        Raises:
            RiskQuotaExceeded: HTTP 429 or an insufficient_quota error body
            RiskProviderUnavailable: Timeout, transport failure, or other HTTP errors
            MalformedRiskResponse: Reply does not match the expected schema
        """
        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(request)}],
            "response_format": {"type": "json_object"},
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(f"{self.base_url}/chat/completions", json=body, headers=headers)
                if response.status_code >= 400 and _is_quota_error(response):
                    raise RiskQuotaExceeded("Risk model quota exceeded")
                response.raise_for_status()
                data = response.json()

            except httpx.TimeoutException as e:
                raise RiskProviderUnavailable(
                    f"Risk model timed out after {self.timeout}s", cause=FallbackCause.TIMEOUT.value
                ) from e
            except httpx.HTTPStatusError as e:
                raise RiskProviderUnavailable(f"Risk model error: HTTP {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise RiskProviderUnavailable(f"Risk model unreachable: {e.__class__.__name__}") from e
            except ValueError as e:
                raise MalformedRiskResponse("Risk model response was not valid JSON") from e

        return parse_reply(data)


def build_risk_model_client(config: Settings | None = None) -> Optional[RiskModelClient]:
    """Return a client when an API key is configured, else None"""
    config = config or settings
    if not config.risk_model_api_key:
        return None
    return RiskModelClient(
        api_key=config.risk_model_api_key,
        base_url=config.risk_model_base_url,
        model=config.risk_model_name,
        timeout=config.risk_model_timeout_seconds,
    )
