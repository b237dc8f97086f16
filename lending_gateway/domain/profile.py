"""Default-filling for aggregator account data.

Every downstream component receives a fully populated FinancialProfile; this
module is the only place that deals with absent or oddly shaped fields.

PROFILE_DEFAULTS maps each profile field to the aggregator paths that may hold
it (first present path wins) and the default used when none does:

    monthly_income   incomeInsights.recurringCreditSummary[0].avgAmount
                     incomeInsights.accounts[0].recurringCreditSummary[0].avgAmount  -> 0.0
    monthly_debt     spendingInsights.recurringDebitSummary[0].avgAmount
                     spendingInsights.accounts[0].recurringDebitSummary[0].avgAmount -> 0.0
    current_balance  accountBalance.balances[0].amount.value                         -> 0.0
    balance_trend    balanceInsights.trend                                           -> "neutral"
    transactions     transactions                                                    -> []
"""

import math
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from lending_gateway.domain.models import BalanceTrend, FinancialProfile, Transaction

_MISSING = object()

PROFILE_DEFAULTS: Dict[str, Tuple[Tuple[str, ...], Any]] = {
    "monthly_income": (
        (
            "incomeInsights.recurringCreditSummary[0].avgAmount",
            "incomeInsights.accounts[0].recurringCreditSummary[0].avgAmount",
        ),
        0.0,
    ),
    "monthly_debt": (
        (
            "spendingInsights.recurringDebitSummary[0].avgAmount",
            "spendingInsights.accounts[0].recurringDebitSummary[0].avgAmount",
        ),
        0.0,
    ),
    "current_balance": (("accountBalance.balances[0].amount.value",), 0.0),
    "balance_trend": (("balanceInsights.trend",), BalanceTrend.NEUTRAL.value),
    "transactions": (("transactions",), []),
}

_TOKEN = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def resolve_path(data: Any, path: str) -> Any:
    """Walk ``a.b[0].c`` through nested mappings/lists; returns _MISSING on any gap"""
    current = data
    for key, index in _TOKEN.findall(path):
        if key:
            if not isinstance(current, Mapping) or key not in current:
                return _MISSING
            current = current[key]
        else:
            i = int(index)
            if not isinstance(current, (list, tuple)) or i >= len(current):
                return _MISSING
            current = current[i]
        if current is None:
            return _MISSING
    return current


def to_amount(value: Any) -> Optional[float]:
    """Parse numbers and numeric strings like "25000.00"; None when unusable"""
    if isinstance(value, bool):
        return None
    if isinstance(value, Mapping):
        value = value.get("value")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return amount if math.isfinite(amount) else None


def _normalize_trend(value: Any) -> Optional[BalanceTrend]:
    if not isinstance(value, str):
        return None
    try:
        return BalanceTrend(value.strip().lower())
    except ValueError:
        return None


def normalize_transaction(raw: Any) -> Transaction:
    """Accept both the aggregator's raw shape and the flat shape"""
    if not isinstance(raw, Mapping):
        return Transaction(category="", description="", amount=0.0, currency="", date="")

    amount_field = raw.get("amount")
    currency = raw.get("currency")
    if isinstance(amount_field, Mapping):
        currency = currency or amount_field.get("currency")

    return Transaction(
        category=str(raw.get("type") or raw.get("transactionType") or raw.get("category") or ""),
        description=str(raw.get("description") or raw.get("transactionDescription") or ""),
        amount=to_amount(amount_field) or 0.0,
        currency=str(currency or ""),
        date=str(raw.get("date") or raw.get("bookingDateTime") or ""),
    )


def normalize_profile(account_data: Optional[Mapping[str, Any]]) -> FinancialProfile:
    """Apply PROFILE_DEFAULTS once, recording which fields fell back to defaults"""
    data = account_data if isinstance(account_data, Mapping) else {}
    values: Dict[str, Any] = {}
    missing: List[str] = []

    for field_name, (paths, default) in PROFILE_DEFAULTS.items():
        parsed = None
        for path in paths:
            raw = resolve_path(data, path)
            if raw is _MISSING:
                continue
            if field_name == "balance_trend":
                parsed = _normalize_trend(raw)
            elif field_name == "transactions":
                parsed = raw if isinstance(raw, (list, tuple)) else None
            else:
                parsed = to_amount(raw)
            if parsed is not None:
                break

        if parsed is None:
            missing.append(field_name)
            parsed = default
        values[field_name] = parsed

    return FinancialProfile(
        monthly_income=values["monthly_income"],
        monthly_debt=values["monthly_debt"],
        current_balance=values["current_balance"],
        balance_trend=BalanceTrend(values["balance_trend"]),
        transactions=tuple(normalize_transaction(t) for t in values["transactions"]),
        missing_fields=frozenset(missing),
    )
