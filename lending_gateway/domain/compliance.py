"""Sharia compliance screen - hard gate over transaction history"""

from typing import Iterable, List

from lending_gateway.domain.models import ComplianceResult, Transaction

PROHIBITED_CATEGORIES = frozenset({"GAMBLING", "ALCOHOL", "TOBACCO"})

# English and Arabic terms; matched case-insensitively against descriptions
PROHIBITED_KEYWORDS = (
    "interest",
    "riba",
    "gambling",
    "casino",
    "betting",
    "lottery",
    "ربا",
    "فائدة",
    "قمار",
    "كازينو",
    "مراهنة",
    "يانصيب",
)

KEYWORD_ACTIVITY = "KEYWORD"


def _matched_activity(txn: Transaction) -> str | None:
    category = (txn.category or "").strip().upper()
    if category in PROHIBITED_CATEGORIES:
        return category

    description = (txn.description or "").casefold()
    if any(keyword.casefold() in description for keyword in PROHIBITED_KEYWORDS):
        return KEYWORD_ACTIVITY

    return None


def screen(transactions: Iterable[Transaction]) -> ComplianceResult:
    """
    Flag transactions in a prohibited category or with a prohibited keyword
    in their description. An empty history is compliant.
    """
    violations: List[Transaction] = []
    activities: List[str] = []

    for txn in transactions:
        activity = _matched_activity(txn)
        if activity is not None:
            violations.append(txn)
            activities.append(activity)

    return ComplianceResult(
        compliant=not violations,
        violations=tuple(violations),
        activities=tuple(activities),
    )
