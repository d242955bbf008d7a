# housingguard/policies/license_topics.py
"""
GA real-estate license topic gate.

Messages touching negotiation, pricing, lease terms, deposits or fees need a
licensed broker's sign-off; valuation and investment/legal talk needs
oversight. Day-to-day operations (maintenance, check-in, amenities) do not.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

OPERATIONS = "operations"
REQUIRES_BROKER = "requires_broker"
REQUIRES_OVERSIGHT = "requires_oversight"

_F = re.IGNORECASE | re.ASCII

PAT_BROKER: Tuple[re.Pattern, ...] = (
    re.compile(r"\b(negotiate|negotiating|negotiation)\b", _F),
    re.compile(r"\b(rental price|rent amount|pricing|rate adjustment)\b", _F),
    re.compile(r"\b(lease terms?|contract terms?|agreement terms?)\b", _F),
    re.compile(r"\b(security deposit|earnest money)\b", _F),
    re.compile(r"\b(commission|fee structure|management fee)\b", _F),
)

PAT_OVERSIGHT: Tuple[re.Pattern, ...] = (
    re.compile(r"\b(property value|market analysis|valuation)\b", _F),
    re.compile(r"\b(investment advice|financial recommendation)\b", _F),
    re.compile(r"\b(legal advice|legal matter)\b", _F),
)

PAT_OPERATIONS: Tuple[re.Pattern, ...] = (
    re.compile(r"\b(maintenance|repair|cleaning|inspection)\b", _F),
    re.compile(r"\b(check[- ]?in|check[- ]?out|arrival|departure)\b", _F),
    re.compile(r"\b(amenities|features|parking|utilities)\b", _F),
    re.compile(r"\b(schedule|appointment|booking confirmation)\b", _F),
    re.compile(r"\b(thank you|welcome|follow[- ]?up)\b", _F),
)

# bucket label pushed per hit, in scan order
GA_LICENSE_TOPICS: Tuple[Tuple[str, Tuple[re.Pattern, ...]], ...] = (
    (REQUIRES_BROKER, PAT_BROKER),
    (REQUIRES_OVERSIGHT, PAT_OVERSIGHT),
    (OPERATIONS, PAT_OPERATIONS),
)


@dataclass
class TopicClassification:
    classification: str = OPERATIONS
    requires_broker_review: bool = False
    matched_topics: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classification": self.classification,
            "requires_broker_review": self.requires_broker_review,
            "matched_topics": list(self.matched_topics),
        }


def classify_message_topic(message: Optional[str]) -> TopicClassification:
    t = message or ""
    matched: List[str] = []
    for label, patterns in GA_LICENSE_TOPICS:
        for p in patterns:
            if p.search(t):
                matched.append(label)

    if REQUIRES_BROKER in matched:
        return TopicClassification(REQUIRES_BROKER, True, matched)
    if REQUIRES_OVERSIGHT in matched:
        return TopicClassification(REQUIRES_OVERSIGHT, True, matched)
    return TopicClassification(OPERATIONS, False, matched)
