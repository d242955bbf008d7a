from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from housingguard.policies.fair_housing import BLOCK, ComplianceIssue, validate_fair_housing
from housingguard.policies.license_topics import OPERATIONS, classify_message_topic

ACTION_BLOCKED = "blocked"
ACTION_MODIFIED = "modified"
ACTION_ESCALATED = "escalated"
ACTION_SENT = "sent"
ACTIONS = (ACTION_BLOCKED, ACTION_MODIFIED, ACTION_ESCALATED, ACTION_SENT)


@dataclass
class MessageReview:
    """Everything the composer needs before a message goes out."""
    compliant: bool = True
    issues: List[ComplianceIssue] = field(default_factory=list)
    risk_score: int = 0
    classification: str = OPERATIONS
    requires_broker_review: bool = False
    matched_topics: List[str] = field(default_factory=list)

    @property
    def recommended_action(self) -> str:
        if not self.compliant:
            return ACTION_BLOCKED
        if self.requires_broker_review:
            return ACTION_ESCALATED
        return ACTION_SENT

    @property
    def blocked_phrases(self) -> List[str]:
        return [i.phrase for i in self.issues if i.severity == BLOCK]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compliant": self.compliant,
            "issues": [i.to_dict() for i in self.issues],
            "risk_score": self.risk_score,
            "classification": self.classification,
            "requires_broker_review": self.requires_broker_review,
            "matched_topics": list(self.matched_topics),
            "recommended_action": self.recommended_action,
        }


def review_message(message: Optional[str]) -> MessageReview:
    # 1) Fair Housing phrases
    fh = validate_fair_housing(message)
    # 2) License topics (independent of the phrase gate)
    topic = classify_message_topic(message)
    return MessageReview(
        compliant=fh.compliant,
        issues=fh.issues,
        risk_score=fh.risk_score,
        classification=topic.classification,
        requires_broker_review=topic.requires_broker_review,
        matched_topics=topic.matched_topics,
    )
