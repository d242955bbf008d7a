from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from housingguard.pipeline.review import MessageReview
from housingguard.policies.fair_housing import BLOCK, CONTEXT, WARN, ComplianceIssue

CATEGORY_LABELS: Dict[str, str] = {
    "familial_status": "Familial Status",
    "race_color": "Race/Color",
    "national_origin": "National Origin",
    "religion": "Religion",
    "disability": "Disability",
    "sex_gender": "Sex/Gender",
}

# severity -> section heading, in display order
SECTION_HEADINGS = (
    (BLOCK, "Must Fix"),
    (WARN, "Review Recommended"),
    (CONTEXT, "Context Dependent"),
)

DEFAULT_BANDS: Dict[str, int] = {"high": 60, "medium": 30}


def category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, category)


def risk_band(score: int, bands: Optional[Mapping[str, int]] = None) -> str:
    b = bands or DEFAULT_BANDS
    if score >= b.get("high", DEFAULT_BANDS["high"]):
        return "high"
    if score >= b.get("medium", DEFAULT_BANDS["medium"]):
        return "medium"
    if score > 0:
        return "low"
    return "none"


@dataclass
class AlertSection:
    severity: str
    heading: str
    issues: List[ComplianceIssue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity,
            "heading": self.heading,
            "count": len(self.issues),
            "issues": [dict(i.to_dict(), label=category_label(i.category)) for i in self.issues],
        }


@dataclass
class ComplianceAlert:
    """
    What the message composer shows before sending:
      - title/description pick the most serious condition (block > broker review > warning)
      - sections group issues by severity; empty sections are dropped
      - actions: always "edit"; "request_broker_review" only when review is required
    """
    title: str
    description: str
    blocking: bool
    requires_broker_review: bool
    risk_score: int
    risk_band: str
    sections: List[AlertSection] = field(default_factory=list)

    @property
    def dismissible(self) -> bool:
        return not self.blocking

    @property
    def actions(self) -> List[str]:
        acts = ["edit"]
        if self.requires_broker_review:
            acts.append("request_broker_review")
        return acts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "blocking": self.blocking,
            "requires_broker_review": self.requires_broker_review,
            "risk_score": self.risk_score,
            "risk_band": self.risk_band,
            "dismissible": self.dismissible,
            "actions": self.actions,
            "sections": [s.to_dict() for s in self.sections],
        }


def build_alert(review: MessageReview, bands: Optional[Mapping[str, int]] = None) -> Optional[ComplianceAlert]:
    if not review.issues and not review.requires_broker_review:
        return None

    sections = []
    for severity, heading in SECTION_HEADINGS:
        hits = [i for i in review.issues if i.severity == severity]
        if hits:
            sections.append(AlertSection(severity, heading, hits))

    blocking = any(i.severity == BLOCK for i in review.issues)
    if blocking:
        title = "Fair Housing Compliance Issue"
        description = "Your message contains language that may violate the Fair Housing Act."
    elif review.requires_broker_review:
        title = "Broker Review Required"
        description = "This message discusses topics that require broker authorization under GA law."
    else:
        title = "Compliance Warning"
        description = "Review these items before sending."

    return ComplianceAlert(
        title=title,
        description=description,
        blocking=blocking,
        requires_broker_review=review.requires_broker_review,
        risk_score=review.risk_score,
        risk_band=risk_band(review.risk_score, bands),
        sections=sections,
    )
