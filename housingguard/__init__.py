"""Fair Housing phrase screening and GA license-topic routing for outbound messages."""
from housingguard.pipeline.review import MessageReview, review_message
from housingguard.policies.fair_housing import (
    ComplianceIssue,
    ValidationResult,
    validate_fair_housing,
)
from housingguard.policies.license_topics import TopicClassification, classify_message_topic

__version__ = "0.1.0"

__all__ = [
    "ComplianceIssue",
    "MessageReview",
    "TopicClassification",
    "ValidationResult",
    "classify_message_topic",
    "review_message",
    "validate_fair_housing",
]
