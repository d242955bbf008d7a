import housingguard
from housingguard.pipeline.review import review_message


def test_package_exports():
    r = housingguard.validate_fair_housing("No section 8")
    assert r.compliant is False
    t = housingguard.classify_message_topic("security deposit")
    assert t.requires_broker_review is True


def test_review_combines_both_gates():
    review = review_message("No kids please, and let's negotiate the lease terms")
    assert review.compliant is False
    assert review.risk_score == 40
    assert review.classification == "requires_broker"
    assert review.requires_broker_review is True
    assert review.blocked_phrases == ["No kids"]
    # a blocked message is never escalated
    assert review.recommended_action == "blocked"


def test_review_to_dict_keys():
    d = review_message("Thank you, see you at check-in").to_dict()
    assert d["compliant"] is True
    assert d["issues"] == []
    assert d["risk_score"] == 0
    assert d["classification"] == "operations"
    assert d["requires_broker_review"] is False
    assert d["matched_topics"] == ["operations", "operations"]
    assert d["recommended_action"] == "sent"
