from datetime import datetime, timedelta, timezone

import pytest

from housingguard.ops.compliance_log import ComplianceLog, summarize_records
from housingguard.pipeline.review import review_message


def _t0():
    return datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_record_writes_row_without_message_text(tmp_path):
    path = tmp_path / "ops" / "compliance_log.csv"
    clog = ComplianceLog(log_path=str(path))
    text = "No kids allowed, call 404-555-0199"
    row = clog.record(review_message(text), channel="sms", ts=_t0())

    assert row["action_taken"] == "blocked"
    assert row["blocked_phrases"] == ["No kids"]
    raw = path.read_text(encoding="utf-8")
    assert raw.splitlines()[0].startswith("ts_utc,channel,action_taken")
    assert "404-555-0199" not in raw

    recs = list(clog.iter_records())
    assert len(recs) == 1
    assert recs[0]["channel"] == "sms"
    assert recs[0]["compliant"] is False
    assert recs[0]["risk_score"] == 40
    assert recs[0]["issues"][0]["category"] == "familial_status"


def test_record_rejects_unknown_action(tmp_path):
    clog = ComplianceLog(log_path=str(tmp_path / "log.csv"))
    with pytest.raises(ValueError):
        clog.record(review_message("hello"), action_taken="deleted")


def test_record_requires_aware_timestamp(tmp_path):
    clog = ComplianceLog(log_path=str(tmp_path / "log.csv"))
    with pytest.raises(ValueError):
        clog.record(review_message("hello"), ts=datetime(2025, 1, 1, 12, 0, 0))


def test_summarize_window_and_top_issues(tmp_path):
    clog = ComplianceLog(log_path=str(tmp_path / "log.csv"))
    t0 = _t0()
    kids = review_message("No kids allowed")
    sec8 = review_message("Sorry, no section 8")
    ops = review_message("Maintenance visit at 3pm")

    # outside the 24h window
    clog.record(kids, ts=t0 - timedelta(days=2))
    clog.record(sec8, ts=t0)
    for _ in range(3):
        clog.record(kids, ts=t0)
    clog.record(kids, action_taken="modified", ts=t0)
    clog.record(ops, ts=t0)
    clog.record(review_message("negotiate the rent"), ts=t0)

    s = clog.summarize(now=t0 + timedelta(hours=1))
    assert s["total"] == 7
    assert s["blocked"] == 4
    assert s["modified"] == 1
    assert s["escalated"] == 1
    assert s["sent"] == 1
    assert s["top_issues"] == [
        {"phrase": "No kids", "count": 4, "category": "familial_status"},
        {"phrase": "no section 8", "count": 1, "category": "race_color"},
    ]

    assert clog.summarize(now=t0 + timedelta(hours=1), limit=1)["top_issues"][0]["phrase"] == "No kids"
    assert clog.summarize(now=t0 + timedelta(days=3))["total"] == 0


def test_malformed_rows_are_skipped(tmp_path):
    path = tmp_path / "log.csv"
    clog = ComplianceLog(log_path=str(path))
    clog.record(review_message("No kids"), ts=_t0())
    with path.open("a", encoding="utf-8") as f:
        f.write("not-a-date,web,sent,x,1,operations,0,[],[]\n")
    assert len(list(clog.iter_records())) == 1


def test_naive_timestamp_rows_are_skipped(tmp_path):
    path = tmp_path / "log.csv"
    clog = ComplianceLog(log_path=str(path))
    clog.record(review_message("No kids"), ts=_t0())
    with path.open("a", encoding="utf-8") as f:
        f.write("2025-01-01T12:30:00,web,sent,0,1,operations,0,[],[]\n")

    s = clog.summarize(now=_t0() + timedelta(hours=1))
    assert s["total"] == 1
    assert s["blocked"] == 1
    assert s["sent"] == 0


def test_rows_with_wrong_json_shapes_are_skipped(tmp_path):
    path = tmp_path / "log.csv"
    clog = ComplianceLog(log_path=str(path))
    clog.record(review_message("No kids"), ts=_t0())
    with path.open("a", encoding="utf-8") as f:
        f.write('2025-01-01T12:10:00+00:00,web,blocked,40,0,operations,0,"[""No kids""]","{""a"": 1}"\n')
        f.write('2025-01-01T12:20:00+00:00,web,blocked,40,0,operations,0,"""No kids""",[]\n')
        f.write('2025-01-01T12:30:00+00:00,web,blocked,40,0,operations,0,"[""No kids""]","[""x""]"\n')
        f.write('2025-01-01T12:40:00+00:00,web,blocked,40,0,operations,0,[1],[]\n')

    assert len(list(clog.iter_records())) == 1
    s = clog.summarize(now=_t0() + timedelta(hours=1))
    assert s["total"] == 1
    assert s["top_issues"] == [{"phrase": "No kids", "count": 1, "category": "familial_status"}]


def test_constructing_log_does_not_touch_disk(tmp_path):
    path = tmp_path / "ops" / "compliance_log.csv"
    clog = ComplianceLog(log_path=str(path))
    assert list(clog.iter_records()) == []
    assert clog.summarize(now=_t0())["total"] == 0
    assert not path.parent.exists()

    clog.record(review_message("hello"), ts=_t0())
    assert path.read_text(encoding="utf-8").startswith("ts_utc,")


def test_summarize_records_unknown_category():
    rows = [{"action_taken": "blocked", "blocked_phrases": ["no pets no kids"], "issues": []}]
    s = summarize_records(rows)
    assert s["total"] == 1
    assert s["top_issues"] == [{"phrase": "no pets no kids", "count": 1, "category": "unknown"}]
