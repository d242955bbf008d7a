# housingguard/ops/compliance_log.py
import csv
import json
import logging
import os
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional

from housingguard.pipeline.review import ACTIONS, MessageReview

log = logging.getLogger("housingguard.ops")

COLUMNS = [
    "ts_utc", "channel", "action_taken", "risk_score", "compliant",
    "classification", "requires_broker_review", "blocked_phrases_json", "issues_json",
]


class ComplianceLog:
    """
    Append-only compliance decision log.
    One CSV row per screened message in artifacts/ops/compliance_log.csv.
    The message body itself is never written, only the phrases that matched.
    """

    def __init__(self, log_path: str = "artifacts/ops/compliance_log.csv"):
        self.log_path = log_path
        self._lock = threading.Lock()

    def _ensure_header(self) -> None:
        # nothing touches disk until the first record
        parent = os.path.dirname(self.log_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        if not os.path.exists(self.log_path):
            with open(self.log_path, "w", newline="", encoding="utf-8") as f:
                csv.writer(f).writerow(COLUMNS)

    def record(self, review: MessageReview, action_taken: Optional[str] = None,
               channel: str = "unknown", ts: Optional[datetime] = None) -> Dict[str, Any]:
        action = action_taken or review.recommended_action
        if action not in ACTIONS:
            raise ValueError(f"action_taken must be one of {ACTIONS}, got {action!r}")
        when = ts or datetime.now(timezone.utc)
        if when.tzinfo is None:
            raise ValueError("record requires timezone-aware UTC datetime")

        row = {
            "ts_utc": when.isoformat(),
            "channel": channel,
            "action_taken": action,
            "risk_score": review.risk_score,
            "compliant": review.compliant,
            "classification": review.classification,
            "requires_broker_review": review.requires_broker_review,
            "blocked_phrases": review.blocked_phrases,
            "issues": [i.to_dict() for i in review.issues],
        }
        with self._lock:
            self._ensure_header()
            with open(self.log_path, "a", newline="", encoding="utf-8") as f:
                csv.writer(f).writerow([
                    row["ts_utc"],
                    channel,
                    action,
                    review.risk_score,
                    int(review.compliant),
                    review.classification,
                    int(review.requires_broker_review),
                    json.dumps(row["blocked_phrases"], ensure_ascii=False),
                    json.dumps(row["issues"], ensure_ascii=False),
                ])
        log.info("compliance decision channel=%s action=%s risk=%s", channel, action, review.risk_score)
        return row

    def iter_records(self, since: Optional[datetime] = None) -> Iterator[Dict[str, Any]]:
        if not os.path.exists(self.log_path):
            return
        with open(self.log_path, "r", newline="", encoding="utf-8") as f:
            for n, raw in enumerate(csv.DictReader(f), 2):
                try:
                    ts = datetime.fromisoformat(raw["ts_utc"])
                    if ts.tzinfo is None:
                        raise ValueError(f"naive timestamp {raw['ts_utc']!r}")
                    rec = {
                        "ts_utc": ts,
                        "channel": raw["channel"],
                        "action_taken": raw["action_taken"],
                        "risk_score": int(raw["risk_score"]),
                        "compliant": raw["compliant"] == "1",
                        "classification": raw["classification"],
                        "requires_broker_review": raw["requires_broker_review"] == "1",
                        "blocked_phrases": json.loads(raw["blocked_phrases_json"] or "[]"),
                        "issues": json.loads(raw["issues_json"] or "[]"),
                    }
                    if not (isinstance(rec["blocked_phrases"], list)
                            and all(isinstance(p, str) for p in rec["blocked_phrases"])):
                        raise ValueError("blocked_phrases_json is not a list of strings")
                    if not (isinstance(rec["issues"], list)
                            and all(isinstance(i, dict) for i in rec["issues"])):
                        raise ValueError("issues_json is not a list of objects")
                except (KeyError, TypeError, ValueError) as e:
                    log.warning("skipping malformed compliance log row %d: %s", n, e)
                    continue
                if since is not None and ts < since:
                    continue
                yield rec

    def summarize(self, since: Optional[datetime] = None, now: Optional[datetime] = None,
                  window_hours: int = 24, limit: int = 5) -> Dict[str, Any]:
        """Watchdog counters over the last ``window_hours`` (or since ``since``)."""
        if since is None:
            since = (now or datetime.now(timezone.utc)) - timedelta(hours=window_hours)
        return summarize_records(self.iter_records(since=since), limit=limit)


def summarize_records(records, limit: int = 5) -> Dict[str, Any]:
    rows = list(records)
    stats: Dict[str, Any] = {"total": len(rows)}
    for action in ACTIONS:
        stats[action] = sum(1 for r in rows if r.get("action_taken") == action)

    # blocked phrase -> {count, category}; category from the first record that saw it
    seen: Dict[str, Dict[str, Any]] = {}
    for r in rows:
        issues = r.get("issues") or []
        for phrase in r.get("blocked_phrases") or []:
            if phrase in seen:
                seen[phrase]["count"] += 1
                continue
            match = next((i for i in issues if i.get("phrase") == phrase), None)
            seen[phrase] = {"count": 1, "category": (match or {}).get("category") or "unknown"}

    top: List[Dict[str, Any]] = [{"phrase": p, **v} for p, v in seen.items()]
    top.sort(key=lambda x: x["count"], reverse=True)
    stats["top_issues"] = top[:limit]
    return stats
