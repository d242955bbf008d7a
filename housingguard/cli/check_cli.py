# Purpose: screen a drafted message from the shell and print the review JSON.
from __future__ import annotations
import argparse, json, sys
from pathlib import Path
from typing import List, Optional

from housingguard.channels.composer_alert import build_alert
from housingguard.config import load_settings
from housingguard.ops.compliance_log import ComplianceLog
from housingguard.pipeline.review import ACTIONS, review_message


def run_check(text: str, *, log_decision: bool = False, channel: str = "cli",
              action: Optional[str] = None, config: Optional[str] = None) -> dict:
    settings = load_settings(config)
    review = review_message(text)
    alert = build_alert(review, bands=settings.risk_bands)
    out = review.to_dict()
    out["alert"] = alert.to_dict() if alert else None
    if log_decision and settings.audit_enabled:
        row = ComplianceLog(log_path=settings.log_path).record(review, action_taken=action, channel=channel)
        out["action_taken"] = row["action_taken"]
    return out


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Screen a message for Fair Housing and broker-review topics")
    ap.add_argument("text", nargs="?", help="message text (or use --file / stdin)")
    ap.add_argument("--file", help="read message text from this file")
    ap.add_argument("--config", default=None, help="path to compliance.yaml")
    ap.add_argument("--log", action="store_true", help="append the decision to the compliance log")
    ap.add_argument("--channel", default="cli")
    ap.add_argument("--action", choices=ACTIONS, default=None, help="override the logged action")
    ap.add_argument("--strict", action="store_true", help="exit 1 when the message is not compliant")
    args = ap.parse_args(argv)

    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    elif args.text is not None:
        text = args.text
    else:
        text = sys.stdin.read()

    out = run_check(text, log_decision=args.log, channel=args.channel,
                    action=args.action, config=args.config)
    print(json.dumps(out, indent=2, ensure_ascii=False))
    if args.strict and not out["compliant"]:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
