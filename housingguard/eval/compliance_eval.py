# housingguard/eval/compliance_eval.py
# -*- coding: utf-8 -*-
"""
Offline compliance eval harness (writes artifacts/eval/compliance_metrics.json)

- Pure rule evaluation, no network.
- Reads an optional YAML config; falls back to a built-in seed set so a
  metrics file is always produced.
- Exit code 0 when gates pass, 1 otherwise.

Gates:
  - block.fn == 0          (a message that should be stopped must never pass)
  - topic.accuracy >= 0.90 (license-topic routing)
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import validate

from housingguard.eval.schema import CASE_SCHEMA
from housingguard.pipeline.review import review_message

log = logging.getLogger("housingguard.eval")

DEFAULT_OUT = "artifacts/eval/compliance_metrics.json"
TOPIC_ACCURACY_MIN = 0.90
BLOCK_FN_MAX = 0


@dataclass
class EvalCase:
    text: str
    id: Optional[str] = None
    expect_compliant: Optional[bool] = None
    expect_classification: Optional[str] = None
    expect_categories: List[str] = field(default_factory=list)


@dataclass
class EvalConfig:
    out_path: str = DEFAULT_OUT
    cases: List[EvalCase] = field(default_factory=list)


SEED_CASES = [
    EvalCase(id="seed-1", text="No kids allowed, adults only please",
             expect_compliant=False, expect_classification="operations",
             expect_categories=["familial_status"]),
    EvalCase(id="seed-2", text="Beautiful 3BR home near the church, walking distance to shops",
             expect_compliant=True, expect_classification="operations",
             expect_categories=["religion"]),
    EvalCase(id="seed-3", text="Let's negotiate the monthly rent",
             expect_compliant=True, expect_classification="requires_broker"),
    EvalCase(id="seed-4", text="Thanks for the quick maintenance fix, see you at checkout",
             expect_compliant=True, expect_classification="operations"),
    EvalCase(id="seed-5", text="Happy to share a market analysis of the property value",
             expect_compliant=True, expect_classification="requires_oversight"),
]


def load_config(path: Optional[str]) -> EvalConfig:
    """
    Load cases from YAML if provided. Every case row is checked against CASE_SCHEMA;
    a malformed row raises jsonschema.ValidationError.
    """
    cfg = EvalConfig()
    if path and Path(path).exists():
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        cfg.out_path = data.get("out_path", DEFAULT_OUT)
        for row in data.get("cases", []) or []:
            validate(instance=row, schema=CASE_SCHEMA)
            cfg.cases.append(EvalCase(
                text=row["text"],
                id=row.get("id"),
                expect_compliant=row.get("expect_compliant"),
                expect_classification=row.get("expect_classification"),
                expect_categories=list(row.get("expect_categories") or []),
            ))
    elif path:
        log.warning("eval config %s not found, using seed cases", path)

    if not cfg.cases:
        cfg.cases = list(SEED_CASES)
    return cfg


def run_eval(cfg: EvalConfig) -> Dict[str, Any]:
    items = []
    block = {"tp": 0, "fp": 0, "fn": 0, "tn": 0}
    topic_total = 0
    topic_hits = 0
    missing_categories = 0

    for case in cfg.cases:
        review = review_message(case.text)
        got_categories = sorted({i.category for i in review.issues})

        if case.expect_compliant is not None:
            expect_block = not case.expect_compliant
            got_block = not review.compliant
            if expect_block and got_block:
                block["tp"] += 1
            elif expect_block:
                block["fn"] += 1
            elif got_block:
                block["fp"] += 1
            else:
                block["tn"] += 1

        if case.expect_classification is not None:
            topic_total += 1
            if review.classification == case.expect_classification:
                topic_hits += 1

        missed = [c for c in case.expect_categories if c not in got_categories]
        missing_categories += len(missed)

        items.append({
            "id": case.id,
            "compliant": review.compliant,
            "risk_score": review.risk_score,
            "classification": review.classification,
            "categories": got_categories,
            "missed_categories": missed,
        })

    accuracy = topic_hits / topic_total if topic_total else 1.0
    ok = block["fn"] <= BLOCK_FN_MAX and accuracy >= TOPIC_ACCURACY_MIN

    return {
        "version": "1.0",
        "results": {
            "block": block,
            "topic": {"accuracy": accuracy, "total": topic_total, "correct": topic_hits},
            "categories": {"missed": missing_categories},
            "ok": ok,
        },
        "items": items,
    }


# ---------- entrypoint ----------

def main(argv: List[str]) -> int:
    logging.basicConfig(level=logging.INFO)
    cfg_path = argv[1] if len(argv) > 1 else None
    cfg = load_config(cfg_path)

    metrics = run_eval(cfg)

    out_path = Path(cfg.out_path or DEFAULT_OUT)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(metrics, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"[compliance_eval] wrote: {out_path}")
    return 0 if metrics["results"]["ok"] else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
