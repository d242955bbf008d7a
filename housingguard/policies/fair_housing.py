# housingguard/policies/fair_housing.py
"""
Fair Housing Act phrase gate for outbound listing/tenant messages.

Covers the protected classes under the Fair Housing Act. Each rule is a regex with a
severity tier:
  - block   -> must not send as-is      (+40 risk)
  - warn    -> should revise            (+20 risk)
  - context -> fine in some contexts    (+10 risk)

Rules are evaluated in declaration order (category, then pattern) and only the
first match per pattern is reported.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

BLOCK = "block"
WARN = "warn"
CONTEXT = "context"

SEVERITY_WEIGHTS: Mapping[str, int] = MappingProxyType({BLOCK: 40, WARN: 20, CONTEXT: 10})
MAX_RISK = 100
DEFAULT_SUGGESTION = "Review and revise this language"

# JS-style regex semantics: ASCII \b and ASCII-only case folding.
_FLAGS = re.IGNORECASE | re.ASCII


@dataclass(frozen=True)
class CompliancePattern:
    category: str
    pattern: re.Pattern
    severity: str
    suggestion: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class ComplianceIssue:
    phrase: str
    category: str
    severity: str
    suggestion: str
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "phrase": self.phrase,
            "category": self.category,
            "severity": self.severity,
            "suggestion": self.suggestion,
        }
        if self.note is not None:
            out["note"] = self.note
        return out


@dataclass
class ValidationResult:
    compliant: bool = True
    issues: List[ComplianceIssue] = field(default_factory=list)
    risk_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compliant": self.compliant,
            "issues": [i.to_dict() for i in self.issues],
            "risk_score": self.risk_score,
        }


def _rules(category: str, *rows: Dict[str, Any]) -> Tuple[CompliancePattern, ...]:
    return tuple(
        CompliancePattern(
            category=category,
            pattern=re.compile(r["pattern"], _FLAGS),
            severity=r["severity"],
            suggestion=r.get("suggestion"),
            note=r.get("note"),
        )
        for r in rows
    )


_TABLE: Dict[str, Tuple[CompliancePattern, ...]] = {
    "familial_status": _rules(
        "familial_status",
        {
            "pattern": r"\b(no|not? allow(ed)?|without|don'?t want) (kids?|children|minors?|families)\b",
            "severity": BLOCK,
            "suggestion": "All applicants are welcome to apply",
        },
        {
            "pattern": r"\b(adult[s]? only|seniors? only|55\+|over 55|65\+)\b",
            "severity": WARN,
            "note": "May be valid for HOPA-qualified communities only",
            "suggestion": "Verify HOPA qualification before using this language",
        },
        {
            "pattern": r"\bquiet (building|community|neighborhood|complex)\b",
            "severity": WARN,
            "suggestion": "Peaceful community or well-maintained property",
        },
        {
            # stays on one line: no \n, \r, U+2028 or U+2029 between the two phrases
            "pattern": r"\b(no pets|pet[- ]?free)[^\n\r\u2028\u2029]*(no kids|no children)",
            "severity": BLOCK,
            "suggestion": "Remove reference to children",
        },
        {
            "pattern": r"\bperfect for (couples?|singles?|retirees?)\b",
            "severity": WARN,
            "suggestion": "Perfect for anyone seeking comfortable living",
        },
    ),
    "race_color": _rules(
        "race_color",
        {
            "pattern": r"\bno section ?8\b",
            "severity": BLOCK,
            "note": "Disparate impact on protected classes",
            "suggestion": "We evaluate all applications based on rental criteria",
        },
        {
            "pattern": r"\b(professionals? only|executive|white[- ]?collar)\b",
            "severity": WARN,
            "suggestion": "Income verification required - specify actual requirements",
        },
        {
            "pattern": r"\b(exclusive|upscale|elite) (neighborhood|community|area)\b",
            "severity": WARN,
            "suggestion": "Well-maintained community",
        },
        {
            "pattern": r"\bintegrated (neighborhood|community)\b",
            "severity": WARN,
            "suggestion": "Diverse community",
        },
    ),
    "national_origin": _rules(
        "national_origin",
        {
            "pattern": r"\b(must|need to|required to) speak english\b",
            "severity": BLOCK,
            "suggestion": "Remove language requirements unless required by law",
        },
        {
            "pattern": r"\b(americans?|citizens?|us citizens?) only\b",
            "severity": BLOCK,
            "suggestion": "All qualified applicants welcome",
        },
        {
            "pattern": r"\b(no|without) (immigrants?|foreigners?|aliens?)\b",
            "severity": BLOCK,
            "suggestion": "Remove nationality references",
        },
        {
            "pattern": r"\b(english[- ]speaking|speak english)\b",
            "severity": WARN,
            "suggestion": "Communication in English available",
        },
        {
            "pattern": r"\b(birth certificate|citizenship|green card|visa) required\b",
            "severity": WARN,
            "note": "May be needed for legal verification but use cautiously",
            "suggestion": "Government-issued ID required",
        },
    ),
    "religion": _rules(
        "religion",
        {
            "pattern": r"\b(christian|muslim|jewish|catholic|protestant|hindu|buddhist) (community|neighborhood|values|family)\b",
            "severity": BLOCK,
            "suggestion": "Remove religious references",
        },
        {
            # optional "to"/"the"/"a" so "near the church" is caught too
            "pattern": r"\b(near|close to|walking distance)(?: to)?(?: the| a)? (church|mosque|synagogue|temple)\b",
            "severity": CONTEXT,
            "note": "OK for describing location, not for marketing to specific groups",
        },
        {
            "pattern": r"\b(no|without) (religious|church|worship)\b",
            "severity": BLOCK,
            "suggestion": "Remove religious references",
        },
    ),
    "disability": _rules(
        "disability",
        {
            "pattern": r"\b(must|able to|can|need to) (walk|climb|use stairs|carry|lift)\b",
            "severity": BLOCK,
            "suggestion": "Property features: [describe accessibility features]",
        },
        {
            "pattern": r"\bno (wheelchair|disability|handicap|disabled)\b",
            "severity": BLOCK,
            "suggestion": "Reasonable accommodations available upon request",
        },
        {
            "pattern": r"\bmental(ly)? (ill|health|stable|sound)\b",
            "severity": WARN,
            "suggestion": "Remove mental health references",
        },
        {
            "pattern": r"\b(sober|drug[- ]?free|no addicts?)\b",
            "severity": WARN,
            "note": "Recovery status may be protected",
            "suggestion": "Standard background check required",
        },
        {
            "pattern": r"\bphysically fit\b",
            "severity": BLOCK,
            "suggestion": "Remove physical requirements",
        },
    ),
    "sex_gender": _rules(
        "sex_gender",
        {
            "pattern": r"\b(perfect for|ideal for|great for) (single )?(men|women|guys?|girls?|ladies|gentlemen|males?|females?)\b",
            "severity": BLOCK,
            "suggestion": "Perfect for anyone seeking quality housing",
        },
        {
            "pattern": r"\b(man|woman|male|female|men|women) only\b",
            "severity": BLOCK,
            "suggestion": "All qualified applicants welcome",
        },
        {
            "pattern": r"\b(bachelor|bachelorette) pad\b",
            "severity": WARN,
            "suggestion": "Studio apartment or one-bedroom unit",
        },
        {
            "pattern": r"\b(master|man cave)\b",
            "severity": CONTEXT,
            "note": "Architectural terms may be acceptable in context",
            "suggestion": "Primary suite or bonus room",
        },
    ),
}

# Read-only view; dict insertion order is the evaluation order.
FAIR_HOUSING_PATTERNS: Mapping[str, Tuple[CompliancePattern, ...]] = MappingProxyType(_TABLE)
CATEGORIES: Tuple[str, ...] = tuple(FAIR_HOUSING_PATTERNS)


def validate_fair_housing(message: Optional[str]) -> ValidationResult:
    """Scan ``message`` against every Fair Housing rule and score the hits."""
    text = message or ""
    issues: List[ComplianceIssue] = []
    score = 0

    for category, patterns in FAIR_HOUSING_PATTERNS.items():
        for rule in patterns:
            m = rule.pattern.search(text)
            if not m:
                continue
            issues.append(ComplianceIssue(
                phrase=m.group(0),
                category=category,
                severity=rule.severity,
                suggestion=rule.suggestion or DEFAULT_SUGGESTION,
                note=rule.note,
            ))
            score += SEVERITY_WEIGHTS[rule.severity]

    return ValidationResult(
        compliant=not any(i.severity == BLOCK for i in issues),
        issues=issues,
        risk_score=min(MAX_RISK, score),
    )
