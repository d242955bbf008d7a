# housingguard/api/server.py — outbound message screening (Fair Housing + GA license topics)
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from housingguard import __version__
from housingguard.api.middleware import PIIRedactionMiddleware
from housingguard.channels.composer_alert import build_alert
from housingguard.config import Settings, load_settings
from housingguard.ops.compliance_log import ComplianceLog
from housingguard.pipeline.review import ACTIONS, MessageReview, review_message
from housingguard.policies.fair_housing import FAIR_HOUSING_PATTERNS
from housingguard.policies.license_topics import GA_LICENSE_TOPICS

log = logging.getLogger("housingguard.server")

_ACTION_PATTERN = "^(" + "|".join(ACTIONS) + ")$"


class CheckIn(BaseModel):
    text: str
    channel: Optional[str] = "unknown"


class LogIn(BaseModel):
    text: str
    action_taken: Optional[str] = Field(default=None, pattern=_ACTION_PATTERN)
    channel: Optional[str] = "unknown"


router = APIRouter(prefix="/api/compliance", tags=["compliance"])


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _compliance_log(request: Request) -> ComplianceLog:
    # created on first use so importing the app never touches disk
    state = request.app.state
    if getattr(state, "compliance_log", None) is None:
        state.compliance_log = ComplianceLog(log_path=state.settings.log_path)
    return state.compliance_log


def _screen(review: MessageReview, settings: Settings) -> Dict[str, Any]:
    alert = build_alert(review, bands=settings.risk_bands)
    out = review.to_dict()
    out["alert"] = alert.to_dict() if alert else None
    return out


@router.post("/check")
def check(inp: CheckIn, request: Request) -> Dict[str, Any]:
    out = _screen(review_message(inp.text), _settings(request))
    out["channel"] = inp.channel or "unknown"
    return out


@router.post("/log")
def record(inp: LogIn, request: Request) -> Dict[str, Any]:
    settings = _settings(request)
    review = review_message(inp.text)
    action = inp.action_taken or review.recommended_action
    logged = False
    if settings.audit_enabled:
        _compliance_log(request).record(review, action_taken=action, channel=inp.channel or "unknown")
        logged = True
    out = _screen(review, settings)
    out.update({"action_taken": action, "logged": logged})
    return out


@router.get("/stats")
def stats(request: Request, hours: Optional[int] = Query(default=None, ge=1, le=24 * 90)) -> Dict[str, Any]:
    settings = _settings(request)
    window = hours or settings.stats_window_hours
    summary = _compliance_log(request).summarize(window_hours=window, limit=settings.top_issues_limit)
    summary["window_hours"] = window
    return summary


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=logging.INFO)
        log.info("Server starting... audit=%s debug=%s", app.state.settings.audit_enabled, app.state.settings.debug)
        yield
        log.info("Server stopping...")

    app = FastAPI(title="housingguard", version=__version__, lifespan=lifespan)
    app.state.settings = settings or load_settings()
    app.state.compliance_log = None
    app.add_middleware(PIIRedactionMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False, allow_methods=["*"], allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/version")
    def version():
        return {"name": "housingguard", "version": __version__}

    @app.get("/status")
    def status():
        s = app.state.settings
        return {
            "ok": True,
            "service": "housingguard",
            "time_utc": datetime.now(timezone.utc).isoformat(),
            "rules": {
                "fair_housing": sum(len(p) for p in FAIR_HOUSING_PATTERNS.values()),
                "license_topics": sum(len(p) for _, p in GA_LICENSE_TOPICS),
            },
            "audit_enabled": s.audit_enabled,
        }

    @app.get("/api/debug/rules")
    def debug_rules(q: Optional[str] = Query(default=None, description="probe text")):
        if not app.state.settings.debug:
            raise HTTPException(status_code=404, detail="Not found")
        out: Dict[str, Any] = {
            "fair_housing": {
                cat: [{"pattern": r.pattern.pattern, "severity": r.severity} for r in rules]
                for cat, rules in FAIR_HOUSING_PATTERNS.items()
            },
            "license_topics": {label: [p.pattern for p in pats] for label, pats in GA_LICENSE_TOPICS},
        }
        if q is not None:
            out["probe"] = review_message(q).to_dict()
        return out

    app.include_router(router)
    return app


app = create_app()
