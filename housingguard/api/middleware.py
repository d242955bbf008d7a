"""
PII-safe request logging middleware.

- Redacts emails and phone-like digit runs from anything that reaches the log.
- Never logs message bodies; drafted messages can carry tenant details.
- Logs path, status and latency only.
"""
from __future__ import annotations
import logging
import re
from time import perf_counter

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("housingguard.middleware")

PHONE_EMAIL_RE = re.compile(
    r"(?P<email>[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,})|(?P<digits>\+?\b\d[\d\-\s]{8,}\d\b)",
    re.IGNORECASE
)


def redact(text: str) -> str:
    return PHONE_EMAIL_RE.sub(lambda m: "***@***" if m.group("email") else "***", text)


class PIIRedactionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        t0 = perf_counter()
        response: Response = await call_next(request)
        ms = int((perf_counter() - t0) * 1000)
        query = redact(request.url.query)[:256] if request.url.query else ""
        log.info("REQ %s %s%s -> %s (%d ms)", request.method, request.url.path,
                 f"?{query}" if query else "", response.status_code, ms)
        return response
