from __future__ import annotations

from fastapi import Request

from waitlist.services.signup_service import WaitlistService


def get_waitlist_service(request: Request) -> WaitlistService:
    svc = getattr(getattr(request.app, "state", None), "waitlist_service", None)
    if not svc:
        raise RuntimeError("WaitlistService not configured")
    return svc


def get_templates(request: Request):
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")
