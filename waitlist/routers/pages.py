from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from waitlist.routers.deps import get_templates, get_waitlist_service

router = APIRouter(prefix="", tags=["pages"])


@router.get("/", response_class=HTMLResponse)
def home(request: Request):
    svc = get_waitlist_service(request)
    return get_templates(request).TemplateResponse(
        request, "index.html", {"brand": svc.settings.brand_name}
    )


@router.get("/admin", response_class=HTMLResponse)
def admin_dashboard(request: Request):
    svc = get_waitlist_service(request)
    return get_templates(request).TemplateResponse(
        request, "admin.html", {"brand": svc.settings.brand_name}
    )
