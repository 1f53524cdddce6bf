from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from waitlist.repositories.base import PersistenceError
from waitlist.routers.deps import get_waitlist_service
from waitlist.services.signup_service import WaitlistService

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.get("/emails")
def list_emails(svc: WaitlistService = Depends(get_waitlist_service)):
    try:
        records = svc.list_signups()
    except PersistenceError as exc:
        logger.error("Listing signups failed: %s", exc)
        return JSONResponse({"message": str(exc)}, status_code=500)
    return [record.to_json() for record in records]


@router.delete("/emails/{record_id}")
def delete_email(record_id: str, svc: WaitlistService = Depends(get_waitlist_service)):
    try:
        deleted = svc.delete_signup(record_id)
    except PersistenceError as exc:
        logger.error("Deleting signup %s failed: %s", record_id, exc)
        return JSONResponse({"message": str(exc)}, status_code=500)
    if not deleted:
        return JSONResponse({"message": "Email not found"}, status_code=404)
    return {"message": "Email deleted successfully"}
