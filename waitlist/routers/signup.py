from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from waitlist.core.rate_limiter import RateLimited, client_identifier
from waitlist.repositories.base import PersistenceError
from waitlist.routers.deps import get_waitlist_service
from waitlist.services.signup_service import SignupError, WaitlistService

router = APIRouter(prefix="/api", tags=["signup"])
logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Successfully joined! Check your email for confirmation."
DEGRADED_MESSAGE = "Successfully joined! Email confirmation may be delayed."
SERVER_ERROR_MESSAGE = "An error occurred while processing your request"
MOCK_SUCCESS_MESSAGE = "Thank you for joining our waitlist! We'll be in touch soon."


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return None


def _message(message: str, status_code: int = 200, **extra) -> JSONResponse:
    body = {"message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(body, status_code=status_code)


@router.post("/signup")
async def signup(request: Request, svc: WaitlistService = Depends(get_waitlist_service)):
    payload = await _read_json(request)
    debug = svc.settings.debug_errors
    try:
        result = await run_in_threadpool(svc.signup, payload, client_identifier(request))
    except (SignupError, RateLimited) as exc:
        return _message(exc.message, exc.status_code)
    except PersistenceError as exc:
        logger.error("Signup failed: %s", exc)
        return _message(SERVER_ERROR_MESSAGE, 500, error=str(exc) if debug else None)
    if not result.email_sent:
        return _message(DEGRADED_MESSAGE, debug=result.email_error if debug else None)
    return _message(SUCCESS_MESSAGE)


@router.post("/mock-signup")
async def mock_signup(request: Request, svc: WaitlistService = Depends(get_waitlist_service)):
    payload = await _read_json(request)
    try:
        await run_in_threadpool(svc.mock_signup, payload, client_identifier(request))
    except (SignupError, RateLimited) as exc:
        return _message(exc.message, exc.status_code)
    return _message(MOCK_SUCCESS_MESSAGE)
