from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from webapp.core.rate_limiter import rate_limit_ip
from webapp.routers.deps import account_service
from webapp.services.account_service import AccountService

router = APIRouter(tags=["verification"])
logger = logging.getLogger(__name__)


@router.get("/validateEmail", response_class=PlainTextResponse)
def validate_email(
    request: Request,
    email: Optional[str] = None,
    token: Optional[str] = None,
    accounts: AccountService = Depends(account_service),
):
    rate_limit_ip(request, "verify:email", limit=30, window_seconds=60)
    if not email or not email.strip():
        return PlainTextResponse("Error: Email parameter is missing", status_code=400)
    if not token or not token.strip():
        return PlainTextResponse("Error: Verification token is missing", status_code=400)
    try:
        verified = accounts.verify_email(email.strip(), token.strip())
    except Exception:
        logger.error("Unexpected error while verifying %s", email, exc_info=True)
        return PlainTextResponse("Server error during verification. Please try again later.", status_code=500)
    if not verified:
        return PlainTextResponse(
            "Verification failed. The link is invalid or has expired.",
            status_code=400,
        )
    return PlainTextResponse("Email verified successfully", status_code=200)
