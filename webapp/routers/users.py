from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from webapp.core.errors import ForbiddenError, ValidationError
from webapp.core.rate_limiter import rate_limit_ip
from webapp.db.models import User
from webapp.routers.deps import account_service, current_account
from webapp.schemas.users import UserCreate, UserResponse, UserUpdate
from webapp.services.account_service import AccountService

router = APIRouter(prefix="/v1/user", tags=["users"])
logger = logging.getLogger(__name__)


def _require_self(account: User, user_id: int) -> None:
    if account.id != user_id:
        logger.warning("User %s tried to access user %s", account.id, user_id, extra={"user_id": account.id})
        raise ForbiddenError("You can only access your own account")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
def create_user(request: Request, payload: UserCreate, accounts: AccountService = Depends(account_service)):
    rate_limit_ip(request, "user:create", limit=20, window_seconds=60)
    user = accounts.create_account(str(payload.username), payload.password, payload.first_name, payload.last_name)
    return UserResponse.from_model(user)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    account: User = Depends(current_account),
    accounts: AccountService = Depends(account_service),
):
    _require_self(account, user_id)
    return UserResponse.from_model(accounts.get_account(user_id))


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_user(
    user_id: int,
    payload: UserUpdate,
    account: User = Depends(current_account),
    accounts: AccountService = Depends(account_service),
):
    _require_self(account, user_id)
    if payload.username is not None:
        raise ValidationError("Username cannot be updated", "username")
    accounts.update_profile(account.email, payload.first_name, payload.last_name, payload.password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
