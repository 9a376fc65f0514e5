"""Request-scoped accessors for the services wired onto ``app.state``."""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from webapp.core.errors import UnauthorizedError
from webapp.db.models import User
from webapp.services.access_service import AccessService
from webapp.services.account_service import AccountService
from webapp.services.catalog_service import CatalogService
from webapp.services.health_service import LivenessProber

basic_auth = HTTPBasic(auto_error=False)


def account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def access_service(request: Request) -> AccessService:
    return request.app.state.access_service


def catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def liveness_prober(request: Request) -> LivenessProber:
    return request.app.state.liveness_prober


def current_account(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    access: AccessService = Depends(access_service),
) -> User:
    """Authenticated and verified account behind the Basic credentials."""
    if credentials is None:
        raise UnauthorizedError("Invalid or missing credentials")
    return access.require(credentials.username, credentials.password)
