from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from webapp.routers.deps import liveness_prober
from webapp.services.health_service import LivenessProber, LivenessStatus

router = APIRouter(tags=["health"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "X-Content-Type-Options": "nosniff",
}

_STATUS_CODES = {
    LivenessStatus.HEALTHY: 200,
    LivenessStatus.BAD_REQUEST: 400,
    LivenessStatus.UNHEALTHY: 503,
}


def _empty(status_code: int) -> Response:
    return Response(status_code=status_code, headers=dict(NO_CACHE_HEADERS))


@router.get("/", response_class=PlainTextResponse)
def index():
    return "Cloud-Native Health Check API. Use /healthz for health checks."


@router.get("/healthz")
def healthz(request: Request, prober: LivenessProber = Depends(liveness_prober)):
    outcome = prober.check(request.url.query, request.headers)
    return _empty(_STATUS_CODES[outcome])


@router.api_route("/healthz", methods=["POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "TRACE"], include_in_schema=False)
def healthz_method_not_allowed():
    return _empty(405)
