"""
Shared route dependencies: the gateway instance and failure -> HTTP mapping.
"""

from typing import Optional

from fastapi import HTTPException, Request, status

from cardwallet.services.gateway import PersistenceGateway
from cardwallet.services.results import FailureKind, GatewayResult

FAILURE_STATUS = {
    FailureKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    FailureKind.PERMANENT_REMOTE: status.HTTP_400_BAD_REQUEST,
    FailureKind.TRANSIENT_REMOTE: status.HTTP_503_SERVICE_UNAVAILABLE,
    FailureKind.DECODE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_gateway(request: Request) -> PersistenceGateway:
    """The gateway is built once in the app lifespan and kept on app.state."""
    gateway: Optional[PersistenceGateway] = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not ready")
    return gateway


def raise_for_failure(result: GatewayResult, overrides: Optional[dict] = None) -> None:
    """Turn a failed result into an HTTPException whose detail is the alert text."""
    if result.ok:
        return
    failure = result.failure
    status_code = (overrides or {}).get(failure.kind, FAILURE_STATUS[failure.kind])
    raise HTTPException(
        status_code=status_code,
        detail={"title": failure.title, "message": failure.message, "kind": failure.kind.value},
    )
