"""
Account APIs.

POST /accounts: create identity account + user record (public).
POST /accounts/sign-in: exchange e-mail/password for Supabase tokens (public).
GET/DELETE /accounts/{user_id}: the caller's own user record.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from cardwallet.api.auth import ensure_owner, get_current_account_id
from cardwallet.api.deps import get_gateway, raise_for_failure
from cardwallet.models.user import User
from cardwallet.services.gateway import PersistenceGateway
from cardwallet.services.results import FailureKind

logger = logging.getLogger(__name__)
router = APIRouter()


class AccountCreate(BaseModel):
    user: User
    password: str


class SignInRequest(BaseModel):
    # Optional so that missing fields reach the gateway's own empty-field check
    email: Optional[str] = None
    password: Optional[str] = None


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=dict,
    summary="Create an account",
)
async def create_account(
    payload: AccountCreate,
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> dict:
    """
    Register with the identity service (which sends the verification e-mail)
    and store the profile under the new account id.
    """
    result = await gateway.create_account(payload.user, payload.password)
    raise_for_failure(result)
    return {"id": result.value, "message": "Account created; check your e-mail to verify it."}


@router.post(
    "/sign-in",
    response_model=dict,
    summary="Sign in with e-mail and password",
)
async def sign_in(
    payload: SignInRequest,
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> dict:
    result = await gateway.sign_in(payload.email, payload.password)
    raise_for_failure(result, overrides={FailureKind.PERMANENT_REMOTE: status.HTTP_401_UNAUTHORIZED})
    session = result.value
    return {
        "id": session.account_id,
        "email": session.email,
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "token_type": "bearer",
    }


@router.get(
    "/{user_id}",
    response_model=dict,
    summary="Get a user profile with its cards",
)
async def get_account(
    user_id: str,
    account_id: Annotated[str, Depends(get_current_account_id)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> dict:
    ensure_owner(user_id, account_id)
    result = await gateway.fetch_user(user_id)
    raise_for_failure(result)
    if result.value is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"id": user_id, **result.value.model_dump(by_alias=True, mode="json")}


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user record",
)
async def delete_account(
    user_id: str,
    account_id: Annotated[str, Depends(get_current_account_id)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> Response:
    """Removes the stored profile and cards. The identity account itself is kept."""
    ensure_owner(user_id, account_id)
    raise_for_failure(await gateway.delete_account(user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
