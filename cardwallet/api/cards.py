"""
Card APIs: list, add and remove the cards stored in a user's record.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from cardwallet.api.auth import ensure_owner, get_current_account_id
from cardwallet.api.deps import get_gateway, raise_for_failure
from cardwallet.models.card import Card
from cardwallet.services.gateway import PersistenceGateway

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/{user_id}/cards",
    response_model=dict,
    summary="List cards",
)
async def list_cards(
    user_id: str,
    account_id: Annotated[str, Depends(get_current_account_id)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> dict:
    """Cards in insertion order. Malformed stored entries are left out."""
    ensure_owner(user_id, account_id)
    result = await gateway.fetch_cards(user_id)
    raise_for_failure(result)
    if result.value is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return {"cards": [card.model_dump(by_alias=True, mode="json") for card in result.value]}


@router.post(
    "/{user_id}/cards",
    status_code=status.HTTP_201_CREATED,
    response_model=dict,
    summary="Add a card",
)
async def add_card(
    user_id: str,
    card: Card,
    account_id: Annotated[str, Depends(get_current_account_id)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> dict:
    """Adding a card identical to a stored one leaves the list unchanged."""
    ensure_owner(user_id, account_id)
    raise_for_failure(await gateway.add_card(user_id, card))
    return {"card": card.model_dump(by_alias=True, mode="json")}


@router.delete(
    "/{user_id}/cards",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a card",
)
async def remove_card(
    user_id: str,
    card: Card,
    account_id: Annotated[str, Depends(get_current_account_id)],
    gateway: Annotated[PersistenceGateway, Depends(get_gateway)],
) -> Response:
    """Removes every stored card equal to the body; unknown cards are ignored."""
    ensure_owner(user_id, account_id)
    raise_for_failure(await gateway.remove_card(user_id, card))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
