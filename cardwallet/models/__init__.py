"""Pydantic domain models."""

from cardwallet.models.card import Card, CardType
from cardwallet.models.user import User

__all__ = ["Card", "CardType", "User"]
