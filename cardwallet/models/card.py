"""
Card model.

A card is a stored loyalty/discount barcode. Cards are embedded by value
in the owning user's record (no separate collection).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CardType(str, Enum):
    """Barcode symbology used to render the card."""

    QR = "qr"
    CODE128 = "code128"


class Card(BaseModel):
    """
    One stored card. Two cards are equal when all four fields are equal,
    which is also how the store de-duplicates and removes entries.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "type": "qr",
                "isClicked": False,
                "name": "Coffee",
                "code": "12345",
            }
        },
    )

    type: CardType
    is_clicked: bool = Field(default=False, alias="isClicked")  # UI selection flag only
    name: str
    code: str
