"""
User profile model.

Identity lives in Supabase; the account id issued there keys the user's
record in MongoDB, so it is not a field of the profile itself.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from cardwallet.models.card import Card


class User(BaseModel):
    """Account profile and the cards it owns, in insertion order."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "firstName": "Anna",
                "lastName": "Brown",
                "email": "anna@example.com",
                "sex": 1,
                "cards": [],
            }
        },
    )

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str  # syntax is checked by the identity service
    sex: int
    cards: List[Card] = Field(default_factory=list)
