"""
Mapping between domain models and MongoDB user records.

Stored record shape:
    {"firstName": str, "lastName": str, "email": str, "sex": int,
     "cards": [{"type": bool, "isClicked": bool, "name": str, "code": str}]}

Card "type" is stored as a boolean: true is QR, false is Code 128.
"""

import logging
from typing import Any, Iterable, List, Mapping

from cardwallet.models.card import Card, CardType
from cardwallet.models.user import User
from cardwallet.services.exceptions import RecordDecodeError

logger = logging.getLogger(__name__)


def _require(record: Mapping[str, Any], field: str, expected: type) -> Any:
    value = record.get(field)
    # bool is an int subclass; a stored true/false is never a valid integer field
    if expected is int and isinstance(value, bool):
        raise RecordDecodeError(field)
    if not isinstance(value, expected):
        raise RecordDecodeError(field)
    return value


def encode_card(card: Card) -> dict:
    """Card -> record. Key order is fixed so equal cards produce equal records."""
    return {
        "type": card.type == CardType.QR,
        "isClicked": card.is_clicked,
        "name": card.name,
        "code": card.code,
    }


def decode_card(record: Mapping[str, Any]) -> Card:
    """Record -> Card. Raises RecordDecodeError naming the first bad field."""
    if not isinstance(record, Mapping):
        raise RecordDecodeError("card", "not a mapping")
    is_qr = _require(record, "type", bool)
    is_clicked = _require(record, "isClicked", bool)
    name = _require(record, "name", str)
    code = _require(record, "code", str)
    return Card(
        type=CardType.QR if is_qr else CardType.CODE128,
        is_clicked=is_clicked,
        name=name,
        code=code,
    )


def decode_cards(records: Iterable[Any]) -> List[Card]:
    """Decode a card collection, skipping malformed entries and keeping order."""
    cards: List[Card] = []
    skipped = 0
    for record in records:
        try:
            cards.append(decode_card(record))
        except RecordDecodeError as e:
            skipped += 1
            logger.debug("Skipping card record: %s", e)
    if skipped:
        logger.warning("Skipped %d malformed card record(s) of %d", skipped, skipped + len(cards))
    return cards


def encode_user(user: User) -> dict:
    return {
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "sex": user.sex,
        "cards": [encode_card(card) for card in user.cards],
    }


def card_records(record: Mapping[str, Any]) -> list:
    """
    Return the raw "cards" list of a user record.
    The list and every item in it must be mappings; individual items may still be malformed cards.
    """
    cards = record.get("cards")
    if not isinstance(cards, list) or not all(isinstance(c, Mapping) for c in cards):
        raise RecordDecodeError("cards")
    return cards


def decode_user(record: Mapping[str, Any]) -> User:
    """Record -> User. All five fields are required; malformed cards are skipped."""
    first_name = _require(record, "firstName", str)
    last_name = _require(record, "lastName", str)
    email = _require(record, "email", str)
    sex = _require(record, "sex", int)
    cards = decode_cards(card_records(record))
    return User(first_name=first_name, last_name=last_name, email=email, sex=sex, cards=cards)
