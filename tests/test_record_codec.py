import pytest

from cardwallet.models.card import Card, CardType
from cardwallet.models.user import User
from cardwallet.services.exceptions import RecordDecodeError
from cardwallet.services.record_codec import (
    decode_card,
    decode_cards,
    decode_user,
    encode_card,
    encode_user,
)

CARD_FIELDS = ["type", "isClicked", "name", "code"]


def _card_record(**overrides):
    record = {"type": True, "isClicked": False, "name": "Coffee", "code": "12345"}
    record.update(overrides)
    return record


def test_example_user_record_decodes():
    record = {
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
        "sex": 1,
        "cards": [_card_record()],
    }

    user = decode_user(record)

    assert user.first_name == "A"
    assert user.last_name == "B"
    assert user.email == "a@b.com"
    assert user.sex == 1
    assert len(user.cards) == 1
    assert user.cards[0].type == CardType.QR
    assert user.cards[0].code == "12345"


@pytest.mark.parametrize(
    "record",
    [
        _card_record(),
        _card_record(type=False, isClicked=True, name="Grocery", code="4006381333931"),
        _card_record(name="", code="x"),
    ],
)
def test_card_record_round_trip(record):
    assert encode_card(decode_card(record)) == record


def test_type_flag_maps_to_symbology():
    assert decode_card(_card_record(type=True)).type == CardType.QR
    assert decode_card(_card_record(type=False)).type == CardType.CODE128
    assert encode_card(Card(type=CardType.QR, name="n", code="c"))["type"] is True
    assert encode_card(Card(type=CardType.CODE128, name="n", code="c"))["type"] is False


@pytest.mark.parametrize("field", CARD_FIELDS)
def test_card_missing_field_is_rejected(field):
    record = _card_record()
    del record[field]

    with pytest.raises(RecordDecodeError) as exc:
        decode_card(record)
    assert exc.value.field == field


@pytest.mark.parametrize("field", CARD_FIELDS)
def test_malformed_card_is_skipped_without_dropping_siblings(field):
    broken = _card_record(name="Broken")
    del broken[field]
    records = [_card_record(name="First"), broken, _card_record(name="Last", type=False)]

    cards = decode_cards(records)

    assert [c.name for c in cards] == ["First", "Last"]
    assert cards[1].type == CardType.CODE128


def test_card_with_wrong_types_is_skipped():
    records = [_card_record(type="yes"), _card_record(isClicked=1), _card_record(code=12345), "not a card", _card_record()]

    assert len(decode_cards(records)) == 1


def test_user_missing_sex_is_rejected():
    record = {"firstName": "A", "lastName": "B", "email": "a@b.com", "cards": [_card_record()]}

    with pytest.raises(RecordDecodeError) as exc:
        decode_user(record)
    assert exc.value.field == "sex"


@pytest.mark.parametrize(
    "field, value",
    [
        ("sex", True),
        ("sex", "1"),
        ("email", None),
        ("cards", {"type": True}),
        ("cards", [_card_record(), "oops"]),
    ],
)
def test_user_with_wrong_shape_is_rejected(field, value):
    record = encode_user(User(first_name="A", last_name="B", email="a@b.com", sex=1))
    record[field] = value

    with pytest.raises(RecordDecodeError):
        decode_user(record)


def test_user_keeps_valid_cards_and_skips_malformed_ones():
    record = {
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
        "sex": 2,
        "cards": [_card_record(name="One"), {"type": True}, _card_record(name="Two")],
    }

    assert [c.name for c in decode_user(record).cards] == ["One", "Two"]


def test_encode_user_uses_stored_field_names(coffee_card):
    user = User(first_name="A", last_name="B", email="a@b.com", sex=1, cards=[coffee_card])

    assert encode_user(user) == {
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
        "sex": 1,
        "cards": [_card_record()],
    }
