"""
Tests for the JSON and XML codecs.
"""

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, Field

from discovery_client import DecodeError, EncodeError
from discovery_client.clients.codecs import JSON, XML, XMLCodec


class Item(BaseModel):
    sku: str
    quantity: int
    price: float


class Address(BaseModel):
    street: str
    city: str


class Order(BaseModel):
    id: int
    customer: str
    paid: bool
    address: Address
    items: list[Item]
    note: str | None = None


@dataclass
class Point:
    x: int
    y: int
    tags: list[str] = field(default_factory=list)


class Note(BaseModel):
    text: str
    tags: list[str] = Field(default_factory=list)


class Extras(BaseModel):
    floor: int | None = None
    buzzer: str | None = None


class Delivery(BaseModel):
    name: str
    extras: Extras | None = None


class Basket(BaseModel):
    owner: str
    items: list[str]


@pytest.fixture
def order() -> Order:
    return Order(
        id=42,
        customer="ada",
        paid=True,
        address=Address(street="1 Main St", city="Springfield"),
        items=[
            Item(sku="a-1", quantity=2, price=9.5),
            Item(sku="b-2", quantity=1, price=20.0),
        ],
    )


def test_media_types() -> None:
    assert JSON.media_type == "application/json"
    assert XML.media_type == "application/xml"


def test_json_round_trip(order) -> None:
    assert JSON.decode(JSON.encode(order), Order) == order


def test_json_encodes_plain_values() -> None:
    assert JSON.decode(JSON.encode({"a": [1, 2]}), dict) == {"a": [1, 2]}


def test_json_encode_failure() -> None:
    with pytest.raises(EncodeError):
        JSON.encode(object())


@pytest.mark.parametrize("payload", [b"not json", b"", b'{"id": "abc"}'])
def test_json_decode_failure(payload: bytes) -> None:
    with pytest.raises(DecodeError):
        JSON.decode(payload, Order)


def test_xml_round_trip(order) -> None:
    data = XML.encode(order)

    assert data.startswith(b"<Order>")
    assert XML.decode(data, Order) == order


def test_xml_round_trip_single_element_list(order) -> None:
    single = order.model_copy(update={"items": order.items[:1], "note": "leave at door"})

    assert XML.decode(XML.encode(single), Order) == single


def test_xml_round_trip_dataclass() -> None:
    point = Point(x=1, y=-2, tags=["a", "b"])
    data = XML.encode(point)

    assert data.startswith(b"<Point>")
    assert XML.decode(data, Point) == point


def test_xml_keeps_surrounding_whitespace() -> None:
    note = Note(text="  padded  ", tags=[" a", "b "])

    assert XML.decode(XML.encode(note), Note) == note


def test_xml_ignores_indentation_between_children() -> None:
    payload = b"<Note>\n  <text>hi</text>\n  <tags>x</tags>\n</Note>"

    assert XML.decode(payload, Note) == Note(text="hi", tags=["x"])


def test_xml_round_trip_nested_model_without_fields() -> None:
    delivery = Delivery(name="a", extras=Extras())
    data = XML.encode(delivery)

    assert b"<extras />" in data
    assert XML.decode(data, Delivery) == delivery


def test_xml_round_trip_single_empty_string_item() -> None:
    note = Note(text="x", tags=[""])

    assert XML.decode(XML.encode(note), Note) == note


def test_xml_round_trip_empty_required_list() -> None:
    basket = Basket(owner="ada", items=[])

    assert XML.decode(XML.encode(basket), Basket) == basket


def test_xml_empty_top_level_sequence() -> None:
    assert XML.decode(XML.encode([]), list[str]) == []
    assert XML.decode(XML.encode([""]), list[str]) == [""]


def test_xml_top_level_sequence() -> None:
    data = XML.encode([1, 2, 3])

    assert data == b"<root><item>1</item><item>2</item><item>3</item></root>"
    assert XML.decode(data, list[int]) == [1, 2, 3]


def test_xml_custom_root_tag() -> None:
    codec = XMLCodec(root_tag="payload")

    assert codec.encode({"name": "x"}) == b"<payload><name>x</name></payload>"


def test_xml_decode_attributes() -> None:
    decoded = XML.decode(b'<r><user id="7">ada</user></r>', dict)

    assert decoded == {"user": {"id": "7", "_text": "ada"}}


def test_xml_encode_invalid_element_name() -> None:
    with pytest.raises(EncodeError):
        XML.encode({"not a tag": 1})


def test_xml_encode_failure() -> None:
    with pytest.raises(EncodeError):
        XML.encode(object())


@pytest.mark.parametrize("payload", [b"<unclosed>", b"", b"<Order><id>x</id></Order>"])
def test_xml_decode_failure(payload: bytes) -> None:
    with pytest.raises(DecodeError):
        XML.decode(payload, Order)
