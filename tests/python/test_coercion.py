import dataclasses
import datetime
import enum
import uuid
from typing import Annotated, Literal

import pytest

import gasket as gk
from gasket.coercion import Coercer
from gasket.descriptors import (
    ArrayType,
    NullType,
    NumberBrand,
    NumberType,
    ObjectLiteralType,
    PropertySignature,
    StringType,
    UnionType,
    UnknownType,
)
from gasket.errors import ArgumentValidationError
from gasket.reflection import type_descriptor


class Status(enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


@dataclasses.dataclass
class Cover:
    url: str


@dataclasses.dataclass
class Review:
    stars: gk.UInt8
    body: str | None = None


@dataclasses.dataclass
class Article:
    id: uuid.UUID
    status: Status
    published_at: datetime.datetime
    reviews: list[Review] = dataclasses.field(default_factory=list)
    cover: Cover | None = None
    _secret: str = "hidden"


type Media = Cover | Review


@pytest.fixture
def coercer() -> Coercer:
    """Provides the default engine."""
    return Coercer()


@pytest.mark.parametrize(
    ("annotation", "value", "codes"),
    [
        (str, "x", []),
        (str, 1, ["type"]),
        (bool, 0, ["type"]),
        (int, True, ["type"]),
        (int, 1.5, ["type"]),
        (float, 1.5, []),
        (gk.Int8, 200, ["range"]),
        (gk.UInt16, -1, ["range"]),
        (Annotated[float, gk.Negative], 0.0, []),
        (Annotated[float, gk.NegativeNoZero], 0.0, ["NegativeNoZero"]),
        (Annotated[int, gk.Positive], -3, ["Positive"]),
        (Literal["a"], "b", ["literal"]),
        (uuid.UUID, "not-a-uuid", ["uuid"]),
        (Status, "draft", []),
        (Status, Status.PUBLISHED, []),
        (Status, "archived", ["type"]),
        (list[int], [1, "2"], ["type"]),
        (list[int], "12", ["type"]),
        (str | None, None, []),
        (str, None, ["type"]),
        (datetime.datetime, "2024-01-02T03:04:05", []),
        (datetime.datetime, "yesterday", ["type"]),
        (bytes, "aGVsbG8=", []),
        (bytes, "%%%", ["type"]),
    ],
)
def test_validate_reports_codes(
    coercer: Coercer, annotation: object, value: object, codes: list[str]
) -> None:
    """Reports the expected failure codes for scalar-ish values."""
    errors = coercer.validate(value, type_descriptor(annotation))
    assert [error.code for error in errors] == codes


def test_validate_accumulates_nested_paths(coercer: Coercer) -> None:
    """Keeps going after the first failure and records dotted paths."""
    errors = coercer.validate(
        {"status": "nope", "reviews": [{"stars": 5}, {"stars": 300}]},
        type_descriptor(Article),
    )

    assert [(error.path, error.code) for error in errors] == [
        ("id", "required"),
        ("status", "type"),
        ("published_at", "required"),
        ("reviews.1.stars", "range"),
    ]


def test_unknown_accepts_anything(coercer: Coercer) -> None:
    """Never reports errors for untyped values."""
    assert coercer.validate(object(), UnknownType()) == []
    assert coercer.validate(None, UnknownType()) == []


def test_union_accepts_any_member(coercer: Coercer) -> None:
    """Accepts a value matching one member and rejects values matching none."""
    descriptor = UnionType((StringType(), ArrayType(StringType()), NullType()))

    assert coercer.validate(["a"], descriptor) == []
    assert coercer.validate(None, descriptor) == []
    assert [error.code for error in coercer.validate(3, descriptor)] == ["type"]


def test_deserialize_builds_native_values(coercer: Coercer) -> None:
    """Turns wire mappings into dataclasses, enums, UUIDs and datetimes."""
    article_id = uuid.uuid4()
    article = coercer.deserialize(
        {
            "id": str(article_id),
            "status": "published",
            "published_at": "2024-01-02T03:04:05+00:00",
            "reviews": [{"stars": 4, "body": None}],
            "cover": {"url": "https://example.com/a.png"},
        },
        type_descriptor(Article),
    )

    assert article == Article(
        id=article_id,
        status=Status.PUBLISHED,
        published_at=datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.UTC),
        reviews=[Review(4)],
        cover=Cover("https://example.com/a.png"),
    )


def test_deserialize_epoch_milliseconds(coercer: Coercer) -> None:
    """Reads numeric timestamps as epoch milliseconds."""
    moment = coercer.deserialize(0, type_descriptor(datetime.datetime))
    assert moment == datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)


def test_deserialize_object_literal_stays_a_dict(coercer: Coercer) -> None:
    """Leaves anonymous object shapes as plain mappings."""
    descriptor = ObjectLiteralType(
        properties=[
            PropertySignature("limit", NumberType(brand=NumberBrand.FLOAT)),
            PropertySignature("tag", StringType(), optional=True),
        ]
    )
    assert coercer.deserialize({"limit": 3}, descriptor) == {"limit": 3.0}


def test_serialize_produces_wire_values(coercer: Coercer) -> None:
    """Flattens dataclasses and converts enums, UUIDs, datetimes and bytes."""
    article_id = uuid.uuid4()
    article = Article(
        id=article_id,
        status=Status.DRAFT,
        published_at=datetime.datetime(2024, 1, 2, 3, 4, 5),
        reviews=[Review(5, "great")],
    )

    assert coercer.serialize(article, type_descriptor(Article)) == {
        "id": str(article_id),
        "status": "draft",
        "published_at": "2024-01-02T03:04:05",
        "reviews": [{"stars": 5, "body": "great"}],
        "cover": None,
    }
    assert coercer.serialize(b"hello", type_descriptor(bytes)) == "aGVsbG8="


def test_serialize_union_tags_member(coercer: Coercer) -> None:
    """Adds the member name so the union can be resolved later."""
    descriptor = type_descriptor(Media)

    assert coercer.serialize(Review(3), descriptor) == {
        "stars": 3,
        "body": None,
        "__typename": "Review",
    }
    assert coercer.serialize({"url": "u"}, descriptor) == {
        "url": "u",
        "__typename": "Cover",
    }


def test_serialized_values_deserialize_back(coercer: Coercer) -> None:
    """Round-trips a nested dataclass through its wire form."""
    descriptor = type_descriptor(Article)
    article = Article(
        id=uuid.uuid4(),
        status=Status.PUBLISHED,
        published_at=datetime.datetime(2024, 5, 6, 7, 8, 9),
        reviews=[Review(1), Review(2, "ok")],
        cover=Cover("c"),
    )

    wire = coercer.serialize(article, descriptor)
    assert coercer.validate(wire, descriptor) == []
    assert coercer.deserialize(wire, descriptor) == article


def test_argument_validation_error_message(coercer: Coercer) -> None:
    """Lists every failure with its path and code."""
    errors = coercer.validate({"stars": 999}, type_descriptor(Review))
    error = ArgumentValidationError(errors)

    assert error.errors == errors
    assert str(error) == (
        "Validation error:\nstars(range): Number needs to be between 0 and 255"
    )
    assert isinstance(error, ValueError)
