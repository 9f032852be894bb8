import collections.abc
import dataclasses
import datetime
import enum
import uuid
from typing import Annotated, Any, Literal

import pytest

import gasket as gk
from gasket.descriptors import (
    CONTEXT,
    PARENT,
    ArrayType,
    BooleanType,
    ClassType,
    EnumType,
    LiteralType,
    NullType,
    NumberBrand,
    NumberType,
    PromiseType,
    StringType,
    UnionType,
    UnknownType,
)
from gasket.errors import GasketTypeError
from gasket.reflection import clear_cache, method_descriptor, type_descriptor


@dataclasses.dataclass
class Node:
    label: str
    children: list["Node"] = dataclasses.field(default_factory=list)
    parent: "Node | None" = None


class Level(enum.IntEnum):
    LOW = 1
    HIGH = 2


type Score = Annotated[float, gk.Positive]


class Resolvers:
    async def lookup(
        self, parent: gk.Parent[Node], key: gk.ID, limit: int = 5
    ) -> Node | None:
        raise NotImplementedError

    def plain(self, flag: bool | None) -> list[str]:
        raise NotImplementedError

    def untyped(self, value) -> str:  # type: ignore[no-untyped-def]
        raise NotImplementedError

    def keyword(self, *, value: str) -> str:
        raise NotImplementedError


@pytest.mark.parametrize(
    ("annotation", "expected_type"),
    [
        (bool, BooleanType),
        (str, StringType),
        (int, NumberType),
        (float, NumberType),
        (Any, UnknownType),
        (object, UnknownType),
        (None, NullType),
        (Literal["x"], LiteralType),
        (Literal["x", "y"], UnionType),
        (str | None, UnionType),
        (list[str], ArrayType),
        (tuple[int, ...], ArrayType),
        (collections.abc.Sequence[str], ArrayType),
        (collections.abc.Awaitable[str], PromiseType),
        (Level, EnumType),
        (datetime.datetime, ClassType),
        (bytes, ClassType),
    ],
)
def test_annotation_kinds(annotation: object, expected_type: type) -> None:
    """Maps each supported annotation onto its descriptor kind."""
    assert isinstance(type_descriptor(annotation), expected_type)


def test_named_strings() -> None:
    """Marks ID and UUID annotations by name."""
    assert type_descriptor(gk.ID).type_name == "ID"
    assert type_descriptor(uuid.UUID).type_name == "UUID"


def test_number_brands_and_signs() -> None:
    """Applies brand and sign markers to numbers."""
    assert type_descriptor(int).brand is NumberBrand.INTEGER
    assert type_descriptor(float).brand is NumberBrand.FLOAT
    assert type_descriptor(gk.UInt32).brand is NumberBrand.UINT32
    score = type_descriptor(Score)
    assert score.brand is NumberBrand.FLOAT
    assert score.decorators == frozenset({"Positive"})
    assert score.type_name == "Score"


def test_sign_marker_requires_number() -> None:
    """Rejects numeric markers on non-numeric types."""
    with pytest.raises(GasketTypeError, match="number type"):
        type_descriptor(Annotated[str, gk.Positive])


def test_name_marker() -> None:
    """Renames the annotated type."""
    assert type_descriptor(Annotated[Level, gk.Name("Priority")]).type_name == (
        "Priority"
    )


def test_enum_descriptor_is_shared() -> None:
    """Reuses one enum descriptor per class with member values."""
    descriptor = type_descriptor(Level)

    assert descriptor is type_descriptor(Level)
    assert descriptor.enum == {"LOW": 1, "HIGH": 2}
    assert descriptor.enum_class is Level


def test_clear_cache_forgets_descriptors() -> None:
    """Builds a new descriptor for a class once the cache is cleared."""
    before = type_descriptor(Level)
    clear_cache()

    after = type_descriptor(Level)
    assert after is not before
    assert after is type_descriptor(Level)


def test_recursive_dataclass() -> None:
    """Resolves self references to the same class descriptor."""
    descriptor = type_descriptor(Node)

    assert descriptor.type_name == "Node"
    children, parent = descriptor.properties[1:]
    assert children.type.type is descriptor
    assert children.optional
    assert [member for member in parent.type.types if isinstance(member, ClassType)] == [
        descriptor
    ]


def test_role_markers() -> None:
    """Carries parent and context roles on the wrapped descriptor."""
    assert type_descriptor(gk.Parent[Node]).annotations == frozenset({PARENT})
    assert type_descriptor(gk.Context[object]).annotations == frozenset({CONTEXT})
    assert type_descriptor(gk.Context).annotations == frozenset({CONTEXT})


def test_method_descriptor() -> None:
    """Reads parameters, defaults and the awaited return type."""
    method = method_descriptor(Resolvers().lookup)

    assert method.name == "lookup"
    assert [p.name for p in method.parameters] == ["parent", "key", "limit"]
    parent, key, limit = method.parameters
    assert parent.has_role(PARENT)
    assert key.type.type_name == "ID"
    assert not key.optional
    assert limit.optional and limit.default == 5
    assert isinstance(method.return_type, PromiseType)
    assert isinstance(method.return_type.type, UnionType)


def test_nullable_parameters_are_optional() -> None:
    """Treats a nullable parameter as optional even without a default."""
    method = method_descriptor(Resolvers().plain)

    assert method.parameters[0].optional
    assert not method.parameters[0].has_default()
    assert isinstance(method.return_type, ArrayType)


def test_method_descriptor_requires_annotations() -> None:
    """Rejects parameters without annotations."""
    with pytest.raises(GasketTypeError, match="missing annotation for 'value'"):
        method_descriptor(Resolvers().untyped)


def test_keyword_only_parameters_are_rejected() -> None:
    """Requires resolver parameters to be positional."""
    with pytest.raises(GasketTypeError, match="must be positional"):
        method_descriptor(Resolvers().keyword)


def test_unsupported_annotations() -> None:
    """Rejects classes that are not dataclasses and bare lists."""
    with pytest.raises(GasketTypeError, match="Unsupported annotation"):
        type_descriptor(Resolvers)
    with pytest.raises(GasketTypeError, match="parameterized"):
        type_descriptor(list)
