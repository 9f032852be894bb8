"""Scalars beyond the GraphQL built-ins: signed numerics, big integers, UUIDs,
timestamps and byte strings."""

import base64
import binascii
import datetime
import uuid
from typing import TYPE_CHECKING

from graphql import GraphQLError, GraphQLScalarType
from graphql.language import FloatValueNode, IntValueNode, StringValueNode, print_ast
from graphql.pyutils import inspect

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any

    from graphql.language import ValueNode


def _to_int(scalar_name: str, value: "Any", *, strict: bool) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not strict and isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise GraphQLError(
        f"{scalar_name} cannot represent non-integer value: {inspect(value)}"
    )


def _to_float(scalar_name: str, value: "Any", *, strict: bool) -> float:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    if not strict and isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise GraphQLError(
        f"{scalar_name} cannot represent non-numeric value: {inspect(value)}"
    )


def _signed_scalar(
    name: str,
    description: str,
    check: "Callable[[float], bool]",
    requirement: str,
    *,
    is_float: bool,
) -> GraphQLScalarType:
    convert = _to_float if is_float else _to_int
    literal_nodes = (IntValueNode, FloatValueNode) if is_float else (IntValueNode,)

    def _checked(value: "Any", *, strict: bool) -> "Any":
        number = convert(name, value, strict=strict)
        if not check(number):
            raise GraphQLError(f"{name} must be {requirement}, got {inspect(value)}")
        return number

    def serialize(value: "Any") -> "Any":
        return _checked(value, strict=False)

    def parse_value(value: "Any") -> "Any":
        return _checked(value, strict=True)

    def parse_literal(
        value_node: "ValueNode", _variables: "dict[str, Any] | None" = None
    ) -> "Any":
        if not isinstance(value_node, literal_nodes):
            raise GraphQLError(
                f"{name} cannot represent non-numeric value: {print_ast(value_node)}",
                value_node,
            )
        return _checked(value_node.value, strict=False)

    return GraphQLScalarType(
        name=name,
        description=description,
        serialize=serialize,
        parse_value=parse_value,
        parse_literal=parse_literal,
    )


PositiveInt = _signed_scalar(
    "PositiveInt",
    "Integers that are greater than 0.",
    lambda value: value > 0,
    "greater than 0",
    is_float=False,
)
NegativeInt = _signed_scalar(
    "NegativeInt",
    "Integers that are less than 0.",
    lambda value: value < 0,
    "less than 0",
    is_float=False,
)
NonPositiveInt = _signed_scalar(
    "NonPositiveInt",
    "Integers that are 0 or less.",
    lambda value: value <= 0,
    "0 or less",
    is_float=False,
)
NonNegativeInt = _signed_scalar(
    "NonNegativeInt",
    "Integers that are 0 or greater.",
    lambda value: value >= 0,
    "0 or greater",
    is_float=False,
)
PositiveFloat = _signed_scalar(
    "PositiveFloat",
    "Floats that are greater than 0.",
    lambda value: value > 0,
    "greater than 0",
    is_float=True,
)
NegativeFloat = _signed_scalar(
    "NegativeFloat",
    "Floats that are less than 0.",
    lambda value: value < 0,
    "less than 0",
    is_float=True,
)
NonPositiveFloat = _signed_scalar(
    "NonPositiveFloat",
    "Floats that are 0 or less.",
    lambda value: value <= 0,
    "0 or less",
    is_float=True,
)
NonNegativeFloat = _signed_scalar(
    "NonNegativeFloat",
    "Floats that are 0 or greater.",
    lambda value: value >= 0,
    "0 or greater",
    is_float=True,
)


def _parse_bigint_literal(
    value_node: "ValueNode", _variables: "dict[str, Any] | None" = None
) -> int:
    if isinstance(value_node, IntValueNode | StringValueNode):
        return _to_int("BigInt", value_node.value, strict=False)
    raise GraphQLError(
        f"BigInt cannot represent non-integer value: {print_ast(value_node)}",
        value_node,
    )


BigInt = GraphQLScalarType(
    name="BigInt",
    description="Signed whole numbers without the 32-bit limit of Int.",
    serialize=lambda value: _to_int("BigInt", value, strict=False),
    parse_value=lambda value: _to_int("BigInt", value, strict=False),
    parse_literal=_parse_bigint_literal,
)


def _coerce_uuid(value: "Any") -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        try:
            return uuid.UUID(value)
        except ValueError:
            pass
    raise GraphQLError(f"UUID cannot represent value: {inspect(value)}")


def _parse_uuid_literal(
    value_node: "ValueNode", _variables: "dict[str, Any] | None" = None
) -> uuid.UUID:
    if isinstance(value_node, StringValueNode):
        return _coerce_uuid(value_node.value)
    raise GraphQLError(
        f"UUID cannot represent non-string value: {print_ast(value_node)}", value_node
    )


UUID = GraphQLScalarType(
    name="UUID",
    description="A RFC 4122 universally unique identifier.",
    serialize=lambda value: str(_coerce_uuid(value)),
    parse_value=_coerce_uuid,
    parse_literal=_parse_uuid_literal,
    specified_by_url="https://datatracker.ietf.org/doc/html/rfc4122",
)


def to_datetime(value: "Any") -> datetime.datetime:
    """Read an ISO-8601 string or a Unix epoch in milliseconds as a datetime."""
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, int | float) and not isinstance(value, bool):
        return datetime.datetime.fromtimestamp(value / 1000, tz=datetime.UTC)
    if isinstance(value, str):
        return datetime.datetime.fromisoformat(value)
    raise ValueError(f"Cannot read {inspect(value)} as a timestamp")


def _coerce_timestamp(value: "Any") -> datetime.datetime:
    try:
        return to_datetime(value)
    except ValueError as exc:
        raise GraphQLError(f"Timestamp cannot represent value: {inspect(value)}") from exc


def _serialize_timestamp(value: "Any") -> str:
    if isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, str):
        # already in wire form; only check that it parses
        _coerce_timestamp(value)
        return value
    return _coerce_timestamp(value).isoformat()


def _parse_timestamp_literal(
    value_node: "ValueNode", _variables: "dict[str, Any] | None" = None
) -> datetime.datetime:
    if isinstance(value_node, StringValueNode):
        return _coerce_timestamp(value_node.value)
    if isinstance(value_node, IntValueNode):
        return _coerce_timestamp(int(value_node.value))
    raise GraphQLError(
        f"Timestamp cannot represent value: {print_ast(value_node)}", value_node
    )


Timestamp = GraphQLScalarType(
    name="Timestamp",
    description=(
        "A point in time, serialized as an ISO-8601 string. Accepts ISO-8601 "
        "strings or Unix epoch milliseconds."
    ),
    serialize=_serialize_timestamp,
    parse_value=_coerce_timestamp,
    parse_literal=_parse_timestamp_literal,
)


def to_bytes(value: "Any") -> bytes:
    """Read raw bytes, a base64 string, or a list of octets as bytes."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, bytearray | memoryview):
        return bytes(value)
    if isinstance(value, str):
        return base64.b64decode(value, validate=True)
    if isinstance(value, list):
        return bytes(value)
    raise ValueError(f"Cannot read {inspect(value)} as bytes")


def _coerce_bytes(value: "Any") -> bytes:
    try:
        return to_bytes(value)
    except (ValueError, TypeError, binascii.Error) as exc:
        raise GraphQLError(f"Byte cannot represent value: {inspect(value)}") from exc


def _parse_bytes_literal(
    value_node: "ValueNode", _variables: "dict[str, Any] | None" = None
) -> bytes:
    if isinstance(value_node, StringValueNode):
        return _coerce_bytes(value_node.value)
    raise GraphQLError(
        f"Byte cannot represent non-string value: {print_ast(value_node)}", value_node
    )


Byte = GraphQLScalarType(
    name="Byte",
    description="Binary data, serialized as a base64 string.",
    serialize=lambda value: base64.b64encode(_coerce_bytes(value)).decode("ascii"),
    parse_value=_coerce_bytes,
    parse_literal=_parse_bytes_literal,
)
