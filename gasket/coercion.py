"""Validation and wire/native conversion driven by type descriptors."""

import base64
import binascii
import dataclasses
import datetime
import enum
import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING

from .descriptors import (
    BRAND_RANGES,
    FLOAT_BRANDS,
    MISSING,
    NEGATIVE,
    NEGATIVE_NO_ZERO,
    POSITIVE,
    POSITIVE_NO_ZERO,
    ArrayType,
    BigIntType,
    BooleanType,
    ClassType,
    EnumType,
    LiteralType,
    NullType,
    NumberType,
    ObjectLiteralType,
    PromiseType,
    PropertySignature,
    StringType,
    UndefinedType,
    UnionType,
    UnknownType,
    is_nullable,
    strip_nullish,
)
from .scalars import to_bytes, to_datetime

if TYPE_CHECKING:
    from typing import Any, Protocol

    from .descriptors import TypeDescriptor

    class Engine(Protocol):
        def validate(
            self, value: "Any", descriptor: "TypeDescriptor"
        ) -> list["ValidationErrorItem"]: ...
        def deserialize(self, value: "Any", descriptor: "TypeDescriptor") -> "Any": ...
        def serialize(self, value: "Any", descriptor: "TypeDescriptor") -> "Any": ...


@dataclasses.dataclass(frozen=True, slots=True)
class ValidationErrorItem:
    path: str
    code: str
    message: str


_SIGN_RULES: dict[str, tuple["Any", str]] = {
    POSITIVE: (lambda number: number >= 0, "Number needs to be positive"),
    POSITIVE_NO_ZERO: (
        lambda number: number > 0,
        "Number needs to be positive and not zero",
    ),
    NEGATIVE: (lambda number: number <= 0, "Number needs to be negative"),
    NEGATIVE_NO_ZERO: (
        lambda number: number < 0,
        "Number needs to be negative and not zero",
    ),
}


def _join(path: str, key: "str | int") -> str:
    return f"{path}.{key}" if path else str(key)


def _is_date_class(cls: type) -> bool:
    return issubclass(cls, datetime.date)


def _is_bytes_class(cls: type) -> bool:
    return issubclass(cls, bytes | bytearray | memoryview)


def _read(value: "Any", name: str) -> "Any":
    if isinstance(value, Mapping):
        return value.get(name, MISSING)
    return getattr(value, name, MISSING)


class Coercer:
    """Default validation/serialization engine.

    ``validate`` never raises; it reports every failure it finds. ``deserialize``
    and ``serialize`` assume the value was validated against the same descriptor.
    """

    def validate(
        self, value: "Any", descriptor: "TypeDescriptor"
    ) -> list[ValidationErrorItem]:
        errors: list[ValidationErrorItem] = []
        self._validate(value, descriptor, "", errors)
        return errors

    def _validate(
        self,
        value: "Any",
        descriptor: "TypeDescriptor",
        path: str,
        errors: list[ValidationErrorItem],
    ) -> None:
        def fail(code: str, message: str) -> None:
            errors.append(ValidationErrorItem(path, code, message))

        if value is None and not isinstance(
            descriptor,
            UnionType
            | NullType
            | UndefinedType
            | UnknownType
            | PropertySignature
            | PromiseType,
        ):
            fail("type", f"Not a {descriptor.kind.value}")
            return

        match descriptor:
            case PropertySignature() | PromiseType():
                self._validate(value, descriptor.type, path, errors)
            case UnknownType():
                pass
            case NullType() | UndefinedType():
                if value is not None:
                    fail("type", "Not null")
            case BooleanType():
                if not isinstance(value, bool):
                    fail("type", "Not a boolean")
            case StringType():
                self._validate_string(value, descriptor, fail)
            case NumberType():
                self._validate_number(value, descriptor, fail)
            case BigIntType():
                if isinstance(value, bool) or not isinstance(value, int):
                    fail("type", "Not a bigint")
            case LiteralType():
                if value != descriptor.value:
                    fail("literal", f"Not '{descriptor.value}'")
            case EnumType():
                if not self._is_enum_value(value, descriptor):
                    fail("type", f"No valid enum member of {descriptor.type_name}")
            case ArrayType():
                if not isinstance(value, list | tuple):
                    fail("type", "Not an array")
                    return
                for index, item in enumerate(value):
                    self._validate(item, descriptor.type, _join(path, index), errors)
            case UnionType():
                if value is None:
                    if not is_nullable(descriptor):
                        fail("type", "Not nullable")
                    return
                members = strip_nullish(descriptor.types)
                if not any(not self.validate(value, member) for member in members):
                    fail("type", "No valid union member found")
            case ClassType() if _is_date_class(descriptor.class_type):
                try:
                    to_datetime(value)
                except ValueError:
                    fail("type", "Not a valid date")
            case ClassType() if _is_bytes_class(descriptor.class_type):
                try:
                    to_bytes(value)
                except (ValueError, TypeError, binascii.Error):
                    fail("type", "Not valid binary data")
            case ClassType() | ObjectLiteralType():
                self._validate_object(value, descriptor, path, errors)

    def _validate_string(
        self, value: "Any", descriptor: StringType, fail: "Any"
    ) -> None:
        if descriptor.type_name == "UUID":
            if isinstance(value, uuid.UUID):
                return
            try:
                uuid.UUID(str(value))
            except ValueError:
                fail("uuid", "Not a UUID")
            return
        if descriptor.type_name == "ID" and isinstance(value, int | str):
            return
        if not isinstance(value, str):
            fail("type", "Not a string")

    def _validate_number(
        self, value: "Any", descriptor: NumberType, fail: "Any"
    ) -> None:
        if isinstance(value, bool) or not isinstance(value, int | float):
            fail("type", "Not a number")
            return
        brand = descriptor.brand
        if brand is not None and brand not in FLOAT_BRANDS:
            if not float(value).is_integer():
                fail("type", "Not an integer")
                return
            bounds = BRAND_RANGES.get(brand)
            if bounds is not None and not bounds[0] <= value <= bounds[1]:
                fail(
                    "range",
                    f"Number needs to be between {bounds[0]} and {bounds[1]}",
                )
                return
        for decorator in descriptor.decorators:
            rule = _SIGN_RULES.get(decorator)
            if rule is not None and not rule[0](value):
                fail(decorator, rule[1])

    def _is_enum_value(self, value: "Any", descriptor: EnumType) -> bool:
        if descriptor.enum_class is not None and isinstance(
            value, descriptor.enum_class
        ):
            return True
        return any(value == member for member in descriptor.enum.values())

    def _validate_object(
        self,
        value: "Any",
        descriptor: "ClassType | ObjectLiteralType",
        path: str,
        errors: list[ValidationErrorItem],
    ) -> None:
        is_instance = isinstance(descriptor, ClassType) and isinstance(
            value, descriptor.class_type
        )
        if not is_instance and not isinstance(value, Mapping):
            errors.append(ValidationErrorItem(path, "type", "Not an object"))
            return
        for prop in descriptor.properties:
            child_path = _join(path, prop.name)
            item = _read(value, prop.name)
            if item is MISSING or item is None:
                if prop.is_optional() or prop.is_nullable():
                    continue
                errors.append(
                    ValidationErrorItem(
                        child_path, "required", "Required value is undefined"
                    )
                )
                continue
            self._validate(item, prop.type, child_path, errors)

    def deserialize(self, value: "Any", descriptor: "TypeDescriptor") -> "Any":
        if value is None:
            return None
        match descriptor:
            case PropertySignature() | PromiseType():
                return self.deserialize(value, descriptor.type)
            case UnionType():
                members = strip_nullish(descriptor.types)
                for member in members:
                    if not self.validate(value, member):
                        return self.deserialize(value, member)
                return value
            case ArrayType():
                return [self.deserialize(item, descriptor.type) for item in value]
            case EnumType():
                enum_class = descriptor.enum_class
                if enum_class is not None and not isinstance(value, enum_class):
                    return enum_class(value)
                return value
            case StringType() if descriptor.type_name == "UUID":
                return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
            case NumberType():
                if descriptor.brand in FLOAT_BRANDS:
                    return float(value)
                if descriptor.brand is not None and isinstance(value, float):
                    return int(value)
                return value
            case ClassType() if _is_date_class(descriptor.class_type):
                moment = to_datetime(value)
                if descriptor.class_type is datetime.date:
                    return moment.date()
                return moment
            case ClassType() if _is_bytes_class(descriptor.class_type):
                return to_bytes(value)
            case ClassType() | ObjectLiteralType():
                return self._deserialize_object(value, descriptor)
        return value

    def _deserialize_object(
        self, value: "Any", descriptor: "ClassType | ObjectLiteralType"
    ) -> "Any":
        if not isinstance(value, Mapping):
            return value
        native = {
            prop.name: self.deserialize(value[prop.name], prop.type)
            for prop in descriptor.properties
            if prop.name in value
        }
        if isinstance(descriptor, ClassType) and dataclasses.is_dataclass(
            descriptor.class_type
        ):
            init_names = {
                field.name
                for field in dataclasses.fields(descriptor.class_type)
                if field.init
            }
            return descriptor.class_type(
                **{name: item for name, item in native.items() if name in init_names}
            )
        return native

    def serialize(self, value: "Any", descriptor: "TypeDescriptor") -> "Any":
        if value is None:
            return None
        match descriptor:
            case PropertySignature() | PromiseType():
                return self.serialize(value, descriptor.type)
            case UnionType():
                return self._serialize_union(value, descriptor)
            case ArrayType():
                return [self.serialize(item, descriptor.type) for item in value]
            case EnumType():
                return value.value if isinstance(value, enum.Enum) else value
            case StringType() if descriptor.type_name == "UUID":
                return str(value)
            case ClassType() if _is_date_class(descriptor.class_type):
                return value.isoformat() if isinstance(value, datetime.date) else value
            case ClassType() if _is_bytes_class(descriptor.class_type):
                if isinstance(value, bytes | bytearray | memoryview):
                    return base64.b64encode(bytes(value)).decode("ascii")
                return value
            case ClassType() | ObjectLiteralType():
                return self._serialize_object(value, descriptor)
        return value

    def _serialize_object(
        self, value: "Any", descriptor: "ClassType | ObjectLiteralType"
    ) -> dict[str, "Any"]:
        wire: dict[str, "Any"] = {}
        for prop in descriptor.properties:
            item = _read(value, prop.name)
            if item is MISSING:
                continue
            wire[prop.name] = self.serialize(item, prop.type)
        return wire

    def _serialize_union(self, value: "Any", descriptor: UnionType) -> "Any":
        members = strip_nullish(descriptor.types)
        if len(members) == 1:
            return self.serialize(value, members[0])
        for member in members:
            if isinstance(member, ClassType) and not isinstance(
                value, (member.class_type, Mapping)
            ):
                continue
            if self.validate(value, member):
                continue
            wire = self.serialize(value, member)
            if isinstance(member, ClassType | ObjectLiteralType) and isinstance(
                wire, dict
            ):
                wire["__typename"] = member.type_name
            return wire
        return value
