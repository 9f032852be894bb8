"""Kind-tagged descriptions of declared types, parameters and methods.

Descriptors hash and compare by identity: the compiler memoizes enum and union
types per descriptor object, so two structurally equal descriptors still map to
distinct cache entries.
"""

import dataclasses
import enum
from builtins import type as pytype
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from typing import Any

MISSING = dataclasses.MISSING

PARENT = "parent"
CONTEXT = "context"

POSITIVE = "Positive"
POSITIVE_NO_ZERO = "PositiveNoZero"
NEGATIVE = "Negative"
NEGATIVE_NO_ZERO = "NegativeNoZero"


class TypeKind(enum.Enum):
    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    BIGINT = "bigint"
    LITERAL = "literal"
    ENUM = "enum"
    CLASS = "class"
    OBJECT_LITERAL = "objectLiteral"
    PROPERTY_SIGNATURE = "propertySignature"
    ARRAY = "array"
    UNION = "union"
    PROMISE = "promise"
    UNKNOWN = "unknown"
    NULL = "null"
    UNDEFINED = "undefined"


class NumberBrand(enum.Enum):
    INTEGER = "integer"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    FLOAT = "float"
    FLOAT32 = "float32"
    FLOAT64 = "float64"


FLOAT_BRANDS = frozenset({NumberBrand.FLOAT, NumberBrand.FLOAT32, NumberBrand.FLOAT64})
SIGNED_INT_BRANDS = frozenset(
    {NumberBrand.INTEGER, NumberBrand.INT8, NumberBrand.INT16, NumberBrand.INT32}
)
UNSIGNED_INT_BRANDS = frozenset(
    {NumberBrand.UINT8, NumberBrand.UINT16, NumberBrand.UINT32}
)

# inclusive bounds; INTEGER is unbounded
BRAND_RANGES: dict[NumberBrand, tuple[int, int]] = {
    NumberBrand.INT8: (-(2**7), 2**7 - 1),
    NumberBrand.INT16: (-(2**15), 2**15 - 1),
    NumberBrand.INT32: (-(2**31), 2**31 - 1),
    NumberBrand.UINT8: (0, 2**8 - 1),
    NumberBrand.UINT16: (0, 2**16 - 1),
    NumberBrand.UINT32: (0, 2**32 - 1),
}


@dataclasses.dataclass(eq=False, slots=True, kw_only=True)
class TypeDescriptor:
    kind: ClassVar[TypeKind]
    type_name: str | None = None
    annotations: frozenset[str] = frozenset()


@dataclasses.dataclass(eq=False, slots=True, kw_only=True)
class BooleanType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.BOOLEAN


@dataclasses.dataclass(eq=False, slots=True, kw_only=True)
class StringType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.STRING


@dataclasses.dataclass(eq=False, slots=True, kw_only=True)
class NumberType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.NUMBER
    brand: NumberBrand | None = None
    decorators: frozenset[str] = frozenset()


@dataclasses.dataclass(eq=False, slots=True, kw_only=True)
class BigIntType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.BIGINT


@dataclasses.dataclass(eq=False, slots=True)
class LiteralType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.LITERAL
    value: "Any"


@dataclasses.dataclass(eq=False, slots=True)
class EnumType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.ENUM
    enum: "Mapping[str, Any]"
    enum_class: pytype | None = None


@dataclasses.dataclass(eq=False, slots=True)
class PropertySignature(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.PROPERTY_SIGNATURE
    name: str
    type: TypeDescriptor
    optional: bool = False
    default: object = dataclasses.field(default_factory=lambda: MISSING)

    def is_optional(self) -> bool:
        return self.optional

    def is_nullable(self) -> bool:
        return is_nullable(self.type)


@dataclasses.dataclass(eq=False, slots=True)
class ClassType(TypeDescriptor):
    """A declared class; ``properties`` may be filled after construction to close cycles."""

    kind: ClassVar[TypeKind] = TypeKind.CLASS
    class_type: pytype
    properties: list[PropertySignature] = dataclasses.field(default_factory=list)

    def __post_init__(self) -> None:
        if self.type_name is None:
            self.type_name = self.class_type.__name__


@dataclasses.dataclass(eq=False, slots=True)
class ObjectLiteralType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.OBJECT_LITERAL
    properties: list[PropertySignature] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(eq=False, slots=True)
class ArrayType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.ARRAY
    type: TypeDescriptor


@dataclasses.dataclass(eq=False, slots=True)
class UnionType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.UNION
    types: tuple[TypeDescriptor, ...]


@dataclasses.dataclass(eq=False, slots=True)
class PromiseType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.PROMISE
    type: TypeDescriptor


@dataclasses.dataclass(eq=False, slots=True, kw_only=True)
class UnknownType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.UNKNOWN


@dataclasses.dataclass(eq=False, slots=True, kw_only=True)
class NullType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.NULL


@dataclasses.dataclass(eq=False, slots=True, kw_only=True)
class UndefinedType(TypeDescriptor):
    kind: ClassVar[TypeKind] = TypeKind.UNDEFINED


ObjectShapedType = ClassType | ObjectLiteralType


@dataclasses.dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    name: str
    type: TypeDescriptor
    optional: bool = False
    default: object = dataclasses.field(default_factory=lambda: MISSING)

    def has_role(self, role: str) -> bool:
        return role in self.type.annotations

    def has_default(self) -> bool:
        return self.default is not MISSING


@dataclasses.dataclass(frozen=True, slots=True)
class MethodDescriptor:
    name: str
    parameters: tuple[ParameterDescriptor, ...]
    return_type: TypeDescriptor


def is_nullish(descriptor: TypeDescriptor) -> bool:
    return isinstance(descriptor, NullType | UndefinedType)


def strip_nullish(types: "Iterable[TypeDescriptor]") -> list[TypeDescriptor]:
    return [member for member in types if not is_nullish(member)]


def is_nullable(descriptor: TypeDescriptor) -> bool:
    """True for unions that admit ``null`` or ``undefined``."""
    return isinstance(descriptor, UnionType) and any(
        is_nullish(member) for member in descriptor.types
    )


def unwrap_promise(descriptor: TypeDescriptor) -> TypeDescriptor:
    if isinstance(descriptor, PromiseType):
        return descriptor.type
    return descriptor


def object_literal(
    properties: "Iterable[PropertySignature]", *, type_name: str | None = None
) -> ObjectLiteralType:
    return ObjectLiteralType(type_name=type_name, properties=list(properties))
