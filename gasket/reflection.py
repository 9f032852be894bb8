"""Build type descriptors from Python annotations.

Supported annotations: ``bool``, ``str``, ``int``, ``float``, :class:`ID`,
``uuid.UUID``, ``Literal[...]``, ``enum.Enum`` subclasses, dataclasses,
``list[T]``/``tuple[T, ...]``/``Sequence[T]``, ``X | Y``, ``Awaitable[T]``,
``Any``/``object``, ``datetime``/``date``/``bytes``, PEP 695 type aliases, and
``Annotated[T, ...]`` carrying the markers defined here.
"""

import collections.abc
import dataclasses
import datetime
import enum
import inspect
import types
import uuid
from builtins import type as pytype
from typing import (
    TYPE_CHECKING,
    Annotated,
    Any,
    Generic,
    Literal,
    TypeAliasType,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from ._annotations import get_annotations
from .descriptors import (
    CONTEXT,
    MISSING,
    NEGATIVE,
    NEGATIVE_NO_ZERO,
    PARENT,
    POSITIVE,
    POSITIVE_NO_ZERO,
    ArrayType,
    BooleanType,
    ClassType,
    EnumType,
    LiteralType,
    MethodDescriptor,
    NullType,
    NumberBrand,
    NumberType,
    ParameterDescriptor,
    PromiseType,
    PropertySignature,
    StringType,
    UnionType,
    UnknownType,
    is_nullable,
)
from .errors import (
    GasketTypeError,
    list_type_requires_parameter,
    resolver_missing_annotation,
    unsupported_annotation,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .descriptors import TypeDescriptor

_NONE_TYPE = pytype(None)
_DESCRIPTORS: dict["Any", "TypeDescriptor"] = {}


class ID(str):
    """GraphQL ID scalar."""


@dataclasses.dataclass(frozen=True, slots=True)
class Name:
    """Gives the annotated type a declared GraphQL name."""

    value: str


@dataclasses.dataclass(frozen=True, slots=True)
class Brand:
    value: NumberBrand


@dataclasses.dataclass(frozen=True, slots=True)
class Sign:
    value: str


@dataclasses.dataclass(frozen=True, slots=True)
class Role:
    value: str


Positive = Sign(POSITIVE)
PositiveNoZero = Sign(POSITIVE_NO_ZERO)
Negative = Sign(NEGATIVE)
NegativeNoZero = Sign(NEGATIVE_NO_ZERO)

Int8 = Annotated[int, Brand(NumberBrand.INT8)]
Int16 = Annotated[int, Brand(NumberBrand.INT16)]
Int32 = Annotated[int, Brand(NumberBrand.INT32)]
UInt8 = Annotated[int, Brand(NumberBrand.UINT8)]
UInt16 = Annotated[int, Brand(NumberBrand.UINT16)]
UInt32 = Annotated[int, Brand(NumberBrand.UINT32)]
Float32 = Annotated[float, Brand(NumberBrand.FLOAT32)]
Float64 = Annotated[float, Brand(NumberBrand.FLOAT64)]

_PARENT_MARKER = Role(PARENT)
_CONTEXT_MARKER = Role(CONTEXT)

if TYPE_CHECKING:
    type Parent[T] = Annotated[T, _PARENT_MARKER]
    type Context[T] = Annotated[T, _CONTEXT_MARKER]
else:
    _T = TypeVar("_T")

    class Parent(Generic[_T]):
        """Marks the parameter that receives the parent object of the field."""

        def __class_getitem__(cls, item: _T) -> Annotated[_T, _PARENT_MARKER]:
            return Annotated[item, _PARENT_MARKER]

    class Context(Generic[_T]):
        """Marks the parameter that receives the request context."""

        def __class_getitem__(cls, item: _T) -> Annotated[_T, _CONTEXT_MARKER]:
            return Annotated[item, _CONTEXT_MARKER]


_SEQUENCE_ORIGINS = (
    list,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.Iterable,
    collections.abc.Set,
)
_PROMISE_ORIGINS = (collections.abc.Awaitable, collections.abc.Coroutine)
_CLASS_SCALARS = (datetime.datetime, datetime.date, bytes, bytearray)


def type_descriptor(annotation: "Any") -> "TypeDescriptor":
    """Return the descriptor for an annotation, reusing it for repeated lookups."""
    try:
        cached = _DESCRIPTORS.get(annotation)
    except TypeError:
        return _build(annotation)
    if cached is not None:
        return cached
    descriptor = _build(annotation)
    _DESCRIPTORS.setdefault(annotation, descriptor)
    return _DESCRIPTORS[annotation]


def _build(annotation: "Any") -> "TypeDescriptor":
    if annotation is Parent or annotation is Context:
        role = PARENT if annotation is Parent else CONTEXT
        return UnknownType(annotations=frozenset({role}))

    if isinstance(annotation, TypeAliasType):
        return _with(type_descriptor(annotation.__value__), name=annotation.__name__)

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return _build_annotated(args[0], args[1:])
    if annotation in (Any, object, inspect.Parameter.empty):
        return UnknownType()
    if annotation is None or annotation is _NONE_TYPE:
        return NullType()
    if annotation is bool:
        return BooleanType()
    if annotation is ID:
        return StringType(type_name="ID")
    if annotation is str:
        return StringType()
    if annotation is uuid.UUID:
        return StringType(type_name="UUID")
    if annotation is int:
        return NumberType(brand=NumberBrand.INTEGER)
    if annotation is float:
        return NumberType(brand=NumberBrand.FLOAT)
    if origin is Literal:
        members = [
            NullType() if value is None else LiteralType(value) for value in args
        ]
        return members[0] if len(members) == 1 else UnionType(tuple(members))
    if origin is Union or origin is types.UnionType:
        return UnionType(tuple(type_descriptor(arg) for arg in args))
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return ArrayType(type_descriptor(args[0]))
        raise unsupported_annotation(annotation)
    if origin in _SEQUENCE_ORIGINS or annotation in _SEQUENCE_ORIGINS:
        if not args:
            raise list_type_requires_parameter()
        return ArrayType(type_descriptor(args[0]))
    if origin in _PROMISE_ORIGINS:
        return PromiseType(type_descriptor(args[-1]) if args else UnknownType())
    if isinstance(annotation, pytype):
        return _build_class(annotation)
    raise unsupported_annotation(annotation)


def _build_annotated(inner: "Any", metadata: tuple["Any", ...]) -> "TypeDescriptor":
    descriptor = type_descriptor(inner)
    name: str | None = None
    roles: set[str] = set()
    signs: set[str] = set()
    brand: NumberBrand | None = None
    for item in metadata:
        match item:
            case Name(value=value):
                name = value
            case Role(value=value):
                roles.add(value)
            case Sign(value=value):
                signs.add(value)
            case Brand(value=value):
                brand = value
    if isinstance(descriptor, NumberType) and (signs or brand is not None):
        descriptor = dataclasses.replace(
            descriptor,
            brand=brand or descriptor.brand,
            decorators=descriptor.decorators | signs,
        )
    elif signs or brand is not None:
        raise GasketTypeError(f"Numeric markers require a number type, got {inner}")
    return _with(descriptor, name=name, roles=roles)


def _with(
    descriptor: "TypeDescriptor",
    *,
    name: str | None = None,
    roles: "set[str] | None" = None,
) -> "TypeDescriptor":
    changes: dict[str, Any] = {}
    if name is not None:
        changes["type_name"] = name
    if roles:
        changes["annotations"] = descriptor.annotations | roles
    if not changes:
        return descriptor
    return dataclasses.replace(descriptor, **changes)


def _build_class(cls: pytype) -> "TypeDescriptor":
    if issubclass(cls, enum.Enum):
        return EnumType(
            type_name=cls.__name__,
            enum={member.name: member.value for member in cls},
            enum_class=cls,
        )
    if issubclass(cls, _CLASS_SCALARS):
        return ClassType(class_type=cls)
    if not dataclasses.is_dataclass(cls):
        raise unsupported_annotation(cls)

    # Registered before the properties are read so self-references resolve
    # to this same descriptor.
    descriptor = ClassType(class_type=cls)
    _DESCRIPTORS[cls] = descriptor
    try:
        descriptor.properties.extend(_dataclass_properties(cls))
    except Exception:
        del _DESCRIPTORS[cls]
        raise
    return descriptor


def _class_hints(cls: pytype) -> dict[str, "Any"]:
    # get_type_hints also resolves string arguments nested in generics (list["Node"])
    return get_type_hints(cls, include_extras=True)


def _dataclass_properties(cls: pytype) -> list[PropertySignature]:
    hints = _class_hints(cls)
    properties: list[PropertySignature] = []
    for dc_field in dataclasses.fields(cls):
        if dc_field.name.startswith("_"):
            continue
        annotation = hints.get(dc_field.name, dc_field.type)
        default: object = MISSING
        if dc_field.default is not MISSING:
            default = dc_field.default
        elif dc_field.default_factory is not MISSING:
            default = dc_field.default_factory()
        properties.append(
            PropertySignature(
                dc_field.name,
                type_descriptor(annotation),
                optional=default is not MISSING,
                default=default,
            )
        )
    return properties


def _callable_name(func: "Callable[..., Any]") -> str:
    return getattr(func, "__name__", func.__class__.__name__)


def method_descriptor(
    func: "Callable[..., Any]", *, name: str | None = None
) -> MethodDescriptor:
    """Describe a (bound) method's parameters and return type.

    ``async def`` methods get their declared return type wrapped in a promise.
    """
    func_name = name or _callable_name(func)
    target = inspect.unwrap(getattr(func, "__func__", func))
    hints = get_annotations(target)
    signature = inspect.signature(func)

    parameters: list[ParameterDescriptor] = []
    for param in signature.parameters.values():
        if param.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            continue
        if param.kind is inspect.Parameter.KEYWORD_ONLY:
            raise GasketTypeError(
                f"Resolver {func_name} parameter '{param.name}' must be positional."
            )
        annotation = hints.get(param.name, inspect.Parameter.empty)
        if annotation is inspect.Parameter.empty:
            raise resolver_missing_annotation(func_name, param.name)
        descriptor = type_descriptor(annotation)
        has_default = param.default is not inspect.Parameter.empty
        parameters.append(
            ParameterDescriptor(
                param.name,
                descriptor,
                optional=has_default or is_nullable(descriptor),
                default=param.default if has_default else MISSING,
            )
        )

    if "return" not in hints:
        raise resolver_missing_annotation(func_name, "return")
    return_type = type_descriptor(hints["return"])
    if inspect.iscoroutinefunction(target) and not isinstance(return_type, PromiseType):
        return_type = PromiseType(return_type)

    return MethodDescriptor(func_name, tuple(parameters), return_type)


def clear_cache() -> None:
    """Forget every descriptor built so far."""
    _DESCRIPTORS.clear()

