"""Compile type descriptors into graphql-core types.

Named types (objects, input objects, enums, unions) are created once per
compiler and handed back by reference on every later request. Object and input
object field maps are deferred, so a type can be cached before any of its fields
are mapped, which keeps mutually-referential types from recursing forever.
"""

import datetime
import functools
from collections.abc import Mapping
from typing import TYPE_CHECKING

from graphql import (
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLEnumType,
    GraphQLEnumValue,
    GraphQLField,
    GraphQLFloat,
    GraphQLID,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLString,
    GraphQLUnionType,
    Undefined,
)

from .coercion import Coercer
from .config import CompilerConfig
from .descriptors import (
    FLOAT_BRANDS,
    NEGATIVE,
    NEGATIVE_NO_ZERO,
    POSITIVE,
    POSITIVE_NO_ZERO,
    SIGNED_INT_BRANDS,
    UNSIGNED_INT_BRANDS,
    ArrayType,
    BigIntType,
    BooleanType,
    ClassType,
    EnumType,
    LiteralType,
    NumberType,
    ObjectLiteralType,
    PromiseType,
    PropertySignature,
    StringType,
    UnionType,
    is_nullable,
    strip_nullish,
    unwrap_promise,
)
from .errors import (
    TypeNameRequiredError,
    UnsupportedClassScalarError,
    number_requires_brand,
    union_member_must_be_object,
    unsupported_class_scalar,
    unsupported_kind,
)
from .logger import log
from .registry import ResolverRegistry
from .resolver import create_resolve_function, filter_argument_parameters
from .scalars import (
    UUID,
    BigInt,
    Byte,
    NegativeFloat,
    NegativeInt,
    NonNegativeFloat,
    NonNegativeInt,
    NonPositiveFloat,
    NonPositiveInt,
    PositiveFloat,
    PositiveInt,
    Timestamp,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from typing import Any

    from graphql import (
        GraphQLInputType,
        GraphQLNamedInputType,
        GraphQLNamedOutputType,
        GraphQLOutputType,
        GraphQLResolveInfo,
        GraphQLScalarType,
    )

    from .coercion import Engine
    from .descriptors import (
        ObjectShapedType,
        ParameterDescriptor,
        TypeDescriptor,
    )
    from .registry import OperationMeta

# checked in this order; the first decorator present wins
_SIGN_PRIORITY = (POSITIVE_NO_ZERO, NEGATIVE_NO_ZERO, NEGATIVE, POSITIVE)

_FLOAT_SCALARS: dict[str | None, "GraphQLScalarType"] = {
    None: GraphQLFloat,
    POSITIVE_NO_ZERO: PositiveFloat,
    NEGATIVE_NO_ZERO: NegativeFloat,
    NEGATIVE: NonPositiveFloat,
    POSITIVE: NonNegativeFloat,
}
_INT_SCALARS: dict[str | None, "GraphQLScalarType"] = {
    None: GraphQLInt,
    POSITIVE_NO_ZERO: PositiveInt,
    NEGATIVE_NO_ZERO: NegativeInt,
    NEGATIVE: NonPositiveInt,
    POSITIVE: NonNegativeInt,
}


def require_type_name(descriptor: "TypeDescriptor") -> str:
    if not descriptor.type_name:
        raise TypeNameRequiredError(descriptor)
    return descriptor.type_name


def _number_scalar(descriptor: NumberType) -> "GraphQLScalarType":
    brand = descriptor.brand
    if brand in UNSIGNED_INT_BRANDS:
        return PositiveInt
    if brand in FLOAT_BRANDS:
        table = _FLOAT_SCALARS
    elif brand in SIGNED_INT_BRANDS:
        table = _INT_SCALARS
    else:
        raise number_requires_brand()
    for decorator in _SIGN_PRIORITY:
        if decorator in descriptor.decorators:
            return table[decorator]
    return table[None]


def _union_type_resolver(
    members: "Sequence[ObjectShapedType]",
) -> "Callable[[Any, GraphQLResolveInfo, Any], str | None]":
    classes = [
        (member.class_type, member.type_name)
        for member in members
        if isinstance(member, ClassType)
    ]

    def resolve_type(value: "Any", _info: "GraphQLResolveInfo", _type: "Any") -> str | None:
        if isinstance(value, Mapping):
            type_name = value.get("__typename")
            if isinstance(type_name, str):
                return type_name
        for cls, type_name in classes:
            if isinstance(value, cls):
                return type_name
        return None

    return resolve_type


class TypeCompiler:
    """Maps descriptors onto graphql-core types for a single schema.

    The caches are filled on first use and never invalidated, so one compiler
    should build exactly one schema.
    """

    def __init__(
        self,
        registry: ResolverRegistry | None = None,
        *,
        engine: "Engine | None" = None,
        config: CompilerConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else ResolverRegistry()
        self.engine = engine if engine is not None else Coercer()
        self.config = config if config is not None else CompilerConfig()
        self._output_object_types: dict[str, GraphQLObjectType] = {}
        self._input_object_types: dict[str, GraphQLInputObjectType] = {}
        self._enum_types: dict[EnumType, GraphQLEnumType] = {}
        self._union_types: dict[UnionType, GraphQLUnionType] = {}
        self._deferred: list["Callable[[], Any]"] = []

    # -----------------------------------------------------------------------
    # Scalars
    # -----------------------------------------------------------------------

    def scalar_type(self, descriptor: "TypeDescriptor") -> "GraphQLScalarType":
        if descriptor.type_name == "ID":
            return GraphQLID

        match descriptor:
            case BooleanType():
                return GraphQLBoolean
            case BigIntType():
                return BigInt
            case ClassType():
                return self.class_scalar_type(descriptor)
            case NumberType():
                return _number_scalar(descriptor)
            case LiteralType():
                return GraphQLString
            case StringType():
                return UUID if descriptor.type_name == "UUID" else GraphQLString
            case _:
                raise unsupported_kind(descriptor)

    def class_scalar_type(self, descriptor: ClassType) -> "GraphQLScalarType":
        cls = descriptor.class_type
        # datetime.datetime is a datetime.date subclass
        if issubclass(cls, datetime.date):
            return Timestamp
        if issubclass(cls, bytes | bytearray | memoryview):
            return Byte
        raise unsupported_class_scalar(cls.__name__)

    # -----------------------------------------------------------------------
    # Enums, unions and lists
    # -----------------------------------------------------------------------

    def enum_type(self, descriptor: EnumType) -> GraphQLEnumType:
        cached = self._enum_types.get(descriptor)
        if cached is not None:
            return cached

        name = require_type_name(descriptor)
        enum_type = GraphQLEnumType(
            name,
            {key: GraphQLEnumValue(value) for key, value in descriptor.enum.items()},
        )
        self._enum_types[descriptor] = enum_type
        log.debug("Created enum type %s", name)
        return enum_type

    def union_type(self, descriptor: UnionType) -> GraphQLUnionType:
        cached = self._union_types.get(descriptor)
        if cached is not None:
            return cached

        members = strip_nullish(descriptor.types)
        object_members: list["ObjectShapedType"] = []
        for member in members:
            if not isinstance(member, ClassType | ObjectLiteralType):
                raise union_member_must_be_object(member)
            object_members.append(member)
        types = [self.output_object_type(member) for member in object_members]

        name = require_type_name(descriptor)
        union_type = GraphQLUnionType(
            name, types, resolve_type=_union_type_resolver(object_members)
        )
        self._union_types[descriptor] = union_type
        log.debug("Created union type %s", name)
        return union_type

    def input_list_type(self, descriptor: ArrayType) -> "GraphQLList[GraphQLInputType]":
        return GraphQLList(self.input_type(descriptor.type))

    def output_list_type(
        self, descriptor: ArrayType
    ) -> "GraphQLList[GraphQLOutputType]":
        return GraphQLList(self.output_type(descriptor.type))

    # -----------------------------------------------------------------------
    # General entry points
    # -----------------------------------------------------------------------

    def named_input_type(self, descriptor: "TypeDescriptor") -> "GraphQLNamedInputType":
        if descriptor.type_name == "ID":
            return GraphQLID

        match descriptor:
            case PropertySignature():
                return self.named_input_type(descriptor.type)
            case ObjectLiteralType():
                return self.input_object_type(descriptor)
            case ClassType():
                try:
                    return self.class_scalar_type(descriptor)
                except UnsupportedClassScalarError:
                    return self.input_object_type(descriptor)
            case EnumType():
                return self.enum_type(descriptor)
            case _:
                return self.scalar_type(descriptor)

    def input_type(self, descriptor: "TypeDescriptor") -> "GraphQLInputType":
        if descriptor.type_name == "ID":
            return GraphQLID

        match descriptor:
            case UnionType():
                # GraphQL has no input unions; only nullable wrappers collapse
                members = strip_nullish(descriptor.types)
                if len(members) == 1:
                    return self.input_type(members[0])
                raise unsupported_kind(descriptor)
            case PropertySignature():
                return self.input_type(descriptor.type)
            case ObjectLiteralType():
                return self.input_object_type(descriptor)
            case ClassType():
                try:
                    return self.class_scalar_type(descriptor)
                except UnsupportedClassScalarError:
                    return self.input_object_type(descriptor)
            case ArrayType():
                return self.input_list_type(descriptor)
            case EnumType():
                return self.enum_type(descriptor)
            case _:
                return self.scalar_type(descriptor)

    def named_output_type(
        self, descriptor: "TypeDescriptor"
    ) -> "GraphQLNamedOutputType":
        if descriptor.type_name == "ID":
            return GraphQLID

        match descriptor:
            case UnionType():
                members = strip_nullish(descriptor.types)
                if len(members) == 1:
                    return self.named_output_type(members[0])
                return self.union_type(descriptor)
            case PropertySignature():
                return self.named_output_type(descriptor.type)
            case ObjectLiteralType():
                return self.output_object_type(descriptor)
            case ClassType():
                try:
                    return self.class_scalar_type(descriptor)
                except UnsupportedClassScalarError:
                    return self.output_object_type(descriptor)
            case EnumType():
                return self.enum_type(descriptor)
            case _:
                return self.scalar_type(descriptor)

    def output_type(self, descriptor: "TypeDescriptor") -> "GraphQLOutputType":
        if descriptor.type_name == "ID":
            return GraphQLID

        match descriptor:
            case UnionType():
                members = strip_nullish(descriptor.types)
                if len(members) == 1:
                    return self.output_type(members[0])
                return self.union_type(descriptor)
            case PromiseType():
                return self.output_type(descriptor.type)
            case PropertySignature():
                return self.output_type(descriptor.type)
            case ObjectLiteralType():
                return self.output_object_type(descriptor)
            case ClassType():
                try:
                    return self.class_scalar_type(descriptor)
                except UnsupportedClassScalarError:
                    return self.output_object_type(descriptor)
            case ArrayType():
                return self.output_list_type(descriptor)
            case EnumType():
                return self.enum_type(descriptor)
            case _:
                return self.scalar_type(descriptor)

    # -----------------------------------------------------------------------
    # Object and input object types
    # -----------------------------------------------------------------------

    def _defer(self, build: "Callable[[], Any]") -> "Callable[[], Any]":
        thunk = functools.cache(build)
        self._deferred.append(thunk)
        return thunk

    def resolve_deferred(self) -> None:
        """Evaluate every pending field map, including ones created along the way.

        Errors raised here keep their own type; graphql-core re-raises thunk
        failures as a generic ``TypeError``.
        """
        index = 0
        while index < len(self._deferred):
            self._deferred[index]()
            index += 1

    def output_object_type(
        self,
        descriptor: "ObjectShapedType",
        extra_fields: "Mapping[str, GraphQLField] | None" = None,
    ) -> GraphQLObjectType:
        name = require_type_name(descriptor)
        cached = self._output_object_types.get(name)
        if cached is not None:
            return cached

        object_type = GraphQLObjectType(
            name,
            self._defer(
                lambda: {**self.create_output_fields(descriptor), **(extra_fields or {})}
            ),
        )
        self._output_object_types[name] = object_type
        log.debug("Created object type %s", name)
        return object_type

    def input_object_type(self, descriptor: "ObjectShapedType") -> GraphQLInputObjectType:
        name = require_type_name(descriptor)
        cached = self._input_object_types.get(name)
        if cached is not None:
            return cached

        input_object_type = GraphQLInputObjectType(
            name, self._defer(lambda: self.create_input_fields(descriptor))
        )
        self._input_object_types[name] = input_object_type
        log.debug("Created input object type %s", name)
        return input_object_type

    def get_resolver(self, descriptor: "ObjectShapedType") -> "Any | None":
        return self.registry.for_type(require_type_name(descriptor))

    def has_field_resolver(self, instance: "Any", field_name: str) -> bool:
        return self.registry.has_field_resolver(instance, field_name)

    def create_output_fields(
        self, descriptor: "ObjectShapedType"
    ) -> dict[str, GraphQLField]:
        resolver = self.get_resolver(descriptor)

        fields: dict[str, GraphQLField] = {}
        for prop in descriptor.properties:
            field_type = self.output_type(prop.type)
            if not prop.is_optional() and not prop.is_nullable():
                field_type = GraphQLNonNull(field_type)

            if resolver is not None and self.has_field_resolver(resolver, prop.name):
                fields[prop.name] = GraphQLField(
                    field_type, **self.generate_field_resolver(resolver, prop.name)
                )
            else:
                fields[prop.name] = GraphQLField(field_type)
        return fields

    def create_input_fields(
        self, descriptor: "ObjectShapedType"
    ) -> dict[str, GraphQLInputField]:
        fields: dict[str, GraphQLInputField] = {}
        for prop in descriptor.properties:
            field_type = self.input_type(prop.type)
            if not prop.is_optional() and not prop.is_nullable():
                field_type = GraphQLNonNull(field_type)
            fields[prop.name] = GraphQLInputField(field_type)
        return fields

    # -----------------------------------------------------------------------
    # Resolver methods
    # -----------------------------------------------------------------------

    def create_return_type(self, descriptor: "TypeDescriptor") -> "GraphQLOutputType":
        descriptor = unwrap_promise(descriptor)
        output_type = self.output_type(descriptor)
        if is_nullable(descriptor):
            return output_type
        return GraphQLNonNull(output_type)

    def create_input_args(
        self, parameters: "Sequence[ParameterDescriptor]"
    ) -> dict[str, GraphQLArgument]:
        args: dict[str, GraphQLArgument] = {}
        for parameter in filter_argument_parameters(parameters, self.config):
            arg_type = self.input_type(parameter.type)
            if not parameter.optional:
                arg_type = GraphQLNonNull(arg_type)
            default_value = (
                self.engine.serialize(parameter.default, parameter.type)
                if parameter.has_default()
                else Undefined
            )
            args[parameter.name] = GraphQLArgument(arg_type, default_value=default_value)
        return args

    def generate_field_resolver(
        self, instance: "Any", field_name: str
    ) -> dict[str, "Any"]:
        """Return the ``args``/``resolve`` pair backing ``field_name`` on an object type."""
        field = self.registry.field_resolver(instance, field_name)
        method = self.registry.method_descriptor(instance, field.property)
        return {
            "args": self.create_input_args(method.parameters),
            "resolve": create_resolve_function(
                instance,
                method,
                field_name=field_name,
                engine=self.engine,
                config=self.config,
            ),
        }

    def generate_query_fields(self, instance: "Any") -> dict[str, GraphQLField]:
        registration = self.registry.registration(instance)
        return self._operation_fields(instance, registration.queries)

    def generate_mutation_fields(self, instance: "Any") -> dict[str, GraphQLField]:
        registration = self.registry.registration(instance)
        return self._operation_fields(instance, registration.mutations)

    def _operation_fields(
        self, instance: "Any", operations: "Mapping[str, OperationMeta]"
    ) -> dict[str, GraphQLField]:
        fields: dict[str, GraphQLField] = {}
        for method_name, operation in operations.items():
            method = self.registry.method_descriptor(instance, method_name)
            fields[operation.name] = GraphQLField(
                self.create_return_type(method.return_type),
                args=self.create_input_args(method.parameters),
                resolve=create_resolve_function(
                    instance,
                    method,
                    field_name=operation.name,
                    engine=self.engine,
                    config=self.config,
                ),
                description=operation.description,
                deprecation_reason=operation.deprecation_reason,
            )
        return fields
