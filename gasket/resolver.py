import inspect
from typing import TYPE_CHECKING

from graphql import GraphQLError

from .coercion import Coercer
from .config import CompilerConfig
from .descriptors import (
    CONTEXT,
    PARENT,
    PropertySignature,
    UnknownType,
    object_literal,
    unwrap_promise,
)
from .errors import ArgumentValidationError
from .logger import log

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine, Sequence
    from typing import Any

    from graphql import GraphQLResolveInfo

    from .coercion import Engine
    from .descriptors import (
        MethodDescriptor,
        ObjectLiteralType,
        ParameterDescriptor,
    )

_DEFAULT_CONFIG = CompilerConfig()


def _role_index(
    parameters: "Sequence[ParameterDescriptor]",
    role: str,
    config: CompilerConfig,
    *,
    skip: int = -1,
) -> int:
    for index, parameter in enumerate(parameters):
        if parameter.has_role(role):
            return index
    if not config.infer_special_from_unknown:
        return -1
    # Compatibility shim for descriptor producers that drop role markers.
    for index, parameter in enumerate(parameters):
        if index == skip or parameter.type.annotations:
            continue
        if isinstance(parameter.type, UnknownType):
            return index
    return -1


def special_parameter_indices(
    parameters: "Sequence[ParameterDescriptor]",
    config: CompilerConfig = _DEFAULT_CONFIG,
) -> tuple[int, int]:
    """Return the ``(parent, context)`` positions within ``parameters``, ``-1`` when absent."""
    parent_index = _role_index(parameters, PARENT, config)
    context_index = _role_index(parameters, CONTEXT, config, skip=parent_index)
    return parent_index, context_index


def parent_parameter_index(
    parameters: "Sequence[ParameterDescriptor]",
    config: CompilerConfig = _DEFAULT_CONFIG,
) -> int:
    return special_parameter_indices(parameters, config)[0]


def context_parameter_index(
    parameters: "Sequence[ParameterDescriptor]",
    config: CompilerConfig = _DEFAULT_CONFIG,
) -> int:
    return special_parameter_indices(parameters, config)[1]


def filter_argument_parameters(
    parameters: "Sequence[ParameterDescriptor]",
    config: CompilerConfig = _DEFAULT_CONFIG,
) -> list["ParameterDescriptor"]:
    """Drop the parent and context parameters, leaving the GraphQL arguments."""
    parent_index, context_index = special_parameter_indices(parameters, config)
    special = [
        parameters[index] for index in (parent_index, context_index) if index != -1
    ]
    return [
        parameter
        for parameter in parameters
        if not any(parameter is item for item in special)
    ]


def arguments_type(
    parameters: "Sequence[ParameterDescriptor]",
) -> "ObjectLiteralType":
    """Synthesize the object literal that incoming field arguments are validated against."""
    return object_literal(
        PropertySignature(
            parameter.name,
            parameter.type,
            optional=parameter.optional,
            default=parameter.default,
        )
        for parameter in parameters
    )


def create_resolve_function(
    instance: "Any",
    method: "MethodDescriptor",
    *,
    field_name: str | None = None,
    engine: "Engine | None" = None,
    config: CompilerConfig = _DEFAULT_CONFIG,
) -> "Callable[..., Coroutine[Any, Any, Any]]":
    """Bind ``method`` on ``instance`` to graphql-core's ``(parent, info, **args)`` shape.

    Arguments are validated and deserialized before the call, the parent object
    and ``info.context`` are placed at the positions their parameters were
    declared at, and the awaited result is serialized against the declared
    return type.
    """
    engine = engine if engine is not None else Coercer()
    exposed_name = field_name or method.name
    bound = getattr(instance, method.name)
    parameters = method.parameters
    parent_index, context_index = special_parameter_indices(parameters, config)
    argument_parameters = filter_argument_parameters(parameters, config)
    args_type = arguments_type(argument_parameters)
    return_type = unwrap_promise(method.return_type)

    async def resolve(
        parent: "Any", info: "GraphQLResolveInfo", **args: "Any"
    ) -> "Any":
        errors = engine.validate(args, args_type)
        if errors:
            original_error = ArgumentValidationError(errors)
            log.debug("Rejected arguments for %s: %s", exposed_name, original_error)
            raise GraphQLError(
                str(original_error),
                path=[exposed_name],
                original_error=original_error,
            )

        values = iter(
            [
                _argument_value(engine, args, parameter)
                for parameter in argument_parameters
            ]
        )
        call_args: list["Any"] = []
        for index in range(len(parameters)):
            if index == parent_index:
                call_args.append(parent)
            elif index == context_index:
                call_args.append(info.context)
            else:
                call_args.append(next(values))

        result = bound(*call_args)
        if inspect.isawaitable(result):
            result = await result
        return engine.serialize(result, return_type)

    resolve.__name__ = method.name
    resolve.__qualname__ = f"{type(instance).__qualname__}.{method.name}"
    return resolve


def _argument_value(
    engine: "Engine", args: dict[str, "Any"], parameter: "ParameterDescriptor"
) -> "Any":
    if parameter.name in args:
        return engine.deserialize(args[parameter.name], parameter.type)
    if parameter.has_default():
        return parameter.default
    return None
