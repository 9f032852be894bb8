from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any

    from .coercion import ValidationErrorItem
    from .descriptors import TypeDescriptor


class GasketError(Exception):
    """Base exception for gasket errors."""


class GasketTypeError(TypeError, GasketError):
    """Raised when a type descriptor cannot be mapped onto the GraphQL type system."""


class GasketSchemaError(GasketError):
    """Raised when resolver wiring makes it impossible to assemble a schema."""


class GasketValueError(ValueError, GasketError):
    """Raised when a runtime value does not satisfy its declared type."""


class TypeNameRequiredError(GasketTypeError):
    def __init__(self, descriptor: "TypeDescriptor") -> None:
        super().__init__(f"Type requires a name: {descriptor!r}")
        self.descriptor = descriptor


class UnsupportedKindError(GasketTypeError):
    pass


class UnsupportedBrandError(GasketTypeError):
    pass


class UnsupportedClassScalarError(GasketTypeError):
    pass


class UnsupportedUnionMemberError(GasketTypeError):
    pass


class MissingResolverRegistrationError(GasketSchemaError):
    pass


class MissingFieldError(GasketSchemaError):
    pass


class DuplicateResolverError(GasketSchemaError):
    pass


class DuplicateFieldError(GasketSchemaError):
    pass


class ArgumentValidationError(GasketValueError):
    """Aggregates the field-level failures found while validating resolver arguments."""

    def __init__(self, errors: "list[ValidationErrorItem]") -> None:
        self.errors = list(errors)
        super().__init__(
            "Validation error:\n"
            + "\n".join(f"{error.path}({error.code}): {error.message}" for error in errors)
        )


def unsupported_kind(descriptor: "TypeDescriptor") -> UnsupportedKindError:
    return UnsupportedKindError(f"Kind {descriptor.kind.value} is not supported")


def number_requires_brand() -> UnsupportedBrandError:
    return UnsupportedBrandError('Add a brand or decorator to type "number"')


def unsupported_class_scalar(class_name: str) -> UnsupportedClassScalarError:
    return UnsupportedClassScalarError(f"{class_name} is not a supported scalar type")


def union_member_must_be_object(member: "TypeDescriptor") -> UnsupportedUnionMemberError:
    return UnsupportedUnionMemberError(
        "Only classes and object literals are supported for unions, "
        f"got {member.kind.value}"
    )


def missing_resolver_registration(class_name: str) -> MissingResolverRegistrationError:
    return MissingResolverRegistrationError(
        f"Missing resolver registration for {class_name}"
    )


def missing_field(field_name: str, class_name: str) -> MissingFieldError:
    return MissingFieldError(f"Field {field_name} is missing on {class_name}")


def missing_method(method_name: str, class_name: str) -> MissingFieldError:
    return MissingFieldError(f"{class_name} has no method named '{method_name}'")


def duplicate_resolver(class_name: str) -> DuplicateResolverError:
    return DuplicateResolverError(
        f"A resolver instance for {class_name} is already registered"
    )


def duplicate_type_resolver(type_name: str) -> DuplicateResolverError:
    return DuplicateResolverError(
        f"More than one resolver supplies fields for type '{type_name}'"
    )


def duplicate_root_field(root_name: str, field_name: str) -> DuplicateFieldError:
    return DuplicateFieldError(f"{root_name}.{field_name} is defined more than once")


def schema_requires_query() -> GasketSchemaError:
    return GasketSchemaError("Schema requires at least one query field.")


def resolver_missing_annotation(
    resolver_name: str, param_name: str
) -> GasketTypeError:
    return GasketTypeError(
        f"Resolver {resolver_name} missing annotation for '{param_name}'."
    )


def unsupported_annotation(annotation: "Any") -> GasketTypeError:
    return GasketTypeError(f"Unsupported annotation: {annotation}")


def list_type_requires_parameter() -> GasketTypeError:
    return GasketTypeError("List types must be parameterized.")
