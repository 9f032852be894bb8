from .coercion import Coercer, ValidationErrorItem
from .compiler import TypeCompiler
from .config import CompilerConfig
from .errors import (
    ArgumentValidationError,
    GasketError,
    GasketSchemaError,
    GasketTypeError,
    GasketValueError,
)
from .logger import configure_logging
from .reflection import (
    ID,
    Context,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Name,
    Negative,
    NegativeNoZero,
    Parent,
    Positive,
    PositiveNoZero,
    UInt8,
    UInt16,
    UInt32,
    method_descriptor,
    type_descriptor,
)
from .registry import (
    FieldResolverMeta,
    OperationMeta,
    ResolverRegistration,
    ResolverRegistry,
)
from .schema import Schema

__all__ = [
    "Schema",
    "TypeCompiler",
    "CompilerConfig",
    "ResolverRegistry",
    "ResolverRegistration",
    "OperationMeta",
    "FieldResolverMeta",
    "Coercer",
    "ValidationErrorItem",
    "type_descriptor",
    "method_descriptor",
    "ID",
    "Name",
    "Parent",
    "Context",
    "Int8",
    "Int16",
    "Int32",
    "UInt8",
    "UInt16",
    "UInt32",
    "Float32",
    "Float64",
    "Positive",
    "PositiveNoZero",
    "Negative",
    "NegativeNoZero",
    "configure_logging",
    "ArgumentValidationError",
    "GasketError",
    "GasketSchemaError",
    "GasketTypeError",
    "GasketValueError",
]
