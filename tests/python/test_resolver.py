import dataclasses
from types import SimpleNamespace
from typing import TYPE_CHECKING, Annotated

import pytest
from graphql import GraphQLError

import gasket as gk
from gasket.descriptors import (
    PARENT,
    ParameterDescriptor,
    StringType,
    UnknownType,
)
from gasket.errors import ArgumentValidationError
from gasket.reflection import method_descriptor
from gasket.resolver import (
    context_parameter_index,
    create_resolve_function,
    filter_argument_parameters,
    parent_parameter_index,
    special_parameter_indices,
)

if TYPE_CHECKING:
    from typing import Any


@dataclasses.dataclass
class Book:
    title: str
    pages: int


@dataclasses.dataclass
class Filter:
    prefix: str
    limit: int = 10


class Library:
    def __init__(self) -> None:
        self.calls: list[tuple["Any", ...]] = []

    async def describe(
        self, ctx: gk.Context[object], book: gk.Parent[Book], style: str
    ) -> str:
        self.calls.append((ctx, book, style))
        return f"{book.title} ({style})"

    def shelf(self, criteria: Filter) -> list[Book]:
        self.calls.append((criteria,))
        return [Book(f"{criteria.prefix}-{n}", n) for n in range(criteria.limit)]

    async def count(self, minimum: Annotated[int, gk.PositiveNoZero] = 1) -> int:
        self.calls.append((minimum,))
        return minimum


def _info(context: "Any" = None) -> "Any":
    return SimpleNamespace(context=context)


def _resolver(library: Library, name: str, **kwargs: "Any") -> "Any":
    method = method_descriptor(getattr(library, name), name=name)
    return create_resolve_function(library, method, **kwargs)


def test_special_parameters_are_found_by_role() -> None:
    """Locates parent and context by their markers, not their position."""
    parameters = method_descriptor(Library().describe).parameters

    assert special_parameter_indices(parameters) == (1, 0)
    assert parent_parameter_index(parameters) == 1
    assert context_parameter_index(parameters) == 0
    assert [p.name for p in filter_argument_parameters(parameters)] == ["style"]


def test_unknown_parameters_are_plain_arguments_by_default() -> None:
    """Does not treat untyped parameters as special unless configured to."""
    parameters = (
        ParameterDescriptor("first", UnknownType()),
        ParameterDescriptor("second", UnknownType()),
        ParameterDescriptor("query", StringType()),
    )

    assert special_parameter_indices(parameters) == (-1, -1)
    assert len(filter_argument_parameters(parameters)) == 3

    config = gk.CompilerConfig(infer_special_from_unknown=True)
    assert special_parameter_indices(parameters, config) == (0, 1)
    assert [p.name for p in filter_argument_parameters(parameters, config)] == [
        "query"
    ]


def test_explicit_role_beats_unknown_inference() -> None:
    """Keeps the marked parent even when an earlier parameter is untyped."""
    parameters = (
        ParameterDescriptor("ctx", UnknownType()),
        ParameterDescriptor("parent", UnknownType(annotations=frozenset({PARENT}))),
    )
    config = gk.CompilerConfig(infer_special_from_unknown=True)

    assert special_parameter_indices(parameters, config) == (1, 0)


@pytest.mark.anyio
async def test_parent_and_context_are_injected_at_declared_positions() -> None:
    """Calls the method with context, parent and argument in declaration order."""
    library = Library()
    resolve = _resolver(library, "describe")

    parent = Book("Dune", 412)

    result = await resolve(parent, _info("request"), style="short")

    assert result == "Dune (short)"
    assert library.calls == [("request", parent, "short")]
    assert library.calls[0][1] is parent
    assert resolve.__name__ == "describe"


@pytest.mark.anyio
async def test_arguments_are_deserialized_and_results_serialized() -> None:
    """Builds dataclass arguments and returns wire-shaped results."""
    library = Library()
    resolve = _resolver(library, "shelf")

    result = await resolve(None, _info(), criteria={"prefix": "sf", "limit": 2})

    assert library.calls == [(Filter("sf", 2),)]
    assert result == [{"title": "sf-0", "pages": 0}, {"title": "sf-1", "pages": 1}]


@pytest.mark.anyio
async def test_invalid_arguments_never_reach_the_method() -> None:
    """Raises a located GraphQL error that carries every validation failure."""
    library = Library()
    resolve = _resolver(library, "shelf", field_name="books")

    with pytest.raises(GraphQLError) as exc_info:
        await resolve(None, _info(), criteria={"limit": "many"})

    error = exc_info.value
    assert error.path == ["books"]
    assert error.message.startswith("Validation error:")
    assert isinstance(error.original_error, ArgumentValidationError)
    assert [(item.path, item.code) for item in error.original_error.errors] == [
        ("criteria.prefix", "required"),
        ("criteria.limit", "type"),
    ]
    assert library.calls == []


@pytest.mark.anyio
async def test_missing_argument_falls_back_to_default() -> None:
    """Passes the declared default when the argument was not supplied."""
    library = Library()
    resolve = _resolver(library, "count")

    assert await resolve(None, _info()) == 1
    assert await resolve(None, _info(), minimum=5) == 5


@pytest.mark.anyio
async def test_sign_decorators_are_enforced() -> None:
    """Rejects values outside the declared sign constraint."""
    resolve = _resolver(Library(), "count")

    with pytest.raises(GraphQLError) as exc_info:
        await resolve(None, _info(), minimum=0)

    assert exc_info.value.original_error.errors[0].code == "PositiveNoZero"
