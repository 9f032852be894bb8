"""Shared fixtures and collection guards for the gasket test suite."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterator
from typing import Any

import pytest

import gasket
from gasket.reflection import clear_cache


@pytest.fixture(autouse=True)
def fresh_descriptors() -> Iterator[None]:
    """Drops descriptors cached by a test so classes never leak between tests."""
    yield
    clear_cache()


@pytest.fixture
def run_operation() -> Callable[
    [gasket.Schema, str, dict[str, Any] | None, Any], Awaitable[Any]
]:
    """Provides an async helper for executing schema operations."""

    async def _run(
        schema: gasket.Schema,
        query: str,
        variables: dict[str, Any] | None = None,
        context: Any = None,
    ) -> Any:
        return await schema.execute(query, variables=variables, context=context)

    return _run


@pytest.fixture
def compiler() -> gasket.TypeCompiler:
    """Provides a fresh compiler with empty type caches and no resolvers."""
    return gasket.TypeCompiler()


@pytest.fixture
def make_schema() -> Callable[..., gasket.Schema]:
    """Builds a schema from resolver instances paired with their registrations."""

    def _make(
        *pairs: tuple[Any, gasket.ResolverRegistration],
        config: gasket.CompilerConfig | None = None,
    ) -> gasket.Schema:
        return gasket.Schema(
            resolvers=[instance for instance, _ in pairs],
            registrations={type(instance): reg for instance, reg in pairs},
            config=config,
        )

    return _make


@pytest.fixture
def assert_success() -> Callable[[Any, dict[str, Any]], None]:
    """Provides a shared assertion helper for successful operation results."""

    def _assert(result: Any, expected_data: dict[str, Any]) -> None:
        assert result.errors is None
        assert result.data == expected_data

    return _assert


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Fails collection when any test function omits a docstring."""
    del config

    missing_docstrings: set[str] = set()
    for item in items:
        if not item.name.startswith("test_"):
            continue
        obj = getattr(item, "obj", None)
        if obj is None:
            continue
        if inspect.getdoc(obj) is None:
            missing_docstrings.add(item.nodeid)

    if missing_docstrings:
        missing_lines = "\n".join(
            f"- {nodeid}" for nodeid in sorted(missing_docstrings)
        )
        raise pytest.UsageError(
            "Every collected test function must include a docstring.\n"
            f"Missing docstrings:\n{missing_lines}"
        )
