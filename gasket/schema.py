from builtins import type as pytype
from typing import TYPE_CHECKING

from graphql import GraphQLObjectType, GraphQLSchema, graphql, print_schema

from .compiler import TypeCompiler
from .config import CompilerConfig
from .errors import duplicate_root_field, schema_requires_query
from .logger import log
from .registry import ResolverRegistry

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from typing import Any

    from graphql import ExecutionResult, GraphQLField

    from .coercion import Engine
    from .registry import ResolverRegistration


class Schema:
    """A GraphQL schema assembled from registered resolver instances.

    Every instance contributes its queries to the ``Query`` root and its
    mutations to the ``Mutation`` root. Object types reachable from those
    fields are compiled on the way, picking up field resolvers from whichever
    instance registered for their type name.
    """

    def __init__(
        self,
        *,
        resolvers: "Iterable[Any]",
        registrations: "Mapping[pytype, ResolverRegistration] | None" = None,
        config: CompilerConfig | None = None,
        engine: "Engine | None" = None,
    ) -> None:
        self.config = config if config is not None else CompilerConfig()
        self.registry = ResolverRegistry(resolvers, registrations)
        self.compiler = TypeCompiler(self.registry, engine=engine, config=self.config)

        query_fields = self._root_fields(
            self.config.query_type_name, self.compiler.generate_query_fields
        )
        mutation_fields = self._root_fields(
            self.config.mutation_type_name, self.compiler.generate_mutation_fields
        )
        if not query_fields:
            raise schema_requires_query()

        query = GraphQLObjectType(self.config.query_type_name, query_fields)
        mutation = (
            GraphQLObjectType(self.config.mutation_type_name, mutation_fields)
            if mutation_fields
            else None
        )
        self.compiler.resolve_deferred()
        self.graphql_schema = GraphQLSchema(query=query, mutation=mutation)
        log.info(
            "Built schema with %d query and %d mutation fields",
            len(query_fields),
            len(mutation_fields),
        )

    def _root_fields(
        self,
        root_name: str,
        generate: "Callable[[Any], dict[str, GraphQLField]]",
    ) -> dict[str, "GraphQLField"]:
        fields: dict[str, GraphQLField] = {}
        for instance in self.registry:
            for name, field in generate(instance).items():
                if name in fields:
                    raise duplicate_root_field(root_name, name)
                fields[name] = field
        return fields

    async def execute(
        self,
        query: str,
        variables: dict[str, "Any"] | None = None,
        root: "Any | None" = None,
        context: "Any | None" = None,
    ) -> "ExecutionResult":
        return await graphql(
            self.graphql_schema,
            query,
            root_value=root,
            context_value=context,
            variable_values=variables,
        )

    def sdl(self) -> str:
        return print_schema(self.graphql_schema)

    def __repr__(self) -> str:
        return f"Schema(resolvers={[pytype(item).__name__ for item in self.registry]})"
