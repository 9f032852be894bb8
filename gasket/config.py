import dataclasses


@dataclasses.dataclass(frozen=True, slots=True)
class CompilerConfig:
    """Options that shape how resolvers and root types are compiled."""

    # Treat an ``unknown``-typed parameter as the parent/context slot when no
    # parameter carries an explicit role marker.
    infer_special_from_unknown: bool = False
    query_type_name: str = "Query"
    mutation_type_name: str = "Mutation"
