import dataclasses
from builtins import type as pytype
from typing import TYPE_CHECKING

from .errors import (
    duplicate_resolver,
    duplicate_type_resolver,
    missing_field,
    missing_method,
    missing_resolver_registration,
)
from .reflection import method_descriptor

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from typing import Any

    from .descriptors import MethodDescriptor


@dataclasses.dataclass(frozen=True, slots=True)
class OperationMeta:
    """How a query or mutation method is exposed on the root type."""

    name: str
    description: str | None = None
    deprecation_reason: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class FieldResolverMeta:
    """Backs the object field ``name`` with the resolver method ``property``."""

    name: str
    property: str


@dataclasses.dataclass(frozen=True, slots=True)
class ResolverRegistration:
    type_name: str | None = None
    queries: "Mapping[str, OperationMeta]" = dataclasses.field(default_factory=dict)
    mutations: "Mapping[str, OperationMeta]" = dataclasses.field(default_factory=dict)
    resolve_fields: "Mapping[str, FieldResolverMeta]" = dataclasses.field(
        default_factory=dict
    )
    methods: "Mapping[str, MethodDescriptor]" = dataclasses.field(default_factory=dict)


class ResolverRegistry:
    """Live resolver instances, keyed by their class, plus their registrations.

    A class maps to at most one instance. Registrations with a ``type_name`` make
    their instance the supplier of extra field resolvers for that object type.
    """

    def __init__(
        self,
        instances: "Iterable[Any]" = (),
        registrations: "Mapping[pytype, ResolverRegistration] | None" = None,
    ) -> None:
        self._instances: dict[pytype, "Any"] = {}
        self._registrations: dict[pytype, ResolverRegistration] = {}
        self._type_resolvers: dict[str, pytype] = {}
        for cls, registration in (registrations or {}).items():
            self.add_registration(cls, registration)
        for instance in instances:
            self.register(instance)

    def add_registration(self, cls: pytype, registration: ResolverRegistration) -> None:
        type_name = registration.type_name
        if type_name is not None:
            owner = self._type_resolvers.get(type_name)
            if owner is not None and owner is not cls:
                raise duplicate_type_resolver(type_name)
            self._type_resolvers[type_name] = cls
        self._registrations[cls] = registration

    def register(
        self, instance: "Any", registration: ResolverRegistration | None = None
    ) -> None:
        cls = pytype(instance)
        if cls in self._instances:
            raise duplicate_resolver(cls.__name__)
        if registration is not None:
            self.add_registration(cls, registration)
        self._instances[cls] = instance

    def get(self, cls: pytype) -> "Any | None":
        return self._instances.get(cls)

    def __contains__(self, cls: object) -> bool:
        return cls in self._instances

    def __iter__(self) -> "Iterator[Any]":
        return iter(self._instances.values())

    def __len__(self) -> int:
        return len(self._instances)

    def registration(self, instance: "Any") -> ResolverRegistration:
        cls = pytype(instance)
        registration = self._registrations.get(cls)
        if registration is None:
            raise missing_resolver_registration(cls.__name__)
        return registration

    def for_type(self, type_name: str) -> "Any | None":
        """Return the instance supplying field resolvers for ``type_name``, if any."""
        cls = self._type_resolvers.get(type_name)
        if cls is None:
            return None
        return self._instances.get(cls)

    def has_field_resolver(self, instance: "Any", field_name: str) -> bool:
        registration = self.registration(instance)
        return any(
            field.name == field_name for field in registration.resolve_fields.values()
        )

    def field_resolver(self, instance: "Any", field_name: str) -> FieldResolverMeta:
        registration = self.registration(instance)
        for field in registration.resolve_fields.values():
            if field.name == field_name:
                return field
        raise missing_field(field_name, pytype(instance).__name__)

    def method_descriptor(self, instance: "Any", method_name: str) -> "MethodDescriptor":
        registration = self.registration(instance)
        explicit = registration.methods.get(method_name)
        if explicit is not None:
            return explicit
        method = getattr(instance, method_name, None)
        if method is None or not callable(method):
            raise missing_method(method_name, pytype(instance).__name__)
        return method_descriptor(method, name=method_name)
