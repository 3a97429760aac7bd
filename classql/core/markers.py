from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Type, TypeVar, overload

from .context import bound_value
from .declarations import UNSET, FieldDeclaration, accessor_kind, callable_parameters, normalize_type_spec

__all__ = ['object_type', 'field', 'arg', 'ctx', 'FieldMarker', 'ContextMarker', 'ArgSpec']

T = TypeVar('T')

_PENDING_ARGS = '__classql_args__'


def _registry(explicit: Any = None):
    if explicit is not None:
        return explicit
    from ..registry import get_registry
    return get_registry()


@overload
def object_type(cls: Type[T]) -> Type[T]: ...


@overload
def object_type(cls: None = None, *, name: Optional[str] = None, description: Optional[str] = None,
                registry: Any = None) -> Callable[[Type[T]], Type[T]]: ...


def object_type(cls=None, *, name=None, description=None, registry=None):
    """Mark a class as a GraphQL output type.

    Usable bare or with options::

        @object_type
        class Item: ...

        @object_type(name='Article', description='A published article')
        class Post: ...

    ``description`` defaults to the class docstring.
    """
    def deco(c):
        return _registry(registry).register_type(c, name=name, description=description)
    return deco(cls) if cls is not None else deco


@dataclass(frozen=True)
class ArgSpec:
    """Pending argument marker captured before the owning class exists."""

    name: str
    type_spec: Any
    param: Optional[str] = None
    position: Optional[int] = None
    nullable: bool = False
    default: Any = UNSET
    description: Optional[str] = None


class FieldMarker:
    """Descriptor placed on annotated classes to declare fields.

    Created by :func:`field`. Registration with the metadata registry happens
    in ``__set_name__``, i.e. when the owning class is created. Afterwards the
    marker keeps behaving like the member it wraps: attribute values live in
    the instance ``__dict__``, properties are read through their getter, and
    methods are returned bound.
    """

    def __init__(self, type_spec: Any, *, name: Optional[str] = None, nullable: bool = False,
                 description: Optional[str] = None, deprecation_reason: Optional[str] = None,
                 default: Any = None, registry: Any = None):
        self.type_spec = type_spec
        self.graphql_name = name
        self.nullable = nullable
        self.description = description
        self.deprecation_reason = deprecation_reason
        self.default = default
        self.registry = registry
        self.accessor: Any = None
        self.arguments: List[ArgSpec] = []
        self.name: str | None = None
        self.owner: Any = None

    def __call__(self, accessor: Any) -> 'FieldMarker':
        if self.accessor is not None:
            raise TypeError(f"field marker already wraps {self.accessor!r}")
        if isinstance(accessor, FieldMarker):
            raise TypeError("field markers cannot be stacked")
        pending = getattr(accessor, _PENDING_ARGS, None)
        if pending is None and isinstance(accessor, (staticmethod, classmethod)):
            pending = getattr(accessor.__func__, _PENDING_ARGS, None)
        if pending:
            # decorators apply bottom-up; restore source order
            self.arguments.extend(reversed(pending))
        self.accessor = accessor
        if self.description is None and accessor_kind(accessor) != 'attribute':
            doc = getattr(accessor, '__doc__', None)
            if doc:
                self.description = inspect.cleandoc(doc)
        return self

    def __set_name__(self, owner, name):
        self.name = name
        self.owner = owner
        spec, spec_nullable = normalize_type_spec(self.type_spec)
        kind = accessor_kind(self.accessor)
        reg = _registry(self.registry)
        reg.register_field(owner, FieldDeclaration(
            name=name,
            type_spec=spec,
            kind=kind,
            owner=owner,
            accessor=self.accessor,
            graphql_name=self.graphql_name,
            nullable=self.nullable or spec_nullable,
            description=self.description,
            deprecation_reason=self.deprecation_reason,
            default=self.default,
        ))
        param_names = self._parameter_names() if kind == 'method' else []
        for a in self.arguments:
            position = a.position
            if position is None:
                target = a.param or a.name
                position = param_names.index(target) if target in param_names else None
            reg.register_argument(
                owner, name, position, a.type_spec,
                name=a.name, param=a.param, nullable=a.nullable,
                default=a.default, description=a.description,
            )

    def _parameter_names(self) -> List[str]:
        try:
            return [p.name for p in callable_parameters(self.accessor)]
        except (TypeError, ValueError):
            return []

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        if self.accessor is None:
            return instance.__dict__.get(self.name, self.default)
        return self.accessor.__get__(instance, owner if owner is not None else type(instance))

    def __set__(self, instance, value):
        if isinstance(self.accessor, property):
            self.accessor.__set__(instance, value)
            return
        instance.__dict__[self.name] = value

    def __repr__(self):
        return f"<field {self.name!r} kind={accessor_kind(self.accessor)}>"


def field(type_spec: Any, *, name: Optional[str] = None, nullable: bool = False,
          description: Optional[str] = None, deprecation_reason: Optional[str] = None,
          default: Any = None, registry: Any = None) -> FieldMarker:
    """Declare a GraphQL field on an annotated class.

    ``type_spec`` may be a scalar (``int``, ``str``, ``strawberry.ID``...), an
    annotated class, a deferred reference (``lambda: Item``), a type name
    (``'Item'``) or a single-element list for list fields (``[Item]``).
    ``Optional[...]`` makes the field nullable, as does ``nullable=True``.

    Three placements are supported::

        @object_type
        class Item:
            id = field(strawberry.ID)              # plain attribute

            @field(str)                            # property getter
            @property
            def label(self): ...

            @field([lambda: Item])                 # method, may be async
            @arg('first', int, default=10)
            async def children(self, first): ...

    Args:
        name: GraphQL field name; defaults to the attribute name.
        description: Field description; defaults to the accessor docstring.
        deprecation_reason: Marks the field deprecated in the schema.
        default: Value returned for attribute fields never assigned on the
            instance.
    """
    return FieldMarker(type_spec, name=name, nullable=nullable, description=description,
                       deprecation_reason=deprecation_reason, default=default, registry=registry)


def arg(name: str, type_spec: Any, *, param: Optional[str] = None, position: Optional[int] = None,
        nullable: bool = False, default: Any = UNSET, description: Optional[str] = None):
    """Declare one argument of a method field.

    The argument is bound to a method parameter by position. The position is
    taken from ``position`` when given, otherwise from the index of the
    parameter called ``param`` (or ``name``) in the method signature, not
    counting ``self``. Apply one marker per parameter, below or above
    :func:`field`::

        @field([Item])
        @arg('first', int, default=10)
        @arg('titleLike', Optional[str], param='title_like')
        def items(self, first, title_like=None): ...

    Arguments omitted from a query are not passed, so the method's own
    parameter defaults apply.
    """
    spec = ArgSpec(name=name, type_spec=type_spec, param=param, position=position,
                   nullable=nullable, default=default, description=description)

    def deco(target):
        if isinstance(target, FieldMarker):
            # applied above the field marker: source order is already top-down
            target.arguments.insert(0, spec)
            return target
        fn = target.__func__ if isinstance(target, (staticmethod, classmethod)) else target
        setattr(fn, _PENDING_ARGS, tuple(getattr(fn, _PENDING_ARGS, ())) + (spec,))
        return target
    return deco


class ContextMarker:
    """Descriptor marking an instance member as populated from request context.

    Reads resolve against the request context of the resolver currently
    running (see :func:`classql.core.context.request_context`); outside a
    request the member reads as ``None``. Nothing is stored on the instance,
    so one object may serve concurrent requests. Assigning the member on an
    instance shadows the binding for that instance.
    """

    def __init__(self, key: Optional[str] = None, registry: Any = None):
        self.key = key
        self.registry = registry
        self.name: str | None = None

    def __set_name__(self, owner, name):
        self.name = name
        _registry(self.registry).register_context_binding(owner, name, key=self.key)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return bound_value(self.key)


def ctx(key: Optional[str] = None, *, registry: Any = None) -> ContextMarker:
    """Bind an instance member to the per-request context.

    Without ``key`` the member reads the whole context object; with ``key`` it
    reads the entry ``context[key]`` (or attribute ``context.key``)::

        @object_type
        class Query:
            session = ctx('db_session')
    """
    return ContextMarker(key, registry=registry)
