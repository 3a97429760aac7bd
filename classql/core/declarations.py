from __future__ import annotations

import functools
import inspect
import types
from dataclasses import dataclass, field as dc_field
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union, get_args, get_origin

import strawberry

__all__ = [
    'UNSET',
    'TypeRef',
    'ListOf',
    'Deferred',
    'NamedRef',
    'TypeSpec',
    'normalize_type_spec',
    'callable_parameters',
    'accessor_kind',
    'FieldDeclaration',
    'ArgumentDeclaration',
    'ContextBinding',
    'TypeDeclaration',
]

UNSET = getattr(strawberry, 'UNSET')

# --- Type specifiers -----------------------------------------------------------------

@dataclass(frozen=True)
class TypeRef:
    """A concrete target: a scalar, a strawberry enum/input, or an annotated class."""

    target: Any


@dataclass(frozen=True)
class ListOf:
    """Array-of-type wrapper around another specifier."""

    of: 'TypeSpec'
    of_nullable: bool = False


@dataclass(frozen=True)
class Deferred:
    """Zero-argument callable producing the real specifier when first needed."""

    thunk: Callable[[], Any]


@dataclass(frozen=True)
class NamedRef:
    """Reference to a registered type by its GraphQL name."""

    name: str


TypeSpec = Union[TypeRef, ListOf, Deferred, NamedRef]

_SPEC_CLASSES = (TypeRef, ListOf, Deferred, NamedRef)


def _is_union(origin: Any) -> bool:
    return origin is Union or (hasattr(types, 'UnionType') and origin is getattr(types, 'UnionType'))


def normalize_type_spec(spec: Any) -> Tuple[TypeSpec, bool]:
    """Turn a user-facing type specifier into ``(TypeSpec, nullable)``.

    Accepted forms::

        int, strawberry.ID, SomeEnum      -> TypeRef
        Item                              -> TypeRef (annotated class)
        [Item], List[Item], list[Item]    -> ListOf
        lambda: Item                      -> Deferred
        'Item'                            -> NamedRef
        Optional[X]                       -> X, nullable=True
    """
    nullable = False
    if _is_union(get_origin(spec)):
        members = get_args(spec)
        non_none = [m for m in members if m is not type(None)]
        if len(non_none) != 1 or len(members) != 2:
            raise TypeError(f"Union type specifiers are not supported: {spec!r}")
        spec = non_none[0]
        nullable = True
    return _to_spec(spec), nullable


def _to_spec(spec: Any) -> TypeSpec:
    if isinstance(spec, _SPEC_CLASSES):
        return spec
    if isinstance(spec, (list, tuple)):
        if len(spec) != 1:
            raise TypeError(f"List type specifiers take exactly one element, got {spec!r}")
        inner, inner_nullable = normalize_type_spec(spec[0])
        return ListOf(inner, inner_nullable)
    if get_origin(spec) in (list, List):
        (item,) = get_args(spec) or (Any,)
        inner, inner_nullable = normalize_type_spec(item)
        return ListOf(inner, inner_nullable)
    if isinstance(spec, str):
        return NamedRef(spec)
    if inspect.isfunction(spec) or inspect.ismethod(spec) or isinstance(spec, functools.partial):
        return Deferred(spec)
    return TypeRef(spec)


# --- Accessors -----------------------------------------------------------------------

def accessor_kind(accessor: Any) -> str:
    if accessor is None:
        return 'attribute'
    if isinstance(accessor, property):
        return 'property'
    return 'method'


def callable_parameters(accessor: Any) -> List[inspect.Parameter]:
    """Parameters of a method accessor, excluding the bound ``self``/``cls``."""
    fn = accessor
    bound = True
    if isinstance(accessor, staticmethod):
        fn = accessor.__func__
        bound = False
    elif isinstance(accessor, classmethod):
        fn = accessor.__func__
    params = list(inspect.signature(fn).parameters.values())
    if bound and params:
        return params[1:]
    return params


# --- Declarations --------------------------------------------------------------------

@dataclass(frozen=True)
class ArgumentDeclaration:
    """One resolver argument bound to a method parameter by position.

    ``position`` indexes the method's parameters without ``self``; it is
    ``None`` when the parameter named by the marker could not be found, which
    is reported at build time.
    """

    name: str
    type_spec: TypeSpec
    position: Optional[int]
    owner: Any
    method_name: str
    param: Optional[str] = None
    nullable: bool = False
    default: Any = UNSET
    description: Optional[str] = None


@dataclass(frozen=True)
class FieldDeclaration:
    """One exposed member of an annotated class.

    Attributes:
        name: Attribute name on the declaring class.
        type_spec: Normalized return type specifier.
        kind: ``attribute``, ``property`` or ``method``.
        owner: Declaring class.
        accessor: The property or function object (``None`` for attributes).
        graphql_name: Field name in the schema; defaults to ``name``.
        arguments: Declared arguments ordered by position.
    """

    name: str
    type_spec: TypeSpec
    kind: str
    owner: Any
    accessor: Any = None
    graphql_name: Optional[str] = None
    nullable: bool = False
    description: Optional[str] = None
    deprecation_reason: Optional[str] = None
    default: Any = None
    arguments: Tuple[ArgumentDeclaration, ...] = ()

    @property
    def public_name(self) -> str:
        return self.graphql_name or self.name


@dataclass(frozen=True)
class ContextBinding:
    member: str
    owner: Any
    key: Optional[str] = None


@dataclass(frozen=True)
class TypeDeclaration:
    """Raw declarations recorded for exactly one class (no inheritance)."""

    cls: Any
    name: str
    description: Optional[str] = None
    fields: Mapping[str, FieldDeclaration] = dc_field(default_factory=dict)
    context_bindings: Mapping[str, ContextBinding] = dc_field(default_factory=dict)
    is_type: bool = False
