"""Type graph construction.

Turns the effective declarations of annotated classes into a graph of
:class:`TypeGraphNode` objects. Nodes are memoized by class identity for the
lifetime of one :class:`TypeGraphBuilder`, and a node is cached before its
fields are resolved, so self-referencing and mutually referencing types
terminate and share node instances. Deferred references are invoked lazily,
once per thunk, the first time traversal reaches them.
"""
from __future__ import annotations

import datetime
import decimal
import logging
import uuid
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..errors import NotATypeError, SchemaBuildError, UnknownTypeError
from .declarations import (
    ArgumentDeclaration,
    ContextBinding,
    Deferred,
    FieldDeclaration,
    ListOf,
    NamedRef,
    TypeRef,
    normalize_type_spec,
)
from .inheritance import resolve_context_bindings, resolve_fields

__all__ = [
    'ScalarType',
    'ListType',
    'GraphType',
    'ArgumentNode',
    'FieldNode',
    'TypeGraphNode',
    'TypeGraphBuilder',
    'is_scalar_target',
    'to_annotation',
]

_logger = logging.getLogger("classql")

_BUILTIN_SCALARS = (
    str, int, float, bool,
    datetime.datetime, datetime.date, datetime.time,
    decimal.Decimal, uuid.UUID,
)

_STRAWBERRY_MARKS = ('__strawberry_definition__', '_type_definition', '_enum_definition', '_scalar_definition')


def is_scalar_target(target: Any) -> bool:
    """True for targets handed to strawberry as-is rather than built as nodes.

    Covers Python builtin scalars, strawberry scalars/enums/types, and
    ``NewType`` scalars such as ``strawberry.ID``. Anything else, including
    ``None`` and plain values, is not a type.
    """
    if any(target is s for s in _BUILTIN_SCALARS):
        return True
    for attr in _STRAWBERRY_MARKS:
        if getattr(target, attr, None) is not None:
            return True
    return getattr(target, '__supertype__', None) is not None


@dataclass(frozen=True)
class ScalarType:
    target: Any


@dataclass(frozen=True)
class ListType:
    of: 'GraphType'
    of_nullable: bool = False


GraphType = Union['TypeGraphNode', ListType, ScalarType]


@dataclass(eq=False)
class ArgumentNode:
    decl: ArgumentDeclaration
    type: GraphType
    nullable: bool

    @property
    def name(self) -> str:
        return self.decl.name


@dataclass(eq=False)
class FieldNode:
    decl: FieldDeclaration
    type: GraphType
    nullable: bool
    arguments: Tuple[ArgumentNode, ...] = ()

    @property
    def name(self) -> str:
        return self.decl.public_name


class TypeGraphNode:
    """Built output type for one annotated class.

    ``runtime_cls`` is the strawberry class emitted for the node by the schema
    assembler; it stays ``None`` until emission.
    """

    def __init__(self, cls: Any, name: str, description: Optional[str] = None,
                 context_bindings: Optional[Mapping[str, ContextBinding]] = None):
        self.cls = cls
        self.name = name
        self.description = description
        self.context_bindings: Mapping[str, ContextBinding] = MappingProxyType(dict(context_bindings or {}))
        self.fields: Mapping[str, FieldNode] = {}
        self.runtime_cls: Any = None

    def add_field(self, fnode: FieldNode) -> None:
        if not isinstance(self.fields, dict):
            raise RuntimeError(f"type {self.name} is already built")
        if fnode.name in self.fields:
            raise SchemaBuildError(
                f"{self.name}.{fnode.name} is declared twice "
                f"(attributes {self.fields[fnode.name].decl.name!r} and {fnode.decl.name!r})"
            )
        self.fields[fnode.name] = fnode

    def freeze(self) -> None:
        if isinstance(self.fields, dict):
            self.fields = MappingProxyType(self.fields)

    def __repr__(self):
        return f"<TypeGraphNode {self.name} fields={list(self.fields)}>"


def to_annotation(gtype: GraphType, nullable: bool = False) -> Any:
    """Python annotation strawberry understands for a resolved graph type."""
    if isinstance(gtype, TypeGraphNode):
        if gtype.runtime_cls is None:
            raise RuntimeError(f"type {gtype.name} has no runtime class yet")
        base: Any = gtype.runtime_cls
    elif isinstance(gtype, ListType):
        base = List[to_annotation(gtype.of, gtype.of_nullable)]  # type: ignore[misc]
    else:
        base = gtype.target
    return Optional[base] if nullable else base


class TypeGraphBuilder:
    """Builds memoized type graph nodes from the metadata registry.

    One builder backs exactly one schema build; its caches are never shared.
    """

    def __init__(self, registry):
        self._registry = registry
        self._nodes: Dict[Any, TypeGraphNode] = {}
        self._by_name: Dict[str, TypeGraphNode] = {}
        self._thunks: Dict[Any, Tuple[Any, bool]] = {}

    @property
    def nodes(self) -> Mapping[str, TypeGraphNode]:
        """Built nodes by GraphQL name, in build order."""
        return MappingProxyType(dict(self._by_name))

    def build(self, cls: Any, *, where: Optional[str] = None, root: bool = False) -> TypeGraphNode:
        node = self._nodes.get(cls)
        if node is not None:
            return node
        decl = self._registry.get_declarations(cls)
        if decl is None or not decl.is_type:
            if root:
                raise NotATypeError(cls, detail="used as a schema root")
            if decl is not None:
                raise NotATypeError(cls, detail=f"referenced from {where}" if where else None)
            raise UnknownTypeError(cls, where)
        other = self._by_name.get(decl.name)
        if other is not None:
            raise SchemaBuildError(
                f"type name {decl.name!r} is used by both {other.cls.__qualname__} and {cls.__qualname__}"
            )
        node = TypeGraphNode(
            cls=cls,
            name=decl.name,
            description=decl.description,
            context_bindings=resolve_context_bindings(cls, self._registry),
        )
        # cache first so cycles land on this node
        self._nodes[cls] = node
        self._by_name[decl.name] = node
        _logger.debug("building type %s", decl.name)
        for fdecl in resolve_fields(cls, self._registry).values():
            loc = f"{decl.name}.{fdecl.public_name}"
            ftype, spec_nullable = self.resolve(fdecl.type_spec, where=loc)
            args = tuple(self._build_argument(a, loc) for a in fdecl.arguments)
            node.add_field(FieldNode(decl=fdecl, type=ftype, nullable=fdecl.nullable or spec_nullable, arguments=args))
        if not node.fields:
            raise SchemaBuildError(f"type {decl.name} declares no fields")
        return node

    def _build_argument(self, adecl: ArgumentDeclaration, loc: str) -> ArgumentNode:
        where = f"{loc}({adecl.name})"
        atype, spec_nullable = self.resolve(adecl.type_spec, where=where, output=False)
        return ArgumentNode(decl=adecl, type=atype, nullable=adecl.nullable or spec_nullable)

    def resolve(self, spec: Any, *, where: str, output: bool = True) -> Tuple[GraphType, bool]:
        """Resolve a type specifier to ``(graph type, nullable)``."""
        if isinstance(spec, ListOf):
            inner, _ = self.resolve(spec.of, where=where, output=output)
            return ListType(inner, spec.of_nullable), False
        if isinstance(spec, Deferred):
            resolved, nullable = self._invoke_thunk(spec.thunk, where)
            gtype, inner_nullable = self.resolve(resolved, where=where, output=output)
            return gtype, nullable or inner_nullable
        if isinstance(spec, NamedRef):
            target = self._registry.find_type(spec.name)
            if target is None:
                raise UnknownTypeError(spec.name, where)
            return self._resolve_target(target, where, output), False
        if isinstance(spec, TypeRef):
            return self._resolve_target(spec.target, where, output), False
        raise UnknownTypeError(spec, where)

    def _invoke_thunk(self, thunk: Any, where: str) -> Tuple[Any, bool]:
        cached = self._thunks.get(thunk)
        if cached is not None:
            return cached
        try:
            produced = thunk()
        except (NameError, AttributeError, ImportError) as exc:
            raise UnknownTypeError(thunk, where) from exc
        result = normalize_type_spec(produced)
        self._thunks[thunk] = result
        return result

    def _resolve_target(self, target: Any, where: str, output: bool) -> GraphType:
        if self._registry.is_type(target) or self._registry.has_declarations(target):
            if not output:
                raise SchemaBuildError(
                    f"{where}: output type {getattr(target, '__qualname__', target)} cannot be used as an argument type"
                )
            return self.build(target, where=where)
        if is_scalar_target(target):
            return ScalarType(target)
        raise UnknownTypeError(target, where)

    def finish(self) -> None:
        for node in self._by_name.values():
            node.freeze()
