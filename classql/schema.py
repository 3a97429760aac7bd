"""Schema assembly: annotated classes in, executable schema out.

``create_schema`` drives the type graph builder over the root classes,
binds a resolver to every reachable field and emits strawberry runtime
classes for the graph. Runtime classes are created fresh on every call, so
independent schemas never share type objects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import strawberry
from strawberry.schema.config import StrawberryConfig

from .core.binder import make_resolver
from .core.graph import TypeGraphBuilder, TypeGraphNode, to_annotation
from .registry import MetadataRegistry, get_registry

__all__ = ['Schema', 'create_schema']

_logger = logging.getLogger("classql")


@dataclass(frozen=True)
class Schema:
    """A finished schema: the type graph plus the strawberry schema built from it.

    Attributes:
        query: Root query node.
        mutation: Root mutation node, when one was given.
        types: Every reachable node by GraphQL name.
        strawberry_schema: The schema handed to the execution engine.
    """

    query: TypeGraphNode
    mutation: Optional[TypeGraphNode]
    types: Mapping[str, TypeGraphNode]
    strawberry_schema: strawberry.Schema

    def get_type(self, name: str) -> Optional[TypeGraphNode]:
        return self.types.get(name)

    async def execute(self, query: str, variable_values: Optional[Dict[str, Any]] = None,
                      context_value: Any = None, root_value: Any = None,
                      operation_name: Optional[str] = None):
        """Execute a GraphQL document; see ``strawberry.Schema.execute``."""
        return await self.strawberry_schema.execute(
            query,
            variable_values=variable_values,
            context_value=context_value,
            root_value=root_value,
            operation_name=operation_name,
        )

    def as_str(self) -> str:
        """Schema definition language for the whole schema."""
        return self.strawberry_schema.as_str()

    def __str__(self) -> str:
        return self.as_str()


def _emit_runtime_types(nodes: Mapping[str, TypeGraphNode]) -> None:
    # Two-pass: create plain classes first so annotations can reference any node
    for name, node in nodes.items():
        cls = type(name, (), {'__doc__': node.description or f'classql runtime type {name}'})
        cls.__module__ = __name__
        node.runtime_cls = cls
    # Second pass: annotations and resolvers, then decorate
    for name, node in nodes.items():
        st_cls = node.runtime_cls
        annotations: Dict[str, Any] = {}
        for fnode in node.fields.values():
            fdecl = fnode.decl
            annotations[fdecl.name] = to_annotation(fnode.type, fnode.nullable)
            kwargs: Dict[str, Any] = {'resolver': make_resolver(node, fnode)}
            if fdecl.graphql_name:
                kwargs['name'] = fdecl.graphql_name
            if fdecl.description:
                kwargs['description'] = fdecl.description
            if fdecl.deprecation_reason:
                kwargs['deprecation_reason'] = fdecl.deprecation_reason
            setattr(st_cls, fdecl.name, strawberry.field(**kwargs))
        st_cls.__annotations__ = annotations
    for name, node in nodes.items():
        if node.description:
            node.runtime_cls = strawberry.type(node.runtime_cls, name=name, description=node.description)
        else:
            node.runtime_cls = strawberry.type(node.runtime_cls, name=name)


def create_schema(query: Any, mutation: Any = None, *, config: Optional[StrawberryConfig] = None,
                  registry: Optional[MetadataRegistry] = None) -> Schema:
    """Build a schema rooted at annotated ``query`` (and optional ``mutation``) classes.

    Args:
        query: Class decorated with ``@object_type`` exposing the root query fields.
        mutation: Optional class decorated with ``@object_type`` exposing mutations.
        config: Strawberry configuration. Defaults to keeping Python names
            unchanged (``auto_camel_case=False``).
        registry: Metadata registry to read; defaults to the process-wide one.

    Raises:
        NotATypeError, UnknownTypeError, ArgumentMappingError, SchemaBuildError:
            The declarations are inconsistent; no schema is returned.
    """
    registry = registry or get_registry()
    builder = TypeGraphBuilder(registry)
    query_node = builder.build(query, root=True)
    mutation_node = builder.build(mutation, root=True) if mutation is not None else None
    builder.finish()
    nodes = builder.nodes
    _logger.debug("built type graph with %d type(s): %s", len(nodes), ', '.join(nodes))
    _emit_runtime_types(nodes)
    if config is None:
        config = StrawberryConfig(auto_camel_case=False)
    st_schema = strawberry.Schema(
        query=query_node.runtime_cls,
        mutation=mutation_node.runtime_cls if mutation_node is not None else None,
        types=[n.runtime_cls for n in nodes.values()],
        config=config,
    )
    return Schema(
        query=query_node,
        mutation=mutation_node,
        types=MappingProxyType(dict(nodes)),
        strawberry_schema=st_schema,
    )
