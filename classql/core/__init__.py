# Core subpackage for classql: declarations, markers and the build pipeline.
from .declarations import (
    UNSET, TypeRef, ListOf, Deferred, NamedRef, TypeSpec, normalize_type_spec,
    FieldDeclaration, ArgumentDeclaration, ContextBinding, TypeDeclaration,
)
from .markers import object_type, field, arg, ctx, FieldMarker, ContextMarker
from .inheritance import resolve_fields, resolve_context_bindings
from .graph import TypeGraphBuilder, TypeGraphNode, FieldNode, ArgumentNode, ListType, ScalarType
from .context import request_context, current_context
from .binder import make_resolver, validate_arguments

__all__ = [
    'UNSET', 'TypeRef', 'ListOf', 'Deferred', 'NamedRef', 'TypeSpec', 'normalize_type_spec',
    'FieldDeclaration', 'ArgumentDeclaration', 'ContextBinding', 'TypeDeclaration',
    'object_type', 'field', 'arg', 'ctx', 'FieldMarker', 'ContextMarker',
    'resolve_fields', 'resolve_context_bindings',
    'TypeGraphBuilder', 'TypeGraphNode', 'FieldNode', 'ArgumentNode', 'ListType', 'ScalarType',
    'request_context', 'current_context',
    'make_resolver', 'validate_arguments',
]
