"""classql: GraphQL schemas from annotated Python classes.

Public API:
- object_type, field, arg, ctx (annotation markers)
- create_schema, Schema
- MetadataRegistry, get_registry
- ClassQLError, SchemaBuildError, NotATypeError, UnknownTypeError,
  ArgumentMappingError, FieldResolutionError
"""
from .core.markers import object_type, field, arg, ctx
from .errors import (
    ClassQLError,
    SchemaBuildError,
    NotATypeError,
    UnknownTypeError,
    ArgumentMappingError,
    FieldResolutionError,
)
from .registry import MetadataRegistry, get_registry
from .schema import Schema, create_schema

__all__ = [
    'object_type', 'field', 'arg', 'ctx',
    'create_schema', 'Schema',
    'MetadataRegistry', 'get_registry',
    'ClassQLError', 'SchemaBuildError', 'NotATypeError', 'UnknownTypeError',
    'ArgumentMappingError', 'FieldResolutionError',
]
