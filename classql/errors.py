"""Exception taxonomy for classql.

Build-time errors derive from :class:`SchemaBuildError` and abort
``create_schema`` before any schema is returned. :class:`FieldResolutionError`
is raised at request time from a single field's resolver and is attached by
the execution engine to that field's response path.
"""
from __future__ import annotations

from typing import Any, Optional

__all__ = [
    'ClassQLError',
    'SchemaBuildError',
    'NotATypeError',
    'UnknownTypeError',
    'ArgumentMappingError',
    'FieldResolutionError',
]


class ClassQLError(Exception):
    """Base class for every classql error."""


class SchemaBuildError(ClassQLError):
    """The declarations cannot be turned into a consistent schema."""


class NotATypeError(SchemaBuildError):
    """A class is used as a type but was never passed to ``object_type``."""

    def __init__(self, cls: Any, detail: Optional[str] = None):
        self.cls = cls
        name = getattr(cls, '__qualname__', None) or repr(cls)
        msg = f"{name} is not an object type; decorate it with @object_type"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class UnknownTypeError(SchemaBuildError):
    """A type reference does not resolve to a scalar or a registered type."""

    def __init__(self, reference: Any, where: Optional[str] = None):
        self.reference = reference
        self.where = where
        msg = f"Unknown type reference {reference!r}"
        if where:
            msg = f"{msg} in {where}"
        super().__init__(msg)


class ArgumentMappingError(SchemaBuildError):
    """An argument marker does not match a parameter of its callable."""


class FieldResolutionError(ClassQLError):
    """Wraps a failure raised by user code while resolving one field.

    Attributes:
        type_name: GraphQL name of the type owning the field.
        field_name: GraphQL name of the failing field.
        original: The exception raised by the user callable.
    """

    def __init__(self, type_name: str, field_name: str, original: BaseException):
        self.type_name = type_name
        self.field_name = field_name
        self.original = original
        super().__init__(f"{type_name}.{field_name}: {original}")
