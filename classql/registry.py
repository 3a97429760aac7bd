"""Process-wide metadata registry.

Markers write here while annotated classes are being created; schema builds
only read. Lookups are keyed by class identity, so redefining a class (for
example inside a test) yields a fresh, independent entry.
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Dict, List, Optional

from .core.declarations import (
    UNSET,
    ArgumentDeclaration,
    ContextBinding,
    FieldDeclaration,
    TypeDeclaration,
    normalize_type_spec,
)

__all__ = ['MetadataRegistry', 'get_registry']

_logger = logging.getLogger("classql")


class MetadataRegistry:
    """Store of raw declarations per annotated class.

    Every ``register_*`` call is idempotent: repeating an identical call is a
    no-op, a differing call for the same class/member replaces the earlier
    entry. Members may be registered for classes that are never passed to
    ``register_type``; that is only reported when such a class is used to
    build a schema.
    """

    def __init__(self):
        self._types: Dict[Any, Dict[str, Any]] = {}
        self._fields: Dict[Any, Dict[str, FieldDeclaration]] = {}
        self._arguments: Dict[Any, Dict[str, Dict[str, ArgumentDeclaration]]] = {}
        self._bindings: Dict[Any, Dict[str, ContextBinding]] = {}

    # ---- writes ----
    def register_type(self, cls: Any, name: Optional[str] = None, description: Optional[str] = None):
        info = {'name': name or cls.__name__, 'description': description}
        prev = self._types.get(cls)
        if prev is not None and prev != info:
            _logger.debug("re-registering type %s as %s", prev['name'], info['name'])
        self._types[cls] = info
        return cls

    def register_field(self, cls: Any, field_decl: FieldDeclaration) -> None:
        slot = self._fields.setdefault(cls, {})
        prev = slot.get(field_decl.name)
        if prev is not None and prev != field_decl:
            _logger.debug("replacing field declaration %s.%s", cls.__name__, field_decl.name)
        slot[field_decl.name] = field_decl

    def register_argument(
        self,
        cls: Any,
        method_name: str,
        position: Optional[int],
        type_spec: Any,
        *,
        name: str,
        param: Optional[str] = None,
        nullable: bool = False,
        default: Any = UNSET,
        description: Optional[str] = None,
    ) -> None:
        spec, spec_nullable = normalize_type_spec(type_spec)
        decl = ArgumentDeclaration(
            name=name,
            type_spec=spec,
            position=position,
            owner=cls,
            method_name=method_name,
            param=param,
            nullable=nullable or spec_nullable,
            default=default,
            description=description,
        )
        self._arguments.setdefault(cls, {}).setdefault(method_name, {})[name] = decl

    def register_context_binding(self, cls: Any, member: str, key: Optional[str] = None) -> None:
        self._bindings.setdefault(cls, {})[member] = ContextBinding(member=member, owner=cls, key=key)

    # ---- reads ----
    def is_type(self, cls: Any) -> bool:
        try:
            return cls in self._types
        except TypeError:
            # unhashable targets are never registered
            return False

    def has_declarations(self, cls: Any) -> bool:
        try:
            return cls in self._types or cls in self._fields or cls in self._arguments or cls in self._bindings
        except TypeError:
            return False

    def get_declarations(self, cls: Any) -> Optional[TypeDeclaration]:
        """Return the raw declarations recorded for exactly ``cls``.

        Arguments are attached to their field declarations, ordered by
        position. Returns ``None`` when nothing was ever recorded for ``cls``.
        """
        if not self.has_declarations(cls):
            return None
        info = self._types.get(cls) or {}
        args_by_method = self._arguments.get(cls, {})
        fields: Dict[str, FieldDeclaration] = {}
        for fname, fdecl in self._fields.get(cls, {}).items():
            method_args = args_by_method.get(fname)
            if method_args:
                ordered = sorted(
                    method_args.values(),
                    key=lambda a: (a.position is None, a.position if a.position is not None else 0),
                )
                fdecl = replace(fdecl, arguments=tuple(ordered))
            fields[fname] = fdecl
        for method_name in args_by_method:
            if method_name not in fields:
                _logger.debug("arguments declared on %s.%s without a field marker", cls.__name__, method_name)
        description = info.get('description')
        if description is None and info:
            description = _clean_doc(getattr(cls, '__doc__', None))
        return TypeDeclaration(
            cls=cls,
            name=info.get('name') or cls.__name__,
            description=description,
            fields=MappingProxyType(fields),
            context_bindings=MappingProxyType(dict(self._bindings.get(cls, {}))),
            is_type=bool(info),
        )

    def find_type(self, name: str) -> Optional[Any]:
        """Look up a registered class by GraphQL type name."""
        matches: List[Any] = [cls for cls, info in self._types.items() if info['name'] == name]
        if not matches:
            return None
        if len(matches) > 1:
            # a redefined class supersedes earlier ones with the same name
            _logger.debug("type name %s registered %d times; using latest", name, len(matches))
        return matches[-1]

    def __contains__(self, cls: Any) -> bool:
        return self.is_type(cls)


def _clean_doc(doc: Optional[str]) -> Optional[str]:
    if not doc:
        return None
    cleaned = inspect.cleandoc(doc)
    return cleaned or None


_DEFAULT_REGISTRY = MetadataRegistry()


def get_registry() -> MetadataRegistry:
    """Return the process-wide registry the markers write into."""
    return _DEFAULT_REGISTRY
