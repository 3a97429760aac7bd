from __future__ import annotations

from typing import Any, Dict, List

from .declarations import ContextBinding, FieldDeclaration, TypeDeclaration

__all__ = ['annotated_chain', 'resolve_fields', 'resolve_context_bindings']


def annotated_chain(cls: Any, registry) -> List[TypeDeclaration]:
    """Declarations along ``cls``'s MRO, most-derived first.

    The walk stops at the first class that was never registered as a type;
    ``cls`` itself is always included.
    """
    chain: List[TypeDeclaration] = []
    for klass in getattr(cls, '__mro__', (cls,)):
        if klass is not cls and not registry.is_type(klass):
            break
        decl = registry.get_declarations(klass)
        if decl is not None:
            chain.append(decl)
    return chain


def resolve_fields(cls: Any, registry) -> Dict[str, FieldDeclaration]:
    """Effective fields of ``cls`` after merging its annotated ancestors.

    A field re-declared by a subclass replaces the ancestor's declaration
    wholesale (type, arguments and accessor kind). Ancestor fields come first
    in the returned mapping.
    """
    merged: Dict[str, FieldDeclaration] = {}
    for decl in reversed(annotated_chain(cls, registry)):
        for name, fdecl in decl.fields.items():
            merged[name] = fdecl
    return merged


def resolve_context_bindings(cls: Any, registry) -> Dict[str, ContextBinding]:
    merged: Dict[str, ContextBinding] = {}
    for decl in reversed(annotated_chain(cls, registry)):
        merged.update(decl.context_bindings)
    return merged
