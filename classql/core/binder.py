from __future__ import annotations

import inspect
import keyword
import logging
from collections.abc import Mapping
from typing import Annotated, Any, Callable, Dict

import strawberry

from ..errors import ArgumentMappingError, FieldResolutionError
from .context import request_context
from .declarations import UNSET, FieldDeclaration, callable_parameters
from .graph import FieldNode, TypeGraphNode, to_annotation

try:  # Provide StrawberryInfo for resolver annotations
    from strawberry.types import Info as StrawberryInfo  # type: ignore
except ImportError:  # pragma: no cover
    StrawberryInfo = strawberry.Info  # type: ignore

__all__ = ['validate_arguments', 'make_resolver']

_logger = logging.getLogger("classql")

_UNMAPPABLE = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.VAR_POSITIONAL,
    inspect.Parameter.VAR_KEYWORD,
)


def validate_arguments(fdecl: FieldDeclaration, type_name: str) -> Dict[int, str]:
    """Check argument positions against the accessor signature.

    Returns a mapping of position to parameter name. Raises
    :class:`ArgumentMappingError` for arguments on non-method fields,
    unresolved/out-of-range/duplicate positions, parameters that cannot be
    passed by keyword, and repeated argument names.
    """
    if not fdecl.arguments:
        return {}
    where = f"{type_name}.{fdecl.public_name}"
    if fdecl.kind != 'method':
        raise ArgumentMappingError(f"{where}: arguments are only supported on method fields, not {fdecl.kind} fields")
    params = callable_parameters(fdecl.accessor)
    mapping: Dict[int, str] = {}
    names = set()
    for a in fdecl.arguments:
        if a.position is None:
            raise ArgumentMappingError(
                f"{where}: argument {a.name!r} matches no parameter named {(a.param or a.name)!r}"
            )
        if a.position < 0 or a.position >= len(params):
            raise ArgumentMappingError(
                f"{where}: argument {a.name!r} has position {a.position} but the method takes {len(params)} parameter(s)"
            )
        param = params[a.position]
        if param.kind in _UNMAPPABLE:
            raise ArgumentMappingError(f"{where}: argument {a.name!r} cannot be bound to parameter {param}")
        if a.position in mapping:
            raise ArgumentMappingError(f"{where}: position {a.position} is declared by more than one argument")
        if a.name in names:
            raise ArgumentMappingError(f"{where}: argument {a.name!r} is declared twice")
        mapping[a.position] = param.name
        names.add(a.name)
    return mapping


def _read_member(instance: Any, fdecl: FieldDeclaration) -> Any:
    if isinstance(instance, Mapping):
        return instance.get(fdecl.name, fdecl.default)
    return getattr(instance, fdecl.name)


def _call_member(instance: Any, fdecl: FieldDeclaration, kwargs: Dict[str, Any]) -> Any:
    # mapping sources hold values only
    if isinstance(instance, Mapping):
        raise TypeError(
            f"method field {fdecl.name!r} needs a {fdecl.owner.__name__} instance as its source, "
            f"got {type(instance).__name__}; mapping sources support attribute and property fields only"
        )
    return getattr(instance, fdecl.name)(**kwargs)


def _make_invoker(node: TypeGraphNode, fnode: FieldNode, param_map: Dict[int, str]) -> Callable[..., Any]:
    fdecl = fnode.decl
    owner = node.cls
    type_name, field_name = node.name, fnode.name
    is_method = fdecl.kind == 'method'

    async def _invoke(source: Any, info: Any, raw_args: Dict[int, Any]) -> Any:
        try:
            with request_context(getattr(info, 'context', None)):
                # root types receive no source object
                instance = owner() if source is None else source
                if is_method:
                    kwargs = {param_map[pos]: v for pos, v in raw_args.items() if v is not UNSET}
                    result = _call_member(instance, fdecl, kwargs)
                else:
                    result = _read_member(instance, fdecl)
                if inspect.isawaitable(result):
                    result = await result
        except Exception as exc:
            _logger.debug("resolver %s.%s failed: %r", type_name, field_name, exc)
            raise FieldResolutionError(type_name, field_name, exc) from exc
        return result

    return _invoke


def _parameter_names(fnode: FieldNode) -> Dict[int, str]:
    # declared names double as resolver parameters; unusable ones become _a<position>
    taken = {'self', 'cls', 'root', 'parent', 'info', '_invoke'}
    out: Dict[int, str] = {}
    for a in fnode.arguments:
        pos = a.decl.position
        pname = a.name
        if not pname.isidentifier() or keyword.iskeyword(pname) or pname in taken or pname.startswith('_'):
            pname = f"_a{pos}"
        taken.add(pname)
        out[pos] = pname
    return out


def make_resolver(node: TypeGraphNode, fnode: FieldNode) -> Callable[..., Any]:
    """Build the strawberry resolver for one field of ``node``.

    The resolver is generated with one keyword parameter per declared argument
    so strawberry exposes them with their declared types and names. Required
    arguments come first; optional ones default to ``UNSET`` (or their
    declared default) and unset values are not forwarded.
    """
    param_map = validate_arguments(fnode.decl, node.name)
    invoke = _make_invoker(node, fnode, param_map)
    pnames = _parameter_names(fnode)
    env: Dict[str, Any] = {'_invoke': invoke}
    required, optional = [], []
    for a in fnode.arguments:
        pos = a.decl.position
        if a.decl.default is UNSET and not a.nullable:
            required.append(pnames[pos])
        else:
            env[f"_d{pos}"] = a.decl.default
            optional.append(f"{pnames[pos]}=_d{pos}")
    params = ', '.join(['self', 'info'] + required + optional)
    passed = ', '.join(f"{pos}: {pname}" for pos, pname in pnames.items())
    fname = f"_resolve_{node.name}_{fnode.decl.name}"
    src = f"async def {fname}({params}):\n"
    src += f"    return await _invoke(self, info, {{{passed}}})\n"
    exec(src, env)
    fn = env[fname]
    fn.__module__ = __name__
    anns: Dict[str, Any] = {'info': StrawberryInfo}
    for a in fnode.arguments:
        pname = pnames[a.decl.position]
        anns[pname] = Annotated[
            to_annotation(a.type, a.nullable),
            strawberry.argument(
                name=None if pname == a.name else a.name,
                description=a.decl.description,
            ),
        ]
    fn.__annotations__ = anns
    return fn
