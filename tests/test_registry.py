from typing import List, Optional

import pytest

from classql import MetadataRegistry, NotATypeError, create_schema, field, object_type
from classql.core.declarations import (
    Deferred,
    FieldDeclaration,
    ListOf,
    NamedRef,
    TypeRef,
    normalize_type_spec,
)
from classql.registry import get_registry


class Thing:
    x = 7

    def m(self, a, b):
        return f"{a}-{b}"


def _x_field():
    return FieldDeclaration(name='x', type_spec=TypeRef(int), kind='attribute', owner=Thing)


def test_repeated_registration_is_a_noop():
    reg = MetadataRegistry()
    reg.register_type(Thing)
    reg.register_type(Thing)
    reg.register_field(Thing, _x_field())
    reg.register_field(Thing, _x_field())
    reg.register_context_binding(Thing, 'session', key='db')
    reg.register_context_binding(Thing, 'session', key='db')
    decl = reg.get_declarations(Thing)
    assert decl.is_type
    assert decl.name == 'Thing'
    assert list(decl.fields) == ['x']
    assert list(decl.context_bindings) == ['session']


def test_arguments_attach_to_fields_by_position():
    reg = MetadataRegistry()
    reg.register_field(Thing, FieldDeclaration(name='m', type_spec=TypeRef(str), kind='method',
                                               owner=Thing, accessor=Thing.m))
    reg.register_argument(Thing, 'm', 1, int, name='b')
    reg.register_argument(Thing, 'm', 0, str, name='a')
    args = reg.get_declarations(Thing).fields['m'].arguments
    assert [(a.name, a.position) for a in args] == [('a', 0), ('b', 1)]
    assert args[1].type_spec == TypeRef(int)


def test_members_without_type_marker_fail_only_when_built():
    reg = MetadataRegistry()
    # registration itself never raises
    reg.register_field(Thing, _x_field())
    decl = reg.get_declarations(Thing)
    assert decl is not None and not decl.is_type
    with pytest.raises(NotATypeError):
        create_schema(Thing, registry=reg)


@pytest.mark.asyncio
async def test_explicit_registration_builds_a_schema():
    reg = MetadataRegistry()
    reg.register_field(Thing, _x_field())
    reg.register_type(Thing, name='ThingRoot', description='Registered by hand')
    schema = create_schema(Thing, registry=reg)
    assert schema.query.name == 'ThingRoot'
    assert schema.query.description == 'Registered by hand'
    res = await schema.execute('query { x }')
    assert res.errors is None, res.errors
    assert res.data == {'x': 7}


def test_lookups():
    reg = MetadataRegistry()
    assert reg.get_declarations(Thing) is None
    assert Thing not in reg
    reg.register_type(Thing, name='Renamed')
    assert Thing in reg
    assert reg.find_type('Renamed') is Thing
    assert reg.find_type('Thing') is None


def test_markers_can_target_an_explicit_registry():
    reg = MetadataRegistry()

    @object_type(registry=reg)
    class Local:
        """Local docs."""

        v = field(int, default=3, registry=reg)

    decl = reg.get_declarations(Local)
    assert decl.description == 'Local docs.'
    assert list(decl.fields) == ['v']
    assert get_registry().get_declarations(Local) is None


def test_type_spec_forms():
    def thunk():
        return Thing

    assert normalize_type_spec(int) == (TypeRef(int), False)
    assert normalize_type_spec('Thing') == (NamedRef('Thing'), False)
    assert normalize_type_spec(thunk) == (Deferred(thunk), False)
    assert normalize_type_spec([int]) == (ListOf(TypeRef(int)), False)
    assert normalize_type_spec(Optional[List[Optional[int]]]) == (ListOf(TypeRef(int), of_nullable=True), True)
    with pytest.raises(TypeError):
        normalize_type_spec([int, str])
