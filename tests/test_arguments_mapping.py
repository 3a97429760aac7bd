from typing import List, Optional

import pytest

from classql import ArgumentMappingError, arg, create_schema, field, object_type


@object_type
class Search:
    @field(List[str])
    @arg('term', str)
    @arg('exact', bool, position=2, default=False)
    def search(self, term, limit=2, exact=False):
        words = ['apple', 'apricot', 'avocado', 'banana']
        hits = [w for w in words if (w == term if exact else w.startswith(term))]
        return hits[:limit]

    @field(Optional[str])
    @arg('titleLike', Optional[str], param='title_like', description='Substring filter')
    def titles(self, title_like='*'):
        return title_like

    @arg('times', int, default=2)
    @field(str)
    def echo(self, times):
        return 'x' * times

    @field(int)
    @arg('n', int)
    @staticmethod
    def double(n):
        return n * 2

    @field(int)
    @arg('n', int)
    @classmethod
    def triple(cls, n):
        return n * 3


search_schema = create_schema(Search)


@pytest.mark.asyncio
async def test_uncovered_positions_keep_callable_defaults():
    res = await search_schema.execute('query { search(term: "ap") }')
    assert res.errors is None, res.errors
    # limit is not an argument, so the method's own default applies
    assert res.data['search'] == ['apple', 'apricot']

    res = await search_schema.execute('query { search(term: "apple", exact: true) }')
    assert res.errors is None, res.errors
    assert res.data['search'] == ['apple']


@pytest.mark.asyncio
async def test_argument_name_can_differ_from_parameter():
    res = await search_schema.execute('query { a: titles b: titles(titleLike: "gql") c: titles(titleLike: null) }')
    assert res.errors is None, res.errors
    assert res.data == {'a': '*', 'b': 'gql', 'c': None}


@pytest.mark.asyncio
async def test_arg_marker_above_field_marker():
    res = await search_schema.execute('query { echo e3: echo(times: 3) }')
    assert res.errors is None, res.errors
    assert res.data == {'echo': 'xx', 'e3': 'xxx'}


@pytest.mark.asyncio
async def test_static_and_class_methods():
    res = await search_schema.execute('query { double(n: 4) triple(n: 2) }')
    assert res.errors is None, res.errors
    assert res.data == {'double': 8, 'triple': 6}


@pytest.mark.asyncio
async def test_required_argument_is_enforced_by_engine():
    res = await search_schema.execute('query { search }')
    assert res.errors
    assert 'term' in res.errors[0].message


@pytest.mark.asyncio
async def test_argument_introspection():
    q = """
    query {
      __type(name: "Search") {
        fields { name args { name description defaultValue type { kind name ofType { name } } } }
      }
    }
    """
    res = await search_schema.execute(q)
    assert res.errors is None, res.errors
    fields = {f['name']: f['args'] for f in res.data['__type']['fields']}
    assert [a['name'] for a in fields['search']] == ['term', 'exact']
    exact = fields['search'][1]
    assert exact['defaultValue'] == 'false'
    assert exact['type']['kind'] == 'NON_NULL' and exact['type']['ofType']['name'] == 'Boolean'
    (title_like,) = fields['titles']
    assert title_like['name'] == 'titleLike'
    assert title_like['description'] == 'Substring filter'
    assert title_like['type'] == {'kind': 'SCALAR', 'name': 'String', 'ofType': None}


def test_unknown_parameter_name_fails_at_build():
    @object_type
    class Bad:
        @field(int)
        @arg('missing', int)
        def f(self, present):
            return present

    with pytest.raises(ArgumentMappingError, match='missing'):
        create_schema(Bad)


def test_position_out_of_range_fails_at_build():
    @object_type
    class Bad:
        @field(int)
        @arg('a', int, position=3)
        def f(self, a):
            return a

    with pytest.raises(ArgumentMappingError, match='position 3'):
        create_schema(Bad)


def test_duplicate_position_fails_at_build():
    @object_type
    class Bad:
        @field(int)
        @arg('a', int, position=0)
        @arg('b', int, position=0)
        def f(self, a):
            return a

    with pytest.raises(ArgumentMappingError, match='more than one'):
        create_schema(Bad)


def test_variadic_parameters_cannot_be_mapped():
    @object_type
    class Bad:
        @field(int)
        @arg('rest', int, position=0)
        def f(self, *rest):
            return len(rest)

    with pytest.raises(ArgumentMappingError):
        create_schema(Bad)


def test_arguments_on_attribute_fields_fail_at_build():
    @object_type
    class Bad:
        a = arg('x', int)(field(int))

    with pytest.raises(ArgumentMappingError, match='method fields'):
        create_schema(Bad)
