import pytest

from tests.schema import Item, ItemStore, Query, schema


@pytest.mark.asyncio
async def test_item_with_inherited_and_self_referencing_fields(context):
    q = """
    query { item(id: "2") { id name label parent { id name } children { id name } } }
    """
    res = await schema.execute(q, context_value=context)
    assert res.errors is None, res.errors
    item = res.data['item']
    assert item['id'] == '2'
    assert item['label'] == 'alpha#2'
    assert item['parent'] == {'id': '1', 'name': 'root'}
    assert item['children'] == [{'id': '4', 'name': 'gamma'}]


@pytest.mark.asyncio
async def test_missing_item_is_null(context):
    res = await schema.execute('query { item(id: "404") { id } }', context_value=context)
    assert res.errors is None, res.errors
    assert res.data['item'] is None


@pytest.mark.asyncio
async def test_async_method_results_are_awaited(context):
    q = """
    query { item(id: "4") { depth parent { depth } } }
    """
    res = await schema.execute(q, context_value=context)
    assert res.errors is None, res.errors
    assert res.data['item'] == {'depth': 2, 'parent': {'depth': 1}}


@pytest.mark.asyncio
async def test_nested_arguments(context):
    q = """
    query { item(id: "1") { all: children { id } one: children(first: 1) { id } } }
    """
    res = await schema.execute(q, context_value=context)
    assert res.errors is None, res.errors
    assert [c['id'] for c in res.data['item']['all']] == ['2', '3']
    assert [c['id'] for c in res.data['item']['one']] == ['2']


@pytest.mark.asyncio
async def test_omitted_arguments_use_declared_and_method_defaults(context):
    res = await schema.execute('query { items { id } }', context_value=context)
    assert res.errors is None, res.errors
    assert len(res.data['items']) == 4

    res = await schema.execute('query { items(first: 2, name_like: "a") { name } }', context_value=context)
    assert res.errors is None, res.errors
    assert [i['name'] for i in res.data['items']] == ['alpha', 'beta']


@pytest.mark.asyncio
async def test_variables_are_mapped_onto_parameters(context):
    q = """
    query Find($n: String) { items(name_like: $n) { name } }
    """
    res = await schema.execute(q, variable_values={'n': 'gam'}, context_value=context)
    assert res.errors is None, res.errors
    assert res.data['items'] == [{'name': 'gamma'}]


@pytest.mark.asyncio
async def test_mutation_root(context, store):
    m = """
    mutation { rename(id: "3", name: "bravo") { id name parent { id } } }
    """
    res = await schema.execute(m, context_value=context)
    assert res.errors is None, res.errors
    assert res.data['rename'] == {'id': '3', 'name': 'bravo', 'parent': {'id': '1'}}
    assert store.items['3'].name == 'bravo'


@pytest.mark.asyncio
async def test_explicit_root_value_is_used(store):
    pinned = ItemStore()
    pinned.add(Item('1', 'pinned'))
    root = Query()
    assert root.store is None
    # an assigned member shadows the request context for that instance
    root.store = pinned
    res = await schema.execute('query { item(id: "1") { name } }', root_value=root, context_value={'store': store})
    assert res.errors is None, res.errors
    assert res.data['item'] == {'name': 'pinned'}


@pytest.mark.asyncio
async def test_request_context_is_not_stored_on_instances(store):
    root = Query()
    res = await schema.execute('query { item(id: "1") { name } }', root_value=root, context_value={'store': store})
    assert res.errors is None, res.errors
    assert res.data['item'] == {'name': 'root'}
    assert 'store' not in vars(root)
    assert root.store is None
