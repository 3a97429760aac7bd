"""Test configuration and fixtures for classql."""

import pytest

from tests.schema import Item, ItemStore


@pytest.fixture
def store():
    """A small item tree: root -> (alpha -> gamma, beta)."""
    s = ItemStore()
    root = s.add(Item('1', 'root'))
    alpha = s.add(Item('2', 'alpha', parent=root))
    s.add(Item('3', 'beta', parent=root))
    s.add(Item('4', 'gamma', parent=alpha))
    return s


@pytest.fixture
def context(store):
    return {'store': store}
