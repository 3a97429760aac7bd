"""
Basic example of exposing plain Python classes as a GraphQL API with classql.

This example demonstrates:
- Declaring object types, fields and arguments with markers
- Self-referencing fields through deferred references
- Reading per-request context through context-bound members
- Executing queries and mutations against the built schema
"""

import asyncio
from typing import Dict, Optional

import strawberry

from classql import arg, create_schema, ctx, field, object_type


class Library:
    def __init__(self):
        self.books: Dict[int, 'Book'] = {}

    def add(self, book: 'Book') -> 'Book':
        self.books[book.id] = book
        return book


@object_type
class Book:
    """A book on the shelf"""

    id = field(strawberry.ID)
    title = field(str)
    sequel = field(lambda: Book, nullable=True)

    def __init__(self, id: int, title: str, sequel: Optional['Book'] = None):
        self.id = id
        self.title = title
        self.sequel = sequel

    @field(int)
    def title_length(self):
        """Number of characters in the title"""
        return len(self.title)


@object_type
class Query:
    library = ctx('library')

    @field([Book])
    @arg('title_like', Optional[str], description='Case-insensitive substring match')
    @arg('limit', int, default=10)
    async def books(self, title_like=None, limit=10):
        found = [
            b for b in self.library.books.values()
            if title_like is None or title_like.lower() in b.title.lower()
        ]
        return found[:limit]


@object_type
class Mutation:
    library = ctx('library')

    @field(Book)
    @arg('title', str)
    def add_book(self, title):
        return self.library.add(Book(len(self.library.books) + 1, title))


schema = create_schema(Query, Mutation)


async def main():
    library = Library()
    first = library.add(Book(1, 'The Hobbit'))
    library.add(Book(2, 'The Fellowship of the Ring'))
    first.sequel = library.books[2]
    context = {'library': library}

    print(schema)

    res = await schema.execute(
        'query { books(title_like: "hobbit") { id title title_length sequel { title } } }',
        context_value=context,
    )
    print(res.data)

    res = await schema.execute(
        'mutation Add($t: String!) { add_book(title: $t) { id title } }',
        variable_values={'t': 'The Two Towers'},
        context_value=context,
    )
    print(res.data)

    print([b.title for b in library.books.values()])


if __name__ == "__main__":
    asyncio.run(main())
