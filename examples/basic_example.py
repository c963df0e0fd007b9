"""
Basic example of deriving a GraphQL schema with annoql.

This example demonstrates:
- Declaring fields, properties and methods on plain classes
- Registering root query fields with single and list cardinality
- Serving root fields through definition-level resolvers and a factory
- Running queries with graphql-core (sync and async)
"""

import asyncio
import logging
from datetime import datetime
from typing import Annotated, List, Optional

import graphql
from graphql import GraphQLResolveInfo

import annoql
from annoql import Cardinality, SchemaBuilder, StrawberryConfig


# In-memory data
AUTHORS = {}
POSTS = []


def fetch_authors(source, info, id=None):
    if isinstance(info.return_type, graphql.GraphQLList):
        return list(AUTHORS.values())
    return AUTHORS.get(id)


def fetch_posts(source, info):
    return POSTS


@annoql.root("author")
@annoql.root("authors", cardinality=Cardinality.LIST)
@annoql.type(resolver=fetch_authors)
@annoql.table
class Author:
    """A person writing posts."""

    id: annoql.ID = annoql.field()
    name: str = annoql.field()
    joined_at: datetime = annoql.field(default_factory=datetime.now)

    def __init__(self, id, name):
        self.id = id
        self.name = name

    @annoql.field(description="Posts written by this author")
    def posts(
        self,
        limit: Annotated[Optional[int], annoql.arg(description="Maximum number of posts")] = None,
    ) -> List["Post"]:
        mine = [p for p in POSTS if p.author_id == self.id]
        return mine[:limit] if limit is not None else mine


@annoql.root("posts", cardinality=Cardinality.LIST)
@annoql.type(resolver=fetch_posts)
@annoql.table
class Post:
    id: annoql.ID = annoql.field()
    title: str = annoql.field()
    content: Optional[str] = annoql.field(default=None)
    author_id: annoql.ID = annoql.field()

    def __init__(self, id, title, author_id, content=None):
        self.id = id
        self.title = title
        self.author_id = author_id
        self.content = content

    @property
    @annoql.field
    def author(self) -> Optional[Author]:
        return AUTHORS.get(self.author_id)

    @annoql.field(deprecation_reason="Use title")
    def get_headline(self) -> str:
        return self.title.upper()

    @annoql.field
    async def summary(self, info: GraphQLResolveInfo, words: int = 3) -> str:
        await asyncio.sleep(0)
        return " ".join((self.content or self.title).split()[:words])


class LookupArgumentsFactory:
    """Adds an ``id`` argument to single-object roots.

    Fetching stays with the definition-level resolvers and, for nested
    fields, with the members themselves.
    """

    def get_data_fetcher(self, definition, return_type):
        return None

    def get_supported_arguments(self, definition, return_type):
        if definition is Author and not isinstance(return_type, graphql.GraphQLList):
            return {"id": graphql.GraphQLArgument(graphql.GraphQLNonNull(graphql.GraphQLID))}
        return []


def load_data():
    for author in (Author("1", "Alice"), Author("2", "Bob")):
        AUTHORS[author.id] = author
    POSTS.extend([
        Post("1", "Hello world", "1", "My very first post on this blog"),
        Post("2", "Second thoughts", "1"),
        Post("3", "Bob's corner", "2", "Bob writes about gardening"),
    ])


async def main():
    logging.basicConfig(level=logging.INFO)
    load_data()

    builder = SchemaBuilder(
        config=StrawberryConfig(auto_camel_case=True),
        data_fetcher_factory=LookupArgumentsFactory(),
    )
    schema = builder.build_schema(annoql.find_tables(__name__))
    print(graphql.print_schema(schema))

    query = """
    query {
        author(id: "1") {
            name
            posts(limit: 1) { title headline summary(words: 2) }
        }
        posts { id author { name } }
    }
    """

    result = await graphql.graphql(schema, query)

    if result.errors:
        print("Errors:", result.errors)
    else:
        print("Result:", result.data)


if __name__ == "__main__":
    asyncio.run(main())
