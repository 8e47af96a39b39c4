"""Shared fixtures: an in-memory GraphQL client."""

import pytest

from gqlform.client import QueryResult
from gqlform.documents import selection_field_name


class FakeClient:
    """Records calls and answers from canned responses.

    Mutation responses and failures are keyed by the mutation's top-level
    field name.
    """

    def __init__(self):
        self.query_result = QueryResult()
        self.query_error = None
        self.responses = {}
        self.failures = {}
        self.before_execute = None
        self.query_calls = []
        self.mutation_calls = []
        self.mutation_documents = []

    async def query(self, document, *, variables=None, fetch_policy="network-only", skip=False):
        self.query_calls.append({
            "document": document,
            "variables": variables,
            "fetch_policy": fetch_policy,
            "skip": skip,
        })
        if self.query_error is not None:
            raise self.query_error
        return self.query_result

    def mutation(self, document):
        self.mutation_documents.append(document)
        name = selection_field_name(document)

        async def execute(*, variables, update=None, **options):
            self.mutation_calls.append({
                "name": name,
                "variables": variables,
                "update": update,
                "options": options,
            })
            if self.before_execute is not None:
                self.before_execute(name)
            if name in self.failures:
                raise self.failures[name]
            return self.responses.get(name, {"data": {name: {"ok": True}}})

        return execute


@pytest.fixture
def client():
    return FakeClient()
