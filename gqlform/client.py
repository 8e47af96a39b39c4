"""Contract of the external GraphQL client.

gqlform does not do transport or caching itself. A client adapter exposes a
query primitive and a mutation primitive, and the runtime calls them.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Optional

from graphql.language.ast import DocumentNode
from typing_extensions import Protocol, runtime_checkable


@dataclass(frozen=True)
class QueryResult:
    """One resolution of a query.

    Attributes:
        data: Response data, keyed by selection key
        loading: Whether the client is still loading
        error: Error reported by the client, if any
    """
    data: Optional[Dict[str, Any]] = None
    loading: bool = False
    error: Optional[Any] = None


class MutationExecutor(Protocol):
    """Callable that runs one mutation document."""

    def __call__(
        self,
        *,
        variables: Dict[str, Any],
        update: Any = None,
        **options: Any,
    ) -> Awaitable[Any]:
        ...


@runtime_checkable
class GraphQLClient(Protocol):
    """Query and mutation execution primitives the runtime depends on."""

    async def query(
        self,
        document: DocumentNode,
        *,
        variables: Optional[Dict[str, Any]] = None,
        fetch_policy: str = "network-only",
        skip: bool = False,
    ) -> QueryResult:
        ...

    def mutation(self, document: DocumentNode) -> MutationExecutor:
        ...


__all__ = [
    "QueryResult",
    "MutationExecutor",
    "GraphQLClient",
]
