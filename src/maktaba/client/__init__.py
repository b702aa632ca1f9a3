"""Consumer-side search with a degraded local fallback."""

from .fallback import CatalogClient, SearchResponse
from .replica import ClientSearchReplica, ReplicaSnapshot

__all__ = ["CatalogClient", "ClientSearchReplica", "ReplicaSnapshot", "SearchResponse"]
