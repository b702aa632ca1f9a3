"""Content aggregation and federated search over the category stores."""

from .aggregator import Aggregator
from .models import Attachment, ContentItem, Page
from .normalize import Normalizer
from .query import QueryExecutor
from .registry import DEFAULT_REGISTRY, CategoryDescriptor, CategoryRegistry
from .repository import ContentRepository

__all__ = [
    "Aggregator",
    "Attachment",
    "CategoryDescriptor",
    "CategoryRegistry",
    "ContentItem",
    "ContentRepository",
    "DEFAULT_REGISTRY",
    "Normalizer",
    "Page",
    "QueryExecutor",
]
