"""
Provider independent core of the resource inventory.
"""

from .base_collector import BaseCollector
from .context import BestEffort, PairContext, PairWarning, RunContext
from .exceptions import (
    CollectionCancelled,
    CollectionError,
    ConfigurationError,
    InventoryError,
    NoClientForRegionError,
    UnknownCollectorError,
)
from .name_resolver import NameResolver
from .orchestrator import CollectorResult, Orchestrator, PairError, RunResult
from .registry import Registry
from .resource import Column, Resource, new_resource, standard_columns

__version__ = "1.0.0"

__all__ = [
    "BaseCollector",
    "BestEffort",
    "CollectionCancelled",
    "CollectionError",
    "CollectorResult",
    "Column",
    "ConfigurationError",
    "InventoryError",
    "NameResolver",
    "NoClientForRegionError",
    "Orchestrator",
    "PairContext",
    "PairError",
    "PairWarning",
    "Registry",
    "Resource",
    "RunContext",
    "RunResult",
    "UnknownCollectorError",
    "new_resource",
    "standard_columns",
]
