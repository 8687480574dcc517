"""
Exception hierarchy for resource inventory runs.
"""

from typing import Dict, Tuple


class InventoryError(Exception):
    """Base class for all inventory errors."""


class ConfigurationError(InventoryError):
    """Raised when a collector or run is missing required configuration."""


class NoClientForRegionError(ConfigurationError):
    """Raised when a collector has no initialized client for a region."""

    def __init__(self, service: str, region: str):
        super().__init__(f"no {service} client found for region: {region}")
        self.service = service
        self.region = region


class UnknownCollectorError(InventoryError, KeyError):
    """Raised when a collector name is not registered."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown collector: {self.name}"


class CollectionCancelled(InventoryError):
    """Raised inside a work item once the run has been cancelled."""


class CollectionError(InventoryError):
    """
    Aggregated per-pair failures of a collection run.

    The message stays static; inspect ``details`` for the (collector, region)
    pairs that failed.
    """

    def __init__(self, details: Dict[Tuple[str, str], BaseException]):
        super().__init__("failed to collect one or more categories")
        self.details = details
