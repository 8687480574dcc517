import logging
from abc import ABC, abstractmethod
from typing import List

from .context import PairContext
from .resource import Column, Resource


class BaseCollector(ABC):
    """Base class for resource-type collectors."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable machine identifier used for registry lookup and CLI selection."""

    def should_sort(self) -> bool:
        """
        Whether the orchestrator may reorder this collector's output.

        Collectors that encode parent/child structure through insertion order
        must return False.
        """
        return True

    @abstractmethod
    def get_columns(self) -> List[Column]:
        """Return the static column definitions for this collector."""

    @abstractmethod
    def collect(self, ctx: PairContext, region: str) -> List[Resource]:
        """
        Enumerate this resource type in one region.

        Args:
            ctx: Pair context; check it before every blocking call
            region: Region to collect from

        Returns:
            List of collected resources

        Raises:
            Exception: Any pair-fatal error (missing client, failed primary call)
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
