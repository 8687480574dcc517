"""
Name to collector mapping assembled at startup.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .base_collector import BaseCollector
from .constants import ERROR_MESSAGES
from .exceptions import UnknownCollectorError

logger = logging.getLogger(__name__)


class Registry:
    """
    Collectors keyed by name, enumerated in registration order.

    Populated once at process start; read-only afterwards.
    """

    def __init__(self, collectors: Optional[Iterable[BaseCollector]] = None):
        self._collectors: Dict[str, BaseCollector] = {}
        for collector in collectors or []:
            self.register(collector.name, collector)

    def register(self, name: str, collector: BaseCollector) -> None:
        if name in self._collectors:
            raise ValueError(ERROR_MESSAGES["duplicate_collector"].format(name=name))
        self._collectors[name] = collector

    def get(self, name: str) -> BaseCollector:
        try:
            return self._collectors[name]
        except KeyError:
            raise UnknownCollectorError(name) from None

    def get_collectors(self) -> Dict[str, BaseCollector]:
        return dict(self._collectors)

    def names(self) -> List[str]:
        return list(self._collectors)

    def select(self, names: Optional[Iterable[str]] = None) -> Dict[str, BaseCollector]:
        """
        Filter collectors by name, keeping registration order.

        Args:
            names: Requested collector names; None or empty selects all

        Returns:
            Ordered mapping of the selected collectors
        """
        if not names:
            return self.get_collectors()

        requested = set()
        for name in names:
            name = name.strip()
            if not name:
                continue
            if name not in self._collectors:
                logger.warning(ERROR_MESSAGES["unknown_category"].format(name=name))
                continue
            requested.add(name)

        return {
            name: collector
            for name, collector in self._collectors.items()
            if name in requested
        }

    def __contains__(self, name: object) -> bool:
        return name in self._collectors

    def __len__(self) -> int:
        return len(self._collectors)

    def __iter__(self) -> Iterator[str]:
        return iter(self._collectors)
