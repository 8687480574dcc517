"""Shared fakes for collector, resolver and orchestrator tests."""

import threading
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from inventory.base_collector import BaseCollector
from inventory.context import RunContext
from inventory.resource import Resource, raw_column, standard_columns


class FakePaginator:
    """Stands in for a botocore paginator; records the parameters of each call."""

    def __init__(self, pages: List[Dict[str, Any]]):
        self.pages = pages
        self.calls: List[Dict[str, Any]] = []

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        return iter(list(self.pages))


def make_client(pages: Optional[Dict[str, List[Dict[str, Any]]]] = None, **methods) -> MagicMock:
    """
    Build a fake boto3 client.

    ``pages`` maps paginated operation names to their pages. Keyword
    arguments configure plain API methods: a dict becomes the return value,
    an exception or callable becomes the side effect.
    """
    client = MagicMock()
    paginators = {operation: FakePaginator(p) for operation, p in (pages or {}).items()}

    def get_paginator(operation):
        if operation not in paginators:
            paginators[operation] = FakePaginator([{}])
        return paginators[operation]

    client.get_paginator.side_effect = get_paginator
    client.paginators = paginators
    for method, behaviour in methods.items():
        mock = getattr(client, method)
        if isinstance(behaviour, dict):
            mock.return_value = behaviour
        else:
            mock.side_effect = behaviour
    return client


def client_error(code: str, message: str = "failure", operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class StaticCollector(BaseCollector):
    """
    Collector returning canned results per region.

    A region mapped to an exception raises it; a region mapped to a callable
    is invoked with the pair context.
    """

    def __init__(self, name: str, results: Dict[str, Any], sort: bool = True, depth: int = 1):
        super().__init__()
        self._name = name
        self.results = results
        self.sort = sort
        self.depth = depth
        self.calls: List[str] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def should_sort(self) -> bool:
        return self.sort

    def get_columns(self):
        return standard_columns(depth=self.depth) + [raw_column("Detail")]

    def collect(self, ctx, region: str) -> List[Resource]:
        with self._lock:
            self.calls.append(region)
        result = self.results.get(region, [])
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            return result(ctx)
        return list(result)


@pytest.fixture
def run_ctx():
    return RunContext()


@pytest.fixture
def pair_ctx(run_ctx):
    return run_ctx.for_pair("test", "us-east-1")
