from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

from inventory.base_collector import BaseCollector
from inventory.exceptions import NoClientForRegionError

from ..name_resolvers import AWSNameResolver
from ..utils import create_regional_clients, create_session


class AWSCollector(BaseCollector):
    """
    Base class for collectors backed by one boto3 client per region.

    Subclasses set ``service_name`` (the boto3 service) and implement
    ``name``, ``get_columns`` and ``collect``.
    """

    service_name: str = ""

    def __init__(
        self,
        clients: Optional[Dict[str, Any]] = None,
        name_resolver: Optional[AWSNameResolver] = None,
    ):
        super().__init__()
        self.clients = dict(clients or {})
        self.name_resolver = name_resolver or AWSNameResolver()

    @classmethod
    def from_config(cls, config, regions, name_resolver: AWSNameResolver, session=None):
        """Build the collector with regional clients created from the run configuration."""
        session = session or create_session(config)
        return cls(create_regional_clients(session, cls.service_name, regions), name_resolver)

    def _client(self, region: str) -> Any:
        client = self.clients.get(region)
        if client is None:
            raise NoClientForRegionError(self.service_name.upper(), region)
        return client


def error_code(error: BaseException) -> str:
    """The AWS error code of a botocore ClientError, or an empty string."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def optional_call(call, missing_codes, *args, **kwargs):
    """
    Call an API that reports "not configured" as an error.

    Returns None when the call fails with one of ``missing_codes``;
    every other error propagates.
    """
    try:
        return call(*args, **kwargs)
    except ClientError as e:
        if error_code(e) in missing_codes:
            return None
        raise
