"""
AWS resource-type collectors.
"""

from typing import List

from inventory.registry import Registry

from ..name_resolvers import AWSNameResolver
from ..utils import create_session
from .base import AWSCollector
from .batch import BatchCollector
from .cloudwatch_logs import CloudWatchLogsCollector
from .ec2 import EC2Collector
from .ecs import ECSCollector
from .iam_policy import IAMPolicyCollector
from .kms import KMSCollector
from .s3 import S3Collector

COLLECTOR_CLASSES = [
    BatchCollector,
    CloudWatchLogsCollector,
    EC2Collector,
    ECSCollector,
    IAMPolicyCollector,
    KMSCollector,
    S3Collector,
]


def collector_names() -> List[str]:
    """Names of all available collectors, in registration order."""
    return [collector_class().name for collector_class in COLLECTOR_CLASSES]


def build_registry(
    config,
    regions: List[str],
    name_resolver: AWSNameResolver,
    session=None,
) -> Registry:
    """
    Create every collector with clients for ``regions`` and register it.

    Args:
        config: AWSConfig providing credentials
        regions: Regions the run will cover
        name_resolver: Resolver shared by all collectors of the run
        session: Existing boto3 session to reuse

    Returns:
        Registry in collector registration order
    """
    session = session or create_session(config)
    registry = Registry()
    for collector_class in COLLECTOR_CLASSES:
        collector = collector_class.from_config(config, regions, name_resolver, session=session)
        registry.register(collector.name, collector)
    return registry


__all__ = [
    "AWSCollector",
    "BatchCollector",
    "CloudWatchLogsCollector",
    "COLLECTOR_CLASSES",
    "EC2Collector",
    "ECSCollector",
    "IAMPolicyCollector",
    "KMSCollector",
    "S3Collector",
    "build_registry",
    "collector_names",
]
