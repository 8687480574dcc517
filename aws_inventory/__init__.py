"""
AWS Resource Inventory Module.

This module collects AWS resources per resource type and region and writes
normalized CSV reports.
"""

from .collectors import build_registry
from .name_resolvers import AWSNameResolver

__version__ = "1.0.0"

__all__ = ["AWSNameResolver", "build_registry"]
