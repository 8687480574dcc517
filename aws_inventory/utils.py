"""
Utility functions for the AWS resource inventory.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from inventory.constants import ERROR_MESSAGES
from inventory.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ARN_PARTS_COUNT = 6

Tags = Union[List[Dict[str, str]], Dict[str, str], None]


def create_session(config) -> boto3.Session:
    """Create a boto3 session, supporting profiles, static keys and the default credential chain."""
    region = getattr(config, "primary_region", None)
    if config.aws_profile:
        return boto3.Session(profile_name=config.aws_profile, region_name=region)
    elif config.aws_access_key_id and config.aws_secret_access_key:
        return boto3.Session(
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            region_name=region,
        )
    else:
        # Use default credential chain (env, config, SSO, etc.)
        return boto3.Session(region_name=region)


def get_aws_client(service_name: str, region: str, session: boto3.Session) -> Any:
    """Get AWS client for specified service and region."""
    try:
        return session.client(service_name, region_name=region)
    except NoCredentialsError:
        raise ConfigurationError(ERROR_MESSAGES["credentials_not_found"]) from None


def create_regional_clients(
    session: boto3.Session, service_name: str, regions: List[str]
) -> Dict[str, Any]:
    """Create one client per region for a service."""
    return {region: get_aws_client(service_name, region, session) for region in regions}


def paginate(ctx, client: Any, operation: str, **kwargs) -> Iterator[Dict[str, Any]]:
    """
    Iterate over the pages of a paginated operation.

    The run context is checked before every page request, so a cancelled
    run stops between pages.

    Args:
        ctx: Pair or run context
        client: boto3 client
        operation: Paginated operation name (e.g. "describe_instances")
        **kwargs: Operation parameters

    Yields:
        Response pages
    """
    paginator = client.get_paginator(operation)
    pages = iter(paginator.paginate(**kwargs))
    while True:
        ctx.check()
        try:
            page = next(pages)
        except StopIteration:
            return
        yield page


def check_aws_credentials(session: boto3.Session) -> str:
    """
    Validate credentials with STS GetCallerIdentity.

    Returns:
        Caller identity ARN

    Raises:
        ConfigurationError: If credentials are missing, invalid or the SSO session expired
    """
    try:
        identity = session.client("sts").get_caller_identity()
    except NoCredentialsError as e:
        raise ConfigurationError(ERROR_MESSAGES["credentials_not_found"]) from e
    except (BotoCoreError, ClientError) as e:
        if "sso session has expired" in str(e).lower():
            raise ConfigurationError(ERROR_MESSAGES["sso_expired"].format(error=e)) from e
        raise ConfigurationError(ERROR_MESSAGES["credentials_invalid"].format(error=e)) from e

    arn = identity.get("Arn") or ""
    if not arn:
        raise ConfigurationError(ERROR_MESSAGES["credentials_invalid"].format(error="empty ARN"))
    return arn


def parse_arn(arn: str) -> Dict[str, str]:
    """Split an ARN into partition, service, region, account_id and resource."""
    parts = (arn or "").split(":", ARN_PARTS_COUNT - 1)
    if len(parts) < ARN_PARTS_COUNT or parts[0] != "arn":
        raise ValueError(ERROR_MESSAGES["invalid_arn"].format(arn=arn))
    return {
        "partition": parts[1],
        "service": parts[2],
        "region": parts[3],
        "account_id": parts[4],
        "resource": parts[5],
    }


def extract_account_id(arn: str) -> str:
    return parse_arn(arn)["account_id"]


def get_resource_tags(tags: Tags) -> Dict[str, str]:
    """Convert AWS tags list to dictionary."""
    if not tags:
        return {}
    if isinstance(tags, dict):
        return dict(tags)
    return {tag["Key"]: tag.get("Value", "") for tag in tags if "Key" in tag}


def get_tag_value(tags: Tags, key: str) -> Optional[str]:
    """Look up a tag value by key, ignoring case."""
    wanted = key.lower()
    for tag_key, value in get_resource_tags(tags).items():
        if tag_key.lower() == wanted:
            return value
    return None
