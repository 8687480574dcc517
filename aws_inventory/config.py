"""
Configuration module for the AWS resource inventory.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from inventory.config import BaseConfig
from inventory.constants import ERROR_MESSAGES
from inventory.exceptions import ConfigurationError

# Region used for global services (IAM, S3)
GLOBAL_SERVICE_REGION = "us-east-1"
DEFAULT_REGION = "ap-northeast-1"


@dataclass
class AWSConfig(BaseConfig):
    """AWS configuration settings."""
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_profile: Optional[str] = None
    # regions, output_directory, output_format, max_workers inherited from BaseConfig

    def __post_init__(self):
        super().__post_init__()
        if not self.regions:
            self.regions = parse_comma_list(os.getenv("AWS_DEFAULT_REGION", "")) or [DEFAULT_REGION]
        if not self.aws_access_key_id:
            self.aws_access_key_id = os.getenv("AWS_ACCESS_KEY_ID")
        if not self.aws_secret_access_key:
            self.aws_secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY")
        if not self.aws_profile:
            self.aws_profile = os.getenv("AWS_PROFILE")

    @property
    def primary_region(self) -> str:
        return self.regions[0] if self.regions else DEFAULT_REGION


def parse_comma_list(value: Optional[str]) -> List[str]:
    """Split a comma separated string into trimmed, non-empty, de-duplicated items."""
    if not value:
        return []
    items: List[str] = []
    for part in value.split(","):
        part = part.strip()
        if part and part not in items:
            items.append(part)
    return items


def initialize_regions(user_regions: List[str]) -> List[str]:
    """
    Regions to collect from, in order, always including the global service region.

    Args:
        user_regions: Regions requested by the user

    Returns:
        De-duplicated regions with us-east-1 appended when missing
    """
    regions: List[str] = []
    for region in user_regions:
        if region and region not in regions:
            regions.append(region)
    if GLOBAL_SERVICE_REGION not in regions:
        regions.append(GLOBAL_SERVICE_REGION)
    return regions


def get_all_enabled_regions(session) -> List[str]:
    """Get all enabled regions for the AWS account."""
    try:
        # Use us-east-1 as the default region to get the list of all regions
        ec2_client = session.client("ec2", region_name=GLOBAL_SERVICE_REGION)
        response = ec2_client.describe_regions()

        enabled_regions = [
            region["RegionName"]
            for region in response["Regions"]
            if region.get("OptInStatus") in ["opt-in-not-required", "opted-in"]
        ]

        return sorted(enabled_regions)
    except NoCredentialsError as e:
        raise ConfigurationError(ERROR_MESSAGES["credentials_not_found"]) from e
    except (BotoCoreError, ClientError) as e:
        raise ConfigurationError(f"Could not fetch enabled regions: {e}") from e
