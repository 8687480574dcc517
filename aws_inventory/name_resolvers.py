"""
AWS name lookups backing the shared NameResolver cache.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from inventory.exceptions import NoClientForRegionError
from inventory.name_resolver import NameResolver

from .utils import create_regional_clients, get_tag_value, paginate

logger = logging.getLogger(__name__)

TAG_NAME_KEY = "Name"
ALIAS_PREFIX = "alias/"

KMS = "kms"
SECURITY_GROUP = "security_group"
SUBNET = "subnet"
VPC = "vpc"
IMAGE = "image"
VOLUME = "volume"


class AWSNameResolver(NameResolver):
    """
    NameResolver with loaders for KMS keys and EC2 networking/storage objects.

    Each kind is populated by a single bulk listing per region and cached
    for the lifetime of the resolver.
    """

    def __init__(
        self,
        ec2_clients: Optional[Dict[str, Any]] = None,
        kms_clients: Optional[Dict[str, Any]] = None,
    ):
        super().__init__()
        self.ec2_clients = dict(ec2_clients or {})
        self.kms_clients = dict(kms_clients or {})

        self.register_loader(KMS, self._load_kms_keys)
        self.register_loader(SECURITY_GROUP, self._load_security_groups)
        self.register_loader(SUBNET, self._load_subnets)
        self.register_loader(VPC, self._load_vpcs)
        self.register_loader(IMAGE, self._load_images)
        self.register_loader(VOLUME, self._load_volumes)

    @classmethod
    def from_session(cls, session, regions: List[str]) -> "AWSNameResolver":
        return cls(
            ec2_clients=create_regional_clients(session, "ec2", regions),
            kms_clients=create_regional_clients(session, "kms", regions),
        )

    def get_all_kms_keys(self, ctx, region: str) -> Mapping[str, str]:
        """Key id, key ARN and alias name, each mapped to the ``alias/`` name."""
        return self.get_all(ctx, KMS, region)

    def get_all_security_groups(self, ctx, region: str) -> Mapping[str, str]:
        return self.get_all(ctx, SECURITY_GROUP, region)

    def get_all_subnets(self, ctx, region: str) -> Mapping[str, str]:
        return self.get_all(ctx, SUBNET, region)

    def get_all_vpcs(self, ctx, region: str) -> Mapping[str, str]:
        return self.get_all(ctx, VPC, region)

    def get_all_images(self, ctx, region: str) -> Mapping[str, str]:
        """AMIs owned by the account."""
        return self.get_all(ctx, IMAGE, region)

    def get_all_volumes(self, ctx, region: str) -> Mapping[str, str]:
        return self.get_all(ctx, VOLUME, region)

    def _ec2(self, region: str) -> Any:
        client = self.ec2_clients.get(region)
        if client is None:
            raise NoClientForRegionError("EC2", region)
        return client

    def _kms(self, region: str) -> Any:
        client = self.kms_clients.get(region)
        if client is None:
            raise NoClientForRegionError("KMS", region)
        return client

    def _load_kms_keys(self, ctx, region: str) -> Dict[str, str]:
        client = self._kms(region)

        key_arns: Dict[str, str] = {}
        for page in paginate(ctx, client, "list_keys"):
            for key in page.get("Keys", []):
                key_arns[key.get("KeyId", "")] = key.get("KeyArn", "")

        key_map: Dict[str, str] = {}
        for page in paginate(ctx, client, "list_aliases"):
            for alias in page.get("Aliases", []):
                key_id = alias.get("TargetKeyId")
                alias_name = alias.get("AliasName")
                if not key_id or not alias_name:
                    continue
                if not alias_name.startswith(ALIAS_PREFIX):
                    alias_name = ALIAS_PREFIX + alias_name

                key_map[key_id] = alias_name
                if key_arns.get(key_id):
                    key_map[key_arns[key_id]] = alias_name
                key_map[alias_name] = alias_name

        return key_map

    def _load_security_groups(self, ctx, region: str) -> Dict[str, str]:
        groups: Dict[str, str] = {}
        for page in paginate(ctx, self._ec2(region), "describe_security_groups"):
            for group in page.get("SecurityGroups", []):
                group_id = group.get("GroupId", "")
                groups[group_id] = group.get("GroupName") or group_id
        return groups

    def _load_subnets(self, ctx, region: str) -> Dict[str, str]:
        return _tagged_names(ctx, self._ec2(region), "describe_subnets", "Subnets", "SubnetId")

    def _load_vpcs(self, ctx, region: str) -> Dict[str, str]:
        return _tagged_names(ctx, self._ec2(region), "describe_vpcs", "Vpcs", "VpcId")

    def _load_volumes(self, ctx, region: str) -> Dict[str, str]:
        return _tagged_names(ctx, self._ec2(region), "describe_volumes", "Volumes", "VolumeId")

    def _load_images(self, ctx, region: str) -> Dict[str, str]:
        images: Dict[str, str] = {}
        for page in paginate(ctx, self._ec2(region), "describe_images", Owners=["self"]):
            for image in page.get("Images", []):
                image_id = image.get("ImageId", "")
                images[image_id] = (
                    image.get("Name") or get_tag_value(image.get("Tags"), TAG_NAME_KEY) or image_id
                )
        return images


def _tagged_names(ctx, client: Any, operation: str, list_key: str, id_key: str) -> Dict[str, str]:
    """Map ids to their Name tag, falling back to the id."""
    names: Dict[str, str] = {}
    for page in paginate(ctx, client, operation):
        for item in page.get(list_key, []):
            item_id = item.get(id_key, "")
            names[item_id] = get_tag_value(item.get("Tags"), TAG_NAME_KEY) or item_id
    return names
