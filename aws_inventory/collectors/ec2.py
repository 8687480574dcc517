from typing import List

from inventory.resource import Column, Resource, new_resource, raw_column, standard_columns

from ..name_resolvers import IMAGE, SECURITY_GROUP, SUBNET, VOLUME, VPC
from ..utils import get_tag_value, paginate
from .base import AWSCollector


class EC2Collector(AWSCollector):
    """
    EC2 instances.

    Network and storage references are rendered as names through the shared
    resolver, so each lookup kind costs one bulk call per region.
    """

    service_name = "ec2"

    @property
    def name(self) -> str:
        return "ec2"

    def get_columns(self) -> List[Column]:
        return standard_columns(depth=1, include_arn=False) + [
            raw_column("InstanceID"),
            raw_column("InstanceType"),
            raw_column("ImageID"),
            raw_column("ImageName"),
            raw_column("VPC"),
            raw_column("Subnet"),
            raw_column("SecurityGroup"),
            raw_column("Volumes"),
            raw_column("PrivateIpAddress"),
            raw_column("PublicIpAddress"),
            raw_column("LaunchTime"),
            raw_column("State"),
        ]

    def collect(self, ctx, region: str) -> List[Resource]:
        client = self._client(region)

        instances = []
        for page in paginate(ctx, client, "describe_instances"):
            for reservation in page.get("Reservations", []):
                instances.extend(reservation.get("Instances", []))

        resolver = self.name_resolver
        resources: List[Resource] = []
        for instance in instances:
            group_ids = [group.get("GroupId") for group in instance.get("SecurityGroups", [])]
            volume_ids = [
                mapping.get("Ebs", {}).get("VolumeId")
                for mapping in instance.get("BlockDeviceMappings", [])
            ]
            image_id = instance.get("ImageId")

            resources.append(
                new_resource(
                    "ec2",
                    sub_category1="Instance",
                    name=get_tag_value(instance.get("Tags"), "Name"),
                    region=region,
                    raw_data={
                        "InstanceID": instance.get("InstanceId"),
                        "InstanceType": instance.get("InstanceType"),
                        "ImageID": image_id,
                        "ImageName": resolver.resolve_name(ctx, IMAGE, region, image_id),
                        "VPC": resolver.resolve_name(ctx, VPC, region, instance.get("VpcId")),
                        "Subnet": resolver.resolve_name(ctx, SUBNET, region, instance.get("SubnetId")),
                        "SecurityGroup": resolver.resolve_names(ctx, SECURITY_GROUP, region, group_ids),
                        "Volumes": resolver.resolve_names(ctx, VOLUME, region, volume_ids),
                        "PrivateIpAddress": instance.get("PrivateIpAddress"),
                        "PublicIpAddress": instance.get("PublicIpAddress"),
                        "LaunchTime": instance.get("LaunchTime"),
                        "State": (instance.get("State") or {}).get("Name"),
                    },
                )
            )

        return resources
