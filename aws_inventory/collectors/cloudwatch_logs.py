from typing import List

from inventory.normalizer import unix_millis_to_datetime
from inventory.resource import Column, Resource, new_resource, raw_column, standard_columns

from ..name_resolvers import KMS
from ..utils import paginate
from .base import AWSCollector


class CloudWatchLogsCollector(AWSCollector):
    """CloudWatch Logs log groups with their KMS key resolved to its alias."""

    service_name = "logs"

    @property
    def name(self) -> str:
        return "cloudwatch_logs"

    def get_columns(self) -> List[Column]:
        return standard_columns(depth=1) + [
            raw_column("RetentionInDays"),
            raw_column("StoredBytes"),
            raw_column("MetricFilterCount"),
            raw_column("LogGroupClass"),
            raw_column("KmsKey"),
            raw_column("CreationTime"),
        ]

    def collect(self, ctx, region: str) -> List[Resource]:
        client = self._client(region)
        resources: List[Resource] = []

        for page in paginate(ctx, client, "describe_log_groups"):
            for group in page.get("logGroups", []):
                kms_key = self.name_resolver.resolve_name(ctx, KMS, region, group.get("kmsKeyId"))
                resources.append(
                    new_resource(
                        "cloudwatch",
                        sub_category1="LogGroup",
                        name=group.get("logGroupName"),
                        region=region,
                        arn=group.get("arn"),
                        raw_data={
                            "RetentionInDays": group.get("retentionInDays"),
                            "StoredBytes": group.get("storedBytes"),
                            "MetricFilterCount": group.get("metricFilterCount"),
                            "LogGroupClass": group.get("logGroupClass"),
                            "KmsKey": kms_key,
                            "CreationTime": unix_millis_to_datetime(group.get("creationTime")),
                        },
                    )
                )

        return resources
