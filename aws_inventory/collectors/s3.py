"""
S3 buckets.

Buckets are listed once from the global service region and each is reported
with its own region. Per-bucket configuration is fetched with a client for
the bucket's region; every lookup is best effort.
"""

from typing import Any, Dict, List, Optional

from inventory.normalizer import format_json_indent
from inventory.resource import Column, Resource, new_resource, raw_column, standard_columns

from ..config import GLOBAL_SERVICE_REGION
from ..utils import create_regional_clients, create_session, get_aws_client
from .base import AWSCollector, optional_call

# Error codes meaning "not configured" rather than a failed lookup
ENCRYPTION_NOT_FOUND = {"ServerSideEncryptionConfigurationNotFoundError"}
PUBLIC_ACCESS_BLOCK_NOT_FOUND = {"NoSuchPublicAccessBlockConfiguration"}
LIFECYCLE_NOT_FOUND = {"NoSuchLifecycleConfiguration"}

# Legacy location constraint of eu-west-1
LEGACY_EU_LOCATION = "EU"


def bucket_arn(name: str) -> str:
    return f"arn:aws:s3:::{name}"


class S3Collector(AWSCollector):
    service_name = "s3"

    def __init__(
        self,
        clients: Optional[Dict[str, Any]] = None,
        name_resolver=None,
        session=None,
    ):
        super().__init__(clients, name_resolver)
        self.session = session

    @classmethod
    def from_config(cls, config, regions, name_resolver, session=None):
        session = session or create_session(config)
        return cls(
            create_regional_clients(session, "s3", [GLOBAL_SERVICE_REGION]),
            name_resolver,
            session=session,
        )

    @property
    def name(self) -> str:
        return "s3"

    def get_columns(self) -> List[Column]:
        return standard_columns(depth=1) + [
            raw_column("Encryption"),
            raw_column("Versioning"),
            raw_column("PABBlockPublicACLs"),
            raw_column("PABIgnorePublicACLs"),
            raw_column("PABBlockPublicPolicy"),
            raw_column("PABRestrictPublicBuckets"),
            raw_column("AccessLogARN"),
            raw_column("LifecycleRules"),
            raw_column("CreationDate"),
        ]

    def collect(self, ctx, region: str) -> List[Resource]:
        if region != GLOBAL_SERVICE_REGION:
            return []

        client = self._client(region)
        ctx.check()
        response = client.list_buckets()

        # Per-bucket-region clients live for this call only
        bucket_clients: Dict[str, Any] = dict(self.clients)
        resources: List[Resource] = []
        for bucket in response.get("Buckets", []):
            resources.append(self._bucket(ctx, client, bucket, bucket_clients))
        return resources

    def _bucket_client(self, region: str, default: Any, bucket_clients: Dict[str, Any]) -> Any:
        client = bucket_clients.get(region)
        if client is None and self.session is not None:
            client = get_aws_client("s3", region, self.session)
            bucket_clients[region] = client
        return client or default

    def _bucket(
        self, ctx, global_client: Any, bucket: Dict[str, Any], bucket_clients: Dict[str, Any]
    ) -> Resource:
        name = bucket.get("Name", "")

        location = ctx.best_effort(
            f"get location of bucket {name}", global_client.get_bucket_location, Bucket=name
        )
        bucket_region = ""
        if not location.degraded:
            bucket_region = (location.value or {}).get("LocationConstraint") or GLOBAL_SERVICE_REGION
            if bucket_region == LEGACY_EU_LOCATION:
                bucket_region = "eu-west-1"

        client = global_client
        if bucket_region:
            client = self._bucket_client(bucket_region, global_client, bucket_clients)

        encryption = ctx.best_effort(
            f"get encryption of bucket {name}",
            optional_call,
            client.get_bucket_encryption,
            ENCRYPTION_NOT_FOUND,
            Bucket=name,
        )
        versioning = ctx.best_effort(
            f"get versioning of bucket {name}", client.get_bucket_versioning, Bucket=name
        )
        public_access = ctx.best_effort(
            f"get public access block of bucket {name}",
            optional_call,
            client.get_public_access_block,
            PUBLIC_ACCESS_BLOCK_NOT_FOUND,
            Bucket=name,
        )
        logging_config = ctx.best_effort(
            f"get logging of bucket {name}", client.get_bucket_logging, Bucket=name
        )
        lifecycle = ctx.best_effort(
            f"get lifecycle of bucket {name}",
            optional_call,
            client.get_bucket_lifecycle_configuration,
            LIFECYCLE_NOT_FOUND,
            Bucket=name,
        )

        pab = (public_access.value or {}).get("PublicAccessBlockConfiguration", {})
        target_bucket = ((logging_config.value or {}).get("LoggingEnabled") or {}).get("TargetBucket")
        rules = (lifecycle.value or {}).get("Rules", [])

        return new_resource(
            "s3",
            sub_category1="Bucket",
            name=name,
            region=bucket_region,
            arn=bucket_arn(name),
            raw_data={
                "Encryption": None if encryption.degraded else _encryption_algorithm(encryption.value),
                "Versioning": None if versioning.degraded else (versioning.value or {}).get("Status", "Disabled"),
                "PABBlockPublicACLs": pab.get("BlockPublicAcls"),
                "PABIgnorePublicACLs": pab.get("IgnorePublicAcls"),
                "PABBlockPublicPolicy": pab.get("BlockPublicPolicy"),
                "PABRestrictPublicBuckets": pab.get("RestrictPublicBuckets"),
                "AccessLogARN": bucket_arn(target_bucket) if target_bucket else None,
                "LifecycleRules": "\n".join(format_json_indent(rule) for rule in rules),
                "CreationDate": bucket.get("CreationDate"),
            },
        )


def _encryption_algorithm(response: Optional[Dict[str, Any]]) -> str:
    rules = ((response or {}).get("ServerSideEncryptionConfiguration") or {}).get("Rules", [])
    if not rules:
        return "None"
    default = rules[0].get("ApplyServerSideEncryptionByDefault") or {}
    return default.get("SSEAlgorithm") or "None"
