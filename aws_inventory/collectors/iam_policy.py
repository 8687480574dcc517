from typing import List

from inventory.constants import GLOBAL_REGION_LABEL
from inventory.resource import Column, Resource, new_resource, raw_column, standard_columns

from ..config import GLOBAL_SERVICE_REGION
from ..utils import create_regional_clients, create_session, paginate
from .base import AWSCollector

POLICY_SCOPE = "Local"


class IAMPolicyCollector(AWSCollector):
    """
    Customer managed IAM policies.

    IAM is a global service: policies are listed once, from the global
    service region, and reported with the "Global" region label.
    """

    service_name = "iam"

    @classmethod
    def from_config(cls, config, regions, name_resolver, session=None):
        session = session or create_session(config)
        return cls(create_regional_clients(session, "iam", [GLOBAL_SERVICE_REGION]), name_resolver)

    @property
    def name(self) -> str:
        return "iam_policy"

    def get_columns(self) -> List[Column]:
        return standard_columns(depth=1) + [
            raw_column("Description"),
            raw_column("Scope"),
            raw_column("Path"),
            raw_column("AttachmentCount"),
            raw_column("CreateDate"),
            raw_column("UpdateDate"),
        ]

    def collect(self, ctx, region: str) -> List[Resource]:
        if region != GLOBAL_SERVICE_REGION:
            return []

        client = self._client(region)
        resources: List[Resource] = []

        for page in paginate(ctx, client, "list_policies", Scope=POLICY_SCOPE):
            for policy in page.get("Policies", []):
                arn = policy.get("Arn")
                description = None
                if arn:
                    detail = ctx.best_effort(
                        f"get policy {arn}", client.get_policy, PolicyArn=arn, fallback={}
                    )
                    description = (detail.value or {}).get("Policy", {}).get("Description")

                resources.append(
                    new_resource(
                        "iam_policy",
                        sub_category1="Policy",
                        name=policy.get("PolicyName"),
                        region=GLOBAL_REGION_LABEL,
                        arn=arn,
                        raw_data={
                            "Description": description,
                            "Scope": POLICY_SCOPE,
                            "Path": policy.get("Path"),
                            "AttachmentCount": policy.get("AttachmentCount"),
                            "CreateDate": policy.get("CreateDate"),
                            "UpdateDate": policy.get("UpdateDate"),
                        },
                    )
                )

        return resources
