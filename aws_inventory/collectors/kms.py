from typing import List

from inventory.resource import Column, Resource, new_resource, raw_column, standard_columns

from ..utils import paginate
from .base import AWSCollector


class KMSCollector(AWSCollector):
    """KMS keys, named by their first alias."""

    service_name = "kms"

    @property
    def name(self) -> str:
        return "kms"

    def get_columns(self) -> List[Column]:
        return standard_columns(depth=1) + [
            raw_column("KeyID"),
            raw_column("Description"),
            raw_column("KeyUsage"),
            raw_column("KeySpec"),
            raw_column("KeyManager"),
            raw_column("State"),
            raw_column("CreationDate"),
        ]

    def collect(self, ctx, region: str) -> List[Resource]:
        client = self._client(region)
        resources: List[Resource] = []

        for page in paginate(ctx, client, "list_keys"):
            for key in page.get("Keys", []):
                key_id = key.get("KeyId")

                described = ctx.best_effort(
                    f"describe key {key_id}", client.describe_key, KeyId=key_id, fallback={}
                )
                metadata = (described.value or {}).get("KeyMetadata", {})

                aliases = ctx.best_effort(
                    f"list aliases of key {key_id}", client.list_aliases, KeyId=key_id, fallback={}
                )
                alias_names = [
                    alias.get("AliasName")
                    for alias in (aliases.value or {}).get("Aliases", [])
                    if alias.get("AliasName")
                ]

                resources.append(
                    new_resource(
                        "kms",
                        sub_category1="Key",
                        name=alias_names[0] if alias_names else key_id,
                        region=region,
                        arn=metadata.get("Arn") or key.get("KeyArn"),
                        raw_data={
                            "KeyID": key_id,
                            "Description": metadata.get("Description"),
                            "KeyUsage": metadata.get("KeyUsage"),
                            "KeySpec": metadata.get("KeySpec"),
                            "KeyManager": metadata.get("KeyManager"),
                            "State": metadata.get("KeyState"),
                            "CreationDate": metadata.get("CreationDate"),
                        },
                    )
                )

        return resources
