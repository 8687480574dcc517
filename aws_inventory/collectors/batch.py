from typing import Any, Dict, List

from inventory.normalizer import format_json_indent
from inventory.resource import Column, Resource, new_resource, raw_column, standard_columns

from ..utils import paginate
from .base import AWSCollector

CATEGORY = "batch"


class BatchCollector(AWSCollector):
    """Job queues, compute environments and the latest revision of each active job definition."""

    service_name = "batch"

    @property
    def name(self) -> str:
        return "batch"

    def get_columns(self) -> List[Column]:
        return standard_columns(depth=1) + [
            raw_column("Priority"),
            raw_column("Type"),
            raw_column("JobRoleArn"),
            raw_column("ExecutionRoleArn"),
            raw_column("Image"),
            raw_column("vCPU"),
            raw_column("Memory"),
            raw_column("CpuArchitecture"),
            raw_column("OperatingSystemFamily"),
            raw_column("Timeout"),
            raw_column("JSON"),
            raw_column("Status"),
        ]

    def collect(self, ctx, region: str) -> List[Resource]:
        client = self._client(region)
        resources: List[Resource] = []

        for page in paginate(ctx, client, "describe_job_queues"):
            for queue in page.get("jobQueues", []):
                resources.append(
                    new_resource(
                        CATEGORY,
                        sub_category1="JobQueue",
                        name=queue.get("jobQueueName"),
                        region=region,
                        arn=queue.get("jobQueueArn"),
                        raw_data={
                            "Priority": queue.get("priority"),
                            "Status": queue.get("state"),
                            "JSON": format_json_indent(queue),
                        },
                    )
                )

        for page in paginate(ctx, client, "describe_compute_environments"):
            for env in page.get("computeEnvironments", []):
                resources.append(
                    new_resource(
                        CATEGORY,
                        sub_category1="ComputeEnvironment",
                        name=env.get("computeEnvironmentName"),
                        region=region,
                        arn=env.get("computeEnvironmentArn"),
                        raw_data={
                            "Type": env.get("type"),
                            "Status": env.get("state"),
                            "JSON": format_json_indent(env),
                        },
                    )
                )

        # Only the highest revision of each definition name is reported
        latest: Dict[str, Dict[str, Any]] = {}
        for page in paginate(ctx, client, "describe_job_definitions", status="ACTIVE"):
            for definition in page.get("jobDefinitions", []):
                name = definition.get("jobDefinitionName", "")
                current = latest.get(name)
                if current is None or definition.get("revision", 0) > current.get("revision", 0):
                    latest[name] = definition

        for definition in latest.values():
            resources.append(self._job_definition(definition, region))

        return resources

    @staticmethod
    def _job_definition(definition: Dict[str, Any], region: str) -> Resource:
        container = definition.get("containerProperties") or {}

        vcpu = memory = None
        for requirement in container.get("resourceRequirements", []):
            if requirement.get("type") == "VCPU":
                vcpu = requirement.get("value")
            elif requirement.get("type") == "MEMORY":
                memory = requirement.get("value")
        # Legacy fields
        if vcpu is None:
            vcpu = container.get("vcpus")
        if memory is None:
            memory = container.get("memory")

        platform = container.get("runtimePlatform") or {}
        timeout = (definition.get("timeout") or {}).get("attemptDurationSeconds")

        return new_resource(
            CATEGORY,
            sub_category1="JobDefinition",
            name=f"{definition.get('jobDefinitionName', '')}:{definition.get('revision', 0)}",
            region=region,
            arn=definition.get("jobDefinitionArn"),
            raw_data={
                "Type": definition.get("type"),
                "JobRoleArn": container.get("jobRoleArn"),
                "ExecutionRoleArn": container.get("executionRoleArn"),
                "Image": container.get("image"),
                "vCPU": vcpu,
                "Memory": memory,
                "CpuArchitecture": platform.get("cpuArchitecture"),
                "OperatingSystemFamily": platform.get("operatingSystemFamily"),
                "Timeout": timeout,
                "JSON": format_json_indent(definition),
                "Status": definition.get("status"),
            },
        )
