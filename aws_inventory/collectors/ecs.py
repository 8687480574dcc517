"""
ECS clusters, services, scheduled tasks and task definitions.

Output order encodes the hierarchy: every cluster row is followed by its
service rows and then the EventBridge scheduled tasks targeting it. Task
definitions (latest revision per family) come last. The orchestrator must
therefore keep insertion order.
"""

from typing import Any, Dict, List, Optional

from inventory.resource import Column, Resource, new_resource, raw_column, standard_columns

from ..utils import create_regional_clients, create_session, paginate
from .base import AWSCollector

CATEGORY = "ecs"
# DescribeServices accepts at most 10 services per call
MAX_SERVICES_PER_DESCRIBE = 10
DEFAULT_RUNTIME_PLATFORM = "LINUX/X86_64"


class TaskDefinitionCache:
    """Per work item cache of DescribeTaskDefinition results, failures included."""

    def __init__(self, ctx, client: Any):
        self.ctx = ctx
        self.client = client
        self._definitions: Dict[str, Optional[Dict[str, Any]]] = {}

    def get(self, arn: str) -> Optional[Dict[str, Any]]:
        if not arn:
            return None
        if arn not in self._definitions:
            result = self.ctx.best_effort(
                f"describe task definition {arn}",
                self.client.describe_task_definition,
                taskDefinition=arn,
                fallback={},
            )
            self._definitions[arn] = (result.value or {}).get("taskDefinition")
        return self._definitions[arn]

    def role_arn(self, arn: str) -> Optional[str]:
        definition = self.get(arn) or {}
        return definition.get("taskRoleArn") or definition.get("executionRoleArn")


class ECSCollector(AWSCollector):
    service_name = "ecs"

    def __init__(
        self,
        clients: Optional[Dict[str, Any]] = None,
        name_resolver=None,
        events_clients: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(clients, name_resolver)
        self.events_clients = dict(events_clients or {})

    @classmethod
    def from_config(cls, config, regions, name_resolver, session=None):
        session = session or create_session(config)
        return cls(
            create_regional_clients(session, "ecs", regions),
            name_resolver,
            create_regional_clients(session, "events", regions),
        )

    @property
    def name(self) -> str:
        return "ecs"

    def should_sort(self) -> bool:
        return False

    def get_columns(self) -> List[Column]:
        return standard_columns(depth=2) + [
            raw_column("RoleARN"),
            raw_column("TaskDefinition"),
            raw_column("LaunchType"),
            raw_column("Status"),
            raw_column("CronSchedule"),
            raw_column("Spec"),
            raw_column("RuntimePlatform"),
            raw_column("PortMappings"),
            raw_column("Environment"),
        ]

    def collect(self, ctx, region: str) -> List[Resource]:
        client = self._client(region)
        task_definitions = TaskDefinitionCache(ctx, client)

        scheduled = self._collect_scheduled_tasks(ctx, region, task_definitions)
        resources = self._collect_clusters(ctx, client, region, scheduled, task_definitions)
        resources.extend(self._collect_task_definitions(ctx, client, region, task_definitions))
        return resources

    def _collect_scheduled_tasks(
        self, ctx, region: str, task_definitions: TaskDefinitionCache
    ) -> Dict[str, List[Resource]]:
        """Enabled EventBridge rules targeting ECS, grouped by target cluster ARN."""
        events = self.events_clients.get(region)
        if events is None:
            self.logger.debug("No EventBridge client for %s, skipping scheduled tasks", region)
            return {}

        by_cluster: Dict[str, List[Resource]] = {}
        for page in paginate(ctx, events, "list_rules"):
            for rule in page.get("Rules", []):
                if rule.get("State") != "ENABLED":
                    continue

                targets = ctx.best_effort(
                    f"list targets of rule {rule.get('Name')}",
                    events.list_targets_by_rule,
                    Rule=rule.get("Name"),
                    fallback={},
                )
                for target in (targets.value or {}).get("Targets", []):
                    parameters = target.get("EcsParameters")
                    cluster_arn = target.get("Arn")
                    if not parameters or not cluster_arn:
                        continue

                    task_definition_arn = parameters.get("TaskDefinitionArn")
                    by_cluster.setdefault(cluster_arn, []).append(
                        new_resource(
                            CATEGORY,
                            sub_category2="ScheduledTask",
                            name=rule.get("Name"),
                            region=region,
                            arn=rule.get("Arn"),
                            raw_data={
                                "RoleARN": task_definitions.role_arn(task_definition_arn),
                                "TaskDefinition": task_definition_arn,
                                "LaunchType": parameters.get("LaunchType"),
                                "Status": rule.get("State"),
                                "CronSchedule": rule.get("ScheduleExpression"),
                            },
                        )
                    )

        return by_cluster

    def _collect_clusters(
        self,
        ctx,
        client: Any,
        region: str,
        scheduled: Dict[str, List[Resource]],
        task_definitions: TaskDefinitionCache,
    ) -> List[Resource]:
        resources: List[Resource] = []
        for page in paginate(ctx, client, "list_clusters"):
            cluster_arns = page.get("clusterArns", [])
            if not cluster_arns:
                continue

            ctx.check()
            described = client.describe_clusters(clusters=cluster_arns)
            for cluster in described.get("clusters", []):
                cluster_arn = cluster.get("clusterArn", "")
                resources.append(
                    new_resource(
                        CATEGORY,
                        sub_category1="Cluster",
                        name=cluster.get("clusterName"),
                        region=region,
                        arn=cluster_arn,
                        raw_data={"Status": cluster.get("status")},
                    )
                )
                resources.extend(
                    self._collect_services(ctx, client, region, cluster_arn, task_definitions)
                )
                resources.extend(scheduled.get(cluster_arn, []))

        return resources

    def _collect_services(
        self,
        ctx,
        client: Any,
        region: str,
        cluster_arn: str,
        task_definitions: TaskDefinitionCache,
    ) -> List[Resource]:
        listed = ctx.best_effort(
            f"list services of cluster {cluster_arn}",
            lambda: [
                arn
                for page in paginate(ctx, client, "list_services", cluster=cluster_arn)
                for arn in page.get("serviceArns", [])
            ],
            fallback=[],
        )
        service_arns = listed.value or []

        resources: List[Resource] = []
        for start in range(0, len(service_arns), MAX_SERVICES_PER_DESCRIBE):
            chunk = service_arns[start:start + MAX_SERVICES_PER_DESCRIBE]
            described = ctx.best_effort(
                f"describe services of cluster {cluster_arn}",
                client.describe_services,
                cluster=cluster_arn,
                services=chunk,
                fallback={},
            )
            for service in (described.value or {}).get("services", []):
                task_definition_arn = service.get("taskDefinition")
                status = (
                    f"{service.get('status', '')} "
                    f"({service.get('runningCount', 0)}/{service.get('desiredCount', 0)})"
                )
                resources.append(
                    new_resource(
                        CATEGORY,
                        sub_category2="Service",
                        name=service.get("serviceName"),
                        region=region,
                        arn=service.get("serviceArn"),
                        raw_data={
                            "RoleARN": task_definitions.role_arn(task_definition_arn),
                            "TaskDefinition": task_definition_arn,
                            "LaunchType": service.get("launchType"),
                            "Status": status,
                        },
                    )
                )

        return resources

    def _collect_task_definitions(
        self, ctx, client: Any, region: str, task_definitions: TaskDefinitionCache
    ) -> List[Resource]:
        # Revisions are listed in ascending order, so the last ARN seen per family wins
        latest: Dict[str, str] = {}
        for page in paginate(ctx, client, "list_task_definitions"):
            for arn in page.get("taskDefinitionArns", []):
                family_revision = arn.rsplit("/", 1)[-1]
                if "/" not in arn or ":" not in family_revision:
                    continue
                latest[family_revision.split(":", 1)[0]] = arn

        resources: List[Resource] = []
        for family in sorted(latest):
            arn = latest[family]
            definition = task_definitions.get(arn) or {}
            resources.append(
                new_resource(
                    CATEGORY,
                    sub_category1="TaskDefinition",
                    name=arn.rsplit("/", 1)[-1],
                    region=region,
                    arn=arn,
                    raw_data=_task_definition_details(definition, arn) if definition else {},
                )
            )
        return resources


def _task_definition_details(definition: Dict[str, Any], arn: str) -> Dict[str, Any]:
    spec = "{}CPU/{}MB/{}".format(
        definition.get("cpu", ""), definition.get("memory", ""), definition.get("networkMode", "")
    )

    platform = definition.get("runtimePlatform") or {}
    os_family = platform.get("operatingSystemFamily")
    cpu_architecture = platform.get("cpuArchitecture")
    runtime_platform = (
        f"{os_family}/{cpu_architecture}"
        if os_family and cpu_architecture
        else DEFAULT_RUNTIME_PLATFORM
    )

    port_mappings: List[str] = []
    environment: List[str] = []
    for container in definition.get("containerDefinitions", []):
        for mapping in container.get("portMappings", []):
            host_port = mapping.get("hostPort")
            port_mappings.append(
                "{}:{}:{}".format(
                    mapping.get("containerPort", ""),
                    host_port if host_port else "dynamic",
                    mapping.get("protocol") or "tcp",
                )
            )
        for variable in container.get("environment", []):
            environment.append(f"{variable.get('name', '')}={variable.get('value', '')}")

    return {
        "RoleARN": definition.get("taskRoleArn") or definition.get("executionRoleArn"),
        "TaskDefinition": definition.get("taskDefinitionArn") or arn,
        "Status": definition.get("status"),
        "Spec": spec,
        "RuntimePlatform": runtime_platform,
        "PortMappings": port_mappings,
        "Environment": environment,
    }
