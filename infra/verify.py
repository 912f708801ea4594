"""Post-deploy verification of a provisioned Flask service.

Reads resource names from the stack outputs and the live state through the AWS
APIs (boto3), recording one result per check. A check is retried with linear
backoff before it is marked FAIL.
"""

from collections.abc import Callable
import time
from typing import Any

import boto3
from botocore.exceptions import ClientError

from infra.compute.ecs_service import sanitize_ecs_service_name


class CheckFailed(Exception):
    """A verification check observed an unexpected state."""


def check(
    results: list[dict[str, Any]],
    name: str,
    fn: Callable[[], None],
    retries: int = 3,
    backoff: int = 5,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    for attempt in range(retries):
        try:
            fn()
            results.append({"check": name, "status": "PASS"})
            return
        except (CheckFailed, ClientError) as e:
            if attempt < retries - 1:
                sleep(backoff * (attempt + 1))
            else:
                results.append({"check": name, "status": "FAIL", "error": str(e)})


def verify_cluster(ecs: Any, cluster: str) -> None:
    resp = ecs.describe_clusters(clusters=[cluster])
    clusters = resp.get("clusters", [])
    if not clusters:
        raise CheckFailed(f"cluster {cluster} not found")
    status = clusters[0].get("status")
    if status != "ACTIVE":
        raise CheckFailed(f"cluster {cluster} is {status}")


def verify_service(ecs: Any, cluster: str, service: str) -> None:
    resp = ecs.describe_services(cluster=cluster, services=[service])
    services = resp.get("services", [])
    if not services:
        raise CheckFailed(f"service {service} not found in {cluster}")
    svc = services[0]
    running, desired = svc.get("runningCount", 0), svc.get("desiredCount", 0)
    if running < 1 or running != desired:
        raise CheckFailed(f"service {service} running {running}/{desired} tasks")


def verify_log_group(logs: Any, group: str) -> None:
    resp = logs.describe_log_groups(logGroupNamePrefix=group)
    if not any(g.get("logGroupName") == group for g in resp.get("logGroups", [])):
        raise CheckFailed(f"log group {group} not found")


def verify_alarm(cloudwatch: Any, name: str) -> None:
    resp = cloudwatch.describe_alarms(AlarmNames=[name])
    alarms = resp.get("MetricAlarms", [])
    if not alarms:
        raise CheckFailed(f"alarm {name} not found")
    state = alarms[0].get("StateValue")
    if state == "ALARM":
        raise CheckFailed(f"alarm {name} is in ALARM: {alarms[0].get('StateReason', '')}")


def run_checks(
    service_name: str,
    region: str,
    outputs: dict[str, Any],
    session: Any = None,
    retries: int = 3,
    backoff: int = 5,
) -> list[dict[str, Any]]:
    """Run the checks backed by the stack outputs and return the results in order.

    Names come from the deployed stack outputs. A check whose output is missing
    (logging or alarm disabled) is not run.
    """
    session = session or boto3.session.Session(region_name=region)
    ecs = session.client("ecs")
    logs = session.client("logs")
    cloudwatch = session.client("cloudwatch")

    results: list[dict[str, Any]] = []
    cluster = outputs.get("ecs_cluster_name", service_name)
    service = outputs.get("ecs_service_name", sanitize_ecs_service_name(service_name))

    def run(name: str, fn: Callable[[], None]) -> None:
        check(results, name, fn, retries=retries, backoff=backoff)

    run("ecs_cluster_active", lambda: verify_cluster(ecs, cluster))
    run("ecs_service_running", lambda: verify_service(ecs, cluster, service))
    if "log_group_name" in outputs:
        run("log_group_exists", lambda: verify_log_group(logs, outputs["log_group_name"]))
    if "alarm_name" in outputs:
        run("alarm_not_firing", lambda: verify_alarm(cloudwatch, outputs["alarm_name"]))
    return results


def all_passed(results: list[dict[str, Any]]) -> bool:
    return all(r["status"] == "PASS" for r in results)
