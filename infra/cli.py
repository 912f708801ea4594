"""
Flask Fargate CLI: setup, list, preview, create, destroy, verify. Hides the Pulumi workflow.
Run `fargate setup` once; then use `fargate create <stack.yaml>` and friends.
"""

import json
import os
from pathlib import Path
import subprocess
import sys
from typing import Any

import yaml

CONFIG_DIR = ".flask-fargate"
CONFIG_FILENAME = "config.yaml"
TAG_MANAGED_BY = "managed-by"
TAG_MANAGED_VALUE = "flask-fargate-infra"
TAG_SERVICE = "service"
DEFAULT_STACK_PREFIX = "dev"
PROGRAM_DIR = "infra"


def _project_root() -> Path:
    """Directory containing infra/Pulumi.yaml. Use cwd as default."""
    return Path.cwd()


def _config_path() -> Path:
    return _project_root() / CONFIG_DIR / CONFIG_FILENAME


def _load_config() -> dict[str, Any] | None:
    path = _config_path()
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else None


def _save_config(backend_url: str, region: str, stack_prefix: str = DEFAULT_STACK_PREFIX) -> None:
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            {
                "backend_url": backend_url,
                "region": region,
                "stack_prefix": stack_prefix,
            },
            f,
            default_flow_style=False,
        )
    print(f"Configuration saved to {path}")


def _require_config() -> dict[str, Any]:
    config = _load_config()
    if not config or not config.get("backend_url") or not config.get("region"):
        print("Configuration missing or incomplete. Run: fargate setup", file=sys.stderr)
        sys.exit(1)
    return config


def _check_aws_credentials() -> bool:
    try:
        subprocess.run(
            ["aws", "sts", "get-caller-identity"],
            capture_output=True,
            check=True,
            timeout=10,
        )
        return True
    except (subprocess.CalledProcessError, FileNotFoundError, subprocess.TimeoutExpired):
        return False


def _run(cmd: list[str], env: dict[str, str] | None = None, check: bool = True) -> subprocess.CompletedProcess:
    full_env = os.environ.copy()
    if env:
        full_env.update(env)
    return subprocess.run(
        cmd,
        cwd=_project_root(),
        env=full_env,
        check=check,
    )


def _pulumi(*args: str) -> list[str]:
    return ["pulumi", *args, "-C", PROGRAM_DIR]


def _service_name_from_yaml(path: Path) -> str:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data["metadata"]["name"]


def _stack_name(service_name: str, config: dict[str, Any]) -> str:
    prefix = config.get("stack_prefix", DEFAULT_STACK_PREFIX)
    region = config["region"]
    return f"{prefix}.{service_name}.{region}"


def _require_program_dir() -> None:
    if not (_project_root() / PROGRAM_DIR / "Pulumi.yaml").exists():
        print(f"{PROGRAM_DIR}/Pulumi.yaml not found. Run this from the repo root.", file=sys.stderr)
        sys.exit(1)


# --- setup ---


def _cmd_setup() -> None:
    print("First-time setup. You will need:")
    print("  1) AWS credentials (e.g. run: aws sso login)")
    print("  2) Pulumi state backend URL (e.g. s3://your-bucket or file://~/.pulumi-state)")
    print("  3) Default AWS region (e.g. us-east-1)")
    print()

    if not _check_aws_credentials():
        print("AWS credentials not found. Log in (e.g. aws sso login) and try again.", file=sys.stderr)
        sys.exit(1)
    print("AWS credentials OK.")

    backend_url = os.environ.get("FLASK_FARGATE_BACKEND_URL", "").strip()
    if not backend_url:
        backend_url = input("Pulumi state backend URL: ").strip()
    if not backend_url:
        print("Backend URL is required.", file=sys.stderr)
        sys.exit(1)

    region = os.environ.get("FLASK_FARGATE_REGION", "").strip()
    if not region:
        region = input("Default AWS region (e.g. us-east-1): ").strip()
    if not region:
        print("Region is required.", file=sys.stderr)
        sys.exit(1)

    stack_prefix = os.environ.get("FLASK_FARGATE_STACK_PREFIX", DEFAULT_STACK_PREFIX).strip() or DEFAULT_STACK_PREFIX
    _save_config(backend_url, region, stack_prefix)
    print("Setup complete. You can now use: fargate list, fargate create <path>, fargate destroy <service-name>")


# --- list ---


def _cmd_list() -> None:
    import boto3

    config = _load_config()
    region = config.get("region") if config else os.environ.get("AWS_REGION", "us-east-1")
    client = boto3.client("resourcegroupstaggingapi", region_name=region)
    services: dict[str, list[dict[str, str]]] = {}

    paginator = client.get_paginator("get_resources")
    for page in paginator.paginate(
        TagFilters=[{"Key": TAG_MANAGED_BY, "Values": [TAG_MANAGED_VALUE]}],
        ResourcesPerPage=100,
    ):
        for r in page.get("ResourceTagList", []):
            arn = r.get("ResourceARN", "")
            tags = {t["Key"]: t["Value"] for t in r.get("Tags", [])}
            svc = tags.get(TAG_SERVICE, "?")
            resource_type = arn.split(":")[2] if ":" in arn else "resource"
            services.setdefault(svc, []).append({"arn": arn, "type": resource_type})

    if not services:
        print("No flask-fargate-managed resources found.")
        return
    for name in sorted(services.keys()):
        print(f"\n{name}")
        for r in services[name]:
            print(f"  {r['type']}: {r['arn']}")


# --- preview / create ---


def _prepare_stack(stack_yaml_path: str) -> tuple[str, dict[str, str]]:
    """Resolve stack.yaml, select or init the Pulumi stack, set region. Returns service name and env."""
    config = _require_config()
    path = Path(stack_yaml_path)
    if not path.is_absolute():
        path = _project_root() / path
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        sys.exit(1)
    _require_program_dir()
    service_name = _service_name_from_yaml(path)
    stack = _stack_name(service_name, config)
    region = config["region"]

    env = {
        "STACK_YAML_PATH": str(path.resolve()),
        "PULUMI_BACKEND_URL": config["backend_url"],
    }
    select = _run(_pulumi("stack", "select", stack), env=env, check=False)
    if select.returncode != 0:
        _run(_pulumi("stack", "init", stack), env=env)
    _run(_pulumi("config", "set", "aws:region", region), env=env)
    return service_name, env


def _cmd_preview(stack_yaml_path: str) -> None:
    service_name, env = _prepare_stack(stack_yaml_path)
    print(f"Previewing infrastructure for service '{service_name}'...")
    _run(_pulumi("preview"), env=env)


def _cmd_create(stack_yaml_path: str) -> None:
    service_name, env = _prepare_stack(stack_yaml_path)
    print(f"Provisioning infrastructure for service '{service_name}'...")
    _run(_pulumi("up", "-y"), env=env)
    print(f"Service '{service_name}' provisioned. Check it with: fargate verify {service_name}")


# --- destroy ---


def _cmd_destroy(service_name: str) -> None:
    config = _require_config()
    stack = _stack_name(service_name, config)
    _require_program_dir()

    env = {"PULUMI_BACKEND_URL": config["backend_url"]}
    select = _run(_pulumi("stack", "select", stack), env=env, check=False)
    if select.returncode != 0:
        print(f"No infrastructure found for service '{service_name}' (stack {stack}).", file=sys.stderr)
        sys.exit(1)
    confirm = input(f"This will remove all infrastructure for service '{service_name}'. Continue? [y/N]: ")
    if confirm.strip().lower() != "y":
        print("Cancelled.")
        sys.exit(0)
    _run(_pulumi("destroy", "-y"), env=env)
    rm = _run(_pulumi("stack", "rm", stack, "--yes"), env=env, check=False)
    if rm.returncode != 0:
        print(f"Stack {stack} could not be removed; it may already be gone.", file=sys.stderr)
    print(f"Service '{service_name}' removed.")


# --- verify ---


def _stack_outputs(stack: str, env: dict[str, str]) -> dict[str, Any]:
    """Return `pulumi stack output --json` for an existing stack."""
    full_env = os.environ.copy()
    full_env.update(env)
    proc = subprocess.run(
        _pulumi("stack", "output", "--json", "--stack", stack),
        cwd=_project_root(),
        env=full_env,
        capture_output=True,
        text=True,
        check=False,
    )
    if proc.returncode != 0:
        print(f"No infrastructure found for stack {stack}: {proc.stderr.strip()}", file=sys.stderr)
        sys.exit(1)
    outputs = json.loads(proc.stdout or "{}")
    return outputs if isinstance(outputs, dict) else {}


def _cmd_verify(service_name: str) -> None:
    from infra.verify import all_passed, run_checks

    config = _require_config()
    _require_program_dir()
    stack = _stack_name(service_name, config)
    outputs = _stack_outputs(stack, {"PULUMI_BACKEND_URL": config["backend_url"]})
    results = run_checks(service_name, config["region"], outputs)
    print(json.dumps(results, indent=2))
    sys.exit(0 if all_passed(results) else 1)


def main(argv: list[str] | None = None) -> None:
    import argparse

    parser = argparse.ArgumentParser(
        description="Manage Flask-on-Fargate infrastructure. Run 'fargate setup' first."
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("setup", help="One-time setup: AWS, state backend, region")
    sub.add_parser("list", help="List managed resources by service")
    preview_p = sub.add_parser("preview", help="Show planned changes for a stack.yaml")
    preview_p.add_argument("stack_yaml", help="Path to stack.yaml (file or fixture)")
    create_p = sub.add_parser("create", help="Provision infrastructure from a stack.yaml")
    create_p.add_argument("stack_yaml", help="Path to stack.yaml (file or fixture)")
    destroy_p = sub.add_parser("destroy", help="Remove all infrastructure for a service")
    destroy_p.add_argument("service_name", help="Service name (from stack.yaml metadata.name)")
    verify_p = sub.add_parser("verify", help="Check a provisioned service is healthy")
    verify_p.add_argument("service_name", help="Service name (from stack.yaml metadata.name)")
    args = parser.parse_args(argv)

    if args.command == "setup":
        _cmd_setup()
    elif args.command == "list":
        _cmd_list()
    elif args.command == "preview":
        _cmd_preview(args.stack_yaml)
    elif args.command == "create":
        _cmd_create(args.stack_yaml)
    elif args.command == "destroy":
        _cmd_destroy(args.service_name)
    elif args.command == "verify":
        _cmd_verify(args.service_name)


if __name__ == "__main__":
    main()
