#!/usr/bin/env python3
"""Deployment script for the log group janitor CDK application."""

import argparse
import json
import os
import shlex
import subprocess
import sys
from typing import Dict, List, Mapping, Optional, Sequence


def run_command(
    command: Sequence[str], *, check: bool = True, env: Optional[Mapping[str, str]] = None
) -> subprocess.CompletedProcess[str]:
    """Execute a subprocess without shell interpolation."""

    printable = " ".join(shlex.quote(part) for part in command)
    print(f"Running: {printable}")

    result = subprocess.run(command, capture_output=True, text=True, env=env, check=False)

    if check and result.returncode != 0:
        print(f"Command failed with return code {result.returncode}")
        if result.stdout:
            print(f"stdout: {result.stdout}")
        if result.stderr:
            print(f"stderr: {result.stderr}")
        sys.exit(result.returncode)

    return result


def context_args(environment: str, overrides: Mapping[str, object]) -> List[str]:
    """Build repeated ``--context key=value`` arguments; lists and maps are sent as JSON."""
    args = ["--context", f"environment={environment}"]
    for key, value in overrides.items():
        if value is None:
            continue
        text = json.dumps(value) if isinstance(value, (list, dict)) else str(value)
        args.extend(["--context", f"{key}={text}"])
    return args


def deploy_stack(environment: str, overrides: Mapping[str, object], region: Optional[str] = None) -> None:
    """Deploy the janitor stack to the specified environment."""
    print(f"Deploying to environment: {environment}")

    exec_env: Dict[str, str] = dict(os.environ)
    if region:
        exec_env["CDK_DEFAULT_REGION"] = region

    ctx = context_args(environment, overrides)

    # Bootstrap CDK if needed
    print("Checking CDK bootstrap status...")
    run_command(["cdk", "bootstrap", "--app", "python3 app.py", *ctx], check=False, env=exec_env)

    run_command(
        ["cdk", "deploy", "--all", "--app", "python3 app.py", *ctx, "--require-approval", "never"],
        env=exec_env,
    )
    print(f"Deployment to {environment} completed successfully!")


def parse_tags(values: Optional[Sequence[str]]) -> Optional[Dict[str, str]]:
    if not values:
        return None
    tags: Dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Tag must be KEY=VALUE, got {item!r}")
        tags[key] = value
    return tags


def main():
    """Main deployment function."""
    parser = argparse.ArgumentParser(description="Deploy the log group janitor CDK stack")
    parser.add_argument(
        "--environment", "-e", choices=["dev", "staging", "prod"], default="dev", help="Target environment"
    )
    parser.add_argument("--region", help="Override CDK_DEFAULT_REGION")
    parser.add_argument("--app-name", help="Resource name prefix")
    parser.add_argument("--pattern", action="append", dest="patterns", help="Log group name prefix (repeatable)")
    parser.add_argument("--tag", action="append", dest="tags", help="Required tag KEY=VALUE (repeatable)")
    parser.add_argument("--deletion-delay-days", type=int, help="Days added on top of retention")
    parser.add_argument("--webhook-parameter", help="SSM parameter holding the Slack webhook URL")
    parser.add_argument("--skip-install", action="store_true", help="Do not pip install the project first")

    args = parser.parse_args()

    if not args.skip_install:
        print("Installing Python dependencies...")
        run_command([sys.executable, "-m", "pip", "install", "-e", "."])

    overrides = {
        "appName": args.app_name,
        "logGroupPatterns": args.patterns,
        "requiredTags": parse_tags(args.tags),
        "deletionDelayDays": args.deletion_delay_days,
        "webhookParameterName": args.webhook_parameter,
    }
    deploy_stack(args.environment, overrides, region=args.region)


if __name__ == "__main__":
    main()
