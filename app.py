#!/usr/bin/env python3
"""
Log Group Janitor CDK App
Deletes test log groups once their retention has elapsed.
"""

import aws_cdk as cdk
from cdk_nag import AwsSolutionsChecks

from infrastructure.stacks.log_group_janitor_stack import LogGroupJanitorStack

# Configuration
from infrastructure.config.environments import resolve_config

app = cdk.App()

# Get environment configuration (context keys override the environment file)
environment = app.node.try_get_context("environment") or "dev"
config = resolve_config(environment, app.node.try_get_context)

# CDK environment (account/region)
cdk_env = cdk.Environment(account=config.get("account_id"), region=config.get("region"))

janitor_stack = LogGroupJanitorStack(
    app,
    config["app_name"],
    environment=environment,
    config=config,
    env=cdk_env,
)

# ========================================
# TAGGING STRATEGY
# ========================================

cdk.Tags.of(app).add("Environment", environment)
cdk.Tags.of(app).add("ManagedBy", "CDK")
for key, value in (config.get("tags") or {}).items():
    cdk.Tags.of(janitor_stack).add(key, value)

# Security checks; accepted findings are suppressed with reasons inside the stack
cdk.Aspects.of(app).add(AwsSolutionsChecks())

app.synth()
