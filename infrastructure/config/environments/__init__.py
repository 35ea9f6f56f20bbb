import json
from typing import Any, Callable, Mapping, Optional, cast

from infrastructure.config.types import EnvironmentConfig

from .dev import dev_config
from .staging import staging_config
from .prod import prod_config

# CDK context key -> config key. Context wins over the environment file.
CONTEXT_OVERRIDES = {
    "appName": "app_name",
    "logGroupPatterns": "log_group_patterns",
    "requiredTags": "required_tags",
    "deletionDelayDays": "deletion_delay_days",
    "webhookParameterName": "webhook_parameter_name",
}


def get_environment_config(environment: str) -> EnvironmentConfig:
    """Get configuration for the specified environment."""
    configs = {
        "dev": dev_config,
        "staging": staging_config,
        "prod": prod_config,
    }

    if environment not in configs:
        raise ValueError(f"Unknown environment: {environment}")

    return cast(EnvironmentConfig, configs[environment])


def _decode_context_value(value: Any) -> Any:
    # `cdk -c key=value` always passes strings; lists/maps arrive as JSON text
    if isinstance(value, str) and value.strip()[:1] in ("[", "{"):
        return json.loads(value)
    return value


def validate_config(config: Mapping[str, Any]) -> EnvironmentConfig:
    """Validate and normalise the deploy-time settings consumed by the stack."""
    app_name = str(config.get("app_name") or "").strip()
    if not app_name:
        raise ValueError("app_name must be a non-empty string")

    patterns = config.get("log_group_patterns")
    if isinstance(patterns, str):
        patterns = [p for p in patterns.split(",")]
    patterns = [str(p).strip() for p in (patterns or []) if str(p).strip()]
    if not patterns:
        raise ValueError("log_group_patterns must contain at least one prefix")

    tags = config.get("required_tags") or {}
    if not isinstance(tags, dict):
        raise ValueError("required_tags must be a mapping of tag key to value")

    if config.get("deletion_delay_days") is None:
        raise ValueError("deletion_delay_days must be set")
    try:
        delay = int(config["deletion_delay_days"])
    except (TypeError, ValueError) as exc:
        raise ValueError("deletion_delay_days must be an integer") from exc
    if delay < 0:
        raise ValueError("deletion_delay_days must be >= 0")

    param = str(config.get("webhook_parameter_name") or "").strip()
    if not param:
        raise ValueError("webhook_parameter_name must be set")

    return cast(
        EnvironmentConfig,
        {
            **config,
            "app_name": app_name,
            "log_group_patterns": patterns,
            "required_tags": {str(k): str(v) for k, v in tags.items()},
            "deletion_delay_days": delay,
            "webhook_parameter_name": param,
        },
    )


def resolve_config(
    environment: str, try_get_context: Optional[Callable[[str], Any]] = None
) -> EnvironmentConfig:
    """Environment config with CDK context overrides applied and validated."""
    config: dict = dict(get_environment_config(environment))
    if try_get_context is not None:
        for context_key, config_key in CONTEXT_OVERRIDES.items():
            value = try_get_context(context_key)
            if value is not None:
                config[config_key] = _decode_context_value(value)
    return validate_config(config)
