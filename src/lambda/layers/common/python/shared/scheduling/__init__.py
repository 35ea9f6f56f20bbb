"""One-shot deletion schedules on EventBridge Scheduler."""

from .deletion_schedule import (  # noqa: F401
    DeletionScheduler,
    build_schedule_name,
    compute_fire_at,
    format_at_expression,
)

__all__ = ["DeletionScheduler", "build_schedule_name", "compute_fire_at", "format_at_expression"]
