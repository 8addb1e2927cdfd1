"""Metric definitions for the consistency engine and housekeeping."""

from __future__ import annotations

from .registry import registry


cascade_users_deleted_total = registry.counter(
    "cascade_users_deleted_total",
    "Number of users removed through the two-phase delete cascade.",
)

cascade_groups_total = registry.counter(
    "cascade_groups_total",
    "Groups touched by admin succession, by outcome.",
    label_names=("action",),
)

cascade_failures_total = registry.counter(
    "cascade_failures_total",
    "User deletions rolled back because the cascade failed.",
)

housekeeping_runs_total = registry.counter(
    "housekeeping_runs_total",
    "Notification housekeeping runs, by outcome.",
    label_names=("outcome",),
)

housekeeping_notifications_deleted_total = registry.counter(
    "housekeeping_notifications_deleted_total",
    "Notifications removed by housekeeping.",
)

housekeeping_last_success_timestamp = registry.gauge(
    "housekeeping_last_success_timestamp",
    "Unix timestamp of the last successful housekeeping run.",
)
