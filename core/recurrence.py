"""Recurrence labels stored on tasks.

Labels are persisted as-is; nothing in the planner expands them into
occurrences.
"""
from __future__ import annotations

from typing import Dict

NONE = "NONE"
DAILY = "DAILY"
WEEKLY = "WEEKLY"
MONTHLY = "MONTHLY"
YEARLY = "YEARLY"

RECURRENCE_LABELS: Dict[str, str] = {
    NONE: "Does not repeat",
    DAILY: "Daily",
    WEEKLY: "Weekly",
    MONTHLY: "Monthly",
    YEARLY: "Yearly",
}

DEFAULT_RECURRENCE = NONE


def normalize_recurrence(value: str | None) -> str:
    if not value:
        return DEFAULT_RECURRENCE
    candidate = str(value).strip().upper()
    if candidate in RECURRENCE_LABELS:
        return candidate
    return DEFAULT_RECURRENCE


__all__ = [
    "DAILY",
    "DEFAULT_RECURRENCE",
    "MONTHLY",
    "NONE",
    "RECURRENCE_LABELS",
    "WEEKLY",
    "YEARLY",
    "normalize_recurrence",
]
