"""Utility helpers for task priorities."""
from __future__ import annotations

from typing import Dict

LOW = "LOW"
NORMAL = "NORMAL"
HIGH = "HIGH"
URGENT = "URGENT"

# Ordered from least to most pressing.
PRIORITY_LABELS: Dict[str, str] = {
    LOW: "Low",
    NORMAL: "Normal",
    HIGH: "High",
    URGENT: "Urgent",
}

PRIORITIES = tuple(PRIORITY_LABELS.keys())
DEFAULT_PRIORITY = NORMAL


def normalize_priority(value: str | None) -> str:
    """Map external values onto one of the supported levels."""
    if value is None:
        return DEFAULT_PRIORITY
    candidate = str(value).strip().upper()
    if candidate in PRIORITY_LABELS:
        return candidate
    return DEFAULT_PRIORITY


def priority_label(value: str | None) -> str:
    return PRIORITY_LABELS[normalize_priority(value)]
