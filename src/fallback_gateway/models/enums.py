"""
Enumerations for the gateway data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class Role(str, Enum):
    """Author of a chat turn."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class FallbackPolicy(str, Enum):
    """
    How the orchestrator walks the provider list.

    SEQUENTIAL tries providers one after another and stops at the first
    success. RACE starts every provider at once, waits for all of them to
    settle and keeps the highest-priority success.
    """

    SEQUENTIAL = "sequential"
    RACE = "race"


class Classification(str, Enum):
    """Whether a failed attempt may be retried against the same provider."""

    RETRYABLE = "retryable"
    FATAL = "fatal"
