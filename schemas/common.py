"""
Common types shared across schema modules.
"""

from enum import Enum


class RegistrationOutcome(str, Enum):
    """Result of the one-shot parse route registration task."""

    ALREADY_REGISTERED = "already_registered"
    CREATED = "created"
    LOOKUP_FAILED = "lookup_failed"
    CREATE_FAILED = "create_failed"
    TIMED_OUT = "timed_out"
