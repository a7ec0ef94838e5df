"""Telemetry and observability helpers.

This package emits deterministic run events for auditing extraction runs.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
