"""Telemetry and observability helpers.

This package emits deterministic phase logs for synthesis and configuration runs.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
