# src/opflow/core/traceability/__init__.py
"""Rastreabilidade de execuções (Execution Trace + Event Log)."""

from .trace import (
    ExecutionTrace,
    add_event,
    create_trace,
    load_trace,
    operation_failed,
    operation_finished,
    operation_started,
    save_trace,
)

__all__ = [
    "ExecutionTrace",
    "add_event",
    "create_trace",
    "load_trace",
    "operation_failed",
    "operation_finished",
    "operation_started",
    "save_trace",
]
