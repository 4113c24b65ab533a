# src/opflow/core/operation/__init__.py
"""
Núcleo de Operations: declaração de Inputs, Property Store, hooks e a
máquina de estados de execução.
"""

from .base import Operation, OperationMeta
from .functional import operation_from_function
from .hooks import after, around, before, on_error, on_halted, on_succeeded
from .inputs import Input, InputDescriptor, Property
from .registry import OperationRegistry
from .types import InputKind, HookKind, OperationResult, OperationState

__all__ = [
    "HookKind",
    "Input",
    "InputDescriptor",
    "InputKind",
    "Operation",
    "OperationMeta",
    "OperationRegistry",
    "OperationResult",
    "OperationState",
    "Property",
    "after",
    "around",
    "before",
    "on_error",
    "on_halted",
    "on_succeeded",
    "operation_from_function",
]
