# src/opflow/__init__.py
"""
opflow — Operations com ciclo de vida explícito e composição em Pipelines.

Este pacote raiz define o namespace público do opflow, um framework para
unidades discretas de lógica de negócio ("operations") que executam por um
ciclo de vida fixo, com hooks before/around/after, término antecipado
estruturado (halt / succeed) e desfechos explícitos (succeeded, halted,
failed), além de uma camada de composição que encadeia operations em
Pipelines.

Arquitetura em alto nível:
    - core.operation    → Inputs, Property Store, hooks e máquina de estados
    - core.pipeline     → stages, Pipeline, composição e builder declarativo
    - core.config       → carregamento, merge e hashing de definições
    - core.traceability → Execution Trace e Event Log

Limites explícitos:
    - Execução síncrona, em processo, sem concorrência
    - Não persiste estado de Operations
"""

from .core.exceptions import (
    AlreadyCompletedError,
    DuplicateOperationError,
    InvalidArgumentsError,
    InvalidPropertyError,
    OperationDefinitionError,
    OperationError,
    OperationNotRegisteredError,
    PipelineDefinitionError,
)
from .core.operation import (
    Input,
    Operation,
    OperationRegistry,
    OperationResult,
    OperationState,
    Property,
    after,
    around,
    before,
    on_error,
    on_halted,
    on_succeeded,
    operation_from_function,
)
from .core.pipeline import Pipeline, build_pipeline, computed, load_pipelines, stage
from .core.traceability import ExecutionTrace, create_trace, load_trace, save_trace

__all__ = [
    "AlreadyCompletedError",
    "DuplicateOperationError",
    "ExecutionTrace",
    "Input",
    "InvalidArgumentsError",
    "InvalidPropertyError",
    "Operation",
    "OperationDefinitionError",
    "OperationError",
    "OperationNotRegisteredError",
    "OperationRegistry",
    "OperationResult",
    "OperationState",
    "Pipeline",
    "PipelineDefinitionError",
    "Property",
    "after",
    "around",
    "before",
    "build_pipeline",
    "computed",
    "create_trace",
    "load_pipelines",
    "load_trace",
    "on_error",
    "on_halted",
    "on_succeeded",
    "operation_from_function",
    "save_trace",
    "stage",
]
