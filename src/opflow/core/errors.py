"""
opflow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros serializáveis do opflow.
Falhas de execução são registradas no Execution Trace e, por isso, precisam
ser:

- explícitas
- serializáveis
- rastreáveis
- acionáveis

A exceção original continua sendo relançada ao chamador; o payload é apenas
a sua representação estável para auditoria.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .exceptions import (
    AlreadyCompletedError,
    DuplicateOperationError,
    InvalidArgumentsError,
    InvalidPropertyError,
    OperationDefinitionError,
    OperationError,
    OperationNotRegisteredError,
    PipelineDefinitionError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do opflow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao desenvolvedor (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Ciclo de vida
OPERATION_ALREADY_COMPLETED = "OPERATION_ALREADY_COMPLETED"
OPERATION_INVALID_ARGUMENTS = "OPERATION_INVALID_ARGUMENTS"
OPERATION_INVALID_PROPERTY = "OPERATION_INVALID_PROPERTY"
OPERATION_DEFINITION_ERROR = "OPERATION_DEFINITION_ERROR"
OPERATION_EXECUTION_ERROR = "OPERATION_EXECUTION_ERROR"

# Pipelines / Registry
PIPELINE_DEFINITION_ERROR = "PIPELINE_DEFINITION_ERROR"
OPERATION_DUPLICATED = "OPERATION_DUPLICATED"
OPERATION_NOT_REGISTERED = "OPERATION_NOT_REGISTERED"


_CODES = (
    (AlreadyCompletedError, OPERATION_ALREADY_COMPLETED),
    (InvalidArgumentsError, OPERATION_INVALID_ARGUMENTS),
    (InvalidPropertyError, OPERATION_INVALID_PROPERTY),
    (OperationDefinitionError, OPERATION_DEFINITION_ERROR),
    (PipelineDefinitionError, PIPELINE_DEFINITION_ERROR),
    (DuplicateOperationError, OPERATION_DUPLICATED),
    (OperationNotRegisteredError, OPERATION_NOT_REGISTERED),
)


def error_code_for(exc: BaseException) -> str:
    """Retorna o código estável associado à classe da exceção."""
    for exc_type, code in _CODES:
        if isinstance(exc, exc_type):
            return code
    return OPERATION_EXECUTION_ERROR


def error_payload_from_exception(
    exc: BaseException,
    *,
    operation: Optional[str] = None,
) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - OperationError: já vem com message/details/hint.
    - Outras exceções: encapsular como OPERATION_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, OperationError):
        details = dict(exc.details)
        if operation is not None:
            details.setdefault("operation", operation)
        return ErrorPayload(
            type=error_code_for(exc),
            message=exc.message or "Erro de execução",
            details=details,
            hint=exc.hint,
        )

    # Fallback genérico
    return ErrorPayload(
        type=OPERATION_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={
            "exception_class": exc.__class__.__name__,
            "operation": operation,
        },
        hint="Verifique o corpo da Operation e seus hooks; a exceção original foi relançada ao chamador",
    )
