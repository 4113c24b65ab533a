"""
opflow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do opflow.

Objetivo:
- Permitir que Operations, hooks e Pipelines levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload (ver `core.errors`)
- Evitar ValueError/RuntimeError genéricos em guardrails do ciclo de vida

Regras:
- Não contém lógica de domínio específica de uma Operation.
- Exceções devem carregar apenas dados estruturados (serializáveis) em `details`.
- Quando faz sentido, a exceção também herda do builtin equivalente
  (TypeError, ValueError, KeyError) para integração com código Python comum.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class OperationError(Exception):
    """Base class para exceções internas do opflow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.hint = hint

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Ciclo de vida de Operations
# ---------------------------------------------------------------------------

class AlreadyCompletedError(OperationError):
    """halt/succeed chamado em uma Operation que já atingiu estado terminal."""


class InvalidArgumentsError(OperationError, TypeError):
    """Argumentos de construção malformados (aridade, input posicional ausente, chave desconhecida)."""


class InvalidPropertyError(OperationError, ValueError):
    """O Property Store rejeitou um valor (required, accepts, converts ou tipo)."""


class OperationDefinitionError(OperationError):
    """Declaração inválida de Operation (nome reservado, hook malformado)."""


# ---------------------------------------------------------------------------
# Pipelines / Registry
# ---------------------------------------------------------------------------

class PipelineDefinitionError(OperationError):
    """Definição inválida de Pipeline (compose ambíguo, `use` fora da definição)."""


class DuplicateOperationError(OperationError, ValueError):
    """Nome de Operation já registrado no OperationRegistry."""


class OperationNotRegisteredError(OperationError, KeyError):
    """Nome de Operation ausente no OperationRegistry."""

    def __str__(self) -> str:
        return self.message
