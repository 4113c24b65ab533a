# src/opflow/core/operation/types.py
"""
Tipos canônicos do ciclo de vida de Operations do opflow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre a máquina de estados da Operation, a cadeia de
callbacks e as camadas de composição e rastreabilidade.

Os tipos aqui definidos representam:
    - estados de uma instância de Operation
    - classificação de Inputs e de hooks
    - a variante de Outcome trocada entre as camadas da cadeia de callbacks
    - o snapshot imutável do resultado de uma execução

Componentes principais:
    - OperationState  → enum de estados (INITIALIZED, HALTED, SUCCEEDED, FAILED)
    - InputKind       → enum de tipos de Input (POSITIONAL, KEYWORD)
    - HookKind        → enum de grupos de hooks do ciclo de vida
    - Outcome         → variante Pending | Halted | Succeeded | Failed
    - OperationResult → snapshot imutável do resultado de execução

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Nenhuma lógica de execução vive neste módulo
    - A variante de Outcome substitui saltos não locais entre camadas

Invariantes:
    - Enums possuem valores textuais canônicos
    - Variantes de Outcome são imutáveis
    - `PENDING` é o único valor da variante Pending

Limites explícitos:
    - Não executa Operations
    - Não registra hooks
    - Não decide políticas de execução

Este módulo existe para garantir consistência,
interoperabilidade e clareza semântica no ciclo de vida.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class OperationState(str, Enum):
    """
    Estados possíveis de uma instância de Operation.

    Estados definidos:
        - INITIALIZED: instância construída, ainda sem desfecho
        - HALTED: interrompida de forma esperada (não é erro)
        - SUCCEEDED: concluída pelo caminho normal
        - FAILED: interrompida por exceção não tratada

    Invariantes:
        - Uma instância sai de INITIALIZED no máximo uma vez
        - HALTED e SUCCEEDED são mutuamente exclusivos
        - FAILED só substitui um desfecho provisório dentro da mesma execução

    Limites explícitos:
        - Não representa estados de execução em andamento
        - Não contém lógica associada ao estado
    """
    INITIALIZED = "initialized"
    HALTED = "halted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self is not OperationState.INITIALIZED


class InputKind(str, Enum):
    """Forma de ligação de um Input declarado (argumento posicional ou nomeado)."""
    POSITIONAL = "positional"
    KEYWORD = "keyword"


class HookKind(str, Enum):
    """
    Grupos de hooks do ciclo de vida.

    Os valores coincidem com os nomes dos métodos procurados em objetos
    delegados (`before`, `around`, `after`, `error`, `succeeded`, `halted`).
    """
    BEFORE = "before"
    AROUND = "around"
    AFTER = "after"
    ERROR = "error"
    SUCCEEDED = "succeeded"
    HALTED = "halted"


# ---------------------------------------------------------------------------
# Outcome — variante trocada entre as camadas da cadeia de callbacks
# ---------------------------------------------------------------------------

class Pending:
    """Camada concluída sem desfecho antecipado: a cadeia continua."""

    _instance: Optional["Pending"] = None

    def __new__(cls) -> "Pending":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "PENDING"


PENDING = Pending()


@dataclass(frozen=True)
class Halted:
    """Interrupção esperada carregando um payload."""
    payload: Any = None


@dataclass(frozen=True)
class Succeeded:
    """Conclusão pelo caminho normal carregando um payload."""
    payload: Any = None


@dataclass(frozen=True)
class Failed:
    """Exceção capturada que deve ser propagada ao chamador."""
    error: BaseException


Outcome = Union[Pending, Halted, Succeeded, Failed]


class Unwind(BaseException):
    """
    Sinal interno que transporta um Outcome até a camada mais próxima.

    Levantado por `halt`/`succeed` e por `proceed()` quando a camada interna
    termina antecipadamente. Herda de BaseException para atravessar
    `except Exception` em código de usuário; cada camada da cadeia de
    callbacks o converte de volta em variante de Outcome.
    """

    def __init__(self, outcome: Outcome) -> None:
        super().__init__(outcome)
        self.outcome = outcome


def state_of(outcome: Outcome) -> OperationState:
    """Mapeia uma variante de Outcome para o OperationState correspondente."""
    if isinstance(outcome, Halted):
        return OperationState.HALTED
    if isinstance(outcome, Succeeded):
        return OperationState.SUCCEEDED
    if isinstance(outcome, Failed):
        return OperationState.FAILED
    return OperationState.INITIALIZED


@dataclass(frozen=True)
class OperationResult:
    """
    Snapshot imutável do resultado de uma execução de Operation.

    Campos:
        - operation: nome do tipo de Operation
        - state: estado final da instância
        - output: valor memoizado (None quando falhou)
        - error: payload serializável do erro, quando houver

    Este objeto existe para padronizar o que é registrado no Execution
    Trace, sem expor a instância mutável.
    """
    operation: str
    state: OperationState
    output: Any = None
    error: Optional[Dict[str, Any]] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.state.terminal
