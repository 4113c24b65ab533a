# src/opflow/core/operation/hooks.py
"""
Hooks do ciclo de vida e Callback Chain Runner.

Este módulo concentra:
    - os decoradores de registro inline (`@before`, `@around`, `@after`,
      `@on_error`, `@on_succeeded`, `@on_halted`)
    - a coleta de hooks a partir do corpo de uma classe (inline + delegados)
    - o `HookRegistry` imutável de cada tipo de Operation
    - o `CallbackChain`, que executa before/around/corpo/after

Ordem de execução (de fora para dentro):
    1. before hooks, em ordem de registro (ancestrais primeiro)
    2. around hooks aninhados; o primeiro registrado é o mais externo
    3. o corpo, uma única vez, dentro do around mais interno
    4. after hooks, em ordem de registro, depois que o controle retorna
       por todas as continuações dos around hooks

Decisões arquiteturais:
    - Cada camada retorna uma variante de Outcome; `Unwind` só existe para
      atravessar código de usuário e é convertido na camada mais próxima
    - Exceções interrompem a cadeia imediatamente (nenhum after posterior roda)
    - Um around hook que retorna sem chamar `proceed()` interrompe a
      Operation como halted, sem payload
    - Hooks de erro são chamados diretamente; uma exceção levantada por um
      deles se propaga ao chamador

Invariantes:
    - O registro de um subtipo é o do pai copiado e acrescido
    - `proceed()` executa as camadas internas no máximo uma vez

Limites explícitos:
    - Não decide transições de estado (responsabilidade de `Operation`)
    - Não registra eventos de rastreabilidade
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple

from ..exceptions import OperationDefinitionError, OperationError
from .types import PENDING, Failed, HookKind, Outcome, Unwind


_MARKER = "__opflow_hook__"


def _marker(kind: HookKind) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        if not callable(fn):
            raise OperationDefinitionError(
                f"@{kind.value} espera um método, recebido: {type(fn).__name__}"
            )
        setattr(fn, _MARKER, kind)
        return fn

    return decorate


before = _marker(HookKind.BEFORE)
around = _marker(HookKind.AROUND)
after = _marker(HookKind.AFTER)
on_error = _marker(HookKind.ERROR)
on_succeeded = _marker(HookKind.SUCCEEDED)
on_halted = _marker(HookKind.HALTED)


@dataclass(frozen=True)
class Hook:
    """Hook registrado. `callback` recebe sempre a Operation como primeiro argumento."""

    kind: HookKind
    callback: Callable[..., Any]
    source: str

    def __call__(self, operation: Any, *args: Any) -> Any:
        return self.callback(operation, *args)


def delegate_hooks(delegate: Any) -> List[Hook]:
    """Hooks expostos por um objeto delegado (métodos `before`, `around`, ...)."""
    label = getattr(delegate, "__name__", type(delegate).__name__)
    hooks = [
        Hook(kind, getattr(delegate, kind.value), f"{label}.{kind.value}")
        for kind in HookKind
        if callable(getattr(delegate, kind.value, None))
    ]
    if not hooks:
        raise OperationDefinitionError(
            f"Delegado {label!r} não expõe nenhum método de hook",
            details={"expected": [kind.value for kind in HookKind]},
        )
    return hooks


def collect_hooks(namespace: Mapping[str, Any]) -> List[Hook]:
    """Hooks declarados no corpo de uma classe, em ordem de definição."""
    collected: List[Hook] = []
    for name, value in namespace.items():
        if name == "hooks":
            if not isinstance(value, (list, tuple)):
                raise OperationDefinitionError("`hooks` deve ser uma lista de delegados")
            for delegate in value:
                collected.extend(delegate_hooks(delegate))
            continue
        kind = getattr(value, _MARKER, None)
        if isinstance(kind, HookKind):
            collected.append(Hook(kind, value, name))
    return collected


class HookRegistry:
    """Registro ordenado e imutável de hooks de um tipo de Operation."""

    def __init__(self, hooks: Iterable[Hook] = ()) -> None:
        self._hooks: Tuple[Hook, ...] = tuple(hooks)
        self._by_kind: Dict[HookKind, Tuple[Hook, ...]] = {
            kind: tuple(h for h in self._hooks if h.kind is kind) for kind in HookKind
        }

    def extend(self, hooks: Iterable[Hook]) -> "HookRegistry":
        return HookRegistry(self._hooks + tuple(hooks))

    def of(self, kind: HookKind) -> Tuple[Hook, ...]:
        return self._by_kind[kind]

    def __iter__(self):
        return iter(self._hooks)

    def __len__(self) -> int:
        return len(self._hooks)


def capture(fn: Callable[[], Any]) -> Outcome:
    """Executa `fn` e converte o término em variante de Outcome."""
    try:
        fn()
    except Unwind as signal:
        return signal.outcome
    except Exception as exc:  # noqa: BLE001
        return Failed(exc)
    return PENDING


class CallbackChain:
    """Executa before/around/corpo/after de uma Operation sobre um HookRegistry."""

    def __init__(self, registry: HookRegistry) -> None:
        self._registry = registry
        self._around = registry.of(HookKind.AROUND)

    def run(self, operation: Any, body: Callable[[], Any]) -> Outcome:
        """
        Executa a cadeia completa.

        Retorna PENDING quando o corpo concluiu normalmente, Halted/Succeeded
        quando houve término antecipado, ou Failed com a exceção capturada.
        """
        outcome = self.notify(operation, HookKind.BEFORE)
        if outcome is PENDING:
            outcome = self._layer(operation, 0, body)
        if isinstance(outcome, Failed):
            return outcome

        finished = self.notify(operation, HookKind.AFTER)
        if isinstance(finished, Failed):
            return finished
        return outcome

    def notify(self, operation: Any, kind: HookKind) -> Outcome:
        """Executa um grupo de hooks sem argumentos; para no primeiro término."""
        for hook in self._registry.of(kind):
            outcome = capture(lambda: hook(operation))
            if outcome is not PENDING:
                return outcome
        return PENDING

    def on_error(self, operation: Any, error: BaseException) -> None:
        for hook in self._registry.of(HookKind.ERROR):
            hook(operation, error)

    def _layer(self, operation: Any, index: int, body: Callable[[], Any]) -> Outcome:
        if index == len(self._around):
            return capture(body)

        hook = self._around[index]
        calls: List[bool] = []

        def proceed() -> None:
            if calls:
                raise OperationError(
                    "proceed() chamado mais de uma vez",
                    details={"hook": hook.source},
                )
            calls.append(True)
            inner = self._layer(operation, index + 1, body)
            if inner is not PENDING:
                raise Unwind(inner)

        outcome = capture(lambda: hook(operation, proceed))
        if outcome is PENDING and not calls:
            outcome = capture(operation.halt)
        return outcome
