# src/opflow/core/operation/base.py
"""
Operation — máquina de estados de execução do opflow.

Uma Operation é uma unidade discreta de lógica de negócio com Inputs
declarados, hooks de ciclo de vida e exatamente um desfecho terminal:

    class Upcase(Operation):
        text = Input()

        @before
        def strip(self):
            self.text = self.text.strip()

        def execute(self):
            return self.text.upper()

    Upcase.call("  chunky bacon ")   # -> "CHUNKY BACON"

Ciclo de vida:
    - construção: liga argumentos aos Inputs (falhas = InvalidArgumentsError)
    - `run()`: executa a cadeia de callbacks (eager) e retorna a instância
    - `output`: executa na primeira leitura (lazy) e memoiza o valor
    - `halt(payload)` / `succeed(payload)`: término antecipado esperado
    - exceção não tratada: estado FAILED, hooks de erro, exceção relançada

Decisões arquiteturais:
    - Os registros de Inputs, propriedades e hooks são construídos uma
      única vez, na definição da classe, por um passo explícito de `extend`
      (copia o registro do pai e acrescenta); o pai nunca é mutado
    - O desfecho interno é uma variante (Pending | Halted | Succeeded |
      Failed); `Unwind` apenas transporta a variante por código de usuário
    - Um desfecho halted/succeeded é provisório até a fronteira de `run()`:
      uma exceção posterior na mesma execução o converte em FAILED
    - `call()` retorna o output (convenção única do projeto)

Invariantes:
    - O estado sai de INITIALIZED no máximo uma vez
    - O corpo (`execute`) roda no máximo uma vez por instância
    - halt/succeed após o desfecho levantam AlreadyCompletedError
    - Exatamente um grupo (succeeded ou halted) é notificado por execução
      bem-sucedida; nenhum deles quando a cadeia falha (uma exceção em um
      hook desse grupo acontece depois da notificação, ver `run`)

Limites explícitos:
    - Não há concorrência, cancelamento nem persistência de estado
    - Uma instância não deve ser compartilhada entre chamadores concorrentes
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..errors import error_payload_from_exception
from ..exceptions import AlreadyCompletedError, OperationDefinitionError, OperationError
from ..traceability import trace as tracing
from .binding import bind_arguments
from .hooks import CallbackChain, HookRegistry, collect_hooks
from .inputs import MISSING, Input, InputDescriptor, Property
from .store import PropertySchema
from .types import (
    PENDING,
    Failed,
    Halted,
    HookKind,
    OperationResult,
    OperationState,
    Outcome,
    Succeeded,
    Unwind,
    state_of,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def operation_base(cls: type) -> Optional[type]:
    for base in cls.__mro__[1:]:
        if isinstance(base, OperationMeta):
            return base
    return None


def check_property_name(cls: type, parent: Optional[type], name: str) -> None:
    if name.startswith("_") or name.startswith("model_"):
        raise OperationDefinitionError(
            f"{cls.__name__}.{name}: nomes de propriedade não podem começar com '_' ou 'model_'",
            details={"operation": cls.__name__, "property": name},
        )
    if parent is None:
        return
    existing = getattr(parent, name, MISSING)
    if existing is not MISSING and not isinstance(existing, Property):
        raise OperationDefinitionError(
            f"{cls.__name__}.{name}: nome reservado pela Operation",
            details={"operation": cls.__name__, "property": name},
            hint="Renomeie a propriedade; ela sobrescreveria um atributo do ciclo de vida",
        )


def extend_inputs(
    inherited: Tuple[InputDescriptor, ...],
    properties: Iterable[Tuple[str, Property]],
) -> Tuple[InputDescriptor, ...]:
    """Copia os Inputs herdados e acrescenta (ou substitui, na mesma posição) os próprios."""
    descriptors: List[InputDescriptor] = list(inherited)
    for name, prop in properties:
        index = next((i for i, d in enumerate(descriptors) if d.name == name), None)
        if not isinstance(prop, Input):
            if index is not None:
                del descriptors[index]
            continue
        descriptor = InputDescriptor.of(prop)
        if index is None:
            descriptors.append(descriptor)
        else:
            descriptors[index] = descriptor
    return tuple(descriptors)


class OperationMeta(type):
    """Metaclasse que registra a definição do tipo e oferece composição via `>>`."""

    def __init__(cls, name, bases, namespace, **kwargs):
        super().__init__(name, bases, namespace, **kwargs)
        cls._define(namespace)

    def __rshift__(cls, other):
        from ..pipeline.pipeline import Pipeline

        return Pipeline.concat(cls, other)

    def __rrshift__(cls, other):
        from ..pipeline.pipeline import Pipeline

        return Pipeline.concat(other, cls)


class Operation(metaclass=OperationMeta):
    """
    Unidade de lógica de negócio com ciclo de vida e desfecho explícitos.

    Subclasses implementam `execute()` e declaram `Input`/`Property` no corpo
    da classe. Hooks podem ser registrados com os decoradores de
    `opflow.core.operation.hooks` ou via delegados em `hooks = [...]`.
    Subclasses com `__init__` próprio devem chamar `super().__init__`.
    """

    input_descriptors: Tuple[InputDescriptor, ...] = ()
    property_schema: PropertySchema
    hook_registry: HookRegistry
    hooks: Tuple[Any, ...] = ()

    @classmethod
    def _define(cls, namespace: Dict[str, Any]) -> None:
        parent = operation_base(cls)
        own = [(name, value) for name, value in namespace.items() if isinstance(value, Property)]
        for name, _ in own:
            check_property_name(cls, parent, name)

        if parent is None:
            schema, registry, inherited = PropertySchema(cls.__name__), HookRegistry(), ()
        else:
            schema, registry, inherited = (
                parent.property_schema,
                parent.hook_registry,
                parent.input_descriptors,
            )

        cls.property_schema = schema.extend(cls.__name__, own)
        cls.hook_registry = registry.extend(collect_hooks(namespace))
        cls.input_descriptors = extend_inputs(inherited, own)

    @classmethod
    def positional_inputs(cls) -> Tuple[InputDescriptor, ...]:
        return tuple(d for d in cls.input_descriptors if d.positional)

    @classmethod
    def keyword_inputs(cls) -> Tuple[InputDescriptor, ...]:
        return tuple(d for d in cls.input_descriptors if d.keyword)

    @classmethod
    def call(cls, *args: Any, **kwargs: Any) -> Any:
        """Constrói, executa e retorna o output."""
        return cls(*args, **kwargs).perform()

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        cls = type(self)
        self._state = OperationState.INITIALIZED
        self._outcome: Outcome = PENDING
        self._output: Any = None
        self._error: Optional[BaseException] = None
        self._running = False
        self._trace: Optional[tracing.ExecutionTrace] = None

        values = bind_arguments(
            cls.input_descriptors,
            args,
            kwargs,
            known=cls.property_schema.names,
            operation=cls.__name__,
        )
        self._properties = cls.property_schema.instantiate(values)

    # ------------------------------------------------------------------
    # Corpo
    # ------------------------------------------------------------------

    def execute(self) -> Any:
        raise NotImplementedError(f"{type(self).__name__}.execute() não foi implementado")

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    def run(self, *, trace: Optional[tracing.ExecutionTrace] = None) -> "Operation":
        """
        Executa a Operation (eager) e retorna a própria instância.

        Chamadas subsequentes retornam a instância sem reexecutar. Quando
        `trace` é fornecido, início e término são registrados nele (e
        repassados a sub-operations de Pipelines).

        Um hook succeeded/halted que levanta encerra a notificação do grupo:
        os hooks anteriores do grupo já rodaram, o estado passa a FAILED,
        os hooks de erro são notificados e a exceção é relançada.

        Raises:
            Exception: a exceção original levantada pelo corpo ou por um hook,
                depois de notificar os hooks de erro.
        """
        if self._state is not OperationState.INITIALIZED or self._running:
            return self

        self._trace = trace
        key = tracing.operation_started(trace, self, ts=_now()) if trace is not None else None
        chain = CallbackChain(type(self).hook_registry)

        self._running = True
        try:
            outcome = chain.run(self, self._invoke)
            if not isinstance(outcome, Failed):
                group = HookKind.SUCCEEDED if self._state is OperationState.SUCCEEDED else HookKind.HALTED
                outcome = chain.notify(self, group)

            if isinstance(outcome, Failed):
                self._fail(outcome.error)
                if key is not None:
                    tracing.operation_failed(trace, key, self, outcome.error, ts=_now())
                chain.on_error(self, outcome.error)
        finally:
            self._running = False

        if isinstance(outcome, Failed):
            raise outcome.error

        if key is not None:
            tracing.operation_finished(trace, key, self, ts=_now())
        return self

    def perform(self) -> Any:
        """Executa (se ainda não executou) e retorna o output."""
        return self.run().output

    @property
    def output(self) -> Any:
        """
        Output memoizado. A primeira leitura dispara a execução.

        Durante a execução retorna o valor corrente sem reentrar na cadeia.
        Em uma instância FAILED relança a exceção capturada.
        """
        if self._running:
            return self._output
        if self._state is OperationState.INITIALIZED:
            self.run()
        if self._state is OperationState.FAILED:
            raise self._error
        return self._output

    # ------------------------------------------------------------------
    # Término antecipado
    # ------------------------------------------------------------------

    def halt(self, payload: Any = None) -> None:
        """Interrompe a execução (desfecho esperado, não é erro)."""
        self._interrupt(Halted(payload))

    def succeed(self, payload: Any = None) -> None:
        """Conclui a execução antecipadamente com sucesso."""
        self._interrupt(Succeeded(payload))

    def _interrupt(self, outcome: Outcome) -> None:
        if not self._running:
            if self._state.terminal:
                self._already_completed()
            raise OperationError(
                "halt/succeed só podem ser chamados durante a execução",
                details={"operation": type(self).__name__},
                hint="Chame halt/succeed dentro de execute() ou de um hook",
            )
        self._settle(outcome)
        raise Unwind(outcome)

    def _invoke(self) -> None:
        value = self.execute()
        self._settle(Succeeded(value))

    def _settle(self, outcome: Outcome) -> None:
        if self._outcome is not PENDING:
            self._already_completed()
        self._outcome = outcome
        self._state = state_of(outcome)
        self._output = outcome.payload

    def _fail(self, error: BaseException) -> None:
        self._outcome = Failed(error)
        self._state = OperationState.FAILED
        self._error = error

    def _already_completed(self) -> None:
        raise AlreadyCompletedError(
            f"{type(self).__name__} já foi concluída ({self._state.value})",
            details={"operation": type(self).__name__, "state": self._state.value},
            hint="halt/succeed não podem ser chamados depois que o corpo concluiu",
        )

    # ------------------------------------------------------------------
    # Estado
    # ------------------------------------------------------------------

    @property
    def state(self) -> OperationState:
        return self._state

    @property
    def halted(self) -> bool:
        return self._state is OperationState.HALTED

    @property
    def succeeded(self) -> bool:
        return self._state is OperationState.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self._state is OperationState.FAILED

    @property
    def completed(self) -> bool:
        return self._state.terminal

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def result(self) -> OperationResult:
        name = type(self).__name__
        if self.failed:
            return OperationResult(
                operation=name,
                state=self._state,
                error=error_payload_from_exception(self._error, operation=name).to_dict(),
            )
        return OperationResult(operation=name, state=self._state, output=self._output)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} state={self._state.value}>"
