# src/opflow/core/pipeline/pipeline.py
"""
Pipeline — composição sequencial de Operations.

Um Pipeline é uma Operation cujo corpo é gerado a partir de uma lista
ordenada de stages. O output de cada stage vira o input do próximo:

    class Shout(Pipeline):
        stages = [Strip, stage(Upcase), stage(Repeat, times=3)]

    Shout.call("  chunky bacon ")

    Pipeline.compose(Strip, Upcase)
    Pipeline.compose(body=lambda p: (p.use(Strip), p.use(Upcase)))
    Strip >> Upcase

Política de execução:
    - o primeiro stage recebe os Inputs posicionais do Pipeline e os
      Inputs keyword atribuídos explicitamente
    - output em lista/tupla é espalhado como argumentos posicionais;
      qualquer outro valor é repassado como argumento único
    - opções do stage sobrepõem valores repassados (computed → resolvidas
      contra o Pipeline no momento da construção do stage)
    - stage halted → o Pipeline é interrompido com o output do stage e os
      stages seguintes nunca são instanciados
    - o output do último stage é o output do Pipeline

Decisões arquiteturais:
    - `use` só é aceito durante a definição (atributo `stages` ou `compose`)
    - Os Inputs do Pipeline são derivados do primeiro stage quando o Pipeline
      ainda não possui stages nem Inputs (nome, forma e default)
    - Subclasses acrescentam stages à lista herdada
    - `>>` nunca muta os operandos; só Pipelines gerados por composição são
      achatados, os demais viram um stage aninhado
    - Um Pipeline vazio conclui com output `None`

Invariantes:
    - A lista de stages de um tipo nunca é mutada após a definição
    - Sub-operations recebem o mesmo Execution Trace do Pipeline

Limites explícitos:
    - Execução estritamente sequencial e síncrona
    - Não há retry, skip ou paralelismo de stages
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Type

from ..exceptions import PipelineDefinitionError
from ..operation.base import Operation, check_property_name, operation_base, extend_inputs
from ..operation.inputs import Input, Property
from ..traceability.trace import add_event
from .stage import Computed, Stage, stage


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Pipeline(Operation):
    """Operation cujo corpo executa uma lista ordenada de stages."""

    stages: Tuple[Stage, ...] = ()
    definition_hash: Optional[str] = None
    _defining: bool = False
    _composed: bool = False

    @classmethod
    def _define(cls, namespace: Dict[str, Any]) -> None:
        super()._define(namespace)

        own = namespace.get("stages", ())
        if not isinstance(own, (list, tuple)):
            raise PipelineDefinitionError(
                f"{cls.__name__}.stages deve ser uma lista, recebido: {type(own).__name__}"
            )

        parent = operation_base(cls)
        cls.stages = tuple(getattr(parent, "stages", ()))
        cls._defining = True
        try:
            for item in own:
                cls.use(item)
        finally:
            cls._defining = False

    @classmethod
    def use(cls, operation: Any, **options: Any) -> Stage:
        """Acrescenta um stage (permitido apenas durante a definição)."""
        if not cls.__dict__.get("_defining", False):
            raise PipelineDefinitionError(
                f"{cls.__name__}.use() só pode ser chamado durante a definição do Pipeline",
                hint="Declare `stages = [...]` no corpo da classe ou use Pipeline.compose()",
            )

        binding = stage(operation, **options)
        if not cls.stages and not cls.input_descriptors:
            cls._adopt_inputs(binding.operation)
        cls.stages = cls.stages + (binding,)
        return binding

    @classmethod
    def _adopt_inputs(cls, operation: Type[Operation]) -> None:
        adopted: List[Tuple[str, Property]] = []
        for descriptor in operation.input_descriptors:
            check_property_name(cls, cls, descriptor.name)
            prop = Input(
                descriptor.property.default,
                keyword=descriptor.keyword,
                annotation=descriptor.property.annotation,
            )
            prop.__set_name__(cls, descriptor.name)
            setattr(cls, descriptor.name, prop)
            adopted.append((descriptor.name, prop))

        cls.property_schema = cls.property_schema.extend(cls.__name__, adopted)
        cls.input_descriptors = extend_inputs(cls.input_descriptors, adopted)

    @classmethod
    def compose(
        cls,
        *operations: Any,
        body: Any = None,
        name: Optional[str] = None,
    ) -> Type["Pipeline"]:
        """
        Cria um novo tipo de Pipeline a partir de uma lista de operations
        ou de um `body(pipeline_type)` que chama `use` repetidamente.
        Exatamente uma das formas deve ser usada.
        """
        if bool(operations) == (body is not None):
            raise PipelineDefinitionError(
                "compose() espera uma lista de operations ou um body, exatamente um deles"
            )
        return cls._build(name or "ComposedPipeline", operations, body)

    @classmethod
    def concat(cls, left: Any, right: Any) -> Type["Pipeline"]:
        """
        Novo Pipeline que executa `left` e depois `right`.

        Pipelines gerados por `compose`/`concat` cujos stages não têm opções
        computed contribuem com a sua lista de stages. Qualquer outro Pipeline
        (Inputs, hooks ou atributos próprios) entra como um único stage aninhado.
        """
        left_stages, right_stages = _stages_of(left), _stages_of(right)
        name = f"{_label(left, left_stages)}Then{_label(right, right_stages)}"
        return Pipeline._build(name, left_stages + right_stages, None)

    @classmethod
    def _build(cls, name: str, operations: Any, body: Any) -> Type["Pipeline"]:
        pipeline = type(cls)(name, (cls,), {"__module__": cls.__module__})
        pipeline._composed = cls is Pipeline
        pipeline._defining = True
        try:
            if body is not None:
                body(pipeline)
            else:
                for operation in operations:
                    pipeline.use(operation)
        finally:
            pipeline._defining = False
        return pipeline

    def execute(self) -> Any:
        cls = type(self)
        if not cls.stages:
            return None

        data: Any = [getattr(self, d.name) for d in cls.positional_inputs()]
        forwarded = {
            d.name: getattr(self, d.name)
            for d in cls.keyword_inputs()
            if self._properties.is_set(d.name)
        }

        for index, binding in enumerate(cls.stages):
            operation = binding.build(data, self, forwarded if index == 0 else None)
            operation.run(trace=self._trace)

            if operation.halted:
                if self._trace is not None:
                    add_event(
                        self._trace,
                        event_type="stage_halted",
                        ts=_now(),
                        payload={"pipeline": cls.__name__, "stage": binding.name, "index": index},
                    )
                self.halt(operation.output)

            data = operation.output

        return data


def _flattenable(operation: Any) -> bool:
    if not (isinstance(operation, type) and issubclass(operation, Pipeline)):
        return False
    if not operation.__dict__.get("_composed", False):
        return False
    return not any(
        isinstance(option, Computed) for binding in operation.stages for option in binding.options.values()
    )


def _stages_of(operation: Any) -> Tuple[Stage, ...]:
    if _flattenable(operation):
        return tuple(operation.stages)
    return (stage(operation),)


def _label(operation: Any, stages: Tuple[Stage, ...]) -> str:
    if isinstance(operation, type) or not stages:
        return getattr(operation, "__name__", "Pipeline")
    return stages[0].name
