# src/opflow/core/pipeline/builder.py
"""
Construção declarativa de Pipelines a partir de definições YAML/JSON.

Formato de uma definição (v1):

    pipelines:
      shout:
        inputs:                     # opcional; sem inputs, herda do 1º stage
          text: {}
          times: {keyword: true, default: 2}
        stages:
          - strip                   # nome registrado no OperationRegistry
          - operation: upcase
          - operation: repeat
            options:
              times: {$ref: times}  # resolvido contra o Pipeline em execução
              separator: " - "

Regras:
    - `stages` é obrigatório e deve ser uma lista
    - cada stage é um nome ou um mapa com `operation` (+ `options`)
    - opções `{$ref: nome}` viram `computed` lendo o atributo do Pipeline;
      demais valores são literais
    - o tipo construído recebe `definition_hash` (SHA-256 canônico)

Falhas estruturais levantam `PipelineDefinitionError`; nomes ausentes no
registry levantam `OperationNotRegisteredError`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type

from ..config.hashing import compute_config_hash
from ..config.loader import PathLike, load_config
from ..exceptions import PipelineDefinitionError
from ..operation.inputs import Input
from ..operation.registry import OperationRegistry
from .pipeline import Pipeline
from .stage import OptionValue, Stage, computed, stage

_STAGE_KEYS = {"operation", "options"}
_INPUT_KEYS = {"keyword", "default", "required"}
_REF = "$ref"


def _class_name(name: str) -> str:
    parts = [p for p in name.replace("-", "_").split("_") if p]
    return "".join(p[:1].upper() + p[1:] for p in parts) or "DeclaredPipeline"


def _option(value: Any) -> Any:
    if isinstance(value, Mapping) and set(value) == {_REF}:
        attribute = value[_REF]
        return computed(lambda pipeline: getattr(pipeline, attribute))
    return value


def _stage(entry: Any, registry: OperationRegistry, index: int) -> Stage:
    if isinstance(entry, str):
        return stage(registry.get(entry))

    if not isinstance(entry, Mapping) or "operation" not in entry:
        raise PipelineDefinitionError(
            f"Stage #{index} deve ser um nome ou um mapa com 'operation'",
            details={"index": index, "received": type(entry).__name__},
        )

    unknown = sorted(set(entry) - _STAGE_KEYS)
    if unknown:
        raise PipelineDefinitionError(
            f"Stage #{index} possui chaves desconhecidas: {', '.join(unknown)}",
            details={"index": index, "unknown": unknown},
        )

    options = entry.get("options") or {}
    if not isinstance(options, Mapping):
        raise PipelineDefinitionError(
            f"Stage #{index}: 'options' deve ser um mapa",
            details={"index": index},
        )

    resolved: Dict[str, OptionValue] = {key: _option(value) for key, value in options.items()}
    return stage(registry.get(entry["operation"]), **resolved)


def _inputs(declared: Any) -> Dict[str, Input]:
    if not isinstance(declared, Mapping):
        raise PipelineDefinitionError("'inputs' deve ser um mapa nome -> opções")

    inputs: Dict[str, Input] = {}
    for name, entry in declared.items():
        entry = entry or {}
        unknown = sorted(set(entry) - _INPUT_KEYS)
        if unknown:
            raise PipelineDefinitionError(
                f"Input '{name}' possui chaves desconhecidas: {', '.join(unknown)}",
                details={"input": name, "unknown": unknown},
            )
        kwargs: Dict[str, Any] = {"keyword": bool(entry.get("keyword", False))}
        if "default" in entry:
            kwargs["default"] = entry["default"]
        if "required" in entry:
            kwargs["required"] = bool(entry["required"])
        inputs[name] = Input(**kwargs)
    return inputs


def build_pipeline(
    definition: Mapping[str, Any],
    *,
    registry: OperationRegistry,
    name: Optional[str] = None,
) -> Type[Pipeline]:
    """Constrói um tipo de Pipeline a partir de uma definição declarativa."""
    if not isinstance(definition, Mapping):
        raise PipelineDefinitionError(
            f"Definição de Pipeline deve ser um mapa, recebido: {type(definition).__name__}"
        )

    entries = definition.get("stages")
    if not isinstance(entries, list):
        raise PipelineDefinitionError(
            "Definição de Pipeline exige 'stages' como lista",
            details={"keys": sorted(definition)},
        )

    stages: List[Stage] = [_stage(entry, registry, index) for index, entry in enumerate(entries)]

    namespace: Dict[str, Any] = {
        "__module__": __name__,
        "definition_hash": compute_config_hash(dict(definition)),
        "stages": stages,
    }
    namespace.update(_inputs(definition.get("inputs") or {}))

    return type(Pipeline)(_class_name(name or "declared_pipeline"), (Pipeline,), namespace)


def load_pipelines(
    base_path: PathLike,
    local_path: Optional[PathLike] = None,
    *,
    registry: OperationRegistry,
) -> Dict[str, Type[Pipeline]]:
    """Carrega o arquivo de definições e constrói todos os Pipelines em `pipelines:`."""
    config = load_config(base_path=base_path, local_path=local_path)

    declared = config.get("pipelines", {})
    if not isinstance(declared, dict):
        raise PipelineDefinitionError(
            f"'pipelines' deve ser um mapa, recebido: {type(declared).__name__}"
        )

    return {
        key: build_pipeline(definition, registry=registry, name=key)
        for key, definition in declared.items()
    }
