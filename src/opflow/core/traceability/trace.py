# src/opflow/core/traceability/trace.py
"""
Execution Trace — registro estruturado de execuções de Operations.

Este módulo define a estrutura e as operações canônicas do Execution Trace,
o artefato de observabilidade do opflow.

O Trace consolida, de forma determinística e auditável:
    - metadados do trace (trace_id, started_at)
    - o registro de cada execução de Operation (estado, duração, output)
    - um Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente: `Operation.run(trace=...)`
      e Pipelines chamam as funções deste módulo de forma explícita
    - A ordem do Event Log reflete a ordem real de execução
    - O Trace é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O output de uma Operation é registrado apenas como fingerprint
      (sha256 + bytes da representação JSON), nunca como valor
    - Falhas são registradas como `ErrorPayload` (sem stack trace)
    - Chaves de execução são determinísticas: `0001.NomeDaOperation`

Invariantes:
    - `events` é sempre uma lista ordenada
    - `operations` é sempre um dicionário indexado pela chave de execução
    - Nenhuma mutação ocorre fora das funções explícitas

Limites explícitos:
    - Não executa Operations
    - Não decide políticas de execução
    - Não realiza persistência automaticamente

Este módulo existe para garantir rastreabilidade,
auditoria e reprodutibilidade das execuções.
"""

from __future__ import annotations

import hashlib
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import error_payload_from_exception


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos, nunca negativa."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


def _output_meta(output: Any) -> Dict[str, Any]:
    """
    Metadados leves do output: tipo, bytes e sha256 da representação JSON.

    Valores não serializáveis em JSON usam `repr` como representação.
    """
    try:
        raw = json.dumps(output, sort_keys=True, ensure_ascii=False, default=repr)
    except (TypeError, ValueError):
        raw = repr(output)
    data = raw.encode("utf-8")
    return {
        "type": type(output).__name__,
        "bytes": len(data),
        "sha256": hashlib.sha256(data).hexdigest(),
    }


@dataclass
class ExecutionTrace:
    """
    Registro estruturado de uma ou mais execuções de Operations.

    Campos:
        - trace: metadados (trace_id, started_at)
        - operations: estado de cada execução, indexado pela chave de execução
        - events: Event Log ordenado

    A estrutura é compatível com persistência em JSON e reconstruível via
    `from_dict`.
    """

    trace: Dict[str, Any]
    operations: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def trace_id(self) -> str:
        return self.trace["trace_id"]

    def event_types(self) -> List[str]:
        return [e["event_type"] for e in self.events]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trace": dict(self.trace),
            "operations": {k: dict(v) for k, v in self.operations.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExecutionTrace":
        return cls(
            trace=dict(data.get("trace", {})),
            operations={k: dict(v) for k, v in (data.get("operations", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_trace(*, trace_id: Optional[str] = None, started_at: Optional[datetime] = None) -> ExecutionTrace:
    """
    Cria um Execution Trace vazio.

    ⚠️ Esta função não emite eventos: o Event Log inicia vazio e só é
    preenchido por `add_event`, `operation_started`, `operation_finished`
    ou `operation_failed`.
    """
    started_at = _ensure_tzaware_utc(started_at or datetime.now(timezone.utc))
    return ExecutionTrace(
        trace={
            "trace_id": trace_id or uuid.uuid4().hex,
            "started_at": _iso(started_at),
        },
    )


def add_event(
    trace: ExecutionTrace,
    *,
    event_type: str,
    ts: datetime,
    key: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona um evento explícito ao Event Log, preservando a ordem de chamada."""
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if key is not None:
        ev["key"] = key
    if payload is not None:
        ev["payload"] = payload
    trace.events.append(ev)


def operation_started(trace: ExecutionTrace, operation: Any, *, ts: datetime) -> str:
    """
    Registra o início de uma execução e retorna a sua chave.

    A chave é `NNNN.Nome`, onde NNNN é a posição (1-based) da execução no
    trace; execuções aninhadas (stages de Pipelines) recebem chaves próprias.
    """
    name = type(operation).__name__
    key = f"{len(trace.operations) + 1:04d}.{name}"
    trace.operations[key] = {
        "key": key,
        "operation": name,
        "state": "running",
        "started_at": _iso(ts),
    }
    add_event(trace, event_type="operation_started", ts=ts, key=key, payload={"operation": name})
    return key


def operation_finished(trace: ExecutionTrace, key: str, operation: Any, *, ts: datetime) -> None:
    """Registra o término halted/succeeded de uma execução, com fingerprint do output."""
    record = trace.operations.setdefault(key, {"key": key})
    started_iso = record.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts
    state = operation.state.value

    record.update(
        {
            "state": state,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "output": _output_meta(operation.output),
        }
    )
    add_event(
        trace,
        event_type="operation_finished",
        ts=ts,
        key=key,
        payload={"state": state, "duration_ms": record["duration_ms"]},
    )


def operation_failed(
    trace: ExecutionTrace,
    key: str,
    operation: Any,
    error: BaseException,
    *,
    ts: datetime,
) -> None:
    """Registra a falha de uma execução como ErrorPayload serializável."""
    payload = error_payload_from_exception(error, operation=type(operation).__name__).to_dict()
    record = trace.operations.setdefault(key, {"key": key})
    record.update(
        {
            "state": "failed",
            "finished_at": _iso(ts),
            "error": payload,
        }
    )
    add_event(trace, event_type="operation_failed", ts=ts, key=key, payload={"error": payload})


def save_trace(trace: ExecutionTrace, path: Path) -> None:
    """Persiste o trace em JSON determinístico (chaves ordenadas, indentado)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(trace.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_trace(path: Path) -> ExecutionTrace:
    """Carrega um trace persistido por `save_trace`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return ExecutionTrace.from_dict(data)
