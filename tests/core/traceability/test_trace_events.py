# tests/core/traceability/test_trace_events.py
"""
Testes do Execution Trace durante a execução de Operations e Pipelines.

Os testes asseguram que:
- `create_trace` não emite eventos
- `run(trace=...)` registra início e término com chaves determinísticas
- Pipelines repassam o trace aos stages (chaves próprias, em ordem)
- um stage halted registra `stage_halted`
- falhas são registradas como ErrorPayload (sem stack trace)
- o output é registrado apenas como fingerprint

Decisões arquiteturais:
    - Nenhum evento é emitido implicitamente
    - A ordem do Event Log reflete a ordem real de execução
"""
import pytest

try:
    from opflow.core.operation import Input, Operation
    from opflow.core.pipeline import Pipeline
    from opflow.core.traceability import add_event, create_trace
except Exception as e:  # noqa: BLE001
    create_trace = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing traceability module. Implement:\n"
            "- src/opflow/core/traceability/trace.py (create_trace, operation_started, ...)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_create_trace_has_minimum_fields(fixed_ts):
    _require_imports()

    trace = create_trace(trace_id="t-1", started_at=fixed_ts)

    assert trace.trace_id == "t-1"
    assert trace.trace["started_at"] == "2026-01-16T00:00:00+00:00"
    assert trace.operations == {}
    assert trace.events == []


def test_trace_id_defaults_to_uuid_hex():
    _require_imports()

    first, second = create_trace(), create_trace()

    assert len(first.trace_id) == 32
    assert first.trace_id != second.trace_id


def test_add_event_preserves_order(fixed_ts):
    _require_imports()
    trace = create_trace(trace_id="t-2", started_at=fixed_ts)

    add_event(trace, event_type="custom_a", ts=fixed_ts)
    add_event(trace, event_type="custom_b", ts=fixed_ts, key="k", payload={"n": 1})

    assert trace.event_types() == ["custom_a", "custom_b"]
    assert "key" not in trace.events[0] and "payload" not in trace.events[0]
    assert trace.events[1]["key"] == "k"
    assert trace.events[1]["payload"] == {"n": 1}


def test_operation_run_records_start_and_finish():
    """
    Verifica o registro de uma Operation isolada.

    Invariantes:
        - a chave é `0001.Nome`
        - o registro contém estado final, duração e fingerprint do output
    """
    _require_imports()

    class Double(Operation):
        value = Input()

        def execute(self):
            return self.value * 2

    trace = create_trace()
    Double(21).run(trace=trace)

    assert trace.event_types() == ["operation_started", "operation_finished"]
    record = trace.operations["0001.Double"]
    assert record["state"] == "succeeded"
    assert record["duration_ms"] >= 0
    assert record["output"]["type"] == "int"
    assert len(record["output"]["sha256"]) == 64
    assert "value" not in record["output"]
    assert trace.events[1]["payload"]["state"] == "succeeded"


def test_pipeline_stages_share_the_trace(text_operations):
    _require_imports()
    Shout = Pipeline.compose(text_operations["Strip"], text_operations["Upcase"], name="Shout")

    trace = create_trace()
    assert Shout(" a ").run(trace=trace).output == "A"

    assert list(trace.operations) == ["0001.Shout", "0002.Strip", "0003.Upcase"]
    assert [(e["event_type"], e["key"]) for e in trace.events] == [
        ("operation_started", "0001.Shout"),
        ("operation_started", "0002.Strip"),
        ("operation_finished", "0002.Strip"),
        ("operation_started", "0003.Upcase"),
        ("operation_finished", "0003.Upcase"),
        ("operation_finished", "0001.Shout"),
    ]


def test_halted_stage_is_recorded():
    _require_imports()

    class Stop(Operation):
        def execute(self):
            self.halt("nothing to do")

    Halting = Pipeline.compose(Stop, lambda value: value, name="Halting")
    trace = create_trace()
    op = Halting().run(trace=trace)

    assert op.halted
    assert "stage_halted" in trace.event_types()
    halted = next(e for e in trace.events if e["event_type"] == "stage_halted")
    assert halted["payload"] == {"pipeline": "Halting", "stage": "Stop", "index": 0}
    assert trace.operations["0001.Halting"]["state"] == "halted"
    assert len(trace.operations) == 2


def test_failure_is_recorded_as_error_payload():
    _require_imports()

    class Boom(Exception):
        pass

    class Exploding(Operation):
        def execute(self):
            raise Boom("kaput")

    trace = create_trace()
    with pytest.raises(Boom):
        Exploding().run(trace=trace)

    record = trace.operations["0001.Exploding"]
    assert record["state"] == "failed"
    assert record["error"]["type"] == "OPERATION_EXECUTION_ERROR"
    assert record["error"]["message"] == "kaput"
    assert trace.event_types() == ["operation_started", "operation_failed"]
    assert "Traceback" not in str(record["error"])
