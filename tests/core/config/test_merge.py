# tests/core/config/test_merge.py
"""
Testes da política de deep-merge (deep_merge).

Os testes asseguram que:
- escalares do override sobrescrevem a base
- dicts são mesclados recursivamente
- listas são substituídas integralmente
- conflitos de estrutura ou de tipo são rejeitados
- nenhum input é mutado
"""
import pytest

try:
    from opflow.core.config import ConfigTypeConflictError, deep_merge
except Exception as e:  # noqa: BLE001
    deep_merge = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing merge module. Implement:\n"
            "- src/opflow/core/config/merge.py (deep_merge)\n"
            "- src/opflow/core/config/errors.py (ConfigTypeConflictError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_simple_override():
    _require_imports()
    base = {"a": 1, "b": 2}
    override = {"b": 99}

    out = deep_merge(base, override)

    assert out == {"a": 1, "b": 99}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 99}


def test_merge_nested_dict():
    _require_imports()
    base = {"pipelines": {"echo": {"inputs": {"times": {"default": 3}}, "stages": ["repeat"]}}}
    override = {"pipelines": {"echo": {"inputs": {"times": {"default": 5}}}}}

    out = deep_merge(base, override)

    assert out == {"pipelines": {"echo": {"inputs": {"times": {"default": 5}}, "stages": ["repeat"]}}}


def test_merge_list_override_total():
    _require_imports()
    base = {"stages": ["strip", "upcase"]}

    assert deep_merge(base, {"stages": ["repeat"]}) == {"stages": ["repeat"]}


def test_merge_adds_new_keys_without_aliasing():
    _require_imports()
    override = {"extra": {"nested": [1]}}

    out = deep_merge({}, override)
    out["extra"]["nested"].append(2)

    assert override == {"extra": {"nested": [1]}}


def test_none_on_either_side_is_not_a_conflict():
    _require_imports()

    assert deep_merge({"a": None}, {"a": {"b": 1}}) == {"a": {"b": 1}}
    assert deep_merge({"a": [1]}, {"a": None}) == {"a": None}


@pytest.mark.parametrize(
    "base,override",
    [
        ({"stages": ["strip"]}, {"stages": {"0": "strip"}}),
        ({"times": 3}, {"times": "3"}),
        ({"inputs": {}}, {"inputs": "text"}),
    ],
)
def test_merge_type_conflict_raises(base, override):
    _require_imports()

    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)
