# tests/core/operation/test_property_store.py
"""
Testes do Property Store (validação pydantic de propriedades).

Os testes asseguram que:
- defaults estáticos e factories são aplicados por instância
- required rejeita None na construção e em atribuições
- accepts (tipo, predicado, coleção) restringe valores
- converts (chamável ou nome de método) é aplicado a cada atribuição
- annotation delega a coerção ao pydantic
- falhas viram InvalidPropertyError com detalhes estruturados
- nomes reservados são rejeitados na definição do tipo
"""
import pytest

try:
    from opflow.core.exceptions import InvalidPropertyError, OperationDefinitionError
    from opflow.core.operation import Input, Operation, Property
except Exception as e:  # noqa: BLE001
    Operation = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing property store. Implement:\n"
            "- src/opflow/core/operation/store.py (PropertySchema, PropertyStore)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_static_default_and_factory_default():
    """
    Verifica que um default chamável é avaliado por instância (factory),
    evitando compartilhamento de objetos mutáveis entre instâncias.
    """
    _require_imports()

    class Collect(Operation):
        label = Property(default="items")
        items = Property(default=list)

        def execute(self):
            self.items.append(self.label)
            return self.items

    first, second = Collect(), Collect()
    assert first.output == ["items"]
    assert second.output == ["items"]
    assert first.items is not second.items


def test_required_rejects_none_on_construction_and_assignment():
    _require_imports()

    class Needs(Operation):
        value = Input()

        def execute(self):
            self.value = None

    with pytest.raises(InvalidPropertyError) as excinfo:
        Needs(None)
    assert excinfo.value.details["errors"][0]["property"] == "value"

    op = Needs("ok")
    with pytest.raises(InvalidPropertyError):
        op.run()
    assert op.failed


def test_accepts_type_predicate_and_collection():
    _require_imports()

    class Pick(Operation):
        count = Property(default=1, accepts=int)
        ratio = Property(default=0.5, accepts=lambda v: 0 <= v <= 1)
        mode = Property(default="fast", accepts=("fast", "slow"))

        def execute(self):
            return (self.count, self.ratio, self.mode)

    assert Pick.call() == (1, 0.5, "fast")
    assert Pick.call(count=3, ratio=1, mode="slow") == (3, 1, "slow")

    for bad in ({"count": "3"}, {"ratio": 2}, {"mode": "medium"}):
        with pytest.raises(InvalidPropertyError):
            Pick(**bad)


def test_accepts_is_checked_on_assignment():
    _require_imports()

    class Mode(Operation):
        mode = Property(default="fast", accepts={"fast", "slow"})

        def execute(self):
            return self.mode

    op = Mode()
    op.mode = "slow"
    assert op.mode == "slow"
    with pytest.raises(InvalidPropertyError):
        op.mode = "medium"
    assert op.mode == "slow"


def test_converts_callable_and_method_name():
    _require_imports()

    class Normalize(Operation):
        text = Input(converts="strip")
        tag = Property(default="x", converts=str.upper)

        def execute(self):
            return f"{self.tag}:{self.text}"

    op = Normalize("  padded  ")
    assert op.text == "padded"
    assert op.tag == "X"

    op.tag = "y"
    assert op.tag == "Y"
    assert op.output == "Y:padded"


def test_annotation_delegates_coercion_to_pydantic():
    _require_imports()

    class Typed(Operation):
        size = Input(annotation=int)

        def execute(self):
            return self.size + 1

    assert Typed.call("41") == 42
    with pytest.raises(InvalidPropertyError):
        Typed("not a number")


def test_any_property_preserves_identity():
    _require_imports()

    class Holder(Operation):
        payload = Input()

        def execute(self):
            return self.payload

    marker = object()
    assert Holder.call(marker) is marker


def test_invalid_property_error_is_value_error():
    _require_imports()

    class Strict(Operation):
        value = Input(accepts=int)

        def execute(self):
            return self.value

    with pytest.raises(ValueError):
        Strict("x")


@pytest.mark.parametrize("name", ["_private", "model_name", "output", "run", "halt"])
def test_reserved_property_names_are_rejected(name):
    _require_imports()

    with pytest.raises(OperationDefinitionError):
        type(Operation)("Reserved", (Operation,), {name: Property(), "__module__": __name__})


def test_subtype_schema_does_not_mutate_parent():
    _require_imports()

    class Parent(Operation):
        a = Property(default=1)

        def execute(self):
            return self.a

    class Child(Parent):
        b = Property(default=2)

    assert Parent.property_schema.names == ("a",)
    assert Child.property_schema.names == ("a", "b")
    assert Child.call(b=5) == 1
