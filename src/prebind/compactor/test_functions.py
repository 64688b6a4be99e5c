import pytest

from prebind.compactor import EffectFunction, FunctionRef, FunctionRegistry
from prebind.exceptions import UnknownFunctionError


def run_observer_effect(*args):
    pass


def test_symbol_for_matches_by_identity():
    registry = FunctionRegistry.from_effect_functions(
        {EffectFunction.RUN_OBSERVER_EFFECT: run_observer_effect}
    )

    assert registry.symbol_for(run_observer_effect) == FunctionRef("runObserverEffect")
    assert registry.symbol_for(lambda *args: None) is None


def test_symbolic_values_need_no_registration():
    registry = FunctionRegistry()

    assert registry.symbol_for(EffectFunction.RUN_NOTIFY_EFFECT) == FunctionRef(
        "runNotifyEffect"
    )
    assert registry.symbol_for(FunctionRef("custom")) == FunctionRef("custom")
    assert registry.symbol_for("runNotifyEffect") is None


def test_register_and_resolve():
    registry = FunctionRegistry()
    registry.register(EffectFunction.RUN_OBSERVER_EFFECT, run_observer_effect)
    registry.register("custom", print)

    assert "runObserverEffect" in registry
    assert len(registry) == 2
    assert registry.resolve(FunctionRef("runObserverEffect")) is run_observer_effect
    assert registry.resolve(FunctionRef("custom")) is print


def test_resolve_unknown_raises():
    with pytest.raises(UnknownFunctionError, match="nope"):
        FunctionRegistry().resolve(FunctionRef("nope"))
