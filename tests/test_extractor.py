from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from builders import (
    ACCOUNT,
    CONTRACT_ID,
    DummyLedger,
    SpecType,
    encoded_function_entry,
    function,
    int_enum,
    option,
    struct,
    t,
    tuple_of,
    udt,
    union,
    vec,
)

from soroban_introspect.contract.extractor import SpecExtractor
from soroban_introspect.contract.metadata import SpecMetadata
from soroban_introspect.contract.sac import SacSpecCache
from soroban_introspect.exceptions import MissingContractDataError, ParseError, ValidationError
from soroban_introspect.types import (
    Composite,
    CompositeKind,
    ExecutableKind,
    Named,
    Primitive,
    SimulationResult,
    StateMutability,
    VariantKind,
)


def _entries() -> list[SimpleNamespace]:
    return [
        function("get_balance", [("id", t("ADDRESS"))], [t("I128")], doc="Balance of id"),
        function(
            "transfer",
            [("from", t("ADDRESS")), ("to", t("ADDRESS")), ("amount", t("I128"))],
        ),
        function(
            "configure",
            [
                ("cfg", udt("Config")),
                ("pair", udt("Pair")),
                ("action", udt("Action")),
                ("level", udt("Level")),
            ],
        ),
        struct("Config", [("admin", t("ADDRESS")), ("limits", vec(t("U32")))]),
        struct("Pair", [("0", t("U32")), ("1", t("U32"))]),
        union("Action", [("Stop", []), ("Pay", [t("ADDRESS"), t("I128")])]),
        int_enum("Level", [("Low", 1), ("High", 2)]),
    ]


class SlowLedger(DummyLedger):
    """Ledger whose simulations finish only after a few event loop turns."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.completed: list[str] = []

    async def simulate_invocation(self, contract_id, function_name, args):
        await asyncio.sleep(0.01)
        self.completed.append(function_name)
        return await super().simulate_invocation(contract_id, function_name, args)


def _extractor(ledger: DummyLedger, *, strict: bool = False, **kwargs) -> SpecExtractor:
    return SpecExtractor(
        ledger,
        kwargs.pop("sac_cache", SacSpecCache()),
        strict_types=strict,
        simulation_source=ACCOUNT,
        **kwargs,
    )


def _extract(extractor: SpecExtractor, entries, kind=ExecutableKind.BYTECODE):
    return asyncio.run(extractor.extract(entries, CONTRACT_ID, kind))


def _by_name(functions):
    return {function.name: function for function in functions}


class TestFunctionSignatures:
    def test_ids_names_and_descriptions(self):
        functions = _by_name(_extract(_extractor(DummyLedger()), _entries()))

        balance = functions["get_balance"]
        assert balance.id == "get_balance_Address"
        assert balance.display_name == "Get balance"
        assert balance.description == "Balance of id"
        assert balance.inputs[0].name == "id"
        assert balance.inputs[0].type == Primitive("Address")
        assert balance.outputs[0].name == "result_0"
        assert balance.outputs[0].type == Primitive("I128")

        transfer = functions["transfer"]
        assert transfer.id == "transfer_Address_Address_I128"
        assert transfer.description == "Soroban function: transfer"
        assert transfer.outputs == ()

    def test_function_order_follows_entries(self):
        functions = _extract(_extractor(DummyLedger()), _entries())

        assert [function.name for function in functions] == [
            "get_balance",
            "transfer",
            "configure",
        ]

    def test_struct_components(self):
        functions = _by_name(_extract(_extractor(DummyLedger()), _entries()))
        cfg, pair, _, _ = functions["configure"].inputs

        assert cfg.type == Named("Config")
        assert [component.name for component in cfg.components] == ["admin", "limits"]
        assert cfg.component("limits").type == Composite(CompositeKind.VEC, (Primitive("U32"),))
        assert [component.name for component in pair.components] == ["0", "1"]

    def test_enum_metadata(self):
        functions = _by_name(_extract(_extractor(DummyLedger()), _entries()))
        _, _, action, level = functions["configure"].inputs

        assert action.components is None
        assert [variant.name for variant in action.enum_metadata.variants] == ["Stop", "Pay"]
        pay = action.enum_metadata.variant("Pay")
        assert pay.kind is VariantKind.TUPLE
        assert pay.payload_types == (Primitive("Address"), Primitive("I128"))

        assert level.enum_metadata.is_integer_enum
        assert [variant.value for variant in level.enum_metadata.variants] == [1, 2]


class TestClassification:
    def test_empty_write_footprint_is_view(self):
        ledger = DummyLedger(simulations={"get_balance": SimulationResult(True, 0)})

        functions = _by_name(_extract(_extractor(ledger), _entries()))

        balance = functions["get_balance"]
        assert balance.state_mutability is StateMutability.VIEW
        assert balance.is_view
        assert not balance.modifies_state

    def test_write_footprint_is_nonpayable(self):
        ledger = DummyLedger(simulations={"transfer": SimulationResult(True, 2)})

        functions = _by_name(_extract(_extractor(ledger), _entries()))

        assert functions["transfer"].state_mutability is StateMutability.NONPAYABLE
        assert functions["transfer"].modifies_state

    def test_failed_simulation_is_nonpayable(self):
        ledger = DummyLedger(
            simulations={"get_balance": SimulationResult(False, error="HostError")}
        )

        functions = _by_name(_extract(_extractor(ledger), _entries()))

        assert functions["get_balance"].state_mutability is StateMutability.NONPAYABLE

    def test_placeholder_arguments_are_simulated(self):
        ledger = DummyLedger()

        _extract(_extractor(ledger), _entries())

        calls = {name: args for _, name, args in ledger.simulation_calls}
        assert set(calls) == {"get_balance", "transfer", "configure"}
        assert len(calls["configure"]) == 4
        assert all(contract_id == CONTRACT_ID for contract_id, _, _ in ledger.simulation_calls)

    def test_nested_and_generic_parameters_are_simulated(self):
        ledger = DummyLedger()
        entries = [
            function("draw", [("shape", udt("Shape")), ("extra", t("VAL"))]),
            struct("Point", [("x", t("U32")), ("y", t("U32"))]),
            union("Shape", [("At", [udt("Point")]), ("Empty", [])]),
        ]

        _extract(_extractor(ledger), entries)

        ((_, name, args),) = ledger.simulation_calls
        assert name == "draw"
        assert len(args) == 2

    def test_without_contract_id_nothing_is_simulated(self):
        ledger = DummyLedger(simulations={"get_balance": SimulationResult(True, 0)})
        extractor = _extractor(ledger)

        functions = asyncio.run(extractor.extract(_entries(), None, ExecutableKind.BYTECODE))

        assert ledger.simulation_calls == []
        assert all(not function.is_view for function in functions)


class TestDegradation:
    def test_unparseable_parameter_becomes_placeholder(self):
        entries = [function("odd", [("x", udt("Bad Name!"))])]

        (odd,) = _extract(_extractor(DummyLedger()), entries)

        assert odd.inputs[0].name == "param_0"
        assert odd.inputs[0].type == Named("unknown")

    def test_unsupported_type_keeps_name(self):
        entries = [function("odd", [("x", SimpleNamespace(type=None))])]

        (odd,) = _extract(_extractor(DummyLedger()), entries)

        assert odd.inputs[0].name == "x"
        assert odd.inputs[0].type == Named("unknown")

    def test_broken_function_becomes_placeholder(self):
        broken = function("broken")
        broken.function_v0.inputs = 42
        entries = [function("fine"), broken]

        fine, placeholder = _extract(_extractor(DummyLedger()), entries)

        assert fine.name == "fine"
        assert placeholder.id == "function_1"
        assert placeholder.name == "function_1"
        assert placeholder.description.startswith("Failed to parse function 1")
        assert placeholder.state_mutability is StateMutability.NONPAYABLE

    def test_strict_types_raise_on_unparseable_type(self):
        entries = [function("odd", [("x", udt("Bad Name!"))])]

        with pytest.raises(ParseError):
            _extract(_extractor(DummyLedger(), strict=True), entries)

    def test_strict_types_raise_on_unsupported_type(self):
        entries = [function("odd", [("x", option(SimpleNamespace(type=None)))])]

        with pytest.raises(ValidationError):
            _extract(_extractor(DummyLedger(), strict=True), entries)

    def test_strict_failure_waits_for_other_functions(self):
        ledger = SlowLedger()
        entries = [function("odd", [("x", udt("Bad Name!"))]), function("fine")]

        with pytest.raises(ParseError):
            _extract(_extractor(ledger, strict=True), entries)

        assert ledger.completed == ["fine"]

    def test_undecodable_type_name_does_not_abort_catalogue(self):
        bad = struct("Bad", [("v", t("U32"))])
        bad.udt_struct_v0.name = b"\xff\xfe"
        entries = [bad, function("ok_fn", [("v", t("U32"))])]

        (ok_fn,) = _extract(_extractor(DummyLedger()), entries)

        assert ok_fn.name == "ok_fn"
        assert ok_fn.inputs[0].type == Primitive("U32")


class TestEntryResolution:
    def test_asset_backed_uses_shared_interface(self):
        calls = []

        async def fetcher(source):
            calls.append(source)
            return [
                encoded_function_entry(
                    "balance", [("id", SpecType.SC_SPEC_TYPE_ADDRESS)], [SpecType.SC_SPEC_TYPE_I128]
                )
            ]

        extractor = _extractor(DummyLedger(), sac_cache=SacSpecCache(fetcher))

        (balance,) = _extract(extractor, None, ExecutableKind.ASSET_BACKED)

        assert len(calls) == 1
        assert balance.id == "balance_Address"
        assert balance.outputs[0].type == Primitive("I128")

    def test_bytecode_reads_contract_code(self):
        ledger = DummyLedger(contract_spec=[function("ping")])

        (ping,) = _extract(_extractor(ledger), None)

        assert ping.name == "ping"

    def test_supplied_entries_win_for_bytecode(self):
        ledger = DummyLedger(contract_spec=[function("ignored")])

        (ping,) = _extract(_extractor(ledger), [function("ping")])

        assert ping.name == "ping"

    def test_unknown_kind_reads_contract_code(self):
        ledger = DummyLedger(contract_spec=[function("balance")])

        (balance,) = _extract(_extractor(ledger), None, ExecutableKind.UNKNOWN)

        assert balance.name == "balance"
        assert ledger.contract_spec_calls == [CONTRACT_ID]

    def test_unknown_kind_raises_when_code_is_missing(self):
        ledger = DummyLedger(contract_spec_error=MissingContractDataError("no code"))

        with pytest.raises(MissingContractDataError):
            _extract(_extractor(ledger), None, ExecutableKind.UNKNOWN)

    def test_unknown_kind_without_address_raises(self):
        extractor = _extractor(DummyLedger())

        with pytest.raises(MissingContractDataError):
            asyncio.run(extractor.extract(None, None, ExecutableKind.UNKNOWN))


class TestSpecMetadata:
    def test_recursive_struct_stops(self):
        metadata = SpecMetadata([struct("Node", [("next", option(udt("Node"))), ("v", t("U32"))])])

        components = metadata.struct_components("Node")

        assert [component.name for component in components] == ["next", "v"]
        assert components[0].components == ()

    def test_tuple_types_render(self):
        metadata = SpecMetadata([])

        resolved = metadata.resolve_type(tuple_of(t("U32"), t("BOOL")))

        assert resolved == Composite(CompositeKind.TUPLE, (Primitive("U32"), Primitive("Bool")))

    def test_non_struct_has_no_components(self):
        metadata = SpecMetadata(_entries())

        assert metadata.struct_components("Action") is None
        assert metadata.is_struct("Config")
        assert not metadata.is_struct("Level")

    def test_indexes_user_defined_types_only(self):
        metadata = SpecMetadata(_entries())

        assert set(metadata.types) == {"Config", "Pair", "Action", "Level"}
