"""Tests for the snapshot clone contract."""

import json
from collections import Counter
from dataclasses import dataclass
from enum import Enum

from tracescope.serialize import safe_clone
from tracescope.types import ExecutionStep, MarkKind, TxMeta


class _Color(Enum):
    RED = "red"


@dataclass
class _Point:
    x: int
    y: int


class _HasToDict:
    def to_dict(self):
        return {"kind": "custom", "big": 2**70}


@dataclass
class _Link:
    value: int
    next: object = None


class _NeedsArgument:
    def to_dict(self, orient):
        return {"orient": orient}


class _BrokenToDict:
    def to_dict(self):
        raise RuntimeError("not today")


class TestScalars:
    def test_safe_ints_are_kept(self):
        assert safe_clone(42) == 42
        assert safe_clone(-(2**53 - 1)) == -(2**53 - 1)

    def test_large_ints_become_decimal_strings(self):
        assert safe_clone(2**256 - 1) == str(2**256 - 1)
        assert safe_clone(-(2**60)) == str(-(2**60))

    def test_bools_stay_bools(self):
        assert safe_clone(True) is True

    def test_non_finite_floats_become_none(self):
        assert safe_clone(float("nan")) is None
        assert safe_clone(1.5) == 1.5

    def test_bytes_become_hex(self):
        assert safe_clone(b"\x60\x01") == "0x6001"

    def test_enums_become_values(self):
        assert safe_clone(_Color.RED) == "red"
        assert safe_clone(MarkKind.WARN) == "warn"

    def test_function_alone_is_dropped(self):
        assert safe_clone(lambda: 1) is None


class TestContainers:
    def test_functions_are_omitted_from_mappings(self):
        assert safe_clone({"a": 1, "f": print, "g": lambda: 2}) == {"a": 1}

    def test_functions_in_sequences_become_none(self):
        assert safe_clone([1, len, 2]) == [1, None, 2]

    def test_keys_are_stringified(self):
        assert safe_clone(Counter({10: 3, 20: 1})) == {"10": 3, "20": 1}
        assert safe_clone({True: 1, None: 2}) == {"true": 1, "null": 2}

    def test_tuples_and_sets_become_lists(self):
        assert safe_clone((1, 2)) == [1, 2]
        assert safe_clone({7}) == [7]

    def test_clone_shares_nothing_with_input(self):
        live = {"nested": {"items": [1, 2]}}
        cloned = safe_clone(live)
        live["nested"]["items"].append(3)
        live["nested"]["new"] = True

        assert cloned == {"nested": {"items": [1, 2]}}

    def test_self_containing_list_is_cut(self):
        loop = [1]
        loop.append(loop)
        assert safe_clone(loop) == [1, None]

    def test_shared_subtree_is_cloned_twice(self):
        leaf = [1]
        assert safe_clone({"a": leaf, "b": leaf}) == {"a": [1], "b": [1]}


class TestObjects:
    def test_dataclass_becomes_field_dict(self):
        assert safe_clone(_Point(1, 2)) == {"x": 1, "y": 2}

    def test_to_dict_protocol_is_used(self):
        assert safe_clone(_HasToDict()) == {"kind": "custom", "big": str(2**70)}

    def test_execution_step_stack_is_decimal_strings(self):
        step = ExecutionStep(pc=1, opcode="PUSH32", stack=(1, 2**255))
        assert safe_clone(step)["stack"] == ["1", str(2**255)]

    def test_pydantic_model_is_dumped(self):
        tx = TxMeta(hash="0x01", value=10**30)
        cloned = safe_clone(tx)
        assert cloned["hash"] == "0x01"
        assert cloned["value"] == str(10**30)

    def test_classes_and_plain_objects_are_dropped(self):
        assert safe_clone({"cls": int, "obj": object()}) == {}

    def test_result_is_json_serializable(self):
        payload = {
            "step": ExecutionStep(pc=0, opcode="STOP", stack=(2**200,)),
            "hits": Counter({1: 2}),
            "cb": print,
            "raw": b"\xff",
        }
        json.dumps(safe_clone(payload))

    def test_object_cycle_is_cut(self):
        a = _Link(1)
        b = _Link(2)
        a.next = b
        b.next = a
        assert safe_clone(a) == {"value": 1, "next": {"value": 2}}

    def test_self_referencing_object_is_cut(self):
        node = _Link(7)
        node.next = node
        assert safe_clone({"node": node}) == {"node": {"value": 7}}

    def test_to_dict_needing_arguments_is_dropped(self):
        assert safe_clone({"odd": _NeedsArgument(), "n": 1}) == {"n": 1}

    def test_raising_to_dict_is_dropped(self):
        assert safe_clone([_BrokenToDict(), 2]) == [None, 2]
