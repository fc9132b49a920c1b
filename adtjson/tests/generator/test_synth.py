"""Tests for conversion expression synthesis."""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

import pytest

from adtjson import runtime
from adtjson.generator.python import render_helpers
from adtjson.generator.synth import Direction, Synthesizer
from adtjson.generator.types import (
    TypeDescriptor,
    TypeKind,
    bool_type,
    datatype_ref,
    int_type,
    map_of,
    opaque,
    seq_of,
    set_of,
    string_type,
    tuple_of,
    type_param,
)


@pytest.fixture
def synth():
    return Synthesizer()


def evaluate(expression, **values):
    """Evaluate a synthesized expression with the helpers in scope."""
    gbl = {"_rt": runtime}
    exec(render_helpers(), gbl)
    gbl.update(values)
    return eval(expression, gbl)


def describe_scalars():
    def converts_ints(expect, synth):
        expect(synth.from_external(int_type(), "s")) == "int(s)"
        expect(synth.to_external(int_type(), "s")) == "_to_number(s)"

    def keeps_bools(expect, synth):
        expect(synth.from_external(bool_type(), "s")) == "s"
        expect(synth.to_external(bool_type(), "s")) == "s"

    def converts_strings(expect, synth):
        expect(synth.from_external(string_type(), "s")) == "_rt.Seq.from_string(s)"
        expect(synth.to_external(string_type(), "s")) == "_string_to_json(s)"

    def keeps_opaque_values(expect, synth):
        expect(synth.from_external(opaque("real"), "s")) == "s"
        expect(synth.to_external(opaque("real"), "s")) == "s"

    def uses_the_runtime_alias(expect):
        synth = Synthesizer(runtime_alias="rt")
        expect(synth.from_external(string_type(), "s")) == "rt.Seq.from_string(s)"

    def dispatches_on_direction(expect, synth):
        expect(synth.synthesize(Direction.FROM_EXTERNAL, int_type(), "s")) == "int(s)"
        expect(synth.synthesize(Direction.TO_EXTERNAL, int_type(), "s")) == "_to_number(s)"


def describe_sequences():
    def skips_mapping_for_identity_elements(expect, synth):
        expect(synth.from_external(seq_of(bool_type()), "s")) == "_rt.Seq(s or [])"
        expect(synth.to_external(seq_of(bool_type()), "s")) == "_seq_to_list(s)"

    def maps_converted_elements(expect, synth):
        expect(synth.from_external(seq_of(int_type()), "s")) == (
            "_rt.Seq([int(x) for x in (s or [])])"
        )
        expect(synth.to_external(seq_of(int_type()), "s")) == (
            "[_to_number(x) for x in _seq_to_list(s)]"
        )

    def uses_fresh_placeholders_when_nested(expect, synth):
        nested = seq_of(seq_of(int_type()))
        expect(synth.from_external(nested, "s")) == (
            "_rt.Seq([_rt.Seq([int(x1) for x1 in (x or [])]) for x in (s or [])])"
        )

    def treats_missing_values_as_empty(expect, synth):
        expr = synth.from_external(seq_of(int_type()), "s")
        expect(evaluate(expr, s=None)) == runtime.Seq([])

    def identity_skip_matches_element_mapping(expect, synth):
        skipped_from = synth.from_external(seq_of(bool_type()), "s")
        mapped_from = "_rt.Seq([x for x in (s or [])])"
        skipped_to = synth.to_external(seq_of(bool_type()), "s")
        mapped_to = "[x for x in _seq_to_list(s)]"

        for values in ([], [i % 3 == 0 for i in range(50)]):
            expect(evaluate(skipped_from, s=values)) == evaluate(mapped_from, s=values)
            internal = evaluate(skipped_from, s=values)
            expect(evaluate(skipped_to, s=internal)) == evaluate(mapped_to, s=internal)
            expect(evaluate(skipped_to, s=internal)) == values


def describe_sets():
    def skips_mapping_for_identity_elements(expect, synth):
        expect(synth.from_external(set_of(bool_type()), "s")) == "_rt.Set(s or [])"
        expect(synth.to_external(set_of(bool_type()), "s")) == "list(s.Elements)"

    def maps_converted_elements(expect, synth):
        expect(synth.to_external(set_of(string_type()), "s")) == (
            "[_string_to_json(x) for x in s.Elements]"
        )

    def identity_skip_matches_element_mapping(expect, synth):
        t = set_of(opaque("real"))
        skipped_from = synth.from_external(t, "s")
        skipped_to = synth.to_external(t, "s")
        expect(skipped_from) == "_rt.Set(s or [])"

        for values in ([], list(range(50))):
            internal = evaluate(skipped_from, s=values)
            expect(internal) == evaluate("_rt.Set([x for x in (s or [])])", s=values)
            expect(sorted(evaluate(skipped_to, s=internal))) == values
            expect(sorted(evaluate(skipped_to, s=internal))) == sorted(
                evaluate("[x for x in s.Elements]", s=internal)
            )


def describe_tuples():
    def keeps_empty_tuples(expect, synth):
        expect(synth.from_external(tuple_of(), "s")) == "s"
        expect(synth.to_external(tuple_of(), "s")) == "s"

    def converts_by_position(expect, synth):
        pair = tuple_of(int_type(), string_type())
        expect(synth.from_external(pair, "s")) == (
            "_rt.Tuple2(int(s[0]), _rt.Seq.from_string(s[1]))"
        )
        expect(synth.to_external(pair, "s")) == "[_to_number(s[0]), _string_to_json(s[1])]"

    def round_trips_mixed_positions(expect, synth):
        pair = tuple_of(int_type(), string_type())
        internal = evaluate(synth.from_external(pair, "s"), s=[5, "hi"])
        expect(internal) == (5, runtime.Seq.from_string("hi"))
        expect(evaluate(synth.to_external(pair, "s"), s=internal)) == [5, "hi"]


def describe_maps():
    def converts_with_incremental_update(expect, synth):
        expect(synth.from_external(map_of(string_type(), int_type()), "s")) == (
            "_map_from_json(s, lambda k: _rt.Seq.from_string(k), lambda v: int(v))"
        )

    def builds_string_keyed_objects(expect, synth):
        expect(synth.to_external(map_of(string_type(), int_type()), "s")) == (
            "{_string_to_json(k): _to_number(s.get(k)) for k in s.Keys.Elements}"
        )

    def stringifies_other_keys(expect, synth):
        expect(synth.to_external(map_of(int_type(), bool_type()), "s")) == (
            "{str(_to_number(k)): s.get(k) for k in s.Keys.Elements}"
        )

    def round_trips_regardless_of_key_order(expect, synth):
        t = map_of(string_type(), int_type())
        internal = evaluate(synth.from_external(t, "s"), s={"b": 2, "a": 1})
        expect(internal.get(runtime.Seq.from_string("a"))) == 1
        expect(evaluate(synth.to_external(t, "s"), s=internal)) == {"a": 1, "b": 2}

    def copies_maps_without_type_arguments(expect, synth):
        t = TypeDescriptor(TypeKind.MAP, "map")
        expect(synth.from_external(t, "s")) == "_map_from_json(s, lambda k: k, lambda v: v)"
        internal = evaluate(synth.from_external(t, "s"), s={"a": 1})
        expect(evaluate(synth.to_external(t, "s"), s=internal)) == {"a": 1}

    def emits_statement_blocks(expect, synth):
        t = map_of(string_type(), int_type())
        expect(synth.map_from_external_block(t, 'json.get("m")', "__m")) == [
            "    __m = _rt.Map.Empty",
            '    for k, v in (json.get("m") or {}).items():',
            "        __m = __m.update(_rt.Seq.from_string(k), int(v))",
        ]
        expect(synth.map_to_external_block(t, "value.dtor_m", "__m_json")) == [
            "    __m_json = {}",
            "    if value.dtor_m is not None:",
            "        for k in value.dtor_m.Keys.Elements:",
            "            v = value.dtor_m.get(k)",
            "            __m_json[_string_to_json(k)] = _to_number(v)",
        ]


def describe_datatypes():
    def calls_converter_functions(expect, synth):
        expect(synth.from_external(datatype_ref("Point"), "s")) == "pointFromJson(s)"
        expect(synth.to_external(datatype_ref("Point"), "s")) == "pointToJson(s)"

    def sanitizes_names(expect, synth):
        expect(synth.from_external(datatype_ref("_tuple#2"), "s")) == "_tuple_2FromJson(s)"

    def passes_argument_converters(expect, synth):
        expect(synth.from_external(datatype_ref("Box", int_type()), "s")) == (
            "boxFromJson(s, lambda x: int(x))"
        )
        expect(synth.to_external(datatype_ref("Box", datatype_ref("Point")), "s")) == (
            "boxToJson(s, pointToJson)"
        )

    def threads_bound_parameters(expect, synth):
        box = datatype_ref("Box", type_param("T"))
        expect(synth.from_external(box, "s", {"T": "T_fromJson"})) == "boxFromJson(s, T_fromJson)"


def describe_type_params():
    def invokes_supplied_converters(expect, synth):
        expect(synth.from_external(type_param("T"), "s", {"T": "T_fromJson"})) == "T_fromJson(s)"

    def degrades_to_identity_without_converter(expect, synth):
        expect(synth.from_external(type_param("T"), "s")) == "s"
        expect(synth.to_external(type_param("T"), "s", {"U": "U_toJson"})) == "s"
