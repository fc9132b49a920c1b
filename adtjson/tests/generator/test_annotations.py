"""Tests for the typed output profile."""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

import pytest

from adtjson.generator.annotations import DeclarationEmitter, external_annotation, internal_annotation
from adtjson.generator.naming import RuntimeConvention
from adtjson.generator.types import (
    DatatypeDefinition,
    Field,
    Variant,
    datatype_ref,
    int_type,
    map_of,
    seq_of,
    string_type,
    tuple_of,
)


@pytest.fixture
def typed(gen_code, domain_text):
    return gen_code(domain_text, profile="typed")


@pytest.fixture
def declarations():
    return DeclarationEmitter(RuntimeConvention())


def describe_annotations():
    def annotates_external_forms(expect):
        expect(external_annotation(int_type())) == "int"
        expect(external_annotation(seq_of(string_type()))) == "list[str]"
        expect(external_annotation(map_of(string_type(), int_type()))) == "dict[str, int]"
        expect(external_annotation(tuple_of(int_type(), string_type()))) == "list[Any]"
        expect(external_annotation(datatype_ref("Point"))) == '"PointJson"'

    def annotates_runtime_forms(expect):
        expect(internal_annotation(string_type())) == "_rt.Seq"
        expect(internal_annotation(map_of(int_type(), int_type()), "rt")) == "rt.Map"
        expect(internal_annotation(datatype_ref("Point"))) == '"PointValue"'


def describe_declarations():
    def declares_enum_like_types_as_literals(expect, declarations):
        dt = DatatypeDefinition("Domain", "Color", [Variant("Red"), Variant("Green"), Variant("Blue")])
        expect(declarations.external_view(dt)) == ['ColorJson = Literal["Red", "Green", "Blue"]']

    def declares_single_variants_without_a_tag(expect, declarations):
        dt = DatatypeDefinition(
            "Domain", "Point", [Variant("Point", [Field("x", int_type()), Field("y", int_type())])]
        )
        expect(declarations.external_view(dt)) == [
            'PointJson = TypedDict("PointJson", {"x": int, "y": int})'
        ]

    def declares_a_union_of_tagged_variants(expect, declarations):
        dt = DatatypeDefinition(
            "Domain",
            "Shape",
            [Variant("Circle", [Field("radius", int_type())]), Variant("Empty")],
        )
        expect(declarations.external_view(dt)) == [
            'ShapeCircleJson = TypedDict("ShapeCircleJson", {"type": Literal["Circle"], "radius": int})',
            'ShapeEmptyJson = TypedDict("ShapeEmptyJson", {"type": Literal["Empty"]})',
            "ShapeJson = Union[ShapeCircleJson, ShapeEmptyJson]",
        ]

    def declares_runtime_members(expect, declarations):
        dt = DatatypeDefinition(
            "Domain",
            "Job",
            [
                Variant("Queued", [Field("job_id", int_type())]),
                Variant("Running", [Field("job_id", int_type()), Field("note", string_type())]),
            ],
        )
        expect(declarations.internal_view(dt)) == [
            "class JobValue(Protocol):",
            "    is_Queued: bool",
            "    is_Running: bool",
            "    dtor_job__id: int",
            "    dtor_note: _rt.Seq",
        ]

    def aliases_erased_wrappers_to_their_field(expect, declarations):
        dt = DatatypeDefinition("Domain", "UserId", [Variant("UserId", [Field("value", int_type())])])
        expect(declarations.internal_view(dt)) == ["UserIdValue = int"]


def describe_typed_profile():
    def imports_typing(expect, typed):
        source = typed["__source__"]
        expect(
            "from typing import Any, Callable, Literal, Optional, Protocol, TypedDict, Union" in source
        ) == True

    def emits_declarations_for_every_datatype(expect, typed):
        source = typed["__source__"]
        expect('ColorJson = Literal["Red", "Green", "Blue"]' in source) == True
        expect("class ShapeValue(Protocol):" in source) == True
        expect("UserIdValue = int" in source) == True

    def annotates_converters(expect, typed):
        source = typed["__source__"]
        expect('def pointFromJson(json: "PointJson") -> "PointValue":' in source) == True
        expect(
            'def boxToJson(value: "BoxValue", T_toJson: Callable[[Any], Any]) -> "BoxJson":' in source
        ) == True

    def annotates_helpers(expect, typed):
        expect("def _to_number(n: Any) -> Any:" in typed["__source__"]) == True

    def annotates_app_members(expect, typed):
        source = typed["__source__"]
        expect("    def GetOwner(m: \"ModelValue\") -> \"UserIdJson\":" in source) == True

    def still_round_trips(expect, typed):
        payload = {"type": "Circle", "center": {"x": 1, "y": 2}, "radius": 3}
        expect(typed["shapeToJson"](typed["shapeFromJson"](payload))) == payload
        expect(typed["colorToJson"](typed["App"].Green())) == "Green"

    def leaves_the_bare_profile_unannotated(expect, gen_code, domain_text):
        source = gen_code(domain_text)["__source__"]
        expect("from typing import" in source) == False
        expect("def pointFromJson(json):" in source) == True
