"""Tests for the runtime collection values."""

# pylint: disable=redefined-outer-name,unused-variable,expression-not-assigned,singleton-comparison

import pytest

from adtjson.runtime import Map, Seq, Set, UnknownVariantError


def describe_seq():
    def converts_strings_to_characters(expect):
        s = Seq.from_string("abc")
        expect(list(s)) == ["a", "b", "c"]
        expect(s.is_string) == True
        expect(s.VerbatimString(False)) == "abc"
        expect(s.VerbatimString(True)) == "'abc'"

    def treats_none_as_empty(expect):
        expect(len(Seq.from_string(None))) == 0

    def compares_by_elements(expect):
        expect(Seq.from_string("ab")) == Seq(["a", "b"])
        expect(Seq([1, 2]) == Seq([2, 1])) == False
        expect(hash(Seq([1, 2]))) == hash(Seq([1, 2]))

    def keeps_the_string_flag_when_sliced(expect):
        expect(Seq.from_string("hello")[1:3].VerbatimString(False)) == "el"
        expect(Seq.from_string("hello")[0]) == "h"

    def exposes_elements(expect):
        expect(Seq([1, 2]).Elements) == (1, 2)


def describe_set():
    def ignores_order_and_duplicates(expect):
        expect(Set([1, 2, 2])) == Set([2, 1])
        expect(len(Set([1, 2, 2]))) == 2

    def tests_membership(expect):
        s = Set([Seq.from_string("a")])
        expect(s.contains(Seq.from_string("a"))) == True
        expect(Seq.from_string("b") in s) == False


def describe_map():
    def grows_without_mutating(expect):
        empty = Map.Empty
        one = empty.update("a", 1)
        expect(len(empty)) == 0
        expect(one.get("a")) == 1
        expect(one.contains("a")) == True

    def replaces_existing_keys(expect):
        m = Map.Empty.update("a", 1).update("a", 2)
        expect(m.Items) == [("a", 2)]

    def exposes_keys_as_a_set(expect):
        m = Map({"a": 1, "b": 2})
        expect(m.Keys) == Set(["a", "b"])
        expect(sorted(m.Values)) == [1, 2]

    def raises_on_missing_keys(expect):
        with pytest.raises(KeyError):
            Map.Empty.get("missing")

    def compares_by_entries(expect):
        expect(Map({"a": 1}).update("b", 2)) == Map({"b": 2, "a": 1})
        expect(hash(Map({"a": 1}))) == hash(Map({"a": 1}))


def describe_tuples():
    def resolves_constructors_by_arity(expect, rt):
        expect(rt.Tuple2(1, "x")) == (1, "x")
        expect(rt.Tuple0()) == ()

    def checks_the_arity(expect, rt):
        with pytest.raises(TypeError):
            rt.Tuple3(1, 2)

    def rejects_other_names(expect, rt):
        with pytest.raises(AttributeError):
            rt.Triple  # pylint: disable=pointless-statement


def describe_unknown_variant_error():
    def carries_the_type_and_value(expect):
        error = UnknownVariantError("Color", "Purple")
        expect(error.type_name) == "Color"
        expect(error.value) == "Purple"
        expect(str(error)) == "Unknown Color variant: 'Purple'"
        expect(isinstance(error, ValueError)) == True
