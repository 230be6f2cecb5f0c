"""
Tests for value filter chains.
"""

import re

import pytest
from pica import CustomFilter, FilterChain, FormatFilter, PatternFilter


class TestFilterSteps:
    """Test the individual filter steps."""

    def test_pattern_with_capture(self):
        step = PatternFilter(r"^DDC(\d+)")
        assert step("DDC23") == "23"
        assert step("XYZ") is False

    def test_pattern_without_capture_keeps_value(self):
        step = PatternFilter(r"\d")
        assert step("abc1") is True
        assert step("abc") is False

    def test_pattern_accepts_compiled(self):
        step = PatternFilter(re.compile("^a", re.I))
        assert step("Abc") is True

    def test_optional_group_not_matched(self):
        step = PatternFilter(r"^x(\d)?")
        assert step("x1") == "1"
        assert step("xy") is None

    def test_format(self):
        assert FormatFilter("ddc:{}")("23") == "ddc:23"

    def test_custom(self):
        step = CustomFilter(str.lower)
        assert step("ABC") == "abc"

    def test_steps_compare_by_value(self):
        assert PatternFilter("a") == PatternFilter("a")
        assert FormatFilter("{}") == FormatFilter("{}")


class TestFilterChain:
    """Test chaining and applying filters."""

    def test_empty_chain_keeps_value(self):
        chain = FilterChain()
        assert not chain
        assert chain.apply("foo") == "foo"
        assert chain.apply_all(["a", "b"]) == ["a", "b"]

    def test_find_extracts(self):
        chain = FilterChain().find(r"^DDC(\d+)")
        assert chain.apply("DDC23") == "23"
        assert chain.apply("XYZ") is None

    def test_steps_run_in_order(self):
        chain = FilterChain().find(r"^DDC(\d+)").format("ddc:{}").each(str.upper)
        assert len(chain) == 3
        assert chain.apply("DDC23") == "DDC:23"

    def test_chain_stops_at_first_drop(self):
        calls = []

        def record_call(value):
            calls.append(value)
            return True

        chain = FilterChain().find("^a").each(record_call)
        assert chain.apply("b") is None
        assert calls == []
        assert chain.apply("abc") == "abc"
        assert calls == ["abc"]

    @pytest.mark.parametrize("result,expected", [
        ("new", "new"),
        (True, "old"),
        (False, None),
        (None, None),
        ("", None),
        (0, None),
        (1, None),
    ])
    def test_custom_results(self, result, expected):
        chain = FilterChain().each(lambda value: result)
        assert chain.apply("old") == expected

    def test_apply_all_drops(self):
        chain = FilterChain().find(r"^\d+$")
        assert chain.apply_all(["1", "x", "22"]) == ["1", "22"]

    def test_chains_are_immutable(self):
        base = FilterChain().find("a")
        extended = base.format("{}!")
        assert len(base) == 1
        assert len(extended) == 2

    def test_add(self):
        chain = FilterChain().find("(a)") + FilterChain().format("<{}>")
        assert chain.apply("xa") == "<a>"

    def test_then_rejects_non_steps(self):
        with pytest.raises(TypeError):
            FilterChain().then(str.upper)


class TestFilterChainBuild:
    """Test building chains from loose definitions."""

    def test_none(self):
        assert FilterChain.build(None) == FilterChain()

    def test_chain_passes_through(self):
        chain = FilterChain().find("a")
        assert FilterChain.build(chain) is chain

    def test_single_step(self):
        assert FilterChain.build(FormatFilter("{}")).steps == (FormatFilter("{}"),)

    def test_callable(self):
        chain = FilterChain.build(str.upper)
        assert chain.apply("abc") == "ABC"

    def test_dict_applies_find_format_each(self):
        chain = FilterChain.build({
            "each": str.upper,
            "format": "x{}",
            "find": r"(\d+)",
        })
        assert [type(step) for step in chain] == [PatternFilter, FormatFilter, CustomFilter]
        assert chain.apply("ab12") == "X12"

    def test_list(self):
        chain = FilterChain.build([{"find": r"(\d+)"}, lambda v: v + "!"])
        assert chain.apply("a1") == "1!"

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            FilterChain.build({"pattern": "a"})

    def test_bad_types(self):
        with pytest.raises(TypeError):
            FilterChain.build(42)
        with pytest.raises(TypeError):
            FilterChain.build({"format": 1})
        with pytest.raises(TypeError):
            FilterChain.build({"each": "x"})
