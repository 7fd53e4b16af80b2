"""Tests for the component slot provider, pattern cache and loop data cache."""

from __future__ import annotations

import pytest
from hypothesis import given

from strata import (
    Block,
    ComponentSlotContextProvider,
    DictLoader,
    FrameImbalanceError,
    LoopDataCache,
    PatternCache,
    PatternNotFoundError,
)
from strata.context import extract_slot_contents

from .builders import component, prop, slot_content, text
from .strategies import loop_count


class TestExtractSlotContents:
    """Slot content is read from direct children only."""

    def test_direct_children_by_name(self):
        block = Block.from_dict(
            component("card", slot_content("header", text("H")), slot_content("body", text("B")), text("ignored"))
        )
        slots = extract_slot_contents(block)
        assert list(slots) == ["header", "body"]
        assert slots["header"][0].attrs["content"] == "H"

    def test_first_block_for_a_name_wins(self):
        block = Block.from_dict(component("card", slot_content("a", text("1")), slot_content("a", text("2"))))
        assert extract_slot_contents(block)["a"][0].attrs["content"] == "1"

    def test_nested_component_slots_not_captured(self):
        inner = component("inner", slot_content("deep", text("x")))
        block = Block.from_dict(component("outer", slot_content("body", inner)))
        assert list(extract_slot_contents(block)) == ["body"]

    def test_custom_slot_block_name(self):
        block = Block.from_dict(
            {"blockName": "component", "innerBlocks": [{"blockName": "fill", "attrs": {"name": "x"}}]}
        )
        assert list(extract_slot_contents(block, "fill")) == ["x"]


class TestSlotProvider:
    """Frames per component instance."""

    def test_push_current_pop(self):
        slots = ComponentSlotContextProvider()
        owner = Block("component")
        frame = slots.push({"body": []}, owner)
        assert slots.current is frame
        assert slots.current_component_block() is owner
        assert slots.depth == 1
        assert slots.pop() is frame
        assert slots.current is None
        assert slots.current_slots() == {}

    def test_pop_empty_raises(self):
        with pytest.raises(FrameImbalanceError):
            ComponentSlotContextProvider().pop()

    def test_outer_scope_hides_top_frame(self):
        slots = ComponentSlotContextProvider()
        outer = slots.push({}, Block("component", {"ref": "outer"}))
        inner = slots.push({}, Block("component", {"ref": "inner"}), parent_component_block=outer.component_block)
        with slots.outer_scope() as hidden:
            assert hidden is inner
            assert slots.current is outer
        assert slots.current is inner
        assert slots.current_parent_component_block() is outer.component_block

    def test_scoped_pops_on_exception(self):
        slots = ComponentSlotContextProvider()
        frame = slots.push({}, Block("component"))
        slots.pop()
        with pytest.raises(ValueError), slots.scoped(frame):
            raise ValueError
        assert slots.depth == 0


class TestPatternCache:
    """Positive and negative memoization."""

    class CountingLoader(DictLoader):
        def __init__(self, mapping):
            super().__init__(mapping)
            self.calls = 0

        def get_pattern(self, ref):
            self.calls += 1
            return super().get_pattern(ref)

    def test_hit_after_first_load(self):
        loader = self.CountingLoader({"7": {"blocks": [text("x")], "props": [prop("title")]}})
        cache = PatternCache(loader)
        assert cache.get(7).id == "7"
        assert cache.get("7").props[0].key == "title"
        assert loader.calls == 1
        assert cache.stats() == {"hits": 1, "misses": 1, "size": 1}

    def test_miss_is_cached(self):
        loader = self.CountingLoader({})
        cache = PatternCache(loader)
        assert cache.get("404") is None
        assert cache.get("404") is None
        assert loader.calls == 1
        assert cache.get_blocks("404") == ()
        assert cache.get_props("404") == ()

    def test_empty_ref(self):
        assert PatternCache(DictLoader({})).get("") is None

    def test_no_loader(self):
        assert PatternCache(None).get("x") is None

    def test_clear(self):
        cache = PatternCache(DictLoader({"a": {"blocks": []}}))
        cache.get("a")
        cache.clear()
        assert len(cache) == 0
        assert cache.stats()["misses"] == 0

    def test_loader_error_message(self):
        with pytest.raises(PatternNotFoundError, match="Did you mean 'card'"):
            DictLoader({"card": {"blocks": []}}).get_pattern("crad")


class TestLoopDataCache:
    """Loop items keyed by id and full parameter set."""

    def test_params_are_part_of_the_key(self):
        cache = LoopDataCache()
        cache.set("posts", {"$count": 2}, [1, 2])
        cache.set("posts", {"$count": 3}, [1, 2, 3])
        assert cache.get("posts", {"$count": 2}) == [1, 2]
        assert cache.get("posts", {"$count": 3}) == [1, 2, 3]
        assert len(cache) == 2

    def test_param_order_does_not_matter(self):
        assert LoopDataCache.make_key("p", {"a": 1, "b": 2}) == LoopDataCache.make_key("p", {"b": 2, "a": 1})

    def test_loop_id_separates_keys(self):
        assert LoopDataCache.make_key("ab", {}) != LoopDataCache.make_key("a", {"b": None})

    def test_stats(self):
        cache = LoopDataCache()
        assert cache.get("x") is None
        cache.set("x", None, [])
        assert cache.get("x") == []
        assert cache.stats() == {"hits": 1, "misses": 1, "size": 1}

    @given(loop_count, loop_count)
    def test_distinct_counts_never_collide(self, first, second):
        if first != second:
            assert LoopDataCache.make_key("posts", {"$count": first}) != LoopDataCache.make_key(
                "posts", {"$count": second}
            )
