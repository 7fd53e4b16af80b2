"""Tests for the loop renderer."""

from __future__ import annotations

import pytest
from hypothesis import given, settings

from strata import Environment

from .builders import LOOP_PRESETS, InMemoryBackend, component, loop, pattern, prop, text
from .strategies import loop_count


class TestInlineTargets:
    """JSON and expression targets."""

    def test_items_in_order(self, env):
        assert env.render([loop(text("{item} "), target='["foo", "bar"]')]) == "foo bar "

    def test_item_and_index_ids(self, env):
        blocks = [loop(text("{i}:{post.title};"), target='[{"title": "a"}, {"title": "b"}]', itemId="post", indexId="i")]
        assert env.render(blocks) == "0:a;1:b;"

    def test_single_mapping_is_one_item(self, env):
        assert env.render([loop(text("{item.title}"), target='{"title": "solo"}')]) == "solo"

    def test_expression_target(self, env):
        blocks = [loop(text("{item};"), target="page.tags")]
        assert env.render(blocks, {"page": {"tags": ["x", "y"]}}) == "x;y;"

    def test_braced_expression_target(self, env):
        blocks = [loop(text("{item};"), target="{page.tags}")]
        assert env.render(blocks, {"page": {"tags": ["x"]}}) == "x;"

    def test_target_modifiers(self, env):
        blocks = [loop(text("{item}"), target="page.tags.reverse().slice(0, 2)")]
        assert env.render(blocks, {"page": {"tags": ["a", "b", "c"]}}) == "cb"

    @pytest.mark.parametrize("target", ["nothing.here", "", "[not json", "page.title"])
    def test_unresolvable_target_renders_nothing(self, env, target):
        assert env.render([loop(text("x"), target=target)], {"page": {"title": "T"}}) == ""

    def test_empty_list_renders_nothing(self, env):
        assert env.render([loop(text("x"), target="[]")]) == ""


class TestScoping:
    """Items are pushed for the body only."""

    def test_nested_loop_shadows_outer_item(self, env):
        inner = loop(text("{item.n}"), target="item.kids")
        blocks = [loop(inner, text("{item.n}"), target='[{"n": 1, "kids": [{"n": "a"}, {"n": "b"}]}]')]
        assert env.render(blocks) == "ab1"

    def test_outer_item_visible_under_another_name(self, env):
        inner = loop(text("{row.n}{item.n} "), target="row.kids")
        blocks = [loop(inner, target='[{"n": 1, "kids": [{"n": 2}]}]', itemId="row")]
        assert env.render(blocks) == "12 "

    def test_item_gone_after_loop(self, env):
        blocks = [loop(text("{item}"), target='["a"]'), text("[{item}]")]
        assert env.render(blocks) == "a[]"

    def test_block_context_is_visible(self, env):
        blocks = [loop(text("{item}{block.suffix}", block={"suffix": "!"}), target='["a"]')]
        assert env.render(blocks) == "a!"


class TestPresets:
    """Preset calls, loopId and loopParams."""

    def test_preset_by_id(self, env_with_loops):
        assert env_with_loops.render([loop(text("{item.label};"), target="nav")]) == "Home;About;"

    def test_preset_by_key(self, env_with_loops):
        assert env_with_loops.render([loop(text("{item.label};"), target="mainNav")]) == "Home;About;"

    def test_preset_call_with_count(self, env_with_loops):
        blocks = [loop(text("{item.title};"), target="posts($count: 3)")]
        assert env_with_loops.render(blocks) == "Post 1;Post 2;Post 3;"

    def test_preset_call_then_modifier(self, env_with_loops):
        blocks = [loop(text("{item.id}"), target="posts($count: 3).slice(1)")]
        assert env_with_loops.render(blocks) == "23"

    def test_preset_call_argument_from_sources(self, env_with_loops):
        blocks = [loop(text("{item.id}"), target="posts($count: page.n)")]
        assert env_with_loops.render(blocks, {"page": {"n": 4}}) == "1234"

    def test_default_count(self, env_with_loops):
        assert env_with_loops.render([loop(text("{item.id}"), target="posts")]) == "12"

    def test_loop_id_with_params(self, env_with_loops):
        blocks = [loop(text("{item.id}"), loopId="recentPosts", loopParams={"count": "page.n"})]
        assert env_with_loops.render(blocks, {"page": {"n": 3}}) == "123"

    def test_loop_id_inline_params_stripped(self, env_with_loops):
        blocks = [loop(text("{item.id}"), loopId="posts($count: 9)")]
        assert env_with_loops.render(blocks) == "12"

    def test_loop_id_target_only_adds_modifiers(self, env_with_loops):
        blocks = [loop(text("{item.id}"), loopId="posts", loopParams={"$count": 4}, target=".slice(2)")]
        assert env_with_loops.render(blocks) == "34"

    def test_empty_param_value_is_dropped(self, env_with_loops):
        blocks = [loop(text("{item.id}"), loopId="posts", loopParams={"count": "page.empty"})]
        assert env_with_loops.render(blocks, {"page": {"empty": ""}}) == "12"

    def test_unknown_loop_id(self, env_with_loops):
        assert env_with_loops.render([loop(text("x"), loopId="nope")]) == ""

    def test_ambient_query(self, env_with_loops):
        assert env_with_loops.render([loop(text("{item.id}"), target="archive")]) == "12345"

    def test_loop_data_is_cached_per_render(self, env_with_loops, backend):
        blocks = [loop(text("{item.id}"), target="posts"), loop(text("{item.id}"), target="recentPosts")]
        assert env_with_loops.render(blocks) == "1212"
        assert len(backend.calls) == 1

    def test_handler_failure_renders_nothing(self):
        env = Environment(loop_presets={"posts": {"config": {"type": "structured-query"}}})
        assert env.render([loop(text("x"), target="posts")]) == ""

    @settings(max_examples=20, deadline=None)
    @given(loop_count)
    def test_count_controls_item_count(self, count):
        env = Environment(query_backend=InMemoryBackend(), loop_presets=LOOP_PRESETS)
        rendered = env.render([loop(text("."), target=f"posts($count: {count})")])
        assert rendered == "." * min(count, 5)


class TestLoopProps:
    """Loop props forwarded into a pattern."""

    @pytest.fixture
    def env(self, make_env):
        return make_env(
            {
                "list": pattern(
                    loop(text("{item.id}"), target="props.posts($count: props.count)"),
                    props=[
                        prop("posts", "array", default="recentPosts", specialized="array"),
                        prop("count", "number", default=1),
                    ],
                ),
                "bracket": pattern(
                    loop(text("{item.id}"), target="props['posts']($count: props['count'].toInt()).at(0)"),
                    props=[prop("posts", "array", default="posts", specialized="array"), prop("count", "string")],
                ),
            }
        )

    def test_loop_prop_call_uses_props(self, env):
        assert env.render([component("list", count=3)]) == "123"

    def test_loop_prop_default_count(self, env):
        assert env.render([component("list")]) == "1"

    def test_bracket_loop_call(self, env):
        assert env.render([component("bracket", count="4")]) == "1"
