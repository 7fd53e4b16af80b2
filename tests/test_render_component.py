"""Tests for component rendering: props, isolation, slots and guards."""

from __future__ import annotations

import logging

import pytest

from strata import Environment

from .builders import component, element, loop, pattern, prop, slot, slot_content, text

ITEMS = '[{"title": "A"}, {"title": "B"}]'

PATTERNS = {
    "card": pattern(text("<h2>{props.title}</h2>{item.title}"), props=[prop("title")]),
    "box": pattern(element("div", slot("body"))),
    "titled": pattern(element("section", text("{props.title}"), slot("body")), props=[prop("title", default="T")]),
    "panel": pattern(text("{slots.header.empty}|{slots.body.empty}|{slots.footer.empty}")),
    "menu": pattern(
        loop(text("{item.label};"), target="props.nav"),
        props=[prop("nav", "array", default="mainNav", specialized="array")],
    ),
    "frame": pattern(component("box", slot_content("body", slot("inner")))),
    "badge": pattern(text("[{props.text}]"), props=[prop("text")]),
    "outer": pattern(component("badge", text="{props.label}"), props=[prop("label")]),
    "typed": pattern(
        text("{props.n}|{props.on}|{props.tags.length()}|{props.extra}"),
        props=[prop("n", "number", default="2"), prop("on", "boolean", default="false"), prop("tags", "array")],
    ),
    "defaults": pattern(
        text("{props.who}|{props.echo}"),
        props=[prop("who", default="{user.name}"), prop("echo", default="{props.who}")],
    ),
    "empty": pattern(),
}


@pytest.fixture
def env(make_env):
    return make_env(PATTERNS)


class TestProps:
    """Prop defaults, overrides and casting."""

    def test_default_and_override(self, env):
        assert env.render([component("badge")]) == "[]"
        assert env.render([component("badge", text="hi")]) == "[hi]"

    def test_attributes_resolve_in_caller_scope(self, env):
        blocks = [loop(component("badge", text="{item.title}"), target=ITEMS)]
        assert env.render(blocks) == "[A][B]"

    def test_props_pass_through_nested_components(self, env):
        assert env.render([component("outer", label="deep")]) == "[deep]"

    def test_casting_and_unknown_attributes(self, env):
        blocks = [component("typed", tags="a, b, c", extra="ignored")]
        assert env.render(blocks) == "2|false|3|"

    def test_defaults_resolve_against_caller_sources(self, env):
        assert env.render([component("defaults")]) == "ada|"

    def test_none_attribute_keeps_default(self, env):
        assert env.render([component("typed", n=None)]) == "2|false|0|"


class TestIsolation:
    """Component bodies see props, slots and globals only."""

    def test_caller_item_hidden_from_body(self, env):
        blocks = [loop(component("card", title="{item.title}"), target=ITEMS)]
        assert env.render(blocks) == "<h2>A</h2><h2>B</h2>"

    def test_globals_visible_in_body(self, make_env):
        env = make_env({"hello": pattern(text("{site.name}"))})
        assert env.render([component("hello")]) == "Demo Site"

    def test_caller_frame_restored(self, env):
        blocks = [loop(component("badge", text="x"), text("{item.title}"), target=ITEMS)]
        assert env.render(blocks) == "[x]A[x]B"

    def test_props_not_visible_after_component(self, env):
        assert env.render([component("badge", text="x"), text("<{props.text}>")]) == "[x]<>"


class TestSlots:
    """Slot content renders in the caller's scope."""

    def test_slot_sees_caller_loop_item(self, env):
        blocks = [loop(component("box", slot_content("body", text("{item.title}"))), target=ITEMS)]
        assert env.render(blocks) == "<div>A</div><div>B</div>"

    def test_slot_does_not_see_component_props(self, env):
        blocks = [component("titled", slot_content("body", text("({props.title})")))]
        assert env.render(blocks) == "<section>T()</section>"

    def test_unfilled_slot_is_empty(self, env):
        assert env.render([component("box")]) == "<div></div>"

    def test_slot_empty_flags(self, env):
        blocks = [component("panel", slot_content("header"), slot_content("body", text("x")))]
        assert env.render(blocks) == "true|false|"

    def test_slot_forwarding(self, env):
        blocks = [loop(component("frame", slot_content("inner", text("{item.title}"))), target=ITEMS)]
        assert env.render(blocks) == "<div>A</div><div>B</div>"

    def test_slot_content_holding_a_component(self, env):
        content = slot_content("body", component("badge", text="{item.title}"))
        blocks = [loop(component("box", content), target=ITEMS)]
        assert env.render(blocks) == "<div>[A]</div><div>[B]</div>"

    def test_placeholder_outside_component(self, env):
        assert env.render([slot("body")]) == ""

    def test_slot_content_outside_component(self, env):
        assert env.render([slot_content("body", text("x"))]) == ""

    def test_self_referencing_slot_terminates(self, env):
        blocks = [component("box", slot_content("body", text("a"), slot("body")))]
        assert env.render(blocks) == "<div>a</div>"

    def test_slot_guard_blocks_reentry(self, env):
        session = env.new_session()
        with session.slot_guard_scope((1, "body")) as first:
            with session.slot_guard_scope((1, "body")) as second:
                assert first is True
                assert second is False
        assert session.slot_guard == []


class TestLoopProps:
    """Preset-backed loop props."""

    def test_default_preset(self, env):
        assert env.render([component("menu")]) == "Home;About;"

    def test_override_with_preset_key(self, env):
        assert env.render([component("menu", nav="demoNav")]) == "Demo;"

    def test_override_with_inline_list(self, env):
        assert env.render([component("menu", nav=[{"label": "X"}])]) == "X;"

    def test_override_from_caller_source(self, env):
        blocks = [component("menu", nav="{page.links}")]
        assert env.render(blocks, {"page": {"links": [{"label": "L"}]}}) == "L;"


class TestGuards:
    """Missing patterns, recursion and exception safety."""

    def test_missing_ref(self, env, caplog):
        with caplog.at_level(logging.WARNING):
            assert env.render([component("nope")]) == ""
        assert "nope" in caplog.text

    def test_empty_ref_and_empty_pattern(self, env):
        assert env.render([component("")]) == ""
        assert env.render([component("empty")]) == ""

    def test_depth_cap(self, make_env, caplog):
        env = make_env({"self": pattern(text("x"), component("self"))}, max_component_depth=3)
        with caplog.at_level(logging.WARNING):
            assert env.render([component("self")]) == "xxx"
        assert "S-RUN-001" in caplog.text

    def test_invalid_depth(self):
        with pytest.raises(ValueError):
            Environment(max_component_depth=0)

    def test_stacks_restored_after_error(self, make_env):
        env = make_env({"boom": pattern(text("a"), {"blockName": "explode"})})

        def explode(block, session):
            raise RuntimeError("renderer failed")

        env.add_renderer("explode", explode)
        session = env.new_session()
        with pytest.raises(RuntimeError):
            session.render([loop(component("boom", slot_content("body", text("x"))), target=ITEMS)])
        assert session.context.entries == []
        assert session.slots.depth == 0
        assert session.component_depth == 0

    def test_post_processors_see_component_output(self, make_env):
        seen = []

        def record(html, block_name):
            seen.append(block_name)
            return html

        env = make_env(PATTERNS, post_processors=[record])
        env.render([component("badge", text="x")])
        assert seen == ["text", "component"]
