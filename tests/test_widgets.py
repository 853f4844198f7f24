"""
Widget variants: construction, rendering and their update/trigger behaviour.
"""

import pytest
from fasthtml.common import P, to_xml

from starwidgets import (
    Observable,
    Scope,
    Widget,
    WidgetKind,
    accordion,
    alert,
    confirm,
    highlight,
    latex,
    monsterui_theme,
    notifications,
    set_default_theme,
    widget,
)
from starwidgets.errors import BindingError, PayloadError, UnknownWidgetKindError, WidgetConstructionError
from starwidgets.view import ExecuteScript, MergeFragments


def scripts(w):
    return [c.script for c in w.scope.view.drain() if isinstance(c, ExecuteScript)]


class TestAlert:
    def test_update_replaces_text_and_shows_it(self):
        wdg = alert("Error!")
        html = to_xml(wdg)
        assert "display: none" in html
        assert scripts(wdg) == []

        wdg.invoke("New error message!")

        assert scripts(wdg) == ['alert("New error message!")']
        assert wdg["text"].get() == "New error message!"

    def test_trigger_shows_current_text_again(self):
        wdg = alert("Error!")
        to_xml(wdg)

        wdg.invoke()
        wdg.trigger()

        assert scripts(wdg) == ['alert("Error!")', 'alert("Error!")']

    def test_nothing_shown_before_attach(self):
        wdg = alert("Error!")
        wdg.invoke("Changed")
        assert len(wdg.scope.view) == 0

    def test_observe_returns_text(self):
        text = Observable("hi")
        wdg = alert(text)
        assert wdg.observe() is text


class TestConfirm:
    def test_answer_reaches_callback_once_per_resolution(self):
        answers = []
        wdg = confirm(answers.append, "File exists, overwrite?")
        to_xml(wdg)

        wdg.invoke()
        [script] = scripts(wdg)
        assert 'confirm("File exists, overwrite?")' in script
        assert wdg.scope.set_url("value") in script

        wdg.scope.receive("value", True)
        wdg.scope.receive("value", False)

        assert answers == [True, False]
        assert wdg.observe().get() is False

    def test_arguments_in_either_order(self):
        called = []
        wdg = confirm("Sure?", called.append)
        assert wdg["text"].get() == "Sure?"
        wdg.observe().set(True)
        assert called == [True]

    def test_update_replaces_function_and_text(self):
        first, second = [], []
        wdg = confirm(first.append, "One?")
        to_xml(wdg)

        wdg.update(second.append)
        wdg.update(text="Two?")
        wdg.scope.receive("value", True)

        assert ['confirm("One?")' in s for s in scripts(wdg)] == [True, False]
        assert first == []
        assert second == [True]

    def test_rejects_two_callbacks(self):
        with pytest.raises(TypeError):
            confirm(print, print)

    def test_answers_must_be_booleans(self):
        answers = []
        wdg = confirm(answers.append, "Sure?")
        with pytest.raises(PayloadError):
            wdg.scope.receive("value", "yes")
        with pytest.raises(BindingError):
            wdg.scope.receive("text", "Hijacked?")
        assert answers == []

    def test_without_callback(self):
        wdg = confirm("Proceed?")
        wdg.scope.receive("value", True)
        assert wdg.observe().get() is True


class TestHighlight:
    def test_renders_code_block_and_highlights_on_import(self):
        wdg = highlight("x = 1")
        html = to_xml(wdg)

        assert 'class="language-python"' in html
        assert "prism" in html
        assert "Prism.highlightElement" in html
        assert '"x = 1"' in html

    def test_language_and_updates(self):
        source = Observable("SELECT 1")
        wdg = highlight(source, language="sql")
        assert "language-sql" in to_xml(wdg)

        source.set("SELECT 2")

        [script] = scripts(wdg)
        assert '"SELECT 2"' in script
        assert wdg.observe() is source

    def test_every_render_starts_from_current_text(self):
        wdg = highlight("x = 1")
        first = to_xml(wdg)
        wdg.update("y = 2")
        wdg.scope.view.drain()

        second = to_xml(wdg)

        assert "x = 1" in first
        assert "y = 2" in second and "x = 1" not in second
        assert "Prism.highlightElement(el)" in second
        assert wdg.scope.attached


class TestLatex:
    def test_typesets_on_import_and_change(self):
        wdg = latex(r"\sum_{i=1}^{\infty} e^i")
        html = to_xml(wdg)

        assert "katex.render" in html
        assert "katex" in html
        assert 'class="field"' in html

        wdg.update(r"\frac{1}{2}")
        [script] = scripts(wdg)
        assert script.startswith('katex.render("\\\\frac{1}{2}"')
        assert f"{wdg.scope.id}-container" in script

    def test_every_render_starts_from_current_text(self):
        wdg = latex("a^2")
        to_xml(wdg)
        wdg.update("b^2")

        second = to_xml(wdg)

        assert "b^2" in second
        assert "katex.render(el.textContent, el)" in second


class TestNotifications:
    def test_dismiss_by_position(self):
        wdg = notifications(["A", "B", "C"])
        keys = list(wdg.keys)
        html = to_xml(wdg)
        assert html.count('class="notification"') == 3

        wdg.dismiss_at(1)

        assert wdg.observe().get() == ["A", "C"]
        [command] = wdg.scope.view.drain()
        assert isinstance(command, MergeFragments)
        assert command.fragment.count('class="notification"') == 2
        assert f"{wdg.scope.id}-{keys[1]}" not in command.fragment
        assert f"{wdg.scope.id}-{keys[2]}" in command.fragment

    def test_dismiss_by_key_and_stale_key(self):
        wdg = notifications(["A", "B", "C"])
        keys = list(wdg.keys)

        assert wdg.dismiss(keys[1]) is True
        assert wdg.observe().get() == ["A", "C"]
        assert list(wdg.keys) == [keys[0], keys[2]]

        assert wdg.dismiss(keys[1]) is False
        assert wdg.observe().get() == ["A", "C"]

    def test_delete_buttons_call_dismiss(self):
        wdg = notifications([P("hello")])
        [key] = list(wdg.keys)
        html = to_xml(wdg)
        assert f"/widgets/{wdg.scope.id}/call/dismiss?key={key}" in html

        wdg.scope.call("dismiss", key=key)
        assert wdg.observe().get() == []

    def test_update_replaces_list(self):
        items = Observable(["x"])
        wdg = notifications(items)
        wdg.update(["y", "z"])
        assert wdg.observe().get() == ["y", "z"]
        assert wdg.observe() is items

    def test_theme_classes(self):
        wdg = notifications(["A"], cls="is-warning", theme=monsterui_theme())
        html = to_xml(wdg)
        assert "uk-alert" in html
        assert "is-warning" in html
        assert "uk-close" in html

    def test_default_theme_override(self):
        set_default_theme(monsterui_theme())
        assert "uk-alert" in to_xml(notifications(["A"]))


OPTIONS = [("First", "one"), ("Second", P("two")), ("Third", "three")]


class TestAccordion:
    def test_single_selection_keeps_last_click(self):
        wdg = accordion(OPTIONS, multiple=False)
        assert wdg.observe().get() == 0

        wdg.select(2)
        wdg.select(1)

        assert wdg.observe().get() == 1
        assert wdg.is_active(1) and not wdg.is_active(2)

    def test_multiple_selection_toggles_without_duplicates(self):
        wdg = accordion(OPTIONS)
        assert wdg.observe().get() == ()

        wdg.select(0)
        wdg.select(2)
        wdg.select(0)
        assert wdg.observe().get() == (2,)

        wdg.select(2)
        assert wdg.observe().get() == ()

    def test_click_through_scope_method(self):
        wdg = accordion(OPTIONS, multiple=False)
        wdg.scope.call("on_click", i="2")
        assert wdg.observe().get() == 2

    def test_changing_options_resets_index(self):
        options = Observable(OPTIONS)
        wdg = accordion(options, value=[1, 2, 1])
        assert wdg.observe().get() == (1, 2)

        options.set([("Only", "one")])
        assert wdg.observe().get() == ()

        single = accordion(OPTIONS, multiple=False, value=2)
        single.update([("a", "b"), ("c", "d")])
        assert single.observe().get() == 0

    def test_index_observable_is_output(self):
        index = Observable(1)
        wdg = accordion(OPTIONS, multiple=False, index=index)
        assert wdg.observe() is index
        wdg.select(0)
        assert index.get() == 0

    def test_renders_sections_and_signals(self):
        wdg = accordion({"A": "alpha", "B": P("beta")})
        html = to_xml(wdg)

        assert "data-signals" in html
        assert html.count("<article") == 2
        assert "alpha" in html and "<p>beta</p>" in html
        assert f"${wdg.scope.id}.index.includes(1)" in html
        assert f"/widgets/{wdg.scope.id}/call/on_click?i=0" in html

    def test_selection_after_attach_merges_signal(self):
        wdg = accordion(OPTIONS, multiple=False)
        to_xml(wdg)
        wdg.select(1)
        signals = [c.signals for c in wdg.scope.view.drain() if hasattr(c, "signals")]
        assert {wdg.scope.id: {"index": 1}} in signals

    def test_positions_are_range_checked(self):
        wdg = accordion(OPTIONS, multiple=False)
        with pytest.raises(ValueError):
            wdg.select(3)
        with pytest.raises(PayloadError):
            wdg.scope.call("on_click", i="-1")
        with pytest.raises(WidgetConstructionError):
            accordion(OPTIONS, value=[0, 7])
        assert wdg.observe().get() == 0

    def test_single_selection_without_options(self):
        wdg = accordion([], multiple=False)
        assert wdg.observe().get() is None
        wdg.update(OPTIONS)
        assert wdg.observe().get() == 0

    def test_view_writes_to_index_are_normalized(self):
        single = accordion(OPTIONS, multiple=False)
        multi = accordion(OPTIONS)

        single.scope.receive("index", "2")
        multi.scope.receive("index", [2, "0", 2])

        assert single.observe().get() == 2
        assert multi.observe().get() == (2, 0)
        with pytest.raises(PayloadError):
            single.scope.receive("index", "garbage")
        with pytest.raises(PayloadError):
            multi.scope.receive("index", [5])
        with pytest.raises(BindingError):
            single.scope.receive("options_js", [])
        assert single.observe().get() == 2

    @pytest.mark.parametrize("options", ["abc", 5, [("a",)], [("a", "b", "c")], ["ab"]])
    def test_malformed_options(self, options):
        with pytest.raises(WidgetConstructionError):
            accordion(options)

    def test_malformed_update(self):
        wdg = accordion(OPTIONS)
        with pytest.raises(WidgetConstructionError):
            wdg.update([("a",)])
        assert wdg["options"].get() == OPTIONS


class TestFactory:
    def test_dispatches_by_kind(self):
        assert widget("alert", "hi").kind is WidgetKind.ALERT
        assert widget(WidgetKind.LATEX, "x").kind is WidgetKind.LATEX
        assert widget("accordion", OPTIONS, multiple=False).observe().get() == 0
        assert widget("notifications", ["a"]).kind is WidgetKind.NOTIFICATIONS

    def test_unknown_kind(self):
        with pytest.raises(UnknownWidgetKindError):
            widget("slider")
        with pytest.raises(ValueError):
            widget("slider")


class TestWidgetInvariants:
    def test_output_must_be_an_observable_state_entry(self):
        with pytest.raises(WidgetConstructionError):
            Widget(WidgetKind.ALERT, {"value": "plain"}, scope=Scope())
        with pytest.raises(WidgetConstructionError):
            Widget(WidgetKind.ALERT, {"text": Observable()}, scope=Scope(), output=Observable())
        with pytest.raises(WidgetConstructionError):
            Widget(WidgetKind.ALERT, {}, scope=Scope())

    def test_output_entry_cannot_be_replaced(self):
        wdg = Widget(WidgetKind.LATEX, {"value": Observable("x")}, scope=Scope())
        with pytest.raises(BindingError):
            wdg["value"] = Observable("y")
        with pytest.raises(BindingError):
            wdg["missing"]

    def test_default_update_sets_primary(self):
        value = Observable(1)
        wdg = Widget("latex", {"value": value}, scope=Scope())
        wdg.invoke(5)
        assert value.get() == 5
        with pytest.raises(TypeError):
            wdg.update(1, 2)
