"""Unit tests for custom handlers."""

import re

import pytest

from replaceit import ConfigurationError, CustomHandler, HandlerError, get_path


class TestCustomHandler:
    """Tests for CustomHandler construction and application."""

    def test_string_pattern_compiled(self):
        """Test string patterns are compiled on creation."""
        handler = CustomHandler(r"\[(\w+)\]", lambda m, s, h: m.group(1))
        assert isinstance(handler.pattern, re.Pattern)

    def test_invalid_pattern(self):
        """Test an invalid regular expression is rejected."""
        with pytest.raises(ConfigurationError, match="Invalid handler pattern"):
            CustomHandler("([unclosed", lambda m, s, h: "")

    def test_non_pattern_rejected(self):
        """Test a pattern of the wrong type is rejected."""
        with pytest.raises(ConfigurationError):
            CustomHandler(42, lambda m, s, h: "")

    def test_non_callable_resolver(self):
        """Test a resolver must be callable."""
        with pytest.raises(ConfigurationError, match="callable"):
            CustomHandler(r"x", "not callable")

    def test_from_mapping(self):
        """Test coercion from a mapping, with 'handler' as a resolver alias."""
        handler = CustomHandler.from_value({"pattern": r"x", "handler": lambda m, s, h: "y"})
        assert handler.apply("axa", {}, {}) == "aya"

    def test_from_tuple(self):
        """Test coercion from a (pattern, resolver) tuple."""
        handler = CustomHandler.from_value((r"x", lambda m, s, h: "y"))
        assert handler.apply("x", {}, {}) == "y"

    def test_from_invalid_mapping(self):
        """Test a mapping without a resolver is rejected."""
        with pytest.raises(ConfigurationError):
            CustomHandler.from_value({"pattern": r"x"})

    def test_from_unsupported_value(self):
        """Test unsupported handler definitions are rejected."""
        with pytest.raises(ConfigurationError):
            CustomHandler.from_value("x")

    def test_resolver_receives_scope_and_helpers(self):
        """Test the resolver is called with match, scope and helpers."""
        seen = {}

        def resolver(match, scope, helpers):
            seen.update(match=match.group(0), scope=scope, helpers=helpers)
            return "ok"

        handler = CustomHandler(r"@@", resolver)
        assert handler.apply("@@", {"a": 1}, {"h": len}) == "ok"
        assert seen == {"match": "@@", "scope": {"a": 1}, "helpers": {"h": len}}

    def test_none_result_is_empty(self):
        """Test a resolver returning None removes the match."""
        handler = CustomHandler(r"x", lambda m, s, h: None)
        assert handler.apply("axb", {}, {}) == "ab"

    def test_non_string_result(self):
        """Test resolver results are converted with str()."""
        handler = CustomHandler(r"n", lambda m, s, h: 7)
        assert handler.apply("n!", {}, {}) == "7!"

    def test_failing_resolver_is_empty(self):
        """Test a resolver exception removes the match instead of failing."""
        def boom(match, scope, helpers):
            raise ValueError("bad")

        handler = CustomHandler(r"x", boom)
        assert handler.apply("axb", {}, {}) == "ab"

    def test_failing_resolver_strict(self):
        """Test strict application surfaces resolver exceptions."""
        def boom(match, scope, helpers):
            raise ValueError("bad")

        handler = CustomHandler(r"x", boom, name="boom")
        with pytest.raises(HandlerError, match="boom"):
            handler.apply("axb", {}, {}, strict=True)


class TestHandlersInRender:
    """Tests for handlers running inside the render pipeline."""

    def test_upper_with_raw_expression(self, renderer, upper_handler):
        """Test a handler and a raw expression on the same value."""
        template = "Hello {{ user.name }} / {{#upper user.name}}"
        result = renderer.render(template, {"user": {"name": "Faiz"}}, handlers=[upper_handler])
        assert result == "Hello Faiz / FAIZ"

    def test_multiple_handlers(self, renderer, upper_handler, repeat_handler):
        """Test several handlers in one template."""
        template = "\n<div>\n  Hello {{ user.name }}\n  {{#upper user.name}}\n  {{#repeat user.name 3}}\n</div>\n"
        result = renderer.render(
            template,
            {"user": {"name": "Faiz"}},
            handlers=[upper_handler, repeat_handler],
        )
        assert result == "\n<div>\n  Hello Faiz\n  FAIZ\n  FaizFaizFaiz\n</div>\n"

    def test_registration_order(self, renderer):
        """Test later handlers see text rewritten by earlier ones."""
        handlers = [
            (r"\[a\]", lambda m, s, h: "[b]"),
            (r"\[b\]", lambda m, s, h: "B"),
        ]
        assert renderer.render("[a] [b]", {}, handlers=handlers) == "B B"
        assert renderer.render("[a] [b]", {}, handlers=list(reversed(handlers))) == "[b] B"

    def test_handlers_run_before_expressions(self, renderer):
        """Test handler output containing expressions is still evaluated."""
        handlers = [(r"<<(\w+)>>", lambda m, s, h: "{{ " + m.group(1) + " }}")]
        assert renderer.render("<<name>>", {"name": "Faiz"}, handlers=handlers) == "Faiz"

    def test_handlers_run_after_blocks(self, renderer):
        """Test conditionals are resolved before handlers see the text."""
        handlers = [(r"\{\{#stamp\}\}", lambda m, s, h: "STAMP")]
        template = "{{#if show}}{{#stamp}}{{else}}none{{/if}}"
        assert renderer.render(template, {"show": True}, handlers=handlers) == "STAMP"
        assert renderer.render(template, {"show": False}, handlers=handlers) == "none"

    def test_handler_sees_iteration_scope(self, renderer, upper_handler):
        """Test a handler inside a loop body resolves against the element."""
        data = {"name": "outer", "items": [{"name": "a"}, {"name": "b"}]}
        template = "{{#each items}}{{#upper name}}{{/each}} {{#upper name}}"
        assert renderer.render(template, data, handlers=[upper_handler]) == "AB OUTER"

    def test_handler_can_use_helpers(self, renderer):
        """Test handlers receive the merged helper registry."""
        def price(match, scope, helpers):
            return helpers["formatCurrency"](get_path(scope, match.group(1)), "en-US", "$", 2)

        handlers = [{"pattern": r"\{\{#price (.*?)\}\}", "resolver": price}]
        assert renderer.render("{{#price total}}", {"total": 5}, handlers=handlers) == "$ 5.00"

    def test_failing_handler_does_not_abort(self, renderer):
        """Test a failing handler only blanks its own match."""
        def boom(match, scope, helpers):
            raise RuntimeError("bad")

        result = renderer.render("{{ a }}-{{#boom}}-{{ b }}", {"a": 1, "b": 2}, handlers=[(r"\{\{#boom\}\}", boom)])
        assert result == "1--2"

    def test_invalid_handler_rejected_before_render(self, renderer):
        """Test invalid handler definitions raise at call time."""
        with pytest.raises(ConfigurationError):
            renderer.render("x", {}, handlers=[{"resolver": lambda m, s, h: ""}])
