"""Directive resolvers and the render pipeline they form.

Each resolver locates one kind of directive in the text and expands it.
A render runs the resolvers in a fixed order over the output of the
previous one:

1. ConditionalResolver: ``{{#if cond}} ... {{else}} ... {{/if}}``
2. LoopResolver: ``{{#each path}} ... {{/each}}``
3. HandlerResolver: caller-defined (pattern, resolver) handlers
4. ExpressionResolver: ``{{ expression }}``

Block resolvers re-enter the whole pipeline (RenderContext.render) for the
text they select, with the scope that applies inside the block.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Tuple

from replaceit.blocks import find_blocks, replace_blocks
from replaceit.exceptions import ExpressionError
from replaceit.expressions import ExpressionEvaluator, to_text
from replaceit.handlers import CustomHandler
from replaceit.scope import Scope, extend, get_path, is_sequence

logger = logging.getLogger(__name__)

EXPRESSION_PATTERN = re.compile(r"\{\{(.*?)\}\}")


@dataclass(frozen=True)
class RenderContext:
    """Per-call state shared by every level of one render.

    Attributes:
        helpers: Immutable helper snapshot for the call
        handlers: Custom handlers in application order
        evaluator: Expression evaluator
        resolvers: Pipeline stages in order
        item_name: Name each loop element is bound to inside the body
    """
    helpers: Mapping[str, Callable[..., Any]]
    handlers: Tuple[CustomHandler, ...]
    evaluator: ExpressionEvaluator
    resolvers: Tuple["DirectiveResolver", ...]
    item_name: str = "this"

    @property
    def strict(self) -> bool:
        return self.evaluator.strict

    def render(self, text: str, scope: Scope) -> str:
        """Run every pipeline stage over text with the given scope."""
        for resolver in self.resolvers:
            text = resolver.resolve(text, scope, self)
        return text


class DirectiveResolver(ABC):
    """One stage of the render pipeline."""

    name: str = "directive"

    @abstractmethod
    def resolve(self, text: str, scope: Scope, context: RenderContext) -> str:
        """Expand this resolver's directives in text.

        Args:
            text: Current template text
            scope: Bindings visible at this level
            context: Shared per-call render state

        Returns:
            Text with this resolver's directives expanded
        """


class ConditionalResolver(DirectiveResolver):
    """Expands top-level ``{{#if}}`` blocks.

    Conditionals nested in an ``{{#each}}`` body are skipped here; the loop
    stage renders them later with each iteration's bindings.
    """

    name = "if"

    def resolve(self, text: str, scope: Scope, context: RenderContext) -> str:
        blocks = find_blocks(text, {"if"})
        if not blocks:
            return text

        rendered = []
        for block in blocks:
            truthy, falsy = block.branches(text)
            if context.evaluator.is_truthy(block.argument, scope, context.helpers):
                rendered.append(context.render(truthy, scope))
            else:
                rendered.append(context.render(falsy, scope))
        return replace_blocks(text, blocks, rendered)


class LoopResolver(DirectiveResolver):
    """Expands top-level ``{{#each path}}`` blocks.

    The body is rendered once per element with a child scope. Mapping
    elements are flattened into the child scope, and every element is also
    bound to ``context.item_name``. Targets that are not lists or tuples
    render as "".
    """

    name = "each"

    def resolve(self, text: str, scope: Scope, context: RenderContext) -> str:
        blocks = find_blocks(text, {"each"})
        if not blocks:
            return text

        rendered = []
        for block in blocks:
            items = get_path(scope, block.argument)
            if not is_sequence(items):
                if items is not None:
                    logger.debug(
                        "each target %r is %s, not a sequence",
                        block.argument, type(items).__name__,
                    )
                rendered.append("")
                continue

            body = block.body(text)
            rendered.append("".join(
                context.render(body, self.child_scope(scope, item, context.item_name))
                for item in items
            ))
        return replace_blocks(text, blocks, rendered)

    @staticmethod
    def child_scope(scope: Scope, item: Any, item_name: str) -> Scope:
        """Build the scope for one iteration."""
        bindings = {item_name: item}
        if isinstance(item, Mapping):
            bindings.update(item)
        return extend(scope, bindings)


class HandlerResolver(DirectiveResolver):
    """Applies the call's custom handlers in registration order."""

    name = "handlers"

    def resolve(self, text: str, scope: Scope, context: RenderContext) -> str:
        for handler in context.handlers:
            text = handler.apply(text, scope, context.helpers, strict=context.strict)
        return text


class ExpressionResolver(DirectiveResolver):
    """Substitutes every remaining ``{{ expression }}``."""

    name = "expression"

    def resolve(self, text: str, scope: Scope, context: RenderContext) -> str:
        def replace(match: re.Match) -> str:
            value = context.evaluator.evaluate(match.group(1), scope, context.helpers)
            try:
                return to_text(value)
            except Exception as e:
                if context.strict:
                    raise ExpressionError(
                        f"Cannot convert result of '{match.group(1).strip()}' to text",
                        context={"expression": match.group(1).strip(), "error": str(e)},
                    ) from e
                logger.debug("Result of %r has no text form: %s", match.group(1), e)
                return ""

        return EXPRESSION_PATTERN.sub(replace, text)


def default_resolvers() -> Tuple[DirectiveResolver, ...]:
    """The standard pipeline: conditionals, loops, handlers, expressions."""
    return (
        ConditionalResolver(),
        LoopResolver(),
        HandlerResolver(),
        ExpressionResolver(),
    )
