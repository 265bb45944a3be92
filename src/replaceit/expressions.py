"""Expression evaluation for template directives.

Expressions such as ``user.name``, ``price * qty`` or
``formatCurrency(total, 'en-US', 'USD', 2)`` are compiled with Jinja2's
sandboxed environment rather than executed as Python code. The sandbox
supports literals, attribute and item access, arithmetic, comparisons,
``and``/``or``/``not``, filters and calls of bound helpers, and refuses
access to private and internal attributes.
"""

import logging
from functools import lru_cache
from typing import Any, Callable, Mapping

from jinja2 import ChainableUndefined
from jinja2.sandbox import SandboxedEnvironment

from replaceit.exceptions import ExpressionError

logger = logging.getLogger(__name__)


class DataEnvironment(SandboxedEnvironment):
    """Sandboxed environment where ``a.b`` on a mapping reads the key ``b``.

    Jinja2 resolves ``a.b`` as an attribute first, so ``cart.items`` on a
    dict would yield the bound ``dict.items`` method. Template data is
    mostly plain dicts, so keys take precedence and attribute lookup is
    only the fallback.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except (TypeError, LookupError):
                pass
        return super().getattr(obj, attribute)


class ExpressionEvaluator:
    """Evaluates expression strings against a scope and helper bindings.

    By default every failure (syntax error, undefined reference, exception
    raised by a helper) evaluates to an empty string so that a single bad
    expression never aborts a render. With ``strict=True`` failures are
    raised as ExpressionError instead.

    Example:
        >>> evaluator = ExpressionEvaluator()
        >>> evaluator.evaluate("user.name", {"user": {"name": "Faiz"}}, {})
        'Faiz'
        >>> evaluator.evaluate("user.", {"user": {}}, {})
        ''
    """

    def __init__(self, strict: bool = False, cache_size: int = 256):
        """Initialize the evaluator.

        Args:
            strict: Raise ExpressionError instead of returning "" on failure
            cache_size: Number of compiled expressions kept in the LRU cache
        """
        self._strict = strict
        self._env = DataEnvironment(
            undefined=ChainableUndefined,
            autoescape=False,
        )
        self._compile: Callable[[str], Any] = lru_cache(maxsize=cache_size)(
            self._compile_expression
        )

    @property
    def strict(self) -> bool:
        """Whether failures are raised instead of suppressed."""
        return self._strict

    def _compile_expression(self, expression: str) -> Any:
        logger.debug("Compiling expression: %r", expression)
        return self._env.compile_expression(expression, undefined_to_none=True)

    def evaluate(
        self,
        expression: str,
        scope: Mapping[str, Any],
        helpers: Mapping[str, Callable[..., Any]] | None = None,
    ) -> Any:
        """Evaluate an expression with scope and helper names bound.

        Helpers are bound first and scope entries second, so a scope variable
        shadows a helper of the same name.

        Args:
            expression: Expression source, without the surrounding braces
            scope: Variable bindings for the current block
            helpers: Callable bindings available to the expression

        Returns:
            The value produced by the expression, None for an absent value,
            or "" when evaluation fails in non-strict mode

        Raises:
            ExpressionError: If evaluation fails and the evaluator is strict
        """
        expression = expression.strip()
        if not expression:
            return ""

        bindings = {
            key: value
            for key, value in {**(helpers or {}), **scope}.items()
            if isinstance(key, str)
        }

        try:
            compiled = self._compile(expression)
            return compiled(bindings)
        except Exception as e:
            if self._strict:
                raise ExpressionError(
                    f"Failed to evaluate expression '{expression}': {e}",
                    context={"expression": expression, "error": str(e)},
                ) from e
            logger.debug("Expression %r evaluated to empty: %s", expression, e)
            return ""

    def is_truthy(
        self,
        expression: str,
        scope: Mapping[str, Any],
        helpers: Mapping[str, Callable[..., Any]] | None = None,
    ) -> bool:
        """Evaluate an expression as a condition using Python truthiness.

        A value whose truth test raises counts as false, or raises
        ExpressionError when the evaluator is strict.
        """
        value = self.evaluate(expression, scope, helpers)
        try:
            return bool(value)
        except Exception as e:
            if self._strict:
                raise ExpressionError(
                    f"Cannot test truth of expression '{expression.strip()}': {e}",
                    context={"expression": expression.strip(), "error": str(e)},
                ) from e
            logger.debug("Condition %r treated as false: %s", expression, e)
            return False


def to_text(value: Any) -> str:
    """Convert an evaluated value to its rendered text form.

    None becomes the empty string; everything else goes through str().
    """
    if value is None:
        return ""
    return str(value)
