"""Caller-defined directive syntax.

A custom handler pairs a regular expression with a resolver function. Every
match of the pattern is replaced by whatever the resolver returns for it:

    ```python
    def upper(match, scope, helpers):
        return str(get_path(scope, match.group(1)) or "").upper()

    handler = CustomHandler(r"\\{\\{#upper (.*?)\\}\\}", upper)
    ```

Handlers may also be given as plain mappings
(``{"pattern": ..., "resolver": ...}``) or as ``(pattern, resolver)`` tuples.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Union

from replaceit.exceptions import ConfigurationError, HandlerError

logger = logging.getLogger(__name__)

HandlerFunc = Callable[[re.Match, Mapping[str, Any], Mapping[str, Callable[..., Any]]], Any]


@dataclass(frozen=True)
class CustomHandler:
    """A (pattern, resolver) pair extending the template syntax.

    Attributes:
        pattern: Compiled pattern; a string pattern is compiled on creation
        resolver: Called as resolver(match, scope, helpers), returns the
            replacement text (None renders as "")
        name: Optional label used in log messages
    """
    pattern: re.Pattern
    resolver: HandlerFunc
    name: str | None = None

    def __post_init__(self) -> None:
        pattern = self.pattern
        if isinstance(pattern, str):
            try:
                pattern = re.compile(pattern)
            except re.error as e:
                raise ConfigurationError(
                    f"Invalid handler pattern: {e}",
                    context={"pattern": self.pattern},
                ) from e
            object.__setattr__(self, "pattern", pattern)
        elif not isinstance(pattern, re.Pattern):
            raise ConfigurationError(
                "Handler pattern must be a string or compiled regular expression",
                context={"pattern": repr(pattern)},
            )
        if not callable(self.resolver):
            raise ConfigurationError(
                "Handler resolver must be callable",
                context={"pattern": pattern.pattern, "resolver": repr(self.resolver)},
            )

    @property
    def label(self) -> str:
        """Name for log messages, falling back to the pattern source."""
        return self.name or self.pattern.pattern

    @classmethod
    def from_value(cls, value: "HandlerLike") -> "CustomHandler":
        """Coerce a handler definition into a CustomHandler.

        Args:
            value: A CustomHandler, a mapping with "pattern" and "resolver"
                (or "handler") keys, or a (pattern, resolver) tuple

        Returns:
            CustomHandler instance

        Raises:
            ConfigurationError: If the definition cannot be interpreted
        """
        if isinstance(value, CustomHandler):
            return value
        if isinstance(value, Mapping):
            resolver = value.get("resolver", value.get("handler"))
            if "pattern" not in value or resolver is None:
                raise ConfigurationError(
                    "Handler mapping needs 'pattern' and 'resolver' keys",
                    context={"keys": sorted(str(k) for k in value)},
                )
            return cls(value["pattern"], resolver, value.get("name"))
        if isinstance(value, tuple) and len(value) == 2:
            return cls(value[0], value[1])
        raise ConfigurationError(
            f"Cannot build a handler from {type(value).__name__}",
            context={"value": repr(value)},
        )

    def apply(
        self,
        text: str,
        scope: Mapping[str, Any],
        helpers: Mapping[str, Callable[..., Any]],
        strict: bool = False,
    ) -> str:
        """Replace every match of the pattern in text.

        A resolver that raises renders its match as "" unless strict is set.

        Raises:
            HandlerError: If the resolver fails and strict is True
        """
        def replace(match: re.Match) -> str:
            try:
                value = self.resolver(match, scope, helpers)
            except Exception as e:
                if strict:
                    raise HandlerError(
                        f"Handler '{self.label}' failed: {e}",
                        context={"handler": self.label, "match": match.group(0)},
                    ) from e
                logger.warning(
                    "Handler %r failed on %r, rendering empty: %s",
                    self.label, match.group(0), e,
                )
                return ""
            return "" if value is None else str(value)

        return self.pattern.sub(replace, text)


HandlerLike = Union[CustomHandler, Mapping[str, Any], tuple]
