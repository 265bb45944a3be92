"""Template rendering entry points.

This module provides:
- RenderOptions: the (template, data, helpers, handlers) render request
- TemplateRenderer: reusable renderer holding configuration and helpers
- render_template() / render_file(): one-off convenience functions

Rendering never raises for problems inside the template: failing
expressions, missing paths and non-list loop targets all render as "".
Only strict mode, invalid handler definitions and template loading raise.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Union

from replaceit.config import RendererConfig
from replaceit.exceptions import ConfigurationError
from replaceit.expressions import ExpressionEvaluator
from replaceit.handlers import CustomHandler, HandlerLike
from replaceit.helpers import HelperRegistry
from replaceit.loader import load_template
from replaceit.resolvers import DirectiveResolver, RenderContext, default_resolvers

logger = logging.getLogger(__name__)

HelpersLike = Union[Mapping[str, Callable[..., Any]], HelperRegistry]


@dataclass
class RenderOptions:
    """A single render request.

    Attributes:
        template: Template text
        data: Top-level variable bindings
        helpers: Per-call helpers, overriding registered helpers by name
        handlers: Custom handlers, applied in list order
    """
    template: str
    data: Dict[str, Any] = field(default_factory=dict)
    helpers: HelpersLike | None = None
    handlers: List[HandlerLike] | None = None

    @classmethod
    def from_value(cls, value: Union["RenderOptions", Mapping[str, Any]]) -> "RenderOptions":
        """Coerce a RenderOptions or a mapping with the same keys.

        Raises:
            ConfigurationError: If the value has no template
        """
        if isinstance(value, RenderOptions):
            return value
        if isinstance(value, Mapping):
            if "template" not in value:
                raise ConfigurationError(
                    "Render options need a 'template' key",
                    context={"keys": sorted(str(k) for k in value)},
                )
            return cls(
                template=value["template"],
                data=value.get("data") or {},
                helpers=value.get("helpers"),
                handlers=value.get("handlers"),
            )
        raise ConfigurationError(
            f"Cannot build render options from {type(value).__name__}",
            context={"value": repr(value)},
        )


class TemplateRenderer:
    """Renders templates with conditionals, loops, handlers and expressions.

    Features:
    - ``{{ expression }}`` substitution with sandboxed expressions
    - ``{{#if cond}} ... {{else}} ... {{/if}}`` conditionals
    - ``{{#each path}} ... {{/each}}`` loops with per-element scopes
    - Caller-defined (pattern, resolver) handlers
    - Built-in and caller-supplied helper functions

    Example:
        >>> renderer = TemplateRenderer()
        >>> renderer.render(
        ...     "Hello {{ user.name }}, you have {{ user.balance }} points.",
        ...     {"user": {"name": "Faiz", "balance": 1000}},
        ... )
        'Hello Faiz, you have 1000 points.'
    """

    def __init__(
        self,
        config: RendererConfig | None = None,
        helpers: HelpersLike | None = None,
        resolvers: Sequence[DirectiveResolver] | None = None,
    ):
        """Initialize the renderer.

        Args:
            config: Renderer configuration (default: RendererConfig())
            helpers: Helpers registered on top of the built-ins
            resolvers: Pipeline stages replacing the default pipeline
        """
        self._config = config or RendererConfig()
        self._evaluator = ExpressionEvaluator(
            strict=self._config.strict,
            cache_size=self._config.cache_size,
        )

        if self._config.include_default_helpers:
            self._helpers = HelperRegistry.with_defaults()
        else:
            self._helpers = HelperRegistry()
        if isinstance(helpers, HelperRegistry):
            helpers = helpers.snapshot()
        for name, func in (helpers or {}).items():
            self._helpers.register(name, func)

        self._resolvers = tuple(resolvers) if resolvers is not None else default_resolvers()

    @property
    def config(self) -> RendererConfig:
        """Renderer configuration."""
        return self._config

    @property
    def helpers(self) -> HelperRegistry:
        """Registry of helpers available to every render."""
        return self._helpers

    def add_helper(self, name: str, func: Callable[..., Any]) -> None:
        """Register a helper available to every render of this renderer.

        Example:
            >>> renderer.add_helper("shout", lambda s: s.upper() + "!")
            >>> renderer.render("{{ shout(name) }}", {"name": "hi"})
            'HI!'
        """
        self._helpers.register(name, func)

    def render(
        self,
        template: str,
        data: Mapping[str, Any] | None = None,
        helpers: HelpersLike | None = None,
        handlers: Sequence[HandlerLike] | None = None,
    ) -> str:
        """Render a template.

        Args:
            template: Template text
            data: Top-level variable bindings (copied, never mutated)
            helpers: Per-call helpers overriding registered ones by name
            handlers: Custom handlers applied in order

        Returns:
            The fully expanded text

        Raises:
            ConfigurationError: If a handler definition is invalid
            ExpressionError: On expression failure in strict mode
            HandlerError: On handler failure in strict mode
        """
        context = RenderContext(
            helpers=self._helpers.snapshot(helpers),
            handlers=tuple(CustomHandler.from_value(h) for h in handlers or ()),
            evaluator=self._evaluator,
            resolvers=self._resolvers,
            item_name=self._config.item_name,
        )
        return context.render(str(template), dict(data or {}))

    def render_options(self, options: Union[RenderOptions, Mapping[str, Any]]) -> str:
        """Render a RenderOptions request (or an equivalent mapping)."""
        options = RenderOptions.from_value(options)
        return self.render(options.template, options.data, options.helpers, options.handlers)

    def render_file(
        self,
        path: Union[str, Path],
        data: Mapping[str, Any] | None = None,
        helpers: HelpersLike | None = None,
        handlers: Sequence[HandlerLike] | None = None,
    ) -> str:
        """Load a template file and render it.

        Relative paths resolve against ``config.template_dir``.

        Raises:
            TemplateNotFoundError: If the file does not exist
            TemplateLoadError: If the file cannot be read
        """
        template = load_template(path, base_dir=self._config.template_dir)
        return self.render(template, data, helpers, handlers)


def render_template(
    options: Union[RenderOptions, Mapping[str, Any], str, None] = None,
    **kwargs: Any,
) -> str:
    """Convenience function to render a template.

    Accepts a RenderOptions, a mapping with the same keys, a template
    string plus keyword arguments, or keyword arguments alone. Each call
    uses a fresh renderer with the default configuration, so only the
    built-in helpers and the call's own helpers are bound.

    Args:
        options: Render request, or the template text
        **kwargs: template, data, helpers and handlers

    Returns:
        Rendered text

    Example:
        >>> render_template(
        ...     template="{{#each items}}{{ name }}-{{ price }};{{/each}}",
        ...     data={"items": [{"name": "A", "price": 1}, {"name": "B", "price": 2}]},
        ... )
        'A-1;B-2;'
    """
    if options is None:
        options = RenderOptions(**kwargs)
    elif isinstance(options, str):
        options = RenderOptions(template=options, **kwargs)
    renderer = TemplateRenderer()
    return renderer.render_options(options)


def render_file(
    path: Union[str, Path],
    data: Mapping[str, Any] | None = None,
    helpers: HelpersLike | None = None,
    handlers: Sequence[HandlerLike] | None = None,
) -> str:
    """Load a template file relative to the working directory and render it."""
    renderer = TemplateRenderer()
    return renderer.render_file(path, data, helpers, handlers)
