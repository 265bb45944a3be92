"""Lightweight string templating with conditionals, loops and custom directives.

Example:
    ```python
    from replaceit import render_template

    text = render_template(
        template="{{#if user.isMember}}Welcome back, {{ user.name }}!{{else}}Hello Guest!{{/if}}",
        data={"user": {"isMember": True, "name": "Faiz"}},
    )
    # 'Welcome back, Faiz!'
    ```
"""

from replaceit.blocks import Block, find_blocks
from replaceit.config import RendererConfig
from replaceit.exceptions import (
    ConfigurationError,
    ExpressionError,
    HandlerError,
    ReplaceItError,
    TemplateLoadError,
    TemplateNotFoundError,
)
from replaceit.expressions import ExpressionEvaluator
from replaceit.handlers import CustomHandler
from replaceit.helpers import (
    DEFAULT_HELPERS,
    HelperRegistry,
    format_currency,
    format_date,
)
from replaceit.loader import load_template
from replaceit.renderer import (
    RenderOptions,
    TemplateRenderer,
    render_file,
    render_template,
)
from replaceit.resolvers import (
    ConditionalResolver,
    DirectiveResolver,
    ExpressionResolver,
    HandlerResolver,
    LoopResolver,
    RenderContext,
    default_resolvers,
)
from replaceit.scope import extend, get_path

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Rendering
    "render_template",
    "render_file",
    "RenderOptions",
    "TemplateRenderer",
    "RendererConfig",
    # Pipeline
    "DirectiveResolver",
    "ConditionalResolver",
    "LoopResolver",
    "HandlerResolver",
    "ExpressionResolver",
    "RenderContext",
    "default_resolvers",
    "Block",
    "find_blocks",
    # Expressions and scopes
    "ExpressionEvaluator",
    "extend",
    "get_path",
    # Handlers and helpers
    "CustomHandler",
    "HelperRegistry",
    "DEFAULT_HELPERS",
    "format_currency",
    "format_date",
    # Loading
    "load_template",
    # Exceptions
    "ReplaceItError",
    "TemplateNotFoundError",
    "TemplateLoadError",
    "ExpressionError",
    "HandlerError",
    "ConfigurationError",
]
