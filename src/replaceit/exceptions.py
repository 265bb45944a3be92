"""Exception hierarchy for replaceit.

Rendering itself never raises: bad expressions, non-list loop targets and
missing paths all degrade to empty text. The exceptions here cover the
boundaries around rendering, where failing loudly is the right behavior:

- Loading a template file that does not exist or cannot be read
- Building a renderer from invalid configuration or handler definitions
- Strict mode, where expression and handler failures are surfaced

Every exception carries an optional context dictionary with details about
the failure.

Example:
    ```python
    from replaceit.exceptions import ReplaceItError, TemplateNotFoundError

    try:
        text = load_template("emails/welcome.html")
    except TemplateNotFoundError as e:
        logger.error(f"Missing template: {e.context['path']}")
    ```
"""

from typing import Any, Dict


class ReplaceItError(Exception):
    """Base exception for all replaceit errors.

    Attributes:
        context: Dictionary containing contextual information about the error

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (path, expression, etc.)

    Example:
        ```python
        error = ReplaceItError(
            "Render failed",
            context={"template": "welcome.html"}
        )
        str(error)
        # 'Render failed'
        error.context
        # {'template': 'welcome.html'}
        ```
    """

    def __init__(self, message: str, context: Dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class TemplateNotFoundError(ReplaceItError):
    """Raised when a template file does not exist."""

    pass


class TemplateLoadError(ReplaceItError):
    """Raised when a template file exists but cannot be read or decoded."""

    pass


class ExpressionError(ReplaceItError):
    """Raised in strict mode when an expression fails to compile or evaluate.

    Example:
        ```python
        raise ExpressionError(
            "Expression evaluation failed",
            context={"expression": "user.name |", "error": "unexpected end"}
        )
        ```
    """

    pass


class HandlerError(ReplaceItError):
    """Raised in strict mode when a custom handler's resolver fails."""

    pass


class ConfigurationError(ReplaceItError):
    """Raised when renderer configuration or a handler definition is invalid.

    Common scenarios include:
    - A handler pattern that is neither a string nor a compiled regex
    - A handler resolver that is not callable
    - A configuration file with an unsupported format
    - A configuration value of the wrong type
    """

    pass


__all__ = [
    "ReplaceItError",
    "TemplateNotFoundError",
    "TemplateLoadError",
    "ExpressionError",
    "HandlerError",
    "ConfigurationError",
]
