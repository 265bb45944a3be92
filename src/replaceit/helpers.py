"""Helper functions available to template expressions.

Helpers are plain callables bound by name in every expression, e.g.
``{{ formatCurrency(order.total, 'en-US', '$', 2) }}``. Two are built in:

- ``formatCurrency(amount, locale="id-ID", currency="USD", precision=None)``
- ``formatDate(value, pattern="DD/MM/YYYY")``

Both return "" for missing or invalid input. Callers add or override
helpers per render call, or on a HelperRegistry shared by a renderer.
"""

import threading
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from numbers import Number
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping

from jinja2 import Undefined

from replaceit.exceptions import ConfigurationError

Helper = Callable[..., Any]

# (group separator, decimal separator) by language, or by full locale tag
_SEPARATORS: Dict[str, tuple[str, str]] = {
    "en": (",", "."),
    "ja": (",", "."),
    "zh": (",", "."),
    "ko": (",", "."),
    "th": (",", "."),
    "ms": (",", "."),
    "id": (".", ","),
    "de": (".", ","),
    "es": (".", ","),
    "it": (".", ","),
    "nl": (".", ","),
    "pt": (".", ","),
    "tr": (".", ","),
    "vi": (".", ","),
    "da": (".", ","),
    "fr": ("\u202f", ","),
    "ru": ("\u00a0", ","),
    "pl": ("\u00a0", ","),
    "sv": ("\u00a0", ","),
    "nb": ("\u00a0", ","),
    "fi": ("\u00a0", ","),
    "cs": ("\u00a0", ","),
    "de-CH": ("\u2019", "."),
    "pt-BR": (".", ","),
}

_DEFAULT_FRACTION_DIGITS = 3


def _separators(locale: str) -> tuple[str, str]:
    tag = str(locale or "").replace("_", "-")
    if tag in _SEPARATORS:
        return _SEPARATORS[tag]
    return _SEPARATORS.get(tag.split("-")[0].lower(), _SEPARATORS["en"])


def _is_missing(value: Any) -> bool:
    return value is None or isinstance(value, Undefined)


def format_currency(
    value: Any,
    locale: str = "id-ID",
    currency: str = "USD",
    precision: int | None = None,
) -> str:
    """Format an amount as "<currency> <number>" with locale separators.

    Args:
        value: Amount to format (number or numeric string)
        locale: Locale tag selecting grouping and decimal separators
        currency: Symbol or code placed before the number
        precision: Exact number of fraction digits; None keeps up to three
            and drops trailing zeros

    Returns:
        Formatted amount, or "" when value is missing or not a number

    Raises:
        ValueError: If precision is negative

    Example:
        >>> format_currency(1234.5)
        'USD 1.234,5'
        >>> format_currency(1234.5, "en-US", "$", 2)
        '$ 1,234.50'
    """
    if _is_missing(value) or isinstance(value, bool):
        return ""
    if not isinstance(value, (Number, str)):
        return ""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return ""
    if not amount.is_finite():
        return ""

    if precision is not None:
        precision = int(precision)
        if precision < 0:
            raise ValueError(f"precision must be >= 0, got {precision}")
    digits = _DEFAULT_FRACTION_DIGITS if precision is None else precision
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction
        ctx.prec = max(ctx.prec, amount.adjusted() + digits + 2)
        amount = amount.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)
        if amount == 0:
            amount = abs(amount)

    text = f"{amount:,f}"
    if precision is None and "." in text:
        text = text.rstrip("0").rstrip(".")

    group, decimal = _separators(locale)
    text = text.translate(str.maketrans({",": group, ".": decimal}))
    return f"{currency} {text}"


def _to_datetime(value: Any) -> datetime | date | None:
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Numeric input is milliseconds since the epoch
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def format_date(value: Any, pattern: str = "DD/MM/YYYY") -> str:
    """Format a date by substituting DD, MM, YYYY and YY tokens.

    Only the first occurrence of each token is replaced.

    Args:
        value: datetime, date, ISO-8601 text or epoch milliseconds
        pattern: Output pattern

    Returns:
        Formatted date, or "" when value is missing or cannot be parsed

    Example:
        >>> format_date("2024-03-07")
        '07/03/2024'
        >>> format_date("2024-03-07", "YYYY-MM-DD")
        '2024-03-07'
    """
    if _is_missing(value) or not value:
        return ""
    moment = _to_datetime(value)
    if moment is None:
        return ""

    year = f"{moment.year:04d}"
    return (
        str(pattern)
        .replace("DD", f"{moment.day:02d}", 1)
        .replace("MM", f"{moment.month:02d}", 1)
        .replace("YYYY", year, 1)
        .replace("YY", year[-2:], 1)
    )


DEFAULT_HELPERS: Mapping[str, Helper] = MappingProxyType({
    "formatCurrency": format_currency,
    "formatDate": format_date,
})


class HelperRegistry:
    """Thread-safe registry of named helper functions.

    A renderer owns one registry. Each render call takes an immutable
    snapshot of it merged with the call's own helpers, so registering
    helpers while renders are running never affects a render in flight.

    Example:
        ```python
        registry = HelperRegistry.with_defaults()
        registry.register("shout", lambda s: f"{s}!".upper())
        helpers = registry.snapshot({"formatDate": my_format_date})
        ```
    """

    def __init__(self, helpers: Mapping[str, Helper] | None = None):
        """Initialize the registry.

        Args:
            helpers: Initial helpers to register
        """
        self._items: Dict[str, Helper] = {}
        self._lock = threading.RLock()
        for name, func in (helpers or {}).items():
            self.register(name, func)

    @classmethod
    def with_defaults(cls) -> "HelperRegistry":
        """Create a registry pre-populated with the built-in helpers."""
        return cls(DEFAULT_HELPERS)

    def register(self, name: str, func: Helper, allow_overwrite: bool = True) -> None:
        """Register a helper under a name.

        Args:
            name: Name the helper is bound to in expressions
            func: Helper callable
            allow_overwrite: Whether an existing helper may be replaced

        Raises:
            ConfigurationError: If func is not callable, or the name is taken
                and allow_overwrite is False
        """
        if not callable(func):
            raise ConfigurationError(
                f"Helper '{name}' is not callable",
                context={"name": name, "value": repr(func)},
            )
        with self._lock:
            if not allow_overwrite and name in self._items:
                raise ConfigurationError(
                    f"Helper '{name}' already registered",
                    context={"name": name},
                )
            self._items[name] = func

    def unregister(self, name: str) -> Helper | None:
        """Remove a helper, returning it if it was registered."""
        with self._lock:
            return self._items.pop(name, None)

    def get(self, name: str) -> Helper | None:
        """Get a helper by name, or None."""
        with self._lock:
            return self._items.get(name)

    def names(self) -> List[str]:
        """List registered helper names."""
        with self._lock:
            return list(self._items)

    def snapshot(self, overrides: Mapping[str, Helper] | None = None) -> Mapping[str, Helper]:
        """Build the read-only helper mapping for one render call.

        Args:
            overrides: Per-call helpers, winning over registered ones

        Returns:
            Immutable mapping of helper names to callables
        """
        with self._lock:
            merged = dict(self._items)
        if isinstance(overrides, HelperRegistry):
            overrides = overrides.snapshot()
        merged.update(overrides or {})
        return MappingProxyType(merged)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
