"""Pytest configuration and fixtures for replaceit tests."""

import pytest

from replaceit import CustomHandler, RendererConfig, TemplateRenderer, get_path


@pytest.fixture
def renderer():
    """Renderer with default configuration."""
    return TemplateRenderer()


@pytest.fixture
def strict_renderer():
    """Renderer that raises on expression and handler failures."""
    return TemplateRenderer(RendererConfig(strict=True))


@pytest.fixture
def user_data():
    """Sample top-level data with a nested user record."""
    return {
        "user": {
            "name": "Faiz",
            "balance": 1000,
            "isMember": True,
            "address": {"city": "Jakarta"},
        },
    }


@pytest.fixture
def upper_handler():
    """Handler for {{#upper path}} that uppercases the value at path."""
    def upper(match, scope, helpers):
        value = get_path(scope, match.group(1))
        return str(value if value is not None else "").upper()

    return CustomHandler(r"\{\{#upper (.*?)\}\}", upper, name="upper")


@pytest.fixture
def repeat_handler():
    """Handler for {{#repeat path N}} that repeats the value N times."""
    def repeat(match, scope, helpers):
        value = get_path(scope, match.group(1))
        return str(value if value is not None else "") * int(match.group(2))

    return {"pattern": r"\{\{#repeat (.*?) (\d+)\}\}", "resolver": repeat}
