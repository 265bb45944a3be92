"""Loading templates from files."""

import logging
from pathlib import Path
from typing import Union

from replaceit.exceptions import TemplateLoadError, TemplateNotFoundError

logger = logging.getLogger(__name__)


def resolve_template_path(
    path: Union[str, Path],
    base_dir: Union[str, Path, None] = None,
) -> Path:
    """Resolve a template path against a base directory.

    Absolute paths are returned unchanged.

    Args:
        path: Template path
        base_dir: Directory relative paths are resolved against
            (default: current working directory)

    Returns:
        Absolute template path
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    return (base / Path(path)).absolute()


def load_template(
    path: Union[str, Path],
    base_dir: Union[str, Path, None] = None,
    encoding: str = "utf-8",
) -> str:
    """Read a template file.

    Args:
        path: Template path, relative to base_dir unless absolute
        base_dir: Base directory (default: current working directory)
        encoding: File encoding

    Returns:
        The raw template text

    Raises:
        TemplateNotFoundError: If the file does not exist
        TemplateLoadError: If the path is not a file or cannot be read or decoded

    Example:
        >>> text = load_template("templates/welcome.html")
    """
    full_path = resolve_template_path(path, base_dir)
    if not full_path.exists():
        raise TemplateNotFoundError(
            f"Template not found: {full_path}",
            context={"path": str(full_path)},
        )
    if not full_path.is_file():
        raise TemplateLoadError(
            f"Template path is not a file: {full_path}",
            context={"path": str(full_path)},
        )

    try:
        with open(full_path, encoding=encoding) as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateLoadError(
            f"Failed to read template {full_path}: {e}",
            context={"path": str(full_path), "encoding": encoding},
        ) from e

    logger.debug("Loaded template %s (%d chars)", full_path, len(content))
    return content
