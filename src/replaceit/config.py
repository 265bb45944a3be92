"""Renderer configuration.

Configuration can be built in code, from a dictionary, or from a YAML or
JSON file:

    ```yaml
    strict: false
    include_default_helpers: true
    item_name: this
    cache_size: 256
    template_dir: templates/
    ```
"""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from replaceit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RendererConfig:
    """Settings for a TemplateRenderer.

    Attributes:
        strict: Raise on expression and handler failures instead of
            rendering them as empty text
        include_default_helpers: Register formatCurrency and formatDate
        item_name: Name each loop element is bound to inside an each body
        cache_size: Number of compiled expressions to cache
        template_dir: Base directory for relative template paths
            (None for the process working directory)
    """
    strict: bool = False
    include_default_helpers: bool = True
    item_name: str = "this"
    cache_size: int = 256
    template_dir: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.strict, bool):
            raise ConfigurationError(
                "strict must be a boolean", context={"strict": self.strict}
            )
        if not isinstance(self.include_default_helpers, bool):
            raise ConfigurationError(
                "include_default_helpers must be a boolean",
                context={"include_default_helpers": self.include_default_helpers},
            )
        if not isinstance(self.item_name, str) or not self.item_name.isidentifier():
            raise ConfigurationError(
                "item_name must be a valid identifier",
                context={"item_name": self.item_name},
            )
        if (
            isinstance(self.cache_size, bool)
            or not isinstance(self.cache_size, int)
            or self.cache_size < 0
        ):
            raise ConfigurationError(
                "cache_size must be a non-negative integer",
                context={"cache_size": self.cache_size},
            )
        if self.template_dir is not None and not isinstance(self.template_dir, (str, Path)):
            raise ConfigurationError(
                "template_dir must be a path",
                context={"template_dir": self.template_dir},
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RendererConfig":
        """Create a configuration from a dictionary.

        Unknown keys are logged and ignored.

        Args:
            data: Configuration values

        Returns:
            RendererConfig instance

        Raises:
            ConfigurationError: If a value has the wrong type
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(key) for key in data if key not in known)
        if unknown:
            logger.warning("Ignoring unknown renderer config keys: %s", ", ".join(unknown))
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RendererConfig":
        """Load a configuration from a YAML (.yaml/.yml) or JSON file.

        Args:
            path: Configuration file path

        Returns:
            RendererConfig instance

        Raises:
            ConfigurationError: If the file is missing, unreadable, has an
                unsupported extension or does not hold a mapping
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigurationError(
                f"Config file not found: {path}", context={"path": str(path)}
            )

        suffix = path.suffix.lower()
        try:
            with open(path, encoding="utf-8") as f:
                if suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                elif suffix == ".json":
                    data = json.load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported config format: {suffix}",
                        context={"path": str(path)},
                    )
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to read config file {path}: {e}",
                context={"path": str(path)},
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Config file must contain a mapping",
                context={"path": str(path), "type": type(data).__name__},
            )
        logger.debug("Loaded renderer config from %s", path)
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the configuration to a dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
