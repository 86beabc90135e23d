"""Configuration management for the doclinks CLI tool.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .doclinksrc > pyproject.toml > defaults
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]


@dataclass
class DoclinksConfig:
    """Configuration for the doclinks CLI tool.

    Attributes:
        protected_prefix: Path prefix of generated docs that must never be
            rewritten (default: "ref/").
        similarity_threshold: Minimum similarity (0-1) for an anchor to be
            offered as a correction (default: 0.6).
        max_suggestions: Number of anchor suggestions shown in reports
            (default: 5).
        encoding: Text encoding used to read and write documentation files
            (default: "utf-8").
    """

    protected_prefix: str = "ref/"
    similarity_threshold: float = 0.6
    max_suggestions: int = 5
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if not self.protected_prefix or not isinstance(self.protected_prefix, str):
            raise ValueError("protected_prefix must be a non-empty string")

        if isinstance(self.similarity_threshold, bool) or not isinstance(
            self.similarity_threshold, (int, float)
        ):
            raise ValueError("similarity_threshold must be a number")
        if not 0.0 < self.similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be in (0, 1]")

        if isinstance(self.max_suggestions, bool) or not isinstance(self.max_suggestions, int):
            raise ValueError("max_suggestions must be an integer")
        if self.max_suggestions < 0:
            raise ValueError("max_suggestions must not be negative")

        if not self.encoding or not isinstance(self.encoding, str):
            raise ValueError("encoding must be a non-empty string")

    def is_protected(self, filepath: str) -> bool:
        """Check whether a root-relative filepath lies under the protected prefix.

        Args:
            filepath: Path relative to the scanned root.

        Returns:
            True if the file must never be rewritten.
        """
        normalized = filepath.replace("\\", "/")
        while normalized.startswith("./"):
            normalized = normalized[2:]
        prefix = self.protected_prefix.replace("\\", "/").strip("/") + "/"
        return normalized.startswith(prefix)


def _get_config_field_names() -> set[str]:
    """Get the set of valid configuration field names.

    Returns:
        Set of field names from DoclinksConfig.
    """
    return {f.name for f in fields(DoclinksConfig)}


def find_config_file(filename: str = ".doclinksrc", start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = start_dir or Path.cwd()
    current = current.resolve()

    while True:
        config_path = current / filename
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _load_from_doclinksrc(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from .doclinksrc file.

    Args:
        start_dir: Directory to start searching from.

    Returns:
        Dictionary containing configuration from .doclinksrc, or empty dict if not found.
    """
    config_path = find_config_file(".doclinksrc", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
        valid_fields = _get_config_field_names()
        return {k: v for k, v in data.items() if k in valid_fields}
    except (tomllib.TOMLDecodeError, OSError):
        return {}


def _load_from_pyproject(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from pyproject.toml [tool.doclinks] section.

    Args:
        start_dir: Directory to start searching from.

    Returns:
        Dictionary containing configuration from pyproject.toml, or empty dict if not found.
    """
    config_path = find_config_file("pyproject.toml", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
        section = data.get("tool", {}).get("doclinks", {})

        valid_fields = _get_config_field_names()
        return {k: v for k, v in section.items() if k in valid_fields}
    except (tomllib.TOMLDecodeError, OSError):
        return {}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Environment variables are prefixed with DOCLINKS_ and use uppercase names.
    For example: DOCLINKS_PROTECTED_PREFIX, DOCLINKS_SIMILARITY_THRESHOLD

    Returns:
        Dictionary containing configuration from environment variables.

    Raises:
        ValueError: If a numeric variable cannot be parsed.
    """
    env_mapping: dict[str, tuple[str, Callable[[str], Any]]] = {
        "DOCLINKS_PROTECTED_PREFIX": ("protected_prefix", str),
        "DOCLINKS_SIMILARITY_THRESHOLD": ("similarity_threshold", float),
        "DOCLINKS_MAX_SUGGESTIONS": ("max_suggestions", int),
        "DOCLINKS_ENCODING": ("encoding", str),
    }

    result: dict[str, Any] = {}
    for env_var, (config_key, convert) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        try:
            result[config_key] = convert(value)
        except ValueError:
            raise ValueError(f"{env_var} has an invalid value: {value!r}") from None

    return result


def _merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge multiple configuration dictionaries.

    Later dictionaries take precedence over earlier ones.
    """
    result: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is not None:
                result[key] = value
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> DoclinksConfig:
    """Load configuration with full precedence chain.

    Loads configuration from multiple sources and merges them with the following
    precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (DOCLINKS_*)
    3. .doclinksrc file
    4. pyproject.toml [tool.doclinks] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved DoclinksConfig instance.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    pyproject_config = _load_from_pyproject(start_dir)
    doclinksrc_config = _load_from_doclinksrc(start_dir)
    env_config = _load_from_env()
    cli_config = cli_overrides or {}

    valid_fields = _get_config_field_names()
    cli_config = {k: v for k, v in cli_config.items() if k in valid_fields and v is not None}

    merged = _merge_configs(
        pyproject_config,
        doclinksrc_config,
        env_config,
        cli_config,
    )

    return DoclinksConfig(**merged)
