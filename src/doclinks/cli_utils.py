"""CLI utility functions for doclinks.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Path resolution: Resolving the documentation root
- Error exit: One styled error message and an exit code
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, NoReturn

import typer

from doclinks.config import DoclinksConfig, load_config

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Issues remain, bad input, missing file, etc.
EXIT_SYSTEM_ERROR = 2  # I/O failure while rewriting files


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Args:
        msg: The error message to display.
        exit_code: Exit code to use (default: EXIT_USER_ERROR=1).

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


# -----------------------------------------------------------------------------
# Path Resolution Helpers
# -----------------------------------------------------------------------------


def resolve_path(
    path: str | Path,
    base_path: Path | None = None,
) -> Path:
    """Resolve a path relative to a base path.

    Args:
        path: The path to resolve.
        base_path: Base path to resolve relative paths from. Defaults to cwd.

    Returns:
        Resolved absolute Path.
    """
    p = Path(path)
    base = base_path or Path.cwd()

    return p.resolve() if p.is_absolute() else (base / p).resolve()


def ensure_path_exists(
    path: Path,
    path_type: str = "path",
    must_be_dir: bool = False,
    must_be_file: bool = False,
) -> Path:
    """Ensure a path exists and optionally check its type.

    Raises:
        typer.Exit: If the path doesn't exist or is the wrong type.
    """
    if not path.exists():
        error(f"{path_type} does not exist: {path}")

    if must_be_dir and not path.is_dir():
        error(f"{path_type} is not a directory: {path}")

    if must_be_file and not path.is_file():
        error(f"{path_type} is not a file: {path}")

    return path


# -----------------------------------------------------------------------------
# Config Wiring Helper
# -----------------------------------------------------------------------------


def wire_config(
    protected_prefix: str | None = None,
    similarity_threshold: float | None = None,
    start_dir: Path | None = None,
) -> DoclinksConfig:
    """Wire CLI options to load_config with appropriate overrides.

    Args:
        protected_prefix: Override for the protected path prefix.
        similarity_threshold: Override for the anchor similarity threshold.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved DoclinksConfig instance.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    cli_overrides: dict[str, Any] = {}

    if protected_prefix is not None:
        cli_overrides["protected_prefix"] = protected_prefix
    if similarity_threshold is not None:
        cli_overrides["similarity_threshold"] = similarity_threshold

    try:
        return load_config(cli_overrides=cli_overrides, start_dir=start_dir)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_USER_ERROR)


# -----------------------------------------------------------------------------
# Typer Option Factory Functions
# -----------------------------------------------------------------------------
# Typer consumes Option objects when decorating commands, so each command
# needs a fresh instance.


def issues_option() -> Any:
    """Create a Typer Option for --issues / -i."""
    return typer.Option(
        ...,
        "--issues",
        "-i",
        help="JSON issue report produced by the link crawler ('-' for stdin).",
        envvar="DOCLINKS_ISSUES",
    )


def protected_prefix_option() -> Any:
    """Create a Typer Option for --protected-prefix."""
    return typer.Option(
        None,
        "--protected-prefix",
        help="Path prefix of generated docs that are never rewritten (default: ref/).",
    )


def similarity_threshold_option() -> Any:
    """Create a Typer Option for --similarity-threshold."""
    return typer.Option(
        None,
        "--similarity-threshold",
        help="Minimum anchor similarity (0-1) for automatic anchor fixes (default: 0.6).",
    )


def json_option() -> Any:
    """Create a Typer Option for --json."""
    return typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    )
