"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_INDENT_SIZE, DEFAULT_MAX_FILE_SIZE


@dataclass
class FormatterConfig:
    """Configuration for reformatting Twig templates.

    Attributes:
        indent_size: Number of spaces per indentation level.
        use_tabs: Indent with one tab per level instead of spaces.
        preserve_blank_lines: Keep blank lines (collapsed to empty lines) in
            the output instead of dropping them.
        max_file_size: Maximum file size in bytes that will be processed.

    Examples:
        FormatterConfig(indent_size=2, preserve_blank_lines=False)
    """

    # Formatting
    indent_size: int = DEFAULT_INDENT_SIZE
    use_tabs: bool = False
    preserve_blank_lines: bool = True

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    @property
    def indent_unit(self) -> str:
        """String emitted once per indentation level."""
        if self.use_tabs:
            return "\t"
        return " " * self.indent_size


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Attributes:
        args: Arguments provided to the underlying `ValueError`.

    Examples:
        raise ConfigError("`indent_size` must be a positive integer")
    """


def load_config(search_path: Path) -> FormatterConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.twig-format]`` table from `pyproject.toml` and the
    ``[twig-format]`` or ``[tool.twig-format]`` table from `.twig-format.toml`
    when present. Returns default values when no configuration is found. TOML
    files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        FormatterConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("templates"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "twig-format")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".twig-format.toml",
            table_paths=[("twig-format",), ("tool", "twig-format")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return FormatterConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> FormatterConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> FormatterConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return FormatterConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return FormatterConfig()

    # Dashed keys are accepted as aliases (`indent-size` for `indent_size`).
    normalized = {str(key).replace("-", "_"): value for key, value in raw_config.items()}
    try:
        return FormatterConfig(**normalized)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: FormatterConfig) -> None:
    """Validate a `FormatterConfig` instance.

    The formatting core does not call this; callers that accept user input
    (the CLI, `format_file`) validate before formatting.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If the indent size or file size limit are not positive
            integers, or if the boolean switches are not booleans.

    Examples:
        validate_config(FormatterConfig(indent_size=2))
    """
    _ensure_integers(
        {
            "indent_size": config.indent_size,
            "max_file_size": config.max_file_size,
        }
    )
    _ensure_positive(
        {
            "indent_size": config.indent_size,
            "max_file_size": config.max_file_size,
        }
    )

    if not isinstance(config.use_tabs, bool):
        raise ConfigError("`use_tabs` must be a boolean")
    if not isinstance(config.preserve_blank_lines, bool):
        raise ConfigError("`preserve_blank_lines` must be a boolean")


def apply_overrides(config: FormatterConfig, **overrides: object) -> FormatterConfig:
    """Apply override values to a `FormatterConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        FormatterConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `FormatterConfig`.

    Examples:
        updated = apply_overrides(config, indent_size=2, use_tabs=None)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> FormatterConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        FormatterConfig: Validated configuration ready for formatting.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), indent_size=2)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
