"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_MAX_FILE_SIZE, DEFAULT_MAX_INCLUDE_DEPTH
from .models import ParseOption

CONFIG_TABLE = "rstree"
DOTFILE_NAME = ".rstree.toml"


@dataclass
class ParserConfig:
    """Configuration for parsing reStructuredText files.

    Attributes:
        skip_pounds: Skip up to two leading ``#`` characters on every line.
        support_smilies: Recognise ASCII emoticons.
        support_raw_directive: Allow the ``raw`` directive.
        support_markdown: Accept markdown headlines, code fences and links.
        max_file_size: Maximum size in bytes of parsed and included files.
        max_include_depth: Deepest allowed nesting of ``include`` directives.

    Examples:
        ParserConfig(support_markdown=True, max_include_depth=4)
    """

    # Parser features
    skip_pounds: bool = False
    support_smilies: bool = False
    support_raw_directive: bool = False
    support_markdown: bool = False

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH

    def options(self) -> frozenset[ParseOption]:
        """Return the parser options enabled by this configuration.

        Examples:
            ParserConfig(support_markdown=True).options()
            # frozenset({ParseOption.SUPPORT_MARKDOWN})
        """
        enabled = {
            ParseOption.SKIP_POUNDS: self.skip_pounds,
            ParseOption.SUPPORT_SMILIES: self.support_smilies,
            ParseOption.SUPPORT_RAW_DIRECTIVE: self.support_raw_directive,
            ParseOption.SUPPORT_MARKDOWN: self.support_markdown,
        }
        return frozenset(option for option, flag in enabled.items() if flag)


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`max_include_depth` must be a positive integer")
    """


def load_config(search_path: Path) -> ParserConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.rstree]`` table from `pyproject.toml` and the ``[rstree]`` or
    ``[tool.rstree]`` table from `.rstree.toml` when present. Returns default
    values when no configuration is found. TOML files that cannot be read or
    decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        ParserConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If a configuration table is present but is not a mapping
            or contains unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", CONFIG_TABLE)]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / DOTFILE_NAME,
            table_paths=[(CONFIG_TABLE,), ("tool", CONFIG_TABLE)],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return ParserConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> ParserConfig | None:
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
) -> ParserConfig:
    table_display = ".".join(table_path)

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    # TOML keys may be spelled with hyphens.
    normalized = {key.replace("-", "_"): value for key, value in raw_config.items()}
    try:
        return ParserConfig(**normalized)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: ParserConfig) -> None:
    """Validate a `ParserConfig` instance.

    Raises:
        ConfigError: If a feature flag is not a boolean or a limit is not a
            positive integer.

    Examples:
        validate_config(ParserConfig(max_include_depth=8))
    """
    for name in ("skip_pounds", "support_smilies", "support_raw_directive", "support_markdown"):
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"`{name}` must be a boolean")

    limits = {
        "max_file_size": config.max_file_size,
        "max_include_depth": config.max_include_depth,
    }
    _ensure_integers(limits)
    _ensure_positive(limits)


def apply_overrides(config: ParserConfig, **overrides: object) -> ParserConfig:
    """Apply override values to a `ParserConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        ParserConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        ConfigError: If an override name is not a `ParserConfig` field.

    Examples:
        updated = apply_overrides(config, support_markdown=True)
    """
    known = {item.name for item in fields(ParserConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration option: {unknown[0]}")
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> ParserConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        ParserConfig: Validated configuration ready for parsing.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), support_markdown=True)
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
