from __future__ import annotations

import textwrap
import pytest
from pathlib import Path

from rstree.config import (
    ConfigError,
    ParserConfig,
    apply_overrides,
    build_config,
    load_config,
    validate_config,
)
from rstree.models import ParseOption


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".rstree.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        skip_pounds = true
        support_smilies = true
        support_raw_directive = true
        support_markdown = true
        max_file_size = 1
        max_include_depth = 2
        """,
    )

    config = load_config(tmp_path)

    assert config == ParserConfig(
        skip_pounds=True,
        support_smilies=True,
        support_raw_directive=True,
        support_markdown=True,
        max_file_size=1,
        max_include_depth=2,
    )


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [rstree]
        support_markdown = true
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    config = load_config(nested)

    assert config.support_markdown is True
    assert config.support_smilies is False


def test_dotfile_accepts_tool_table(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tool.rstree]
        support_smilies = true
        """,
    )

    assert load_config(tmp_path).support_smilies is True


def test_hyphenated_keys_are_accepted(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        support-raw-directive = true
        max-include-depth = 4
        """,
    )

    config = load_config(tmp_path)

    assert config.support_raw_directive is True
    assert config.max_include_depth == 4


def test_load_config_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        skip_pounds = true
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    config = load_config(nested)

    assert config.skip_pounds is True


def test_pyproject_without_table_is_ignored(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        support_markdown = true
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [project]
        name = "other"
        """,
    )

    assert load_config(child).support_markdown is True


def test_empty_config_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        support_markdown = true
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.rstree]
        """,
    )

    config = load_config(child)

    assert config == ParserConfig()


def test_load_config_returns_defaults_when_missing(tmp_path: Path):
    config = load_config(tmp_path)

    assert config == ParserConfig()


def test_load_config_skips_invalid_toml(tmp_path: Path):
    invalid_dir = tmp_path / "invalid"
    invalid_dir.mkdir()
    _write_pyproject(invalid_dir, "not = {valid")
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        support_smilies = true
        """,
    )

    nested = invalid_dir / "child"
    nested.mkdir()
    config = load_config(nested)

    assert config.support_smilies is True


def test_load_config_errors_on_unknown_keys(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        support_markdown = true
        unexpected = true
        """,
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_errors_on_non_table(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool]
        rstree = "yes"
        """,
    )

    with pytest.raises(ConfigError, match=r"Invalid `\[tool.rstree\]` settings"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "config",
    [
        ParserConfig(max_file_size=0),
        ParserConfig(max_include_depth=-1),
        ParserConfig(max_file_size="big"),  # type: ignore[arg-type]
        ParserConfig(max_include_depth=True),
        ParserConfig(skip_pounds="yes"),  # type: ignore[arg-type]
        ParserConfig(support_markdown=1),  # type: ignore[arg-type]
    ],
)
def test_validate_config_rejects_invalid_values(config: ParserConfig):
    with pytest.raises(ConfigError):
        validate_config(config)


def test_options_reflect_flags():
    assert ParserConfig().options() == frozenset()
    assert ParserConfig(skip_pounds=True, support_markdown=True).options() == frozenset(
        {ParseOption.SKIP_POUNDS, ParseOption.SUPPORT_MARKDOWN}
    )


def test_apply_overrides_ignores_none():
    config = ParserConfig()

    assert apply_overrides(config, support_markdown=None) is config
    assert apply_overrides(config, support_markdown=True).support_markdown is True


def test_apply_overrides_rejects_unknown_names():
    with pytest.raises(ConfigError, match="Unknown configuration option: colour"):
        apply_overrides(ParserConfig(), colour=True)


def test_build_config_applies_overrides_after_loading(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        support_smilies = true
        max_include_depth = 3
        """,
    )

    config = build_config(tmp_path, support_markdown=True, support_smilies=None)

    assert config.support_markdown is True
    assert config.support_smilies is True
    assert config.max_include_depth == 3


def test_build_config_validates(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.rstree]
        max_include_depth = 0
        """,
    )

    with pytest.raises(ConfigError, match="max_include_depth"):
        build_config(tmp_path)
