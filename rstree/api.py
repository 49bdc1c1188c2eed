"""Parsing entry points."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .blocks import parse_doc
from .config import ParserConfig, validate_config
from .constants import DEFAULT_MAX_INCLUDE_DEPTH
from .exceptions import ParseFileError, RstParseError
from .filesystem import default_find_file, get_max_file_size, read_source
from .messages import MessageHandler, default_message_handler
from .models import ParseOption, ParseResult
from .resolver import resolve
from .state import Cursor, FileFinder, SharedState


def parse_rst(
    text: str,
    filename: str = "",
    line: int = 1,
    column: int = 0,
    options: Iterable[ParseOption] = frozenset(),
    find_file: FileFinder | None = None,
    msg_handler: MessageHandler | None = None,
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
    max_file_size: int | None = None,
) -> ParseResult:
    """Parse reStructuredText into a resolved document tree.

    Args:
        text: Markup to parse.
        filename: Name reported in messages; included files are looked up
            relative to its directory.
        line: Line number of the first line of `text`.
        column: Column offset of `text`.
        options: Enabled parser features.
        find_file: Resolver for included files, tried after the directory of
            `filename`. Defaults to checking the path as given.
        msg_handler: Receives diagnostics. The default raises `RstParseError`
            on errors and echoes warnings to stderr.
        max_include_depth: Deepest allowed nesting of ``include`` directives.
        max_file_size: Size limit in bytes for included files.

    Returns:
        ParseResult: The document tree and whether it has a contents directive.

    Raises:
        RstParseError: If the default handler receives an error.
        IncludeDepthError: If includes nest deeper than `max_include_depth`.

    Examples:
        result = parse_rst("Title\\n=====\\n")
        result.document.kind  # NodeKind.HEADLINE
    """
    options = frozenset(options)
    shared = SharedState(
        options=options,
        msg_handler=msg_handler or default_message_handler,
        find_file=find_file or default_find_file,
        max_include_depth=max_include_depth,
        max_file_size=max_file_size,
    )
    p = Cursor.from_text(
        text,
        shared,
        filename=filename,
        line=line,
        col=column,
        skip_pounds=ParseOption.SKIP_POUNDS in options,
    )
    document = resolve(p, parse_doc(p))
    return ParseResult(document=document, has_toc=p.has_toc)


def parse_file(
    filepath: Path | str,
    config: ParserConfig | None = None,
    msg_handler: MessageHandler | None = None,
) -> ParseResult:
    """Read and parse a reStructuredText file.

    Args:
        filepath: File to parse.
        config: Parser features and limits; defaults to a new `ParserConfig`.
        msg_handler: Receives diagnostics; see `parse_rst`.

    Returns:
        ParseResult: The parsed document.

    Raises:
        ParseFileError: If the configuration is invalid, the file cannot be
            read or decoded, or parsing aborts with an error.

    Examples:
        result = parse_file(Path("docs/index.rst"), ParserConfig(support_markdown=True))
    """
    filepath = Path(filepath)
    config = config or ParserConfig()
    try:
        validate_config(config)
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise ParseFileError(str(error)) from error

    try:
        content = read_source(filepath, max_file_size)
    except UnicodeDecodeError as error:
        error_message = f"Invalid UTF-8 sequence in {filepath}: {error}"
        raise ParseFileError(error_message) from error
    except IOError as error:
        raise ParseFileError(str(error)) from error

    try:
        return parse_rst(
            content,
            filename=str(filepath),
            options=config.options(),
            msg_handler=msg_handler,
            max_include_depth=config.max_include_depth,
            max_file_size=max_file_size,
        )
    except RstParseError as error:
        raise ParseFileError(str(error)) from error
