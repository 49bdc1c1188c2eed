"""
rstree: reStructuredText to document tree parser.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    rstree docs/index.rst

Library Usage:
    from rstree import parse_rst, format_tree

    result = parse_rst("Title\\n=====\\n\\nSome *text*.\\n")
    print(format_tree(result.document))
"""

from .api import parse_file, parse_rst
from .config import ConfigError, ParserConfig
from .directives import get_argument, get_field_value
from .exceptions import IncludeDepthError, ParseFileError, RstParseError
from .lexer import tokenize
from .messages import (
    Message,
    MessageClass,
    MessageCollector,
    MessageKind,
    default_message_handler,
)
from .models import Node, NodeKind, ParseOption, ParseResult, Token, TokenKind, format_tree
from .refname import add_nodes, node_to_refname

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "parse_rst",
    "parse_file",
    "tokenize",
    # Data models
    "Node",
    "NodeKind",
    "ParseOption",
    "ParseResult",
    "Token",
    "TokenKind",
    # Diagnostics
    "Message",
    "MessageClass",
    "MessageCollector",
    "MessageKind",
    "default_message_handler",
    # Utilities
    "add_nodes",
    "format_tree",
    "get_argument",
    "get_field_value",
    "node_to_refname",
    # Configuration
    "ParserConfig",
    # Exceptions
    "ConfigError",
    "IncludeDepthError",
    "ParseFileError",
    "RstParseError",
    # Version
    "__version__",
]
