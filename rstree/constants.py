"""Constants used across the rstree package."""

from __future__ import annotations

# Lexer character classes
ADORNMENT_CHARS = frozenset("!\"#$%&'*+,-./:;<=>?@\\^_`|~")
BRACKET_CHARS = frozenset("()[]{}")
WHITESPACE_CHARS = frozenset(" \t\v\f")
NEWLINE_CHARS = frozenset("\r\n")
MAX_PUNCT_LENGTH = 3  # longer runs of one character are adornments
TAB_WIDTH = 8
BYTE_ORDER_MARK = "\ufeff"

# Inline markup boundaries
MARKUP_START_PRECEDERS = frozenset("'\"([{<-/:_")
MARKUP_END_FOLLOWERS = frozenset("'\")]}>-/\\:.,;!?_")
CLOSING_PARTNERS = {"'": "'", '"': '"', "(": ")", "[": "]", "{": "}", "<": ">"}
URL_SCHEMES = ("http", "https", "ftp", "telnet", "file")

SMILEY_START_CHARS = frozenset(":;8")
# The longest matching entry wins.
SMILIES = (
    (":D", "icon_e_biggrin"),
    (":-D", "icon_e_biggrin"),
    (":)", "icon_e_smile"),
    (":-)", "icon_e_smile"),
    (";)", "icon_e_wink"),
    (";-)", "icon_e_wink"),
    (":(", "icon_e_sad"),
    (":-(", "icon_e_sad"),
    (":o", "icon_e_surprised"),
    (":-o", "icon_e_surprised"),
    (":shock:", "icon_eek"),
    (":?", "icon_e_confused"),
    (":-?", "icon_e_confused"),
    (":-/", "icon_e_confused"),
    ("8-)", "icon_cool"),
    (":lol:", "icon_lol"),
    (":x", "icon_mad"),
    (":-x", "icon_mad"),
    (":P", "icon_razz"),
    (":-P", "icon_razz"),
    (":oops:", "icon_redface"),
    (":cry:", "icon_cry"),
    (":evil:", "icon_evil"),
    (":twisted:", "icon_twisted"),
    (":roll:", "icon_rolleyes"),
    (":!:", "icon_exclaim"),
    (":?:", "icon_question"),
    (":idea:", "icon_idea"),
    (":arrow:", "icon_arrow"),
    (":|", "icon_neutral"),
    (":-|", "icon_neutral"),
    (":mrgreen:", "icon_mrgreen"),
    (":geek:", "icon_e_geek"),
    (":ugeek:", "icon_e_ugeek"),
)

# Reference name spelling of punctuation
REFNAME_SPECIALS = {
    "$": "dollar",
    "%": "percent",
    "&": "amp",
    "^": "roof",
    "!": "emark",
    "?": "qmark",
    "*": "star",
    "+": "plus",
    "/": "slash",
    "\\": "backslash",
    "=": "eq",
    "<": "lt",
    ">": "gt",
    "~": "tilde",
    ":": "colon",
    ".": "dot",
    "@": "at",
    "|": "bar",
}

# Code blocks
DEFAULT_LANGUAGE = "Python"
SUPPORTED_LANGUAGES = ("none", "Python", "Nim", "C++", "C#", "C", "Java", "Yaml")
RAW_FORMATS = ("html", "latex")

# Table columns; the last column is unbounded.
UNBOUNDED_COLUMN = 32000

# Limits and file handling
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_INCLUDE_DEPTH = 16
RST_EXTENSIONS = (".rst", ".rest", ".txt")
