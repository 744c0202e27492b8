"""
The single quoting rule used wherever a literal argument is embedded in
generated Nushell text.
"""

from typing import Iterable

from ..config.config import GLOB_CHARACTERS, QUOTE_CHARACTERS
from ..parser.utils.helpers import is_quoted_literal

REGEX_METACHARACTERS = set("\\.^$|?*+()[]{}")


def needs_quoting(arg: str, glob: bool = False) -> bool:
    triggers = QUOTE_CHARACTERS + GLOB_CHARACTERS if glob else QUOTE_CHARACTERS
    return any(ch in arg for ch in triggers)


def quote_arg(arg: str, glob: bool = False) -> str:
    """
    Wraps `arg` in double quotes, escaping inner double quotes, iff it contains a
    space, `"`, `'` or `$` (and, with `glob=True`, `*` or `?`).

    An argument that already is one complete quoted literal is returned as is,
    so quoting never escapes twice. The empty string becomes `""`.
    """
    if arg == "":
        return '""'
    if is_quoted_literal(arg):
        return arg
    if needs_quoting(arg, glob):
        escaped = arg.replace('"', '\\"')
        return f'"{escaped}"'
    return arg


def format_args(args: Iterable[str], glob: bool = False) -> str:
    return " ".join(quote_arg(arg, glob) for arg in args)


def string_literal(arg: str) -> str:
    """Like `quote_arg`, but always yields a quoted Nushell string."""
    if is_quoted_literal(arg):
        return arg
    escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def regex_literal(pattern: str) -> str:
    """
    A string literal for a generated regular expression.

    Single quotes keep backslashes verbatim; patterns containing a single quote
    fall back to an escaped double-quoted string.
    """
    if "'" not in pattern:
        return f"'{pattern}'"
    escaped = pattern.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def escape_regex(text: str) -> str:
    """Escapes regular expression metacharacters so `text` matches literally."""
    return "".join(f"\\{ch}" if ch in REGEX_METACHARACTERS else ch for ch in text)
