"""
The strict grammar tier of the parser.

A lark Earley grammar covers the flat part of POSIX sh (simple commands,
pipelines, `&&`/`||` chains and lists). Anything outside it, including
compound keywords, raises `ParseStrategyError` so the caller can fall back to
the heuristic parser.
"""

import os

from lark import Lark, LarkError, Token, Transformer
from lark.exceptions import VisitError

from ...config.config import COMPOUND_CLOSERS, COMPOUND_OPENERS
from ...exceptions import ErrorCode, ParseStrategyError
from ..utils.helpers import peel_assignments
from .classes import AndOr, AndOrOperator, CommandList, ListSeparator, Pipeline, Script, SimpleCommand

RESERVED_WORDS = set(COMPOUND_OPENERS) | COMPOUND_CLOSERS | {"then", "elif", "else", "do", "function", "{", "}", "!"}

_STRICT_PARSER = None


def _read_grammar() -> str:
    try:
        from importlib.resources import files as pkg_files

        return (pkg_files("nuposix.parser") / "posix.lark").read_text()
    except FileNotFoundError:
        # Running from a source tree that was not installed as a package.
        grammar_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), "posix.lark")
        with open(grammar_path, "r") as f:
            return f.read()


def get_strict_parser() -> Lark:
    """Builds the Earley parser on first use and caches it."""
    global _STRICT_PARSER
    if _STRICT_PARSER is None:
        try:
            _STRICT_PARSER = Lark(_read_grammar(), start="start", parser="earley")
        except (LarkError, OSError) as e:
            raise ParseStrategyError(ErrorCode.STRICT_GRAMMAR_UNAVAILABLE, details=str(e).strip() or type(e).__name__) from e
    return _STRICT_PARSER


class PosixTransformer(Transformer):
    """
    Transforms the lark parse tree into the shared AST, bottom-up.

    Unlike the heuristic parser, `&&`/`||` chains are grouped left to right as
    in the POSIX grammar, and a leading `!` always marks the pipeline negated.
    """

    def start(self, items):
        return Script(commands=[item for item in items if item is not None])

    def command_list(self, items):
        commands = [item for item in items if not isinstance(item, Token)]
        separators = {item.value for item in items if isinstance(item, Token)}

        if len(separators) > 1:
            raise ParseStrategyError(ErrorCode.STRICT_GRAMMAR_UNSUPPORTED, construct="mixed ';' and '&' list")
        if "&" in separators:
            return CommandList(commands=commands, separator=ListSeparator.BACKGROUND)
        if len(commands) == 1:
            return commands[0]
        return CommandList(commands=commands, separator=ListSeparator.SEQUENTIAL)

    def and_or(self, items):
        tree = items[0]
        for i in range(1, len(items), 2):
            operator = AndOrOperator(items[i].value)
            tree = AndOr(left=tree, operator=operator, right=items[i + 1])
        return tree

    def pipeline(self, items):
        negated = isinstance(items[0], Token) and items[0].type == "BANG"
        commands = items[1:] if negated else items
        if len(commands) == 1 and not negated:
            return commands[0]
        return Pipeline(commands=list(commands), negated=negated)

    def simple_command(self, items):
        words = [token.value for token in items]
        assignments, rest = peel_assignments(words)
        if rest and rest[0] in RESERVED_WORDS:
            raise ParseStrategyError(ErrorCode.STRICT_GRAMMAR_UNSUPPORTED, construct=rest[0])
        if not rest:
            return SimpleCommand(assignments=assignments)
        return SimpleCommand(name=rest[0], args=rest[1:], assignments=assignments)


def parse_strict(text: str) -> Script:
    """Parses `text` with the strict grammar or raises ParseStrategyError."""
    try:
        tree = get_strict_parser().parse(text)
        return PosixTransformer().transform(tree)
    except VisitError as e:
        # Transformer callbacks are wrapped by lark; unwrap our own signal.
        if isinstance(e.orig_exc, ParseStrategyError):
            raise e.orig_exc
        raise
    except LarkError as e:
        first_line = str(e).strip().splitlines()[0] if str(e).strip() else type(e).__name__
        raise ParseStrategyError(ErrorCode.STRICT_GRAMMAR_SYNTAX, details=first_line) from e
