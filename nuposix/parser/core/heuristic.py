"""
The line-oriented heuristic parser.

Each physical line becomes one Command. Lines are classified by operators and
leading keywords, located with literal (quote-aware) substring search rather
than a grammar. Anything the rules do not recognise degrades to a simple
command; this parser never raises on its input.
"""

import logging
import re
from typing import List, Optional

from ...config.config import COMPOUND_OPENERS
from ..utils.helpers import (
    depth_change,
    extract_redirections,
    find_unquoted,
    has_pipe,
    join_compound_lines,
    peel_assignments,
    quoted_positions,
    split_statements,
    split_unquoted,
    strip_keyword_suffix,
    tokenize_words,
)
from .classes import (
    AndOr,
    AndOrOperator,
    Arithmetic,
    BraceGroup,
    CaseClause,
    CaseItem,
    Command,
    CommandList,
    CompoundCommand,
    ElifPart,
    ForLoop,
    FunctionDef,
    IfClause,
    ListSeparator,
    Pipeline,
    Script,
    SimpleCommand,
    Subshell,
    UntilLoop,
    WhileLoop,
)
from .options import ParserOptions

logger = logging.getLogger(__name__)

FUNCTION_DEF_REGEX = re.compile(r"^(?:function\s+)?([A-Za-z_][\w.-]*)\s*\(\)\s*\{(.*)\}$", re.DOTALL)
FUNCTION_KEYWORD_REGEX = re.compile(r"^function\s+([A-Za-z_][\w.-]*)\s*\{(.*)\}$", re.DOTALL)
FUNCTION_START_REGEX = re.compile(r"^(?:function\s+[A-Za-z_]|[A-Za-z_][\w.-]*\s*\(\))")


def _is_background(line: str) -> bool:
    """True for a trailing, unquoted `&` that is neither `&&` nor part of `>&`/`<&`."""
    if not line.endswith("&") or len(line) < 2 or line[-2] in "&<>":
        return False
    return find_unquoted(line, "&", len(line) - 1) == len(line) - 1


def _find_keyword(text: str, keyword: str, start: int = 0) -> int:
    """
    Finds `keyword` as a standalone, unquoted word at or after `start`.

    A standalone word is bounded by the text edges, whitespace or `;`.
    """
    index = find_unquoted(text, keyword, start)
    while index != -1:
        before = text[index - 1] if index > 0 else " "
        after_pos = index + len(keyword)
        after = text[after_pos] if after_pos < len(text) else " "
        if (before.isspace() or before == ";") and (after.isspace() or after == ";"):
            return index
        index = find_unquoted(text, keyword, index + 1)
    return -1


def _find_top_level_keyword(text: str, keyword: str) -> int:
    """Like `_find_keyword`, but skips occurrences inside nested compound commands."""
    index = _find_keyword(text, keyword)
    while index != -1 and depth_change(text[:index]) != 0:
        index = _find_keyword(text, keyword, index + 1)
    return index


def _closing_delimiter_index(text: str, opener: str, closer: str) -> int:
    """Index of the delimiter closing the one at position 0, tracking nesting depth."""
    depth = 0
    quoted_at = quoted_positions(text)
    for index, ch in enumerate(text):
        if index in quoted_at:
            continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return index
    return -1


class HeuristicParser:
    """
    Turns POSIX script text into a Script, one Command per logical line.

    The rules are tried in order: pipeline split, `&&`/`||` split, leading
    keyword constructs and finally the simple-command fallback. A line that
    starts with a compound keyword and ends with its closing keyword is matched
    as that construct first, so operators inside its body stay in the body.
    Lines that do not start a compound are first cut at top-level `;` into a
    sequential list, and a trailing `&` makes a background list.
    """

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options or ParserOptions()

    def parse(self, text: str) -> Script:
        lines = text.splitlines()
        if self.options.join_compound_lines:
            lines = join_compound_lines(lines)

        commands: List[Command] = []
        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            commands.append(self.parse_line(line))
        return Script(commands=commands)

    def parse_line(self, line: str) -> Command:
        line = line.strip()

        if self._is_whole_compound(line):
            compound = self._parse_compound(line)
            if compound is not None:
                return compound

        # --- Top-level `;` and trailing `&` lists ---
        if not self._starts_compound(line):
            statements = split_statements(line)
            if not statements:
                return SimpleCommand()
            if len(statements) > 1:
                return CommandList(commands=[self.parse_line(statement) for statement in statements])
            if statements[0] != line:
                return self.parse_line(statements[0])
            if _is_background(line):
                return CommandList(commands=[self.parse_line(line[:-1])], separator=ListSeparator.BACKGROUND)

        # --- Rule a: pipelines ---
        if has_pipe(line):
            segments = split_unquoted(line, "|")
            negated = False
            first = segments[0].strip()
            if self.options.detect_negation and (first == "!" or first.startswith("! ")):
                negated = True
                segments[0] = first[1:]
            return Pipeline(commands=[self.parse_line(segment) for segment in segments], negated=negated)

        # --- Rule b: conjunctions, split at the first operator only ---
        and_index = find_unquoted(line, "&&")
        or_index = find_unquoted(line, "||")
        if and_index != -1 or or_index != -1:
            if or_index == -1 or (and_index != -1 and and_index < or_index):
                index, operator = and_index, AndOrOperator.AND
            else:
                index, operator = or_index, AndOrOperator.OR
            left = self.parse_line(line[:index])
            right = self.parse_line(line[index + 2 :])
            return AndOr(left=left, operator=operator, right=right)

        # --- Rule c: leading keywords ---
        compound = self._parse_compound(line)
        if compound is not None:
            return compound

        if self.options.detect_negation and (line == "!" or line.startswith("! ")):
            return Pipeline(commands=[self._parse_simple(line[1:])], negated=True)

        # --- Rule d: simple command ---
        return self._parse_simple(line)

    # --- Classification ---

    def _starts_compound(self, line: str) -> bool:
        words = tokenize_words(line)
        if words and words[0] in COMPOUND_OPENERS:
            return True
        return line.startswith(("{", "(", "$((")) or bool(FUNCTION_START_REGEX.match(line))

    def _is_whole_compound(self, line: str) -> bool:
        words = tokenize_words(line)
        if not words:
            return False
        first = words[0]
        if first in COMPOUND_OPENERS:
            return words[-1].rstrip(";") == COMPOUND_OPENERS[first]
        if line.startswith("$((") or line.startswith("(("):
            return line.endswith("))")
        if line.startswith("{"):
            return _closing_delimiter_index(line, "{", "}") == len(line) - 1
        if line.startswith("("):
            return _closing_delimiter_index(line, "(", ")") == len(line) - 1
        return bool(FUNCTION_DEF_REGEX.match(line) or FUNCTION_KEYWORD_REGEX.match(line))

    def _parse_compound(self, line: str) -> Optional[Command]:
        if line.startswith("if "):
            return self._parse_if(line)
        if line.startswith("for "):
            return self._parse_for(line)
        if line.startswith("while "):
            return self._parse_loop(line, "while")
        if line.startswith("until "):
            return self._parse_loop(line, "until")
        if line.startswith("case "):
            return self._parse_case(line)
        if line.startswith("$((") or line.startswith("(("):
            return self._parse_arithmetic(line)

        function_match = FUNCTION_DEF_REGEX.match(line) or FUNCTION_KEYWORD_REGEX.match(line)
        if function_match:
            name, body = function_match.group(1), function_match.group(2)
            return CompoundCommand(kind=FunctionDef(name=name, body=self._parse_body(body)))

        if line.startswith("{") and line.endswith("}"):
            return CompoundCommand(kind=BraceGroup(body=self._parse_body(line[1:-1])))
        if line.startswith("(") and line.endswith(")"):
            return CompoundCommand(kind=Subshell(body=self._parse_body(line[1:-1])))
        return None

    # --- Compound Handlers ---

    def _parse_body(self, text: str) -> List[Command]:
        return [self.parse_line(statement) for statement in split_statements(text)]

    def _split_then(self, text: str):
        """Splits `COND; then BODY` into its two halves, or returns None."""
        then_index = _find_keyword(text, "then")
        if then_index == -1:
            return None
        return text[:then_index], text[then_index + len("then") :]

    def _parse_if(self, line: str) -> Optional[Command]:
        text = strip_keyword_suffix(line[len("if ") :], "fi")
        halves = self._split_then(text)
        if halves is None:
            logger.debug("'if' without 'then', treating as a simple command: %s", line)
            return None
        condition_text, rest = halves

        # Cut the remainder at each `elif` and at the first `else`.
        else_index = _find_top_level_keyword(rest, "else")
        else_body = None
        if else_index != -1:
            else_body = self._parse_body(rest[else_index + len("else") :])
            rest = rest[:else_index]

        branches = []
        elif_index = _find_top_level_keyword(rest, "elif")
        while elif_index != -1:
            branches.append(rest[:elif_index])
            rest = rest[elif_index + len("elif") :]
            elif_index = _find_top_level_keyword(rest, "elif")
        branches.append(rest)

        then_body = self._parse_body(branches[0])
        elif_parts = []
        for branch in branches[1:]:
            elif_halves = self._split_then(branch)
            if elif_halves is None:
                elif_parts.append(ElifPart(condition=self._parse_body(branch), body=[]))
                continue
            elif_parts.append(ElifPart(condition=self._parse_body(elif_halves[0]), body=self._parse_body(elif_halves[1])))

        if elif_parts and else_body is None:
            else_body = []

        kind = IfClause(
            condition=self._parse_body(condition_text),
            then_body=then_body,
            elif_parts=elif_parts,
            else_body=else_body,
        )
        return CompoundCommand(kind=kind)

    def _parse_for(self, line: str) -> Optional[Command]:
        do_index = _find_keyword(line, "do")
        if do_index == -1:
            return None
        header = line[len("for ") : do_index].strip().rstrip(";").strip()
        body_text = strip_keyword_suffix(line[do_index + len("do") :], "done")

        in_index = _find_keyword(header, "in")
        if in_index != -1:
            variable = header[:in_index].strip()
            words = tokenize_words(header[in_index + len("in") :])
        else:
            variable = header
            words = []

        return CompoundCommand(kind=ForLoop(variable=variable, words=words, body=self._parse_body(body_text)))

    def _parse_loop(self, line: str, keyword: str) -> Optional[Command]:
        do_index = _find_keyword(line, "do")
        if do_index == -1:
            return None
        condition = self._parse_body(line[len(keyword) + 1 : do_index])
        body = self._parse_body(strip_keyword_suffix(line[do_index + len("do") :], "done"))
        if keyword == "until":
            return CompoundCommand(kind=UntilLoop(condition=condition, body=body))
        return CompoundCommand(kind=WhileLoop(condition=condition, body=body))

    def _parse_case(self, line: str) -> Optional[Command]:
        in_index = _find_keyword(line, "in")
        if in_index == -1:
            return None
        word = line[len("case ") : in_index].strip()
        items_text = strip_keyword_suffix(line[in_index + len("in") :], "esac")

        items = []
        for item_text in split_unquoted(items_text, ";;"):
            item_text = item_text.strip()
            if not item_text:
                continue
            if item_text.startswith("("):
                item_text = item_text[1:]
            close_index = find_unquoted(item_text, ")")
            if close_index == -1:
                logger.debug("case item without ')', skipping: %s", item_text)
                continue
            patterns = [p.strip() for p in split_unquoted(item_text[:close_index], "|") if p.strip()]
            items.append(CaseItem(patterns=patterns, body=self._parse_body(item_text[close_index + 1 :])))

        return CompoundCommand(kind=CaseClause(word=word, items=items))

    def _parse_arithmetic(self, line: str) -> Command:
        inner = line[3:] if line.startswith("$((") else line[2:]
        if inner.endswith("))"):
            inner = inner[:-2]
        return CompoundCommand(kind=Arithmetic(expression=inner.strip()))

    # --- Simple Commands ---

    def _parse_simple(self, text: str) -> SimpleCommand:
        tokens = tokenize_words(text)
        redirections = []
        if self.options.extract_redirections:
            tokens, redirections = extract_redirections(tokens)

        assignments, rest = peel_assignments(tokens)
        if not rest:
            return SimpleCommand(assignments=assignments, redirections=redirections)
        return SimpleCommand(name=rest[0], args=rest[1:], assignments=assignments, redirections=redirections)
