"""
Text helpers shared by the parser tiers: quote-aware splitting and
tokenizing, assignment peeling, redirection extraction and the optional
compound-line joining pre-pass.
"""

import re
from typing import List, Optional, Tuple

from ...config.config import COMPOUND_CLOSERS, COMPOUND_OPENERS, JOIN_WITHOUT_SEPARATOR, REDIRECTION_TOKENS
from ..core.classes import Assignment, Redirection, RedirectionOp

FD_PREFIX_REGEX = re.compile(r"^(\d+)(.*)$")
NAME_REGEX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _scan(text: str):
    """
    Yields `(index, char, quoted)` for every character of `text`.

    `quoted` is True when the character sits inside single or double quotes or
    is escaped by a backslash, i.e. when it must not act as an operator.
    """
    quote: Optional[str] = None
    escaped = False
    for i, ch in enumerate(text):
        if escaped:
            escaped = False
            yield i, ch, True
            continue
        if ch == "\\" and quote != "'":
            escaped = True
            yield i, ch, True
            continue
        if quote:
            if ch == quote:
                quote = None
            yield i, ch, True
            continue
        if ch in ("'", '"'):
            quote = ch
            yield i, ch, True
            continue
        yield i, ch, False


def quoted_positions(text: str) -> set:
    return {i for i, _, quoted in _scan(text) if quoted}


def find_unquoted(text: str, needle: str, start: int = 0) -> int:
    """Returns the index of the first unquoted occurrence of `needle`, or -1."""
    quoted_at = quoted_positions(text)
    index = text.find(needle, start)
    while index != -1:
        if not any(j in quoted_at for j in range(index, index + len(needle))):
            return index
        index = text.find(needle, index + 1)
    return -1


def split_unquoted(text: str, separator: str, maxsplit: int = -1) -> List[str]:
    """
    Splits `text` on unquoted occurrences of `separator`.

    A single `|`, `&` or `;` separator never matches inside a doubled `||`,
    `&&` or `;;`.
    """
    parts: List[str] = []
    quoted_at = quoted_positions(text)
    single = separator in ("|", "&", ";")
    current_start = 0
    i = 0
    while i < len(text):
        if maxsplit >= 0 and len(parts) >= maxsplit:
            break
        if not text.startswith(separator, i) or any(j in quoted_at for j in range(i, i + len(separator))):
            i += 1
            continue
        if single and (text[i + 1 : i + 2] == separator or (i > 0 and text[i - 1] == separator)):
            i += 1
            continue
        parts.append(text[current_start:i])
        i += len(separator)
        current_start = i
    parts.append(text[current_start:])
    return parts


def has_pipe(text: str) -> bool:
    """True when `text` has an unquoted, unescaped `|` that is not part of `||`."""
    return len(split_unquoted(text, "|")) > 1


def tokenize_words(text: str) -> List[str]:
    """Splits on unquoted whitespace; quotes stay part of their word."""
    words: List[str] = []
    current: List[str] = []
    for _, ch, quoted in _scan(text):
        if ch.isspace() and not quoted:
            if current:
                words.append("".join(current))
                current = []
            continue
        current.append(ch)
    if current:
        words.append("".join(current))
    return words


def strip_keyword_suffix(text: str, keyword: str) -> str:
    text = text.rstrip()
    if text == keyword:
        return ""
    for sep in (" ", ";"):
        if text.endswith(sep + keyword):
            return text[: -len(keyword)].rstrip().rstrip(";").rstrip()
    return text


def split_statements(text: str) -> List[str]:
    """
    Splits a body on unquoted `;` (never on `;;`), dropping empty pieces.

    Pieces of a nested compound (`while …; do …; done`, `{ …; }`) are glued
    back together so each statement is one complete construct.
    """
    pieces: List[str] = []
    depth = 0
    for piece in split_unquoted(text, ";"):
        piece = piece.strip()
        if not piece:
            continue
        if depth > 0:
            pieces[-1] = f"{pieces[-1]}; {piece}"
        else:
            pieces.append(piece)
        depth = max(depth + depth_change(piece), 0)
    return pieces


def is_quoted_literal(word: str) -> bool:
    """True when `word` is one complete single- or double-quoted literal."""
    if len(word) < 2 or word[0] != word[-1] or word[0] not in ("'", '"'):
        return False
    if word[0] == "'":
        return word.count("'") == 2
    unescaped = [i for i, ch in enumerate(word) if ch == '"' and not _is_escaped(word, i)]
    return unescaped == [0, len(word) - 1]


def _is_escaped(text: str, index: int) -> bool:
    backslashes = 0
    j = index - 1
    while j >= 0 and text[j] == "\\":
        backslashes += 1
        j -= 1
    return backslashes % 2 == 1


def unquote(word: str) -> str:
    """Removes one layer of enclosing quotes from a complete quoted literal."""
    if is_quoted_literal(word):
        return word[1:-1]
    return word


# --- Assignments ---


def is_assignment_word(token: str) -> bool:
    if token.startswith("-") or "=" not in token:
        return False
    name = token.split("=", 1)[0]
    return bool(NAME_REGEX.match(name))


def peel_assignments(tokens: List[str]) -> Tuple[List[Assignment], List[str]]:
    """
    Peels leading `NAME=VALUE` tokens off a token list.

    Peeling stops at the first token that is not an assignment word; that token
    and everything after it is the command proper.
    """
    assignments: List[Assignment] = []
    index = 0
    while index < len(tokens) and is_assignment_word(tokens[index]):
        name, value = tokens[index].split("=", 1)
        assignments.append(Assignment(name=name, value=value))
        index += 1
    return assignments, tokens[index:]


# --- Redirections ---


def _match_redirection(token: str) -> Optional[Tuple[Optional[int], str, str]]:
    """Splits a token into `(fd, operator, attached_target)` if it is a redirection."""
    fd: Optional[int] = None
    rest = token
    match = FD_PREFIX_REGEX.match(token)
    if match and match.group(2)[:1] in ("<", ">"):
        fd = int(match.group(1))
        rest = match.group(2)
    for op in REDIRECTION_TOKENS:
        if rest.startswith(op):
            return fd, op, rest[len(op) :]
    return None


def extract_redirections(tokens: List[str]) -> Tuple[List[str], List[Redirection]]:
    """Pulls redirection operators and their targets out of a simple command's tokens."""
    remaining: List[str] = []
    redirections: List[Redirection] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        matched = _match_redirection(token)
        if matched is None:
            remaining.append(token)
            index += 1
            continue
        fd, op, target = matched
        if not target and index + 1 < len(tokens):
            target = tokens[index + 1]
            index += 1
        redirections.append(Redirection(fd=fd, operator=RedirectionOp(op), target=target))
        index += 1
    return remaining, redirections


# --- Compound Line Joining ---


def _command_words(line: str) -> List[str]:
    """The words that sit in command position on a line."""
    segments = [line]
    for separator in (";;", ";", "&&", "||", "|"):
        segments = [piece for segment in segments for piece in split_unquoted(segment, separator)]
    words = []
    for segment in segments:
        segment_words = tokenize_words(segment)
        while segment_words and segment_words[0] in ("then", "do", "else", "elif", "!", "{"):
            words.append(segment_words.pop(0))
        if segment_words:
            words.append(segment_words[0])
    return words


def depth_change(line: str) -> int:
    """Net number of compound constructs that `line` opens."""
    change = 0
    for word in _command_words(line):
        if word in COMPOUND_OPENERS:
            change += 1
        elif word in COMPOUND_CLOSERS:
            change -= 1
    for word in tokenize_words(line):
        if word == "{" or word.endswith("(){"):
            change += 1
        elif word == "}":
            change -= 1
    return change


def join_compound_lines(lines: List[str]) -> List[str]:
    """
    Joins the physical lines of an open compound construct into one logical line.

    Lines are glued with `; ` unless the text so far ends with a keyword or
    operator that already expects a continuation (`then`, `do`, `|`, ...).
    """
    joined: List[str] = []
    buffer = ""
    depth = 0
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if depth <= 0:
            buffer = line
        elif line.startswith(";;") or buffer.endswith(JOIN_WITHOUT_SEPARATOR):
            buffer = f"{buffer} {line}"
        else:
            buffer = f"{buffer}; {line}"
        depth += depth_change(line)
        if depth <= 0:
            joined.append(buffer)
            buffer = ""
            depth = 0
    if buffer:
        joined.append(buffer)
    return joined
