import logging
import re
from typing import Callable, Dict, List, Optional

from ..parser.core.classes import (
    AndOr,
    AndOrOperator,
    Arithmetic,
    BraceGroup,
    CaseClause,
    CommandList,
    CompoundCommand,
    ForLoop,
    FunctionDef,
    IfClause,
    ListSeparator,
    Pipeline,
    Redirection,
    RedirectionOp,
    Script,
    SimpleCommand,
    Subshell,
    UntilLoop,
    WhileLoop,
)
from ..exceptions import InternalConverterError
from ..parser.utils.helpers import unquote
from .base import ConverterRegistry
from .quoting import format_args, quote_arg, string_literal

logger = logging.getLogger(__name__)

INDENT = "  "
VARIABLE_REGEX = re.compile(r"^\$\{?[A-Za-z_][A-Za-z0-9_]*\}?$")

REDIRECTION_TOKENS = {
    RedirectionOp.INPUT: "<",
    RedirectionOp.OUTPUT: "out>",
    RedirectionOp.APPEND: "out>>",
    RedirectionOp.INPUT_OUTPUT: "<>",
    RedirectionOp.CLOBBER: "out>",
}


def _legacy_awk(args: List[str]) -> str:
    if len(args) == 1 and args[0].strip("'\"").startswith("{") and "print" in args[0]:
        return "each { |row| print $row }"
    return f"awk {format_args(args)}".strip()


# Early hard-coded conversions kept for names missing from the injected registries.
LEGACY_INLINE_CONVERTERS: Dict[str, Callable[[List[str]], str]] = {
    "awk": _legacy_awk,
    "which": lambda args: f"which {format_args(args)}".strip(),
    "whoami": lambda args: "whoami",
    "ps": lambda args: "ps",
}


def _indent(lines: List[str], depth: int = 1) -> List[str]:
    return [INDENT * depth + line if line else line for line in lines]


def _value_word(word: str) -> str:
    """A variable reference stays a Nushell variable; any other word is quoted as needed."""
    if VARIABLE_REGEX.match(unquote(word)):
        return "$" + unquote(word).lstrip("$").strip("{}")
    return quote_arg(word)


class ScriptConverter:
    """
    Converts a parsed Script into Nushell source text.

    Simple command names resolve through the builtin registry first, then the
    external-utility registry, then the legacy inline table, and finally pass
    through unchanged. Registries are read-only, so one converter can serve
    any number of scripts.
    """

    def __init__(
        self,
        builtins: Optional[ConverterRegistry] = None,
        utilities: Optional[ConverterRegistry] = None,
        legacy: Optional[Dict[str, Callable[[List[str]], str]]] = None,
    ):
        if builtins is None:
            from ..builtins import BUILTIN_REGISTRY as builtins
        if utilities is None:
            from ..utilities import UTILITY_REGISTRY as utilities
        self.builtins = builtins
        self.utilities = utilities
        self.legacy = LEGACY_INLINE_CONVERTERS if legacy is None else legacy

    def convert(self, script: Script) -> str:
        return "\n".join(self.convert_command(command) for command in script.commands)

    def convert_command(self, command) -> str:
        if isinstance(command, SimpleCommand):
            return self._convert_simple(command)
        if isinstance(command, Pipeline):
            joined = " | ".join(self.convert_command(stage) for stage in command.commands)
            return f"not ({joined})" if command.negated else joined
        if isinstance(command, AndOr):
            joiner = "and" if command.operator == AndOrOperator.AND else "or"
            return f"({self.convert_command(command.left)}) {joiner} ({self.convert_command(command.right)})"
        if isinstance(command, CommandList):
            members = [self.convert_command(member) for member in command.commands]
            if command.separator == ListSeparator.BACKGROUND:
                return " ".join(f"{member} &" for member in members)
            return "; ".join(members)
        if isinstance(command, CompoundCommand):
            rendered = self._convert_compound(command.kind)
            redirections = self._convert_redirections(command.redirections)
            return self._attach_redirections(rendered, redirections)
        raise InternalConverterError(f"Unknown command node: {type(command).__name__}")

    # --- Simple Commands ---

    def _convert_simple(self, command: SimpleCommand) -> str:
        # Assignments set `$env.NAME`; a bare `NAME = "VALUE"` is not a valid Nushell statement.
        prefix = "".join(f"$env.{assignment.name} = {self._assignment_value(assignment.value)}; " for assignment in command.assignments)
        if not command.name:
            return prefix.rstrip("; ").strip()

        body = self.resolve(command.name, command.args)
        redirections = self._convert_redirections(command.redirections)
        return prefix + self._attach_redirections(body, redirections)

    def resolve(self, name: str, args: List[str]) -> str:
        """Converts one command invocation by name, in registry priority order."""
        args = list(args)
        if name in self.builtins:
            return self.builtins.convert(name, args)
        if name in self.utilities:
            return self.utilities.convert(name, args)
        if name in self.legacy:
            return self.legacy[name](args)
        logger.debug("Passing '%s' through unconverted", name)
        return f"{name} {format_args(args)}" if args else name

    @staticmethod
    def _assignment_value(value: str) -> str:
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            return value
        escaped = value.replace('"', '\\"')
        return f'"{escaped}"'

    # --- Redirections ---

    def _convert_redirections(self, redirections: List[Redirection]) -> Dict[str, List[str]]:
        """Splits redirections into a here-string prefix, operator suffixes and comments."""
        parts: Dict[str, List[str]] = {"prefix": [], "suffix": [], "comment": []}
        for redirection in redirections:
            op = redirection.operator
            target = quote_arg(redirection.target)
            if op in (RedirectionOp.HERE_DOC, RedirectionOp.HERE_STRING):
                parts["prefix"].append(f"echo {target} |")
            elif op in (RedirectionOp.OUTPUT_DUP, RedirectionOp.INPUT_DUP):
                fd = redirection.fd if redirection.fd is not None else (1 if op == RedirectionOp.OUTPUT_DUP else 0)
                # Duplicating onto another descriptor has no operator form; `>&FILE` is a plain write.
                if fd == 1 and not redirection.target.isdigit():
                    parts["suffix"].append(f"out> {target}")
                elif fd == 2 and not redirection.target.isdigit():
                    parts["suffix"].append(f"err> {target}")
                else:
                    parts["comment"].append(f"# unsupported: {fd}{op.value}{redirection.target}")
            else:
                token = REDIRECTION_TOKENS[op]
                if redirection.fd == 2 and op in (RedirectionOp.OUTPUT, RedirectionOp.APPEND, RedirectionOp.CLOBBER):
                    token = token.replace("out", "err")
                parts["suffix"].append(f"{token} {target}")
        return parts

    @staticmethod
    def _attach_redirections(body: str, parts: Dict[str, List[str]]) -> str:
        words = parts["prefix"] + [body] + parts["suffix"] + parts["comment"]
        return " ".join(word for word in words if word)

    # --- Compound Commands ---

    def _block(self, commands) -> List[str]:
        """Body members one per line; multi-line members keep their own layout."""
        lines: List[str] = []
        for command in commands:
            lines.extend(self.convert_command(command).split("\n"))
        return lines

    def _inline(self, commands) -> str:
        return "; ".join(self.convert_command(command) for command in commands)

    def _convert_compound(self, kind) -> str:
        if isinstance(kind, BraceGroup):
            return "\n".join(["{"] + _indent(self._block(kind.body)) + ["}"])
        if isinstance(kind, Subshell):
            return f"({self._inline(kind.body)})"
        if isinstance(kind, ForLoop):
            source = "[" + ", ".join(_value_word(word) for word in kind.words) + "]" if kind.words else "$in"
            return "\n".join([f"{source} | each {{ |{kind.variable}|"] + _indent(self._block(kind.body)) + ["}"])
        if isinstance(kind, WhileLoop):
            return "\n".join([f"while {self._inline(kind.condition)} {{"] + _indent(self._block(kind.body)) + ["}"])
        if isinstance(kind, UntilLoop):
            return "\n".join([f"while not ({self._inline(kind.condition)}) {{"] + _indent(self._block(kind.body)) + ["}"])
        if isinstance(kind, IfClause):
            return self._convert_if(kind)
        if isinstance(kind, CaseClause):
            return self._convert_case(kind)
        if isinstance(kind, FunctionDef):
            return "\n".join([f"def {kind.name} [] {{"] + _indent(self._block(kind.body)) + ["}"])
        if isinstance(kind, Arithmetic):
            escaped = kind.expression.replace('"', '\\"')
            return f'math eval "{escaped}"'
        raise InternalConverterError(f"Unknown compound kind: {type(kind).__name__}")

    def _convert_if(self, kind: IfClause) -> str:
        lines = [f"if {self._inline(kind.condition)} {{"] + _indent(self._block(kind.then_body))
        for part in kind.elif_parts:
            lines.append(f"}} else if {self._inline(part.condition)} {{")
            lines.extend(_indent(self._block(part.body)))
        if kind.else_body is not None:
            lines.append("} else {")
            lines.extend(_indent(self._block(kind.else_body)))
        lines.append("}")
        return "\n".join(lines)

    def _convert_case(self, kind: CaseClause) -> str:
        lines = [f"match {_value_word(kind.word)} {{"]
        for item in kind.items:
            patterns = " | ".join(self._case_pattern(pattern) for pattern in item.patterns) or "_"
            lines.append(f"{INDENT}{patterns} => {{")
            lines.extend(_indent(self._block(item.body), 2))
            lines.append(f"{INDENT}}}")
        lines.append("}")
        return "\n".join(lines)

    @staticmethod
    def _case_pattern(pattern: str) -> str:
        if pattern == "*":
            return "_"
        return string_literal(pattern)
