"""
Defines the data structures for the shell Abstract Syntax Tree (AST) shared by
the parser and the conversion dispatcher.

Every node is a frozen pydantic model: the tree for one parse is built bottom-up
and never mutated afterwards; sequence fields are tuples, so neither attributes nor
child lists can change. Command variants carry a `type` discriminator and
compound kinds a `kind` discriminator, so `model_dump(mode="json")` yields the
structured-data form of a script directly.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# --- Enumerations ---


class AndOrOperator(str, Enum):
    AND = "&&"
    OR = "||"


class ListSeparator(str, Enum):
    SEQUENTIAL = ";"
    BACKGROUND = "&"


class RedirectionOp(str, Enum):
    INPUT = "<"
    OUTPUT = ">"
    APPEND = ">>"
    INPUT_OUTPUT = "<>"
    CLOBBER = ">|"
    HERE_DOC = "<<"
    HERE_STRING = "<<<"
    OUTPUT_DUP = ">&"
    INPUT_DUP = "<&"


# --- Core Data Structures ---


class ShellNode(BaseModel):
    """Base class for all AST nodes."""

    model_config = ConfigDict(frozen=True)


class Assignment(ShellNode):
    name: str
    value: str


class Redirection(ShellNode):
    fd: Optional[int] = None
    operator: RedirectionOp
    target: str


# --- Commands ---


class SimpleCommand(ShellNode):
    type: Literal["simple"] = "simple"
    name: str = ""
    args: Tuple[str, ...] = ()
    assignments: Tuple[Assignment, ...] = ()
    redirections: Tuple[Redirection, ...] = ()


class Pipeline(ShellNode):
    type: Literal["pipeline"] = "pipeline"
    commands: Tuple["Command", ...]
    negated: bool = False


class AndOr(ShellNode):
    type: Literal["andor"] = "andor"
    left: "Command"
    operator: AndOrOperator
    right: "Command"


class CommandList(ShellNode):
    type: Literal["list"] = "list"
    commands: Tuple["Command", ...]
    separator: ListSeparator = ListSeparator.SEQUENTIAL


class CompoundCommand(ShellNode):
    type: Literal["compound"] = "compound"
    kind: "CompoundKind"
    redirections: Tuple[Redirection, ...] = ()


# --- Compound Kinds ---


class BraceGroup(ShellNode):
    kind: Literal["brace_group"] = "brace_group"
    body: Tuple["Command", ...] = ()


class Subshell(ShellNode):
    kind: Literal["subshell"] = "subshell"
    body: Tuple["Command", ...] = ()


class ForLoop(ShellNode):
    kind: Literal["for"] = "for"
    variable: str
    words: Tuple[str, ...] = ()
    body: Tuple["Command", ...] = ()


class WhileLoop(ShellNode):
    kind: Literal["while"] = "while"
    condition: Tuple["Command", ...] = ()
    body: Tuple["Command", ...] = ()


class UntilLoop(ShellNode):
    kind: Literal["until"] = "until"
    condition: Tuple["Command", ...] = ()
    body: Tuple["Command", ...] = ()


class ElifPart(ShellNode):
    condition: Tuple["Command", ...] = ()
    body: Tuple["Command", ...] = ()


class IfClause(ShellNode):
    kind: Literal["if"] = "if"
    condition: Tuple["Command", ...] = ()
    then_body: Tuple["Command", ...] = ()
    elif_parts: Tuple[ElifPart, ...] = ()
    else_body: Optional[Tuple["Command", ...]] = None


class CaseItem(ShellNode):
    patterns: Tuple[str, ...] = ()
    body: Tuple["Command", ...] = ()


class CaseClause(ShellNode):
    kind: Literal["case"] = "case"
    word: str
    items: Tuple[CaseItem, ...] = ()


class FunctionDef(ShellNode):
    kind: Literal["function"] = "function"
    name: str
    body: Tuple["Command", ...] = ()


class Arithmetic(ShellNode):
    kind: Literal["arithmetic"] = "arithmetic"
    expression: str


CompoundKind = Annotated[
    Union[BraceGroup, Subshell, ForLoop, WhileLoop, UntilLoop, IfClause, CaseClause, FunctionDef, Arithmetic],
    Field(discriminator="kind"),
]

Command = Annotated[
    Union[SimpleCommand, Pipeline, AndOr, CommandList, CompoundCommand],
    Field(discriminator="type"),
]


class Script(ShellNode):
    """Root of a parse: the ordered commands of one input text."""

    type: Literal["script"] = "script"
    commands: Tuple[Command, ...] = ()


for _model in (
    Pipeline,
    AndOr,
    CommandList,
    CompoundCommand,
    BraceGroup,
    Subshell,
    ForLoop,
    WhileLoop,
    UntilLoop,
    ElifPart,
    IfClause,
    CaseItem,
    CaseClause,
    FunctionDef,
    Script,
):
    _model.model_rebuild()
