"""
The converter capability shared by the builtin and external-utility tables,
and the linear-scan registry that holds them.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from ..config.config import PASSTHROUGH_NOTE
from ..parser.core.classes import Redirection, RedirectionOp
from ..parser.utils.helpers import extract_redirections
from .quoting import format_args, quote_arg

logger = logging.getLogger(__name__)


def _redirection_text(redirection: Redirection) -> str:
    fd = "" if redirection.fd is None else str(redirection.fd)
    op = redirection.operator
    separator = "" if op in (RedirectionOp.OUTPUT_DUP, RedirectionOp.INPUT_DUP) else " "
    return f"{fd}{op.value}{separator}{redirection.target}"


class CommandConverter:
    """
    Maps one command's argument vector to Nushell text.

    Subclasses set `name` (plus optional `aliases`) and implement `_convert`.
    Callers use `convert`, which never returns leading or trailing whitespace
    and never returns an empty string.
    """

    name: str = ""
    aliases: Sequence[str] = ()
    description: str = "Converts a POSIX command to its Nushell equivalent"
    glob_quoting: bool = False

    def convert(self, args: Sequence[str]) -> str:
        result = self._convert(list(args)).strip()
        return result or self.name

    def _convert(self, args: List[str]) -> str:
        raise NotImplementedError

    def handles(self, name: str) -> bool:
        return name == self.name or name in self.aliases

    # --- Formatting helpers ---

    def quote(self, arg: str) -> str:
        return quote_arg(arg, glob=self.glob_quoting)

    def format_args(self, args: Iterable[str]) -> str:
        return format_args(args, glob=self.glob_quoting)

    def render(self, args: Sequence[str], command: Optional[str] = None) -> str:
        """The command name followed by its quoted arguments."""
        command = command or self.name
        if not args:
            return command
        return f"{command} {self.format_args(args)}"

    def passthrough(self, args: Sequence[str], *notes: str) -> str:
        """The command repeated unchanged, annotated so it is never read as a translation."""
        return f"{self.render(args)} # {'; '.join((PASSTHROUGH_NOTE,) + notes)}"


class ConverterRegistry:
    """
    An ordered, read-only-after-construction list of converters.

    Lookup is an exact-name linear scan; `convert` never fails, unknown names
    degrade to a passthrough of the name and its quoted arguments.
    """

    def __init__(self, converters: Iterable[CommandConverter] = (), glob_quoting: bool = False):
        self._converters: List[CommandConverter] = []
        self.glob_quoting = glob_quoting
        for converter in converters:
            self.register(converter)
        logger.debug("Built converter registry: %s", ", ".join(self.all_names()))

    def register(self, converter: CommandConverter) -> None:
        self._converters.append(converter)

    def find(self, name: str) -> Optional[CommandConverter]:
        for converter in self._converters:
            if converter.handles(name):
                return converter
        return None

    def convert(self, name: str, args: Sequence[str]) -> str:
        converter = self.find(name)
        if converter is not None:
            return converter.convert(args)
        logger.debug("No converter registered for '%s', passing it through", name)
        rendered = f"{name} {format_args(args, glob=self.glob_quoting)}" if args else name
        return rendered.strip() or '""'

    def all_names(self) -> List[str]:
        return [converter.name for converter in self._converters]

    def __contains__(self, name: str) -> bool:
        return self.find(name) is not None

    def __len__(self) -> int:
        return len(self._converters)


class UtilityConverter(CommandConverter):
    """
    Base for external-utility converters.

    Utility arguments are usually paths and patterns, so `*` and `?` also
    trigger quoting here. Redirection words the parser left in the arguments
    are never read as operands; they are taken out and reported in a note.
    """

    glob_quoting = True

    def convert(self, args: Sequence[str]) -> str:
        words, redirections = extract_redirections(list(args))
        if not redirections:
            return super().convert(args)
        leftover = ", ".join(_redirection_text(redirection) for redirection in redirections)
        return f"{super().convert(words)} # redirection not translated: {leftover}".strip()

    @staticmethod
    def split_cluster(arg: str) -> List[str]:
        """Expands `-abc` into `-a -b -c`; long options and operands are left alone."""
        if arg.startswith("-") and not arg.startswith("--") and len(arg) > 2:
            return [f"-{flag}" for flag in arg[1:]]
        return [arg]

    def file_list(self, files: Sequence[str]) -> str:
        return "[" + " ".join(self.quote(f) for f in files) + "]"
