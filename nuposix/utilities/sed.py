"""
The sed converter.

A sed script is parsed into a list of `SedCommand` records (address, command
letter, argument) and each record is mapped to one or more Nushell pipeline
stages over the input lines. Features without a pipeline equivalent (hold
space, branching, unsupported addresses) are collected as notes and emitted
in one trailing comment, so they never swallow the stages after them.
"""

import logging
import re
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..config.config import SED_COMMAND_LETTERS, SED_COMMENT_COMMANDS
from ..conversion.base import UtilityConverter
from ..conversion.quoting import regex_literal, string_literal
from ..parser.utils.helpers import unquote

logger = logging.getLogger(__name__)

LINE_NUMBER_REGEX = re.compile(r"^\d+$")
# Letters whose argument runs to the end of the command line.
TEXT_ARGUMENT_LETTERS = set("aicrwbtT")
BRE_ESCAPES = {"\\(": "(", "\\)": ")", "\\{": "{", "\\}": "}", "\\+": "+", "\\?": "?", "\\|": "|"}
ERE_LITERALS = {"(": "\\(", ")": "\\)", "{": "\\{", "}": "\\}", "+": "\\+", "?": "\\?", "|": "\\|"}


class SedCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: Optional[str] = None
    negated: bool = False
    letter: str
    argument: str = ""


class Substitution(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern: str
    replacement: str
    flags: str = ""


# --- Script Parsing ---


def _read_delimited(script: str, start: int, delimiter: str) -> Tuple[str, int]:
    """Reads up to the next unescaped `delimiter`; returns the text and the index after it."""
    out = []
    i = start
    while i < len(script):
        ch = script[i]
        if ch == "\\" and i + 1 < len(script):
            out.append(script[i : i + 2])
            i += 2
            continue
        if ch == delimiter:
            return "".join(out), i + 1
        out.append(ch)
        i += 1
    return "".join(out), i


def _read_address_part(script: str, i: int) -> Tuple[str, int]:
    if i < len(script) and script[i] == "$":
        return "$", i + 1
    if i < len(script) and script[i] == "/":
        body, end = _read_delimited(script, i + 1, "/")
        return f"/{body}/", end
    if i < len(script) and script[i] == "\\" and i + 1 < len(script):
        delimiter = script[i + 1]
        body, end = _read_delimited(script, i + 2, delimiter)
        return f"/{body}/", end
    match = re.match(r"\d+(~\d+)?", script[i:])
    if match:
        return match.group(0), i + len(match.group(0))
    return "", i


def _single_regex(address: str) -> Optional[str]:
    """The body of a lone `/regex/` address, None for anything else."""
    if not address.startswith("/"):
        return None
    body, end = _read_delimited(address, 1, "/")
    if end != len(address) or not address.endswith("/"):
        return None
    return body


def parse_sed_script(script: str) -> List[SedCommand]:
    """
    Parses a sed script into commands.

    Commands are separated by `;` or newlines outside braces; the `s` and `y`
    arguments are read delimiter by delimiter so separators inside them do not
    split. Commands inside `{ ... }` take the block's address unless they have
    their own.
    """
    commands: List[SedCommand] = []
    blocks: List[Tuple[Optional[str], bool]] = []
    i = 0
    while i < len(script):
        while i < len(script) and script[i] in " \t\n;":
            i += 1
        if i >= len(script):
            break
        if script[i] == "}":
            if blocks:
                blocks.pop()
            i += 1
            continue

        address, i = _read_address_part(script, i)
        if address and i < len(script) and script[i] == ",":
            second, i = _read_address_part(script, i + 1)
            address = f"{address},{second}"
        while i < len(script) and script[i] == " ":
            i += 1
        negated = False
        if i < len(script) and script[i] == "!":
            negated = True
            i += 1
            while i < len(script) and script[i] == " ":
                i += 1
        if not address and blocks:
            address, negated = blocks[-1]
        if i >= len(script):
            break

        letter = script[i]
        i += 1
        if letter == "{":
            blocks.append((address or None, negated))
            continue

        argument = ""
        if letter in ("s", "y") and i < len(script):
            delimiter = script[i]
            first, i = _read_delimited(script, i + 1, delimiter)
            second, i = _read_delimited(script, i, delimiter)
            flags_end = i
            while flags_end < len(script) and script[flags_end] not in ";\n}":
                flags_end += 1
            argument = delimiter + first + delimiter + second + delimiter + script[i:flags_end].strip()
            i = flags_end
        elif letter in TEXT_ARGUMENT_LETTERS:
            end = script.find("\n", i)
            end = len(script) if end == -1 else end
            if letter in "btT":
                # Branch labels stop at `;` as well.
                semicolon = script.find(";", i, end)
                end = semicolon if semicolon != -1 else end
            argument = script[i:end].strip()
            if letter in "aic" and argument.startswith("\\"):
                argument = argument[1:].lstrip()
            i = end
        else:
            end = i
            while end < len(script) and script[end] not in ";\n}":
                end += 1
            argument = script[i:end].strip()
            i = end

        commands.append(SedCommand(address=address or None, negated=negated, letter=letter, argument=argument))
    return commands


def parse_substitution(argument: str) -> Optional[Substitution]:
    if len(argument) < 3:
        return None
    delimiter = argument[0]
    pattern, i = _read_delimited(argument, 1, delimiter)
    replacement, j = _read_delimited(argument, i, delimiter)
    if j <= i or argument[j - 1] != delimiter:
        return None
    if delimiter != "/":
        pattern = pattern.replace(f"\\{delimiter}", delimiter)
        replacement = replacement.replace(f"\\{delimiter}", delimiter)
    return Substitution(pattern=pattern, replacement=replacement, flags=argument[j:])


def to_extended_regex(pattern: str) -> str:
    """Rewrites a basic regular expression into the extended syntax Nushell uses."""
    out = []
    i = 0
    while i < len(pattern):
        pair = pattern[i : i + 2]
        if pair in BRE_ESCAPES:
            out.append(BRE_ESCAPES[pair])
            i += 2
        elif pattern[i] == "\\" and i + 1 < len(pattern):
            out.append(pair)
            i += 2
        else:
            out.append(ERE_LITERALS.get(pattern[i], pattern[i]))
            i += 1
    return "".join(out)


def to_capture_replacement(replacement: str) -> str:
    """`\\N` back-references become `${N}` and a bare `&` the whole match."""
    out = []
    i = 0
    while i < len(replacement):
        ch = replacement[i]
        if ch == "\\" and i + 1 < len(replacement):
            nxt = replacement[i + 1]
            if nxt.isdigit():
                out.append("${" + nxt + "}")
            elif nxt == "n":
                out.append("\n")
            else:
                out.append(nxt)
            i += 2
            continue
        if ch == "&":
            out.append("${0}")
        elif ch == "$":
            out.append("$$")
        else:
            out.append(ch)
        i += 1
    return "".join(out)


class SedConverter(UtilityConverter):
    name = "sed"
    description = "Converts sed scripts to Nushell line pipelines"

    def _convert(self, args: List[str]) -> str:
        scripts: List[str] = []
        script_files: List[str] = []
        files: List[str] = []
        in_place: Optional[str] = None
        quiet = extended = separate = False

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("-e", "--expression", "-f", "--file", "-l", "--line-length") and i + 1 < len(args):
                if arg in ("-e", "--expression"):
                    scripts.append(unquote(args[i + 1]))
                elif arg in ("-f", "--file"):
                    script_files.append(args[i + 1])
                i += 2
                continue
            if arg.startswith("--expression="):
                scripts.append(unquote(arg.split("=", 1)[1]))
            elif arg.startswith("--in-place"):
                in_place = arg.split("=", 1)[1] if "=" in arg else ""
            elif arg.startswith("-i") and not arg.startswith("--"):
                in_place = arg[2:]
            elif arg in ("-n", "--quiet", "--silent"):
                quiet = True
            elif arg in ("-r", "-E", "--regexp-extended"):
                extended = True
            elif arg in ("-s", "--separate"):
                separate = True
            elif arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    quiet = quiet or flag == "-n"
                    extended = extended or flag in ("-r", "-E")
                    separate = separate or flag == "-s"
            elif not scripts and not script_files:
                scripts.append(unquote(arg))
            else:
                files.append(arg)
            i += 1

        notes: List[str] = [f"script file {unquote(f)} not supported" for f in script_files]
        if not scripts:
            return self.passthrough(args, *notes)

        commands = parse_sed_script(";".join(scripts))
        logger.debug("Parsed sed script into %d commands", len(commands))

        if not files or files == ["-"]:
            stages = ["lines"]
        elif len(files) == 1:
            stages = [f"open {self.quote(files[0])} | lines"]
        else:
            stages = [f"{self.file_list(files)} | each {{ |file| open $file | lines }} | flatten"]
            if separate:
                notes.append("files are joined, not processed separately")

        for command in commands:
            stages.extend(self._command_stages(command, quiet, extended, notes))

        if quiet and not any(self._prints(command) for command in commands):
            stages.append("ignore")

        if in_place is not None:
            if len(files) == 1 and files[0] != "-":
                if in_place:
                    notes.append(f"backup suffix {in_place} not supported")
                stages.append(f"str join (char nl) | save --force {self.quote(files[0])}")
            else:
                notes.append("in-place editing requires a single file")

        result = " | ".join(stages)
        if notes:
            result += " # " + "; ".join(notes)
        return result

    @staticmethod
    def _prints(command: SedCommand) -> bool:
        if command.letter == "p":
            return True
        if command.letter == "s":
            substitution = parse_substitution(command.argument)
            return substitution is not None and "p" in substitution.flags
        return command.letter in ("=", "l")

    # --- Addresses ---

    def _condition(self, command: SedCommand, extended: bool) -> Optional[str]:
        """A Nushell boolean over an enumerated row `$x`, or None when not expressible."""
        address = command.address
        if address is None:
            return None
        condition = self._address_condition(address, extended)
        if condition is None:
            return None
        return f"not ({condition})" if command.negated else condition

    def _address_condition(self, address: str, extended: bool) -> Optional[str]:
        if LINE_NUMBER_REGEX.match(address):
            return f"$x.index == {int(address) - 1}"
        regex = _single_regex(address)
        if regex is not None:
            return f"$x.item =~ {self._regex(regex, extended)}"
        if "," in address:
            first, last = address.split(",", 1)
            if LINE_NUMBER_REGEX.match(first) and LINE_NUMBER_REGEX.match(last):
                return f"$x.index in {int(first) - 1}..{int(last) - 1}"
            if LINE_NUMBER_REGEX.match(first) and last == "$":
                return f"$x.index >= {int(first) - 1}"
        return None

    def _selection(self, address: str, extended: bool) -> Optional[str]:
        """The stages that keep only the lines an address selects."""
        if address == "$":
            return "last"
        if LINE_NUMBER_REGEX.match(address):
            return f"select {int(address) - 1}"
        if "," in address:
            first, last = address.split(",", 1)
            if LINE_NUMBER_REGEX.match(first) and LINE_NUMBER_REGEX.match(last):
                start, end = int(first), int(last)
                return f"skip {start - 1} | first {max(end - start + 1, 0)}"
            if LINE_NUMBER_REGEX.match(first) and last == "$":
                return f"skip {int(first) - 1}"
        regex = _single_regex(address)
        if regex is not None:
            return f"where $it =~ {self._regex(regex, extended)}"
        return None

    def _regex(self, pattern: str, extended: bool) -> str:
        return regex_literal(pattern if extended else to_extended_regex(pattern))

    # --- Commands ---

    def _guarded(self, command: SedCommand, extended: bool, notes: List[str], then: str, otherwise: str) -> List[str]:
        """Applies `then` to addressed rows and `otherwise` to the rest, over `enumerate`."""
        condition = self._condition(command, extended)
        if condition is None:
            notes.append(f"address {command.address} not supported")
            return [f"each {{ |line| {then.replace('$x.item', '$line')} }}"]
        return ["enumerate", f"each {{ |x| if {condition} {{ {then} }} else {{ {otherwise} }} }}"]

    def _command_stages(self, command: SedCommand, quiet: bool, extended: bool, notes: List[str]) -> List[str]:
        letter = command.letter
        address = command.address
        text = string_literal(command.argument)

        if letter in SED_COMMENT_COMMANDS:
            notes.append(f"{SED_COMMENT_COMMANDS[letter]} ({letter}) not supported")
            return []
        if letter not in SED_COMMAND_LETTERS:
            notes.append(f"unsupported sed command: {address or ''}{letter}{command.argument}")
            return []

        if letter == "s":
            return self._substitute(command, quiet, extended, notes)

        if letter == "y":
            return self._transliterate(command, notes)

        if letter == "d":
            if address is None:
                return ["where false"]
            if address == "$" and not command.negated:
                return ["drop 1"]
            condition = self._condition(command, extended)
            if condition is None:
                notes.append(f"address {address} not supported")
                return []
            return ["enumerate", f"where {{ |x| not ({condition}) }}", "get item"]

        if letter == "p":
            if quiet:
                if address is None:
                    return []
                selection = self._selection(address, extended) if not command.negated else None
                if selection is None:
                    condition = self._condition(command, extended)
                    if condition is None:
                        notes.append(f"address {address} not supported")
                        return []
                    return ["enumerate", f"where {{ |x| {condition} }}", "get item"]
                return [selection]
            if address is None:
                return ["each { |line| [$line $line] }", "flatten"]
            return self._guarded(command, extended, notes, "[$x.item $x.item]", "[$x.item]") + ["flatten"]

        if letter == "q":
            if command.argument.isdigit():
                notes.append(f"exit status {command.argument} not supported")
            if address is None:
                return ["first 1"]
            if LINE_NUMBER_REGEX.match(address):
                return [f"first {address}"]
            notes.append(f"quit at address {address} not supported")
            return []

        if letter == "n":
            return ["skip 1"]

        if letter == "N":
            return ["chunks 2", "each { |pair| $pair | str join (char nl) }"]

        if letter == "l":
            return ["each { |line| $line | debug }"]

        if letter == "=":
            return ["enumerate", "each { |x| print ($x.index + 1); $x.item }"]

        if letter == "a":
            if address is None:
                return [f"each {{ |line| [$line {text}] }}", "flatten"]
            return self._guarded(command, extended, notes, f"[$x.item {text}]", "[$x.item]") + ["flatten"]

        if letter == "i":
            if address is None:
                return [f"each {{ |line| [{text} $line] }}", "flatten"]
            return self._guarded(command, extended, notes, f"[{text} $x.item]", "[$x.item]") + ["flatten"]

        if letter == "c":
            if address is None:
                return [f"each {{ |line| {text} }}"]
            return self._guarded(command, extended, notes, text, "$x.item")

        if letter == "r":
            if address == "$":
                return [f"append (open {self.quote(command.argument)} | lines)"]
            if address is not None:
                notes.append(f"read at address {address} not supported")
            return [f"each {{ |line| [$line] | append (open {self.quote(command.argument)} | lines) }}", "flatten"]

        if letter == "w":
            if address is not None:
                notes.append(f"write at address {address} writes every line")
            return [f"tee {{ str join (char nl) | save --force {self.quote(command.argument)} }}"]

        return []

    def _substitute(self, command: SedCommand, quiet: bool, extended: bool, notes: List[str]) -> List[str]:
        substitution = parse_substitution(command.argument)
        if substitution is None:
            notes.append(f"malformed substitution: s{command.argument}")
            return []

        flags = substitution.flags
        pattern = substitution.pattern if extended else to_extended_regex(substitution.pattern)
        if "i" in flags or "I" in flags:
            pattern = "(?i)" + pattern
        occurrence = re.search(r"\d+", flags)
        if occurrence:
            notes.append(f"replacing occurrence {occurrence.group(0)} only is not supported")
        write = re.search(r"w\s*(\S+)", flags)
        if write:
            notes.append(f"writing substitutions to {write.group(1)} not supported")

        replacement = to_capture_replacement(substitution.replacement)
        replace = f"str replace{' --all' if 'g' in flags else ''} --regex {regex_literal(pattern)} {string_literal(replacement)}"

        stages = []
        if quiet and "p" in flags:
            # Only substituted lines are printed.
            stages.append(f"where $it =~ {regex_literal(pattern)}")
        if command.address is None:
            stages.append(f"each {{ |line| $line | {replace} }}")
        else:
            stages.extend(self._guarded(command, extended, notes, f"$x.item | {replace}", "$x.item"))
        if "p" in flags and not quiet:
            notes.append("p flag without -n not supported")
        return stages

    def _transliterate(self, command: SedCommand, notes: List[str]) -> List[str]:
        argument = command.argument
        delimiter = argument[:1]
        source, i = _read_delimited(argument, 1, delimiter)
        target, _ = _read_delimited(argument, i, delimiter)
        if not delimiter or len(source) != len(target):
            notes.append(f"malformed transliteration: y{argument}")
            return []
        arms = ", ".join(f"{string_literal(a)} => {string_literal(b)}" for a, b in zip(source, target) if a != b)
        if not arms:
            return []
        if command.address is not None:
            notes.append(f"address {command.address} ignored for y")
        return [f"each {{ |line| $line | split chars | each {{ |c| match $c {{ {arms}, _ => $c }} }} | str join }}"]
