"""
Converters for file system utilities: ls, find, stat, chmod, chown, cp, mv,
rm, rmdir and mkdir.
"""

import re
from typing import List, Optional, Tuple

from ..config.config import FIND_TYPE_NAMES, SIZE_BLOCK_BYTES, SIZE_UNITS, STAT_FORMAT_FIELDS
from ..conversion.base import UtilityConverter
from ..conversion.quoting import escape_regex, needs_quoting, regex_literal
from ..parser.utils.helpers import unquote

SIZE_REGEX = re.compile(r"^([+-]?)(\d+)([a-zA-Z]?)$")
TIME_REGEX = re.compile(r"^([+-]?)(\d+)$")
FIND_TERMINATORS = (";", "\\;", "';'", '";"', "+")
OWNERSHIP_LONG_OPTIONS = {"--recursive": "-R", "--verbose": "-v", "--changes": "-c", "--silent": "-f", "--quiet": "-f"}
RM_OPTIONS = {
    "-r": "-r",
    "-R": "-r",
    "--recursive": "-r",
    "-f": "--force",
    "--force": "--force",
    "-i": "--interactive",
    "-I": "--interactive",
    "--interactive": "--interactive",
    "-v": "--verbose",
    "--verbose": "--verbose",
    "--trash": "--trash",
}


def glob_to_regex(pattern: str) -> str:
    """Translates a shell glob into an anchored regular expression."""
    out = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "*":
            out.append(".*")
        elif ch == "?":
            out.append(".")
        elif ch == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append("\\[")
            else:
                body = pattern[i + 1 : end]
                out.append("[^" + body[1:] + "]" if body.startswith("!") else "[" + body + "]")
                i = end
        elif ch == "\\" and i + 1 < len(pattern):
            out.append(escape_regex(pattern[i + 1]))
            i += 1
        else:
            out.append(escape_regex(ch))
        i += 1
    return "^" + "".join(out) + "$"


class LsConverter(UtilityConverter):
    name = "ls"
    description = "Converts ls flags to Nushell ls flags and table sorting"

    def _convert(self, args: List[str]) -> str:
        flags: List[str] = []
        notes: List[str] = []
        paths: List[str] = []
        recursive = reverse = False
        sort_by: Optional[str] = None

        for arg in args:
            if not arg.startswith("-") or arg == "-":
                paths.append(arg)
                continue
            if arg.startswith("--color"):
                continue
            for flag in self.split_cluster(arg):
                if flag in ("-l", "--long", "-g", "-o", "-n"):
                    self._add(flags, "--long")
                elif flag in ("-a", "-A", "--all", "--almost-all"):
                    self._add(flags, "--all")
                elif flag in ("-d", "--directory"):
                    self._add(flags, "--directory")
                elif flag in ("-R", "--recursive"):
                    recursive = True
                elif flag in ("-r", "--reverse"):
                    reverse = True
                elif flag == "-t":
                    sort_by = "modified"
                elif flag == "-S":
                    sort_by = "size"
                elif flag == "-u":
                    self._add(flags, "--long")
                    sort_by = sort_by or "accessed"
                elif flag == "-i":
                    self._add(flags, "--long")
                elif flag in ("-1", "-h", "-F", "-G", "-C", "-x", "-p", "--human-readable", "--classify"):
                    # Display-only flags; Nushell's table covers them.
                    continue
                else:
                    notes.append(f"unknown flag {flag}")

        if recursive:
            paths = [self._recursive_glob(p) for p in paths] or ["**/*"]

        result = " ".join(["ls"] + flags + [p if recursive else self.quote(p) for p in paths])
        if sort_by:
            # ls -t and -S list newest and largest first
            result += f" | sort-by {sort_by}" + ("" if reverse else " --reverse")
        elif reverse:
            result += " | reverse"
        if notes:
            result += " # " + ", ".join(notes)
        return result

    @staticmethod
    def _add(flags: List[str], flag: str) -> None:
        if flag not in flags:
            flags.append(flag)

    def _recursive_glob(self, path: str) -> str:
        if needs_quoting(unquote(path), glob=True):
            return f"({self.quote(path)} | path join '**/*' | into glob)"
        return f"{unquote(path).rstrip('/')}/**/*"


class FindConverter(UtilityConverter):
    """
    Converts find to a recursive `ls` followed by `where` filters.

    Tests are joined with `and`; `-o` starts a new alternative and `!`/`-not`
    negates the next test. Actions (`-exec`, `-delete`, `-print0`) become
    trailing pipeline stages. Predicates the converter does not know make the
    whole command a passthrough.
    """

    name = "find"
    description = "Converts find to ls, where and each"

    def _convert(self, args: List[str]) -> str:
        if not args:
            return "ls **/* | get name"

        paths = []
        i = 0
        while i < len(args) and not (args[i].startswith("-") or args[i] in ("!", "(", ")")):
            paths.append(args[i])
            i += 1

        alternatives: List[List[str]] = [[]]
        notes: List[str] = []
        action = " | get name"
        max_depth: Optional[int] = None
        long_listing = False
        negate = False

        while i < len(args):
            arg = args[i]
            value = args[i + 1] if i + 1 < len(args) else None
            condition = None

            if arg in ("!", "-not"):
                negate = not negate
                i += 1
                continue
            if arg in ("(", "\\(", ")", "\\)"):
                notes.append("grouping parentheses ignored")
                i += 1
                continue
            if arg in ("-o", "-or"):
                alternatives.append([])
                i += 1
                continue
            if arg in ("-a", "-and", "-print", "-depth", "-xdev", "-mount", "-follow"):
                i += 1
                continue

            if arg in ("-name", "-iname", "-path", "-ipath", "-wholename") and value is not None:
                regex = glob_to_regex(unquote(value))
                if arg in ("-iname", "-ipath"):
                    regex = "(?i)" + regex
                subject = "($it.name | path basename)" if arg in ("-name", "-iname") else "$it.name"
                condition = f"{subject} =~ {regex_literal(regex)}"
                i += 2
            elif arg == "-regex" and value is not None:
                condition = f"$it.name =~ {regex_literal(unquote(value))}"
                i += 2
            elif arg == "-type" and value is not None:
                kinds = [FIND_TYPE_NAMES.get(kind) for kind in unquote(value).split(",")]
                if None in kinds:
                    return self.passthrough(args)
                condition = " or ".join(f'$it.type == "{kind}"' for kind in kinds)
                if len(kinds) > 1:
                    condition = f"({condition})"
                i += 2
            elif arg == "-size" and value is not None:
                condition = self._size_condition(unquote(value))
                if condition is None:
                    return self.passthrough(args)
                i += 2
            elif arg in ("-mtime", "-atime", "-ctime", "-mmin", "-amin", "-cmin") and value is not None:
                condition = self._time_condition(arg, unquote(value))
                if condition is None:
                    return self.passthrough(args)
                if arg[1] == "a":
                    long_listing = True
                if arg[1] == "c":
                    notes.append("change time approximated by modification time")
                i += 2
            elif arg == "-newer" and value is not None:
                condition = f"$it.modified > (ls {self.quote(value)} | get 0.modified)"
                i += 2
            elif arg == "-empty":
                condition = "$it.size == 0b"
                i += 1
            elif arg == "-perm" and value is not None:
                notes.append(f"permission filter {unquote(value)} not supported")
                i += 2
            elif arg in ("-maxdepth", "-mindepth") and value is not None:
                if not value.isdigit():
                    return self.passthrough(args)
                if arg == "-maxdepth":
                    max_depth = int(value)
                else:
                    notes.append(f"min depth {value} not supported")
                i += 2
            elif arg in ("-exec", "-execdir", "-ok", "-okdir"):
                end = i + 1
                while end < len(args) and args[end] not in FIND_TERMINATORS:
                    end += 1
                action = self._exec_action(args[i + 1 : end])
                if arg.startswith("-ok"):
                    notes.append("confirmation prompt not supported")
                i = end + 1
            elif arg == "-delete":
                action = " | each { |file| rm $file.name }"
                i += 1
            elif arg == "-print0":
                action = " | get name | str join (char nul)"
                i += 1
            elif arg == "-prune":
                notes.append("prune not supported")
                i += 1
            else:
                return self.passthrough(args)

            if condition is not None:
                alternatives[-1].append(f"not ({condition})" if negate else condition)
            negate = False

        result = self._listing(paths or ["."], max_depth, long_listing)
        groups = [" and ".join(group) for group in alternatives if group]
        if len(groups) == 1:
            result += f" | where {groups[0]}"
        elif groups:
            result += " | where " + " or ".join(f"({group})" for group in groups)
        result += action
        if max_depth is not None and max_depth > 1:
            notes.append(f"max depth {max_depth} not enforced")
        if notes:
            result += " # " + ", ".join(notes)
        return result

    def _listing(self, paths: List[str], max_depth: Optional[int], long_listing: bool) -> str:
        pattern = "*" if max_depth == 1 else "**/*"
        command = "ls --long" if long_listing else "ls"
        if max_depth == 0:
            return f"{command} --directory {' '.join(self.quote(p) for p in paths)}"
        if len(paths) == 1:
            path = unquote(paths[0])
            if path in (".", "./"):
                return f"{command} {pattern}"
            if not needs_quoting(path, glob=True):
                return f"{command} {path.rstrip('/')}/{pattern}"
            return f"{command} ({self.quote(paths[0])} | path join '{pattern}' | into glob)"
        return f"{self.file_list(paths)} | each {{ |dir| {command} ($dir | path join '{pattern}' | into glob) }} | flatten"

    @staticmethod
    def _size_condition(spec: str) -> Optional[str]:
        match = SIZE_REGEX.match(spec)
        if not match:
            return None
        sign, number, unit = match.group(1), int(match.group(2)), match.group(3).lower()
        if unit in SIZE_BLOCK_BYTES:
            size = f"{number * SIZE_BLOCK_BYTES[unit]}b"
        elif unit in SIZE_UNITS:
            size = f"{number}{SIZE_UNITS[unit]}"
        else:
            return None
        op = {"+": ">", "-": "<", "": "=="}[sign]
        return f"$it.size {op} {size}"

    @staticmethod
    def _time_condition(predicate: str, spec: str) -> Optional[str]:
        match = TIME_REGEX.match(spec)
        if not match:
            return None
        sign, number = match.group(1), int(match.group(2))
        column = "accessed" if predicate[1] == "a" else "modified"
        unit = "min" if predicate.endswith("min") else "day"
        if sign == "+":
            # find rounds ages down to whole days
            older = number + 1 if unit == "day" else number
            return f"$it.{column} < ((date now) - {older}{unit})"
        if sign == "-":
            return f"$it.{column} > ((date now) - {number}{unit})"
        return (
            f"$it.{column} <= ((date now) - {number}{unit}) and "
            f"$it.{column} > ((date now) - {number + 1}{unit})"
        )

    def _exec_action(self, command: List[str]) -> str:
        if not command:
            return " | get name"
        rendered = " ".join("$file.name" if word in ("{}", "'{}'", '"{}"') else self.quote(word) for word in command)
        if "$file.name" not in rendered:
            rendered += " $file.name"
        return f" | each {{ |file| {rendered} }}"


class StatConverter(UtilityConverter):
    name = "stat"
    description = "Converts stat to ls --long metadata"

    def _convert(self, args: List[str]) -> str:
        fmt: Optional[str] = None
        terse = False
        files = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("-c", "--format", "--printf") and i + 1 < len(args):
                fmt = unquote(args[i + 1])
                i += 1
            elif arg.startswith(("--format=", "--printf=")):
                fmt = unquote(arg.split("=", 1)[1])
            elif arg in ("-t", "--terse"):
                terse = True
            elif arg in ("--help", "--version"):
                return self.passthrough(args)
            elif arg.startswith("-") and arg != "-":
                # -L, -f and the like do not change the metadata listed
                pass
            else:
                files.append(arg)
            i += 1

        if not files:
            return self.passthrough(args)

        result = f"ls --long --directory {' '.join(self.quote(f) for f in files)}"
        if len(files) == 1:
            result += " | first"

        notes = []
        if fmt is not None:
            fields = []
            for directive in re.findall(r"%.", fmt):
                if directive == "%%":
                    continue
                field = STAT_FORMAT_FIELDS.get(directive)
                if field is None:
                    notes.append(f"format {directive} not supported")
                elif field not in fields:
                    fields.append(field)
            if len(fields) == 1:
                result += f" | get {fields[0]}"
            elif fields:
                result += f" | select {' '.join(fields)}"
        elif terse:
            result += " | select name size mode modified"

        if notes:
            result += " # " + ", ".join(notes)
        return result


class OwnershipConverter(UtilityConverter):
    """
    chmod and chown have no Nushell builtin; they run as explicit external
    calls with their options normalized.
    """

    def _convert(self, args: List[str]) -> str:
        flags = []
        operands = []
        reference = None

        i = 0
        while i < len(args):
            arg = args[i]
            if arg == "--reference" and i + 1 < len(args):
                reference = args[i + 1]
                i += 2
                continue
            if arg.startswith("--reference="):
                reference = arg.split("=", 1)[1]
            elif arg.startswith("-") and arg != "-" and not re.match(r"^-[rwxXst]+$", arg):
                for flag in self.split_cluster(arg):
                    flag = OWNERSHIP_LONG_OPTIONS.get(flag, flag)
                    if flag not in flags:
                        flags.append(flag)
            else:
                operands.append(arg)
            i += 1

        required = 1 if reference else 2
        if len(operands) < required:
            return self.passthrough(args)

        words = [f"^{self.name}"] + flags
        if reference:
            words.append(f"--reference={self.quote(reference)}")
        words.extend(self.quote(o) for o in operands)
        return " ".join(words)


class ChmodConverter(OwnershipConverter):
    name = "chmod"
    description = "Converts chmod to an external chmod call"


class ChownConverter(OwnershipConverter):
    name = "chown"
    description = "Converts chown to an external chown call"


class TransferConverter(UtilityConverter):
    """Shared option mapping for cp and mv."""

    # Short and long option spellings to the Nushell flag they become.
    option_map: dict = {}

    def _parse(self, args: List[str]) -> Tuple[List[str], List[str], List[str]]:
        flags, files, notes = [], [], []
        for arg in args:
            if not arg.startswith("-") or arg == "-":
                files.append(arg)
                continue
            if arg == "--":
                continue
            for flag in self.split_cluster(arg):
                mapped = self.option_map.get(flag)
                if mapped is None:
                    notes.append(f"option {flag} not supported")
                elif mapped and mapped not in flags:
                    flags.append(mapped)
        return flags, files, notes

    def _convert(self, args: List[str]) -> str:
        flags, files, notes = self._parse(args)
        if len(files) < 2:
            return self.passthrough(args)
        result = " ".join([self.name] + flags + [self.quote(f) for f in files])
        if notes:
            result += " # " + ", ".join(notes)
        return result


class CpConverter(TransferConverter):
    name = "cp"
    description = "Converts cp to the Nushell cp command"
    option_map = {
        "-r": "-r",
        "-R": "-r",
        "--recursive": "-r",
        "-a": "-r",
        "--archive": "-r",
        "-f": "",
        "--force": "",
        "-n": "--no-clobber",
        "--no-clobber": "--no-clobber",
        "-u": "--update",
        "--update": "--update",
        "-v": "--verbose",
        "--verbose": "--verbose",
        "-i": "--interactive",
        "--interactive": "--interactive",
        "-p": "--preserve [mode timestamps]",
        "--preserve": "--preserve [mode timestamps]",
    }

    def _convert(self, args: List[str]) -> str:
        # Archive mode also keeps attributes.
        if any(arg == "--archive" or (arg.startswith("-") and not arg.startswith("--") and "a" in arg[1:]) for arg in args):
            args = args + ["-p"]
        return super()._convert(args)


class MvConverter(TransferConverter):
    name = "mv"
    description = "Converts mv to the Nushell mv command"
    option_map = {
        "-f": "--force",
        "--force": "--force",
        "-n": "--no-clobber",
        "--no-clobber": "--no-clobber",
        "-u": "--update",
        "--update": "--update",
        "-v": "--verbose",
        "--verbose": "--verbose",
        "-i": "--interactive",
        "--interactive": "--interactive",
    }


class RmConverter(UtilityConverter):
    name = "rm"
    description = "Converts rm to the Nushell rm command"

    def _convert(self, args: List[str]) -> str:
        flags = []
        files = []
        for arg in args:
            if not arg.startswith("-") or arg == "-":
                files.append(arg)
                continue
            for flag in self.split_cluster(arg):
                mapped = RM_OPTIONS.get(flag)
                if mapped and mapped not in flags:
                    flags.append(mapped)
        if not files:
            return self.passthrough(args)
        return " ".join(["rm"] + flags + [self.quote(f) for f in files])


class RmdirConverter(UtilityConverter):
    name = "rmdir"
    description = "Converts rmdir to rm on directories"

    def _convert(self, args: List[str]) -> str:
        verbose = parents = ignore_non_empty = False
        dirs = []
        for arg in args:
            if arg == "--ignore-fail-on-non-empty":
                ignore_non_empty = True
            elif arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    verbose = verbose or flag in ("-v", "--verbose")
                    parents = parents or flag in ("-p", "--parents")
            else:
                dirs.append(arg)
        if not dirs:
            return self.passthrough(args)

        result = " ".join(["rm"] + (["--verbose"] if verbose else []) + [self.quote(d) for d in dirs])
        notes = []
        if parents:
            notes.append("parent directories are not removed")
        if not ignore_non_empty:
            notes.append("rmdir only removes empty directories")
        if notes:
            result += " # " + ", ".join(notes)
        return result


class MkdirConverter(UtilityConverter):
    name = "mkdir"
    description = "Converts mkdir to the Nushell mkdir command"

    def _convert(self, args: List[str]) -> str:
        verbose = parents = False
        mode = None
        dirs = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("-m", "--mode") and i + 1 < len(args):
                mode = args[i + 1]
                i += 2
                continue
            if arg.startswith("--mode="):
                mode = arg.split("=", 1)[1]
            elif arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    verbose = verbose or flag in ("-v", "--verbose")
                    parents = parents or flag in ("-p", "--parents")
            else:
                dirs.append(arg)
            i += 1
        if not dirs:
            return self.passthrough(args)

        result = " ".join(["mkdir"] + (["--verbose"] if verbose else []) + [self.quote(d) for d in dirs])
        notes = []
        if parents:
            notes.append("creates parent directories automatically")
        if mode is not None:
            notes.append(f"mode {unquote(mode)} not supported")
        if notes:
            result += " # " + ", ".join(notes)
        return result
