"""
Converters for the small shell builtins: cd, exit, true, false and pwd.
"""

import re
from typing import List

from ..conversion.base import CommandConverter

INTEGER_REGEX = re.compile(r"^[+-]?\d+$")


class CdConverter(CommandConverter):
    name = "cd"
    description = "Converts cd to the Nushell cd command"

    def _convert(self, args: List[str]) -> str:
        # -L and -P only change how symlinks are resolved
        paths = [arg for arg in args if arg not in ("-L", "-P", "-e", "-@", "--")]
        if not paths:
            return "cd"
        path = paths[0]
        if path == "-":
            return "cd -"
        if path in ("~", "", '""', "''"):
            return "cd"
        return f"cd {self.quote(path)}"


class ExitConverter(CommandConverter):
    name = "exit"
    description = "Converts exit, keeping a numeric status"

    def _convert(self, args: List[str]) -> str:
        if not args:
            return "exit"
        if INTEGER_REGEX.match(args[0]):
            return f"exit {int(args[0])}"
        return "exit 1"


class TrueConverter(CommandConverter):
    name = "true"
    description = "Converts true to the Nushell boolean literal"

    def _convert(self, args: List[str]) -> str:
        return "true"


class FalseConverter(CommandConverter):
    name = "false"
    description = "Converts false to the Nushell boolean literal"

    def _convert(self, args: List[str]) -> str:
        return "false"


class PwdConverter(CommandConverter):
    name = "pwd"
    description = "Converts pwd, expanding symlinks for -P"

    def _convert(self, args: List[str]) -> str:
        physical = False
        for arg in args:
            if arg in ("-P", "--physical"):
                physical = True
            elif arg in ("-L", "--logical"):
                physical = False
        return "pwd | path expand" if physical else "pwd"
