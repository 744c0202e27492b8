"""
Converters for path name utilities, mapped onto Nushell's `path` commands.
"""

from typing import List

from ..conversion.base import UtilityConverter
from ..conversion.quoting import escape_regex, regex_literal
from ..parser.utils.helpers import unquote


def _joiner(zero: bool) -> str:
    return " | str join (char nul)" if zero else " | str join (char nl)"


class BasenameConverter(UtilityConverter):
    name = "basename"
    description = "Converts basename to path basename"

    def _convert(self, args: List[str]) -> str:
        suffix = None
        multiple = zero = False
        paths = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("--help", "--version"):
                return self.passthrough(args)
            if arg in ("-s", "--suffix") and i + 1 < len(args):
                suffix = unquote(args[i + 1])
                multiple = True
                i += 2
                continue
            if arg.startswith("--suffix="):
                suffix = unquote(arg.split("=", 1)[1])
                multiple = True
            elif arg in ("-a", "--multiple"):
                multiple = True
            elif arg in ("-z", "--zero"):
                zero = True
            elif arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    multiple = multiple or flag == "-a"
                    zero = zero or flag == "-z"
            else:
                paths.append(arg)
            i += 1

        if not paths:
            return self.passthrough(args)
        # Without -a or -s a second operand is the suffix.
        if not multiple and len(paths) == 2:
            suffix = unquote(paths.pop())
        elif not multiple and len(paths) > 2:
            return self.passthrough(args)

        strip = f" | str replace --regex {regex_literal(escape_regex(suffix) + '$')} ''" if suffix else ""
        if len(paths) == 1 and not zero:
            return f"{self.quote(paths[0])} | path basename{strip}"
        return f"{self.file_list(paths)} | each {{ |path| $path | path basename{strip} }}{_joiner(zero)}"


class DirnameConverter(UtilityConverter):
    name = "dirname"
    description = "Converts dirname to path dirname"

    def _convert(self, args: List[str]) -> str:
        if "--help" in args or "--version" in args:
            return self.passthrough(args)
        zero = any(arg in ("-z", "--zero") for arg in args)
        paths = [arg for arg in args if not arg.startswith("-") or arg == "-"]
        if not paths:
            return self.passthrough(args)
        if len(paths) == 1 and not zero:
            return f"{self.quote(paths[0])} | path dirname"
        return f"{self.file_list(paths)} | each {{ |path| $path | path dirname }}{_joiner(zero)}"


class RealpathConverter(UtilityConverter):
    name = "realpath"
    description = "Converts realpath to path expand"

    def _convert(self, args: List[str]) -> str:
        relative_to = None
        zero = False
        paths = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("--help", "--version"):
                return self.passthrough(args)
            if arg in ("--relative-to", "--relative-base") and i + 1 < len(args):
                relative_to = args[i + 1] if arg == "--relative-to" else relative_to
                i += 2
                continue
            if arg.startswith("--relative-to="):
                relative_to = arg.split("=", 1)[1]
            elif arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    zero = zero or flag in ("-z", "--zero")
                    # -e, -m, -q, -s, -L and -P only change how missing or linked paths resolve
            else:
                paths.append(arg)
            i += 1

        expand = "path expand"
        if relative_to is not None:
            expand += f" | path relative-to ({self.quote(relative_to)} | path expand)"

        if not paths:
            return f"pwd | {expand}"
        if len(paths) == 1 and not zero:
            return f"{self.quote(paths[0])} | {expand}"
        return f"{self.file_list(paths)} | each {{ |path| $path | {expand} }}{_joiner(zero)}"
