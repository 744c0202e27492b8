"""
Converters for system and miscellaneous utilities: date, seq, which, whoami,
ps and awk.
"""

import re
from typing import List, Optional

from ..config.config import DATE_ISO_FORMATS, DATE_RFC2822_FORMAT, DATE_RFC3339_FORMATS
from ..conversion.base import UtilityConverter
from ..conversion.quoting import string_literal
from ..parser.utils.helpers import unquote

INTEGER_REGEX = re.compile(r"^[+-]?\d+$")
RELATIVE_DATE_REGEX = re.compile(r"^(\d+)\s+(second|minute|hour|day|week)s?\s+ago$")
SEQ_CONVERSION_REGEX = re.compile(r"%[gdfe]")
DURATION_UNITS = {"second": "sec", "minute": "min", "hour": "hr", "day": "day", "week": "wk"}
PS_FIELDS = {
    "pid": "pid",
    "ppid": "ppid",
    "comm": "name",
    "ucomm": "name",
    "cmd": "command",
    "command": "command",
    "args": "command",
    "%cpu": "cpu",
    "pcpu": "cpu",
    "%mem": "mem",
    "pmem": "mem",
    "rss": "mem",
    "vsz": "virtual",
    "stat": "status",
    "state": "status",
    "user": "user",
    "uid": "user_id",
    "lstart": "start_time",
    "start": "start_time",
}


class DateConverter(UtilityConverter):
    name = "date"
    description = "Converts date to date now and format date"

    def _convert(self, args: List[str]) -> str:
        date_string: Optional[str] = None
        reference: Optional[str] = None
        fmt: Optional[str] = None
        utc = False

        i = 0
        while i < len(args):
            arg = args[i]
            value = args[i + 1] if i + 1 < len(args) else None
            if arg in ("--help", "--version"):
                return self.passthrough(args)
            if arg in ("-s", "--set") or arg.startswith("--set="):
                return self.passthrough(args, "setting the system clock is not supported")
            if arg in ("-d", "--date") and value is not None:
                date_string = unquote(value)
                i += 1
            elif arg.startswith("--date="):
                date_string = unquote(arg.split("=", 1)[1])
            elif arg in ("-r", "--reference") and value is not None:
                reference = value
                i += 1
            elif arg.startswith("--reference="):
                reference = arg.split("=", 1)[1]
            elif arg in ("-u", "--utc", "--universal"):
                utc = True
            elif arg in ("-R", "--rfc-2822", "--rfc-email"):
                fmt = DATE_RFC2822_FORMAT
            elif arg.startswith(("-I", "--iso-8601")):
                precision = arg.split("=", 1)[1] if "=" in arg else arg[2:] if arg.startswith("-I") else ""
                fmt = DATE_ISO_FORMATS.get(precision or "date")
                if fmt is None:
                    return self.passthrough(args)
            elif arg == "--rfc-3339" and value in DATE_RFC3339_FORMATS:
                fmt = DATE_RFC3339_FORMATS[value]
                i += 1
            elif arg.startswith("--rfc-3339="):
                fmt = DATE_RFC3339_FORMATS.get(arg.split("=", 1)[1])
                if fmt is None:
                    return self.passthrough(args)
            elif unquote(arg).startswith("+"):
                fmt = unquote(arg)[1:]
            else:
                return self.passthrough(args)
            i += 1

        if reference is not None:
            result = f"ls {self.quote(reference)} | get 0.modified"
        elif date_string is not None:
            result = self._date_value(date_string)
        else:
            result = "date now"

        if utc:
            result += " | date to-timezone UTC"
        if fmt is not None:
            result += f" | format date {string_literal(fmt)}"
        return result

    @staticmethod
    def _date_value(text: str) -> str:
        lowered = text.strip().lower()
        if lowered in ("now", ""):
            return "date now"
        if lowered == "today":
            return 'date now | format date "%Y-%m-%d" | into datetime'
        if lowered == "yesterday":
            return "(date now) - 1day"
        if lowered == "tomorrow":
            return "(date now) + 1day"
        match = RELATIVE_DATE_REGEX.match(lowered)
        if match:
            return f"(date now) - {match.group(1)}{DURATION_UNITS[match.group(2)]}"
        if text.startswith("@") and INTEGER_REGEX.match(text[1:]):
            return f"{int(text[1:])} * 1_000_000_000 | into datetime"
        return f"{string_literal(text)} | into datetime"


class SeqConverter(UtilityConverter):
    name = "seq"
    description = "Converts seq to Nushell ranges"

    def _convert(self, args: List[str]) -> str:
        separator: Optional[str] = None
        fmt: Optional[str] = None
        equal_width = False
        numbers = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("-s", "--separator", "-f", "--format") and i + 1 < len(args):
                if arg in ("-s", "--separator"):
                    separator = unquote(args[i + 1])
                else:
                    fmt = unquote(args[i + 1])
                i += 2
                continue
            if arg.startswith("--separator="):
                separator = unquote(arg.split("=", 1)[1])
            elif arg.startswith("--format="):
                fmt = unquote(arg.split("=", 1)[1])
            elif arg in ("-w", "--equal-width"):
                equal_width = True
            elif INTEGER_REGEX.match(arg):
                numbers.append(int(arg))
            else:
                return self.passthrough(args)
            i += 1

        if len(numbers) == 1:
            first, step, last = 1, 1, numbers[0]
        elif len(numbers) == 2:
            first, step, last = numbers[0], 1, numbers[1]
        elif len(numbers) == 3:
            first, step, last = numbers
        else:
            return self.passthrough(args)
        if step == 0:
            return self.passthrough(args)

        # seq prints nothing when the bounds run against the step
        if (step > 0 and first > last) or (step < 0 and first < last):
            return "[]"
        result = f"{first}..{last}" if step == 1 else f"{first}..{first + step}..{last}"

        notes = []
        if fmt is not None:
            conversions = SEQ_CONVERSION_REGEX.findall(fmt)
            if len(conversions) == 1 and "%" not in SEQ_CONVERSION_REGEX.sub("", fmt).replace("%%", ""):
                # Interpolation treats parentheses as code, so literal ones are escaped.
                literal = fmt.replace("\\", "\\\\").replace('"', '\\"').replace("(", "\\(").replace("%%", "%")
                template = SEQ_CONVERSION_REGEX.sub(lambda _: "($n)", literal, count=1)
                result += f' | each {{ |n| $"{template}" }}'
            else:
                notes.append(f"format {fmt} not supported")
        elif equal_width:
            width = max(len(str(first)), len(str(last)))
            result += f" | each {{ |n| $n | fill --alignment right --character '0' --width {width} }}"

        if separator is not None:
            result += f" | str join {string_literal(separator)}"
        if notes:
            result += " # " + ", ".join(notes)
        return result


class WhichConverter(UtilityConverter):
    name = "which"
    description = "Converts which to the Nushell which command"

    def _convert(self, args: List[str]) -> str:
        all_matches = silent = False
        names = []
        for arg in args:
            if arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    all_matches = all_matches or flag in ("-a", "--all")
                    silent = silent or flag in ("-s", "--silent")
            else:
                names.append(arg)
        if not names:
            return self.passthrough(args)
        result = " ".join(["which"] + (["--all"] if all_matches else []) + [self.quote(n) for n in names])
        if silent:
            result += " | is-not-empty"
        return result


class WhoamiConverter(UtilityConverter):
    name = "whoami"
    description = "Converts whoami to the USER environment variable"

    def _convert(self, args: List[str]) -> str:
        if args:
            return self.passthrough(args)
        return "$env.USER? | default (^whoami)"


class PsConverter(UtilityConverter):
    """
    Converts ps to Nushell's process table.

    Selection options become `where` filters and `-o` field lists a `select`.
    Display formats Nushell has no equivalent for are reported in a comment.
    """

    name = "ps"
    description = "Converts ps to the Nushell process table with filters"

    def _convert(self, args: List[str]) -> str:
        long_listing = False
        filters: List[str] = []
        fields: List[str] = []
        notes: List[str] = []

        i = 0
        while i < len(args):
            arg = args[i]
            value = args[i + 1] if i + 1 < len(args) else None
            if arg in ("--help", "--version"):
                return self.passthrough(args)
            if arg in ("-p", "--pid", "-u", "-U", "--user", "-C", "-o", "--format") and value is not None:
                self._option(arg, unquote(value), filters, fields, notes)
                if arg in ("-u", "-U", "--user"):
                    long_listing = True
                i += 2
                continue
            if arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    long_listing = self._flag(flag, notes) or long_listing
            elif arg.isalpha() and arg.islower() and all(flag in "auxwfjlvesr" for flag in arg):
                # BSD style option cluster such as `aux`
                for flag in arg:
                    long_listing = self._flag(f"-{flag}", notes) or long_listing
            elif arg.isdigit():
                filters.append(f"pid == {arg}")
            else:
                filters.append(f"user == {string_literal(unquote(arg))}")
                long_listing = True
            i += 1

        if any(field in ("command", "user", "user_id", "start_time") for field in fields):
            long_listing = True
        result = "ps --long" if long_listing else "ps"
        for condition in filters:
            result += f" | where {condition}"
        if fields:
            result += f" | select {' '.join(dict.fromkeys(fields))}"
        if notes:
            result += " # Note: " + ", ".join(dict.fromkeys(notes)) + " not fully supported"
        return result

    @staticmethod
    def _flag(flag: str, notes: List[str]) -> bool:
        """Records a display flag; returns True when it needs the long listing."""
        if flag in ("-f", "-F", "-l", "-u", "-v"):
            if flag in ("-f", "-F"):
                notes.append("full format")
            elif flag == "-u":
                notes.append("user format")
            return True
        if flag in ("-T", "-L", "-m"):
            notes.append("show threads")
        elif flag in ("-H", "--forest", "-j"):
            notes.append("tree format")
        # -e, -A, -a and -x select every process, which ps already lists
        return False

    @staticmethod
    def _option(option: str, value: str, filters: List[str], fields: List[str], notes: List[str]) -> None:
        items = [item for item in re.split(r"[,\s]+", value) if item]
        if option in ("-p", "--pid"):
            pids = [item for item in items if item.isdigit()]
            if len(pids) == 1:
                filters.append(f"pid == {pids[0]}")
            elif pids:
                filters.append(f"pid in [{' '.join(pids)}]")
        elif option in ("-u", "-U", "--user"):
            users = [string_literal(item) for item in items]
            filters.append(f"user == {users[0]}" if len(users) == 1 else f"user in [{' '.join(users)}]")
        elif option == "-C":
            names = [string_literal(item) for item in items]
            filters.append(f"name == {names[0]}" if len(names) == 1 else f"name in [{' '.join(names)}]")
        else:
            for item in items:
                field = PS_FIELDS.get(item.split("=")[0].lower())
                if field is None:
                    notes.append(f"custom fields: {item}")
                else:
                    fields.append(field)


class AwkConverter(UtilityConverter):
    name = "awk"
    description = "Runs awk as an external command"

    def _convert(self, args: List[str]) -> str:
        return self.render(args, "^awk")
