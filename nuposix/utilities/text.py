"""
Converters for the line-oriented text utilities: cat, echo, grep, cut, head,
tail, tee, wc, sort and uniq.

Without file operands these operate on the pipeline input; with one file they
start from `open FILE`; several files are handled per file where the utility
distinguishes them.
"""

import re
from typing import List, Optional, Tuple

from ..conversion.base import UtilityConverter
from ..conversion.quoting import escape_regex, regex_literal, string_literal
from ..parser.utils.helpers import unquote

NUMBER_REGEX = re.compile(r"^\d+$")
RANGE_REGEX = re.compile(r"^(\d*)-(\d*)$")


class CatConverter(UtilityConverter):
    name = "cat"
    description = "Converts cat to open --raw with line post-processing"

    def _convert(self, args: List[str]) -> str:
        number = number_nonblank = squeeze = show_ends = show_tabs = show_nonprinting = False
        files = []
        for arg in args:
            for flag in self.split_cluster(arg):
                if flag in ("-n", "--number"):
                    number = True
                elif flag in ("-b", "--number-nonblank"):
                    number_nonblank = True
                elif flag in ("-s", "--squeeze-blank"):
                    squeeze = True
                elif flag in ("-E", "--show-ends"):
                    show_ends = True
                elif flag in ("-T", "--show-tabs"):
                    show_tabs = True
                elif flag in ("-v", "--show-nonprinting"):
                    show_nonprinting = True
                elif flag in ("-A", "--show-all"):
                    show_ends = show_tabs = show_nonprinting = True
                elif flag.startswith("-") and flag != "-":
                    # -u and unknown flags
                    continue
                else:
                    files.append(flag)

        sources = ["$in" if f == "-" else f"open --raw {self.quote(f)}" for f in files]
        if not sources:
            result = "$in"
        elif len(sources) == 1:
            result = sources[0]
        else:
            result = "[" + ", ".join(s if s == "$in" else f"({s})" for s in sources) + "] | str join"

        steps = []
        if squeeze:
            steps.append("lines | where ($it | str trim | is-not-empty) | str join (char nl)")
        if number:
            steps.append('lines | enumerate | each { |x| $"($x.index + 1)  ($x.item)" } | str join (char nl)')
        elif number_nonblank:
            steps.append(
                'lines | enumerate | each { |x| if ($x.item | str trim | is-empty) { $x.item } '
                'else { $"($x.index + 1)  ($x.item)" } } | str join (char nl)'
            )
        if show_ends:
            steps.append("str replace --all (char nl) $'$(char nl)'")
        if show_tabs:
            steps.append("str replace --all (char tab) '^I'")
        if steps:
            result += " | " + " | ".join(steps)
        if show_nonprinting:
            result += " # show-nonprinting not supported"
        return result


class EchoConverter(UtilityConverter):
    name = "echo"
    description = "Converts echo to print"

    def _convert(self, args: List[str]) -> str:
        no_newline = False
        # Only leading option words are options; `echo a -n` prints "-n".
        while args and re.match(r"^-[neE]+$", args[0]):
            no_newline = no_newline or "n" in args[0]
            args = args[1:]
        command = "print -n" if no_newline else "print"
        return self.render(args, command)


class GrepConverter(UtilityConverter):
    """
    Converts grep to a `where` filter over lines.

    On the pipeline input the filter applies to the incoming items directly,
    so `ls | grep test` filters the listing.
    """

    name = "grep"
    description = "Converts grep to where filters with regex matching"

    def _convert(self, args: List[str]) -> str:
        invert = ignore_case = count = quiet = line_number = word = fixed = only_matching = False
        list_files = list_missing = recursive = False
        patterns: List[str] = []
        operands: List[str] = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("-e", "--regexp") and i + 1 < len(args):
                patterns.append(args[i + 1])
                i += 2
                continue
            if arg.startswith("--regexp="):
                patterns.append(arg.split("=", 1)[1])
            elif arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    if flag in ("-v", "--invert-match"):
                        invert = True
                    elif flag in ("-i", "--ignore-case", "-y"):
                        ignore_case = True
                    elif flag in ("-c", "--count"):
                        count = True
                    elif flag in ("-q", "--quiet", "--silent"):
                        quiet = True
                    elif flag in ("-n", "--line-number"):
                        line_number = True
                    elif flag in ("-w", "--word-regexp"):
                        word = True
                    elif flag in ("-F", "--fixed-strings"):
                        fixed = True
                    elif flag in ("-o", "--only-matching"):
                        only_matching = True
                    elif flag in ("-l", "--files-with-matches"):
                        list_files = True
                    elif flag in ("-L", "--files-without-match"):
                        list_missing = True
                    elif flag in ("-r", "-R", "--recursive"):
                        recursive = True
                    # -E, -G, -H, -h and -s do not change the translation
            else:
                operands.append(arg)
            i += 1

        if not patterns:
            if not operands:
                return self.passthrough(args)
            patterns.append(operands.pop(0))
        if recursive:
            return self.passthrough(args)

        pattern = self._pattern(patterns, fixed, word, ignore_case)
        op = "!~" if invert else "=~"
        where = f"where $it {op} {pattern}"

        if list_files or list_missing:
            if not operands:
                return self.passthrough(args)
            test = "any" if list_files else "all"
            op = "=~" if list_files else "!~"
            return f"{self.file_list(operands)} | where {{ |file| open $file | lines | {test} {{ |line| $line {op} {pattern} }} }}"

        if len(operands) > 1:
            body = f"open $file | lines | {where}"
            if count:
                return f"{self.file_list(operands)} | each {{ |file| {{file: $file, count: ({body} | length)}} }}"
            return f'{self.file_list(operands)} | each {{ |file| {body} | each {{ |line| $"($file):($line)" }} }} | flatten'

        source = f"open {self.quote(operands[0])} | lines | " if operands and operands[0] != "-" else ""
        if quiet:
            return f"{source}{where} | is-not-empty"
        if count:
            return f"{source}{where} | length"
        if line_number:
            return f'{source}enumerate | where $it.item {op} {pattern} | each {{ |x| $"($x.index + 1):($x.item)" }}'
        if only_matching:
            return f"{source}{where} # only-matching not supported"
        return f"{source}{where}"

    def _pattern(self, patterns: List[str], fixed: bool, word: bool, ignore_case: bool) -> str:
        if len(patterns) == 1 and not (fixed or word or ignore_case):
            return self.quote(patterns[0])
        parts = [escape_regex(unquote(p)) if fixed else unquote(p) for p in patterns]
        regex = "|".join(parts) if len(parts) == 1 else "|".join(f"(?:{p})" for p in parts)
        if word:
            regex = rf"\b(?:{regex})\b" if len(parts) > 1 else rf"\b{regex}\b"
        if ignore_case:
            regex = "(?i)" + regex
        return regex_literal(regex)


def parse_ranges(spec: str) -> Optional[List[Tuple[int, Optional[int]]]]:
    """Parses a cut list (`1,3`, `2-4`, `5-`, `-2`) into 1-based (start, end) pairs."""
    ranges = []
    for part in spec.split(","):
        if NUMBER_REGEX.match(part):
            ranges.append((int(part), int(part)))
            continue
        match = RANGE_REGEX.match(part)
        if not match or part == "-":
            return None
        start = int(match.group(1)) if match.group(1) else 1
        end = int(match.group(2)) if match.group(2) else None
        ranges.append((start, end))
    if any(start < 1 or (end is not None and end < start) for start, end in ranges):
        return None
    return ranges


class CutConverter(UtilityConverter):
    name = "cut"
    description = "Converts cut to split row and column selection"

    def _convert(self, args: List[str]) -> str:
        delimiter = "\t"
        output_delimiter = None
        mode = spec = None
        only_delimited = complement = False
        files = []

        i = 0
        while i < len(args):
            arg = args[i]
            value = None
            if arg in ("-d", "--delimiter", "-f", "--fields", "-c", "--characters", "-b", "--bytes", "--output-delimiter"):
                value = args[i + 1] if i + 1 < len(args) else ""
                i += 1
                flag = arg
            elif arg.startswith("--") and "=" in arg:
                flag, value = arg.split("=", 1)
            elif len(arg) > 2 and arg[:2] in ("-d", "-f", "-c", "-b"):
                flag, value = arg[:2], arg[2:]
            else:
                flag = arg

            if flag in ("-d", "--delimiter"):
                delimiter = unquote(value)
            elif flag in ("-f", "--fields"):
                mode, spec = "fields", value
            elif flag in ("-c", "--characters"):
                mode, spec = "characters", value
            elif flag in ("-b", "--bytes"):
                mode, spec = "bytes", value
            elif flag == "--output-delimiter":
                output_delimiter = unquote(value)
            elif flag in ("-s", "--only-delimited"):
                only_delimited = True
            elif flag == "--complement":
                complement = True
            elif not flag.startswith("-") or flag == "-":
                files.append(flag)
            i += 1

        ranges = parse_ranges(unquote(spec)) if spec else None
        if mode is None:
            return self.passthrough(args, "no field, character or byte list")
        if ranges is None or complement:
            return self.passthrough(args)

        if not files:
            result = "lines"
        elif len(files) == 1:
            result = f"open {self.quote(files[0])} | lines"
        else:
            result = f"{self.file_list(files)} | each {{ |file| open $file | lines }} | flatten"

        if mode == "fields":
            if only_delimited:
                result += f" | where ($it | str contains {string_literal(delimiter)})"
            joiner = string_literal(output_delimiter if output_delimiter is not None else delimiter)
            selection = self._field_selection(ranges)
            result += f" | each {{ |line| $line | split row {string_literal(delimiter)} | {selection} | str join {joiner} }}"
        else:
            flag = " --grapheme-clusters" if mode == "characters" else ""
            pieces = [f"($line | str substring{flag} {start - 1}..{'' if end is None else end - 1})" for start, end in ranges]
            if len(pieces) == 1:
                result += f" | each {{ |line| {pieces[0][1:-1]} }}"
            else:
                result += f" | each {{ |line| [{' '.join(pieces)}] | str join }}"
        return result

    @staticmethod
    def _field_selection(ranges: List[Tuple[int, Optional[int]]]) -> str:
        if len(ranges) == 1 and ranges[0][1] is None:
            return f"skip {ranges[0][0] - 1}"
        indices = []
        for start, end in ranges:
            if end is None:
                # Open-ended ranges among others are approximated by their first field.
                end = start
            indices.extend(str(n - 1) for n in range(start, end + 1))
        return "select " + " ".join(dict.fromkeys(indices))


class LineSliceConverter(UtilityConverter):
    """Shared option handling and multi-file banners for head and tail."""

    # Sign of a count that is measured from the start of the input.
    from_start_sign = "-"

    def _slice(self, count: str, from_start: bool, in_bytes: bool) -> str:
        raise NotImplementedError

    def _convert(self, args: List[str]) -> str:
        count, from_start, in_bytes = "10", False, False
        quiet = verbose = follow = False
        files = []

        i = 0
        while i < len(args):
            arg = args[i]
            value = None
            if arg in ("-n", "--lines", "-c", "--bytes"):
                value = args[i + 1] if i + 1 < len(args) else "10"
                in_bytes = arg in ("-c", "--bytes")
                i += 1
            elif arg.startswith(("--lines=", "--bytes=")):
                value = arg.split("=", 1)[1]
                in_bytes = arg.startswith("--bytes=")
            elif len(arg) > 2 and arg[:2] in ("-n", "-c") and arg[2:].lstrip("+-").isdigit():
                value = arg[2:]
                in_bytes = arg[:2] == "-c"
            elif re.match(r"^-\d+$", arg):
                value = arg[1:]
            elif re.match(r"^\+\d+$", arg) and self.from_start_sign == "+":
                value = arg
            elif arg in ("-q", "--quiet", "--silent"):
                quiet = True
            elif arg in ("-v", "--verbose"):
                verbose = True
            elif arg in ("-f", "-F", "--follow"):
                follow = True
            elif arg.startswith("-") and arg != "-":
                pass
            else:
                files.append(arg)

            if value is not None:
                from_start = value.startswith(self.from_start_sign)
                count = value.lstrip("+-") or "0"
                if not count.isdigit():
                    return self.passthrough(args)
            i += 1

        # `head -n -N` drops from the end, `tail -n +N` starts from line N.
        operation = self._slice(count, from_start, in_bytes)
        reader = "open --raw {} | into binary" if in_bytes else "open {} | lines"

        def one(path: str) -> str:
            if path == "-":
                return f"into binary | {operation}" if in_bytes else operation
            return f"{reader.format(self.quote(path))} | {operation}"

        if not files:
            result = f"into binary | {operation}" if in_bytes else operation
        elif len(files) == 1:
            result = one(files[0])
            if verbose:
                result = f"print {string_literal(f'==> {unquote(files[0])} <==')}; {result}"
        else:
            parts = []
            for path in files:
                banner = "" if quiet else f"print {string_literal(f'==> {unquote(path)} <==')}; "
                parts.append(banner + one(path))
            result = "; ".join(parts)

        if follow:
            result += " # follow mode not supported"
        return result


class HeadConverter(LineSliceConverter):
    name = "head"
    description = "Converts head to first"
    from_start_sign = "-"

    def _slice(self, count: str, from_start: bool, in_bytes: bool) -> str:
        if from_start:
            return f"drop {count}"
        return f"first {count}"


class TailConverter(LineSliceConverter):
    name = "tail"
    description = "Converts tail to last, or skip for +N"
    from_start_sign = "+"

    def _slice(self, count: str, from_start: bool, in_bytes: bool) -> str:
        if from_start:
            return f"skip {max(int(count) - 1, 0)}"
        return f"last {count}"


class TeeConverter(UtilityConverter):
    name = "tee"
    description = "Converts tee to tee with save closures"

    def _convert(self, args: List[str]) -> str:
        if "--help" in args or "--version" in args:
            return self.passthrough(args)
        append = any(arg in ("-a", "--append") for arg in args)
        files = [arg for arg in args if not arg.startswith("-") or arg == "-"]
        save = "save --append" if append else "save --force"
        stages = [f"tee {{ {save} {self.quote(f)} }}" for f in files if f != "-"]
        return " | ".join(stages) if stages else "$in"


WC_OPERATIONS = {
    "lines": "lines | length",
    "words": "split words | length",
    "bytes": "into binary | length",
    "chars": "str length --grapheme-clusters",
    "max_line_length": "lines | each { |line| $line | str length } | math max",
}
WC_FLAGS = {
    "-l": "lines",
    "--lines": "lines",
    "-w": "words",
    "--words": "words",
    "-c": "bytes",
    "--bytes": "bytes",
    "-m": "chars",
    "--chars": "chars",
    "-L": "max_line_length",
    "--max-line-length": "max_line_length",
}


class WcConverter(UtilityConverter):
    name = "wc"
    description = "Converts wc to length computations"

    def _convert(self, args: List[str]) -> str:
        selected = []
        files = []
        for arg in args:
            for flag in self.split_cluster(arg):
                counter = WC_FLAGS.get(flag)
                if counter:
                    if counter not in selected:
                        selected.append(counter)
                elif not flag.startswith("-") or flag == "-":
                    files.append(flag)
        if not selected:
            selected = ["lines", "words", "bytes"]

        if len(selected) == 1:
            counts = WC_OPERATIONS[selected[0]]
        else:
            fields = ", ".join(f"{name}: ($in | {WC_OPERATIONS[name]})" for name in selected)
            counts = "{" + fields + "}"

        files = [f for f in files if f != "-"]
        if not files:
            return counts
        if len(files) == 1:
            return f"open --raw {self.quote(files[0])} | {counts}"
        if len(selected) == 1:
            counts = "{" + f"{selected[0]}: ($in | {counts})" + "}"
        return f"{self.file_list(files)} | each {{ |file| open --raw $file | {counts} | insert file $file }}"


class SortConverter(UtilityConverter):
    name = "sort"
    description = "Converts sort to sort and sort-by"

    def _convert(self, args: List[str]) -> str:
        reverse = numeric = unique = ignore_case = False
        key = separator = output = None
        files = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("-k", "--key", "-t", "--field-separator", "-o", "--output"):
                value = args[i + 1] if i + 1 < len(args) else ""
                i += 1
                if arg in ("-k", "--key"):
                    key = value
                elif arg in ("-t", "--field-separator"):
                    separator = unquote(value)
                else:
                    output = value
            elif len(arg) > 2 and arg[:2] in ("-k", "-t", "-o"):
                value = arg[2:]
                if arg[:2] == "-k":
                    key = value
                elif arg[:2] == "-t":
                    separator = unquote(value)
                else:
                    output = value
            elif arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    if flag in ("-r", "--reverse"):
                        reverse = True
                    elif flag in ("-n", "--numeric-sort", "-g", "--general-numeric-sort", "-h", "--human-numeric-sort"):
                        numeric = True
                    elif flag in ("-u", "--unique"):
                        unique = True
                    elif flag in ("-f", "--ignore-case"):
                        ignore_case = True
            else:
                files.append(arg)
            i += 1

        key_field = None
        if key is not None:
            match = re.match(r"^(\d+)", unquote(key))
            if not match:
                return self.passthrough(args)
            key_field = int(match.group(1))

        flags = (" --reverse" if reverse else "") + (" --ignore-case" if ignore_case else "")
        if key_field is not None and separator is not None:
            steps = f"lines | split column {string_literal(separator)} | sort-by{flags}{' --natural' if numeric else ''} column{key_field}"
        elif key_field is not None:
            steps = f"lines | each {{ |line| {{key: ($line | split words | get -i {key_field - 1} | default ''), line: $line}} }}"
            steps += f" | sort-by{flags}{' --natural' if numeric else ''} key | get line"
        elif numeric:
            steps = f"lines | where ($it | str trim | is-not-empty) | each {{ |line| $line | str trim | into float }} | sort{flags}"
        else:
            steps = f"lines | sort{flags}"
        if unique:
            steps += " | uniq"
        if output:
            steps += f" | save --force {self.quote(output)}"

        files = [f for f in files if f != "-"]
        if not files:
            return steps[len("lines | ") :] if steps.startswith("lines | ") else steps
        if len(files) == 1:
            return f"open {self.quote(files[0])} | {steps}"
        return f"{self.file_list(files)} | each {{ |file| open --raw $file }} | str join (char nl) | {steps}"


class UniqConverter(UtilityConverter):
    name = "uniq"
    description = "Converts uniq to the uniq command"

    def _convert(self, args: List[str]) -> str:
        count = repeated = unique = ignore_case = False
        notes = []
        files = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg in ("-f", "--skip-fields", "-s", "--skip-chars", "-w", "--check-chars"):
                value = args[i + 1] if i + 1 < len(args) else ""
                notes.append(f"{arg.lstrip('-')} {value} not supported")
                i += 1
            elif arg.startswith("-") and arg != "-":
                for flag in self.split_cluster(arg):
                    if flag in ("-c", "--count"):
                        count = True
                    elif flag in ("-d", "--repeated"):
                        repeated = True
                    elif flag in ("-u", "--unique"):
                        unique = True
                    elif flag in ("-i", "--ignore-case"):
                        ignore_case = True
            else:
                files.append(arg)
            i += 1

        flags = ""
        if count:
            flags += " --count"
        if repeated:
            flags += " --repeated"
        elif unique:
            flags += " --unique"
        if ignore_case:
            flags += " --ignore-case"

        result = f"uniq{flags}"
        if files and files[0] != "-":
            result = f"open {self.quote(files[0])} | lines | {result}"
        if len(files) > 1:
            result += f" | save --force {self.quote(files[1])}"
        if notes:
            result += " # " + ", ".join(notes)
        return result
