from typing import List

from ..conversion.base import CommandConverter
from ..conversion.quoting import string_literal

# Options of `read` that consume a value, either attached (`-p'> '`) or as the next word.
VALUE_OPTIONS = {"p", "t", "d", "n", "N", "u", "a"}


class ReadConverter(CommandConverter):
    """
    Converts `read` to Nushell's `input`.

    The line is read once and bound to environment variables: a single
    variable takes the whole line, several variables take successive words
    with empty defaults. Timeouts and delimiters have no `input` equivalent and
    are reported in a trailing comment.
    """

    name = "read"
    description = "Converts read to Nushell input with environment variable binding"

    def _convert(self, args: List[str]) -> str:
        silent = False
        prompt = None
        notes = []
        variables = []

        i = 0
        while i < len(args):
            arg = args[i]
            if arg == "--":
                variables.extend(args[i + 1 :])
                break
            if not arg.startswith("-") or arg == "-":
                variables.append(arg)
                i += 1
                continue

            cluster = arg[1:]
            j = 0
            while j < len(cluster):
                flag = cluster[j]
                if flag in VALUE_OPTIONS:
                    value = cluster[j + 1 :]
                    if not value and i + 1 < len(args):
                        i += 1
                        value = args[i]
                    if flag == "p":
                        prompt = value
                    elif flag == "t":
                        notes.append(f"timeout: {value}s")
                    elif flag == "d":
                        notes.append(f"delimiter: {self.quote(value) if value else '(empty)'}")
                    elif flag == "a":
                        variables.append(value)
                    break
                if flag == "s":
                    silent = True
                # -r (raw) and -e (readline) need no translation
                j += 1
            i += 1

        result = "input -s" if silent else "input"
        if prompt is not None:
            result = f"print {string_literal(prompt)}; {result}"

        variables = [v for v in variables if v]
        if len(variables) == 1:
            result += f" | $env.{variables[0]} = $in"
        elif variables:
            bindings = "; ".join(f'$env.{var} = ($in | get {index} | default "")' for index, var in enumerate(variables))
            result += f" | split words | {bindings}"

        if notes:
            result += " # " + ", ".join(notes)
        return result
