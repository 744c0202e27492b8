import argparse
import json
import logging
import sys

from .exceptions import ErrorCode, NuPosixError
from .formatter import roundtrip_reverse
from .parser.core.options import ParserOptions
from .translator import parse_to_data, translate
from .utils import AstArtifactEncoder, TerminalColors

COMMANDS = {
    "from-posix": "Convert POSIX shell text to Nushell.",
    "to-posix": "Convert Nushell text back to POSIX shell (experimental, best-effort).",
    "parse-posix": "Parse POSIX shell text and print its syntax tree as JSON.",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nuposix", description="Translate POSIX shell scripts to Nushell.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output from every stage.")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    for name, help_text in COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text, description=help_text)
        sub.add_argument("text", nargs="?", default=None, help="Input text. Omit to use --file or stdin.")
        sub.add_argument("-f", "--file", default=None, help="Read the input from this file.")
        if name == "from-posix":
            sub.add_argument("-p", "--pretty", action="store_true", help="Re-indent the generated Nushell.")
        if name != "to-posix":
            sub.add_argument("--strict-grammar", action="store_true", help="Try the strict grammar before the heuristic parser.")
            sub.add_argument("--detect-negation", action="store_true", help="Treat a leading '!' as a negated pipeline.")
            sub.add_argument("--join-lines", action="store_true", help="Join multi-line compound commands before parsing.")
            sub.add_argument("--redirections", action="store_true", help="Extract redirection operators from commands.")
    return parser


def read_input(args) -> str:
    """Input precedence: positional text, then --file, then piped stdin."""
    if args.text is not None:
        return args.text
    if args.file is not None:
        try:
            with open(args.file, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise NuPosixError(ErrorCode.FILE_READ_FAILED, path=args.file, reason=e.strerror or str(e))
    if sys.stdin.isatty():
        raise NuPosixError(ErrorCode.NO_INPUT_PROVIDED)
    content = sys.stdin.read()
    if not content:
        raise NuPosixError(ErrorCode.NO_INPUT_PROVIDED)
    return content


def parser_options(args) -> ParserOptions:
    return ParserOptions(
        strict_grammar=args.strict_grammar,
        detect_negation=args.detect_negation,
        join_compound_lines=args.join_lines,
        extract_redirections=args.redirections,
    )


def run(args) -> str:
    if args.command not in COMMANDS:
        raise NuPosixError(ErrorCode.UNKNOWN_COMMAND, name=args.command, choices=", ".join(COMMANDS))
    text = read_input(args)
    if args.command == "from-posix":
        return translate(text, pretty=args.pretty, options=parser_options(args))
    if args.command == "to-posix":
        return roundtrip_reverse(text)
    return json.dumps(parse_to_data(text, parser_options(args)), indent=2, cls=AstArtifactEncoder)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        output = run(args)
    except NuPosixError as e:
        print(f"{TerminalColors.RED}ERROR: {e}{TerminalColors.RESET}", file=sys.stderr)
        sys.exit(1)

    sys.stdout.write(output if output.endswith("\n") else output + "\n")


if __name__ == "__main__":
    main()
