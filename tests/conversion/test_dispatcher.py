import pytest

from nuposix.builtins import BUILTIN_REGISTRY
from nuposix.conversion.base import CommandConverter, ConverterRegistry
from nuposix.conversion.dispatcher import LEGACY_INLINE_CONVERTERS, ScriptConverter
from nuposix.exceptions import InternalConverterError
from nuposix.parser.core.options import ParserOptions
from nuposix.parser.core.parser import parse_posix

from ..utils.factory_helpers import *


@pytest.fixture(scope="module")
def converter():
    return ScriptConverter()


def convert_text(converter, text, options=None):
    return converter.convert(parse_posix(text, options))


# --- Worked examples ---


def test_simple_command(converter):
    assert convert_text(converter, "echo hello world") == "print hello world"


def test_pipeline_filter(converter):
    assert convert_text(converter, "ls | grep test") == "ls | where $it =~ test"


def test_and_or(converter):
    assert convert_text(converter, "true && echo success") == "(true) and (print success)"


def test_or(converter):
    assert convert_text(converter, "false || exit 3") == "(false) or (exit 3)"


def test_chained_conjunction(converter):
    assert convert_text(converter, "a && b && c") == "(a) and ((b) and (c))"


def test_assignment_prefix(converter):
    assert convert_text(converter, "VAR=value echo $VAR") == '$env.VAR = "value"; print "$VAR"'


def test_assignment_only(converter):
    assert convert_text(converter, "A=1 B='two words'") == "$env.A = \"1\"; $env.B = 'two words'"


def test_commands_join_with_newlines(converter):
    assert convert_text(converter, "cd /tmp\n# skip\npwd") == "cd /tmp\npwd"


def test_empty_script(converter):
    assert converter.convert(get_script([])) == ""


def test_empty_simple_command(converter):
    assert converter.convert_command(get_simple()) == ""


# --- Resolution order ---


def test_builtin_wins_over_utility():
    class UtilityTest(CommandConverter):
        name = "test"

        def _convert(self, args):
            return "utility"

    utilities = ConverterRegistry([UtilityTest()])
    converter = ScriptConverter(builtins=BUILTIN_REGISTRY, utilities=utilities)
    assert converter.resolve("test", ["-n", "x"]) == '("x" | is-not-empty)'


def test_utility_wins_over_legacy(converter):
    assert converter.resolve("whoami", []) == "$env.USER? | default (^whoami)"
    assert converter.resolve("awk", ["{print $1}"]) == '^awk "{print $1}"'


def test_legacy_table_covers_missing_utilities():
    converter = ScriptConverter(utilities=ConverterRegistry())
    assert converter.resolve("awk", ["'{print $1}'"]) == "each { |row| print $row }"
    assert converter.resolve("awk", ["-F:", "'{print $1}'"]) == "awk -F: '{print $1}'"
    assert converter.resolve("which", ["git"]) == "which git"
    assert converter.resolve("whoami", []) == "whoami"
    assert converter.resolve("ps", ["aux"]) == "ps"


def test_legacy_table_can_be_replaced():
    converter = ScriptConverter(utilities=ConverterRegistry(), legacy={})
    assert converter.legacy == {}
    assert converter.resolve("whoami", []) == "whoami"
    assert set(LEGACY_INLINE_CONVERTERS) == {"awk", "which", "whoami", "ps"}


def test_unknown_command_passes_through(converter):
    assert convert_text(converter, "frobnicate --x 'a b' $y") == "frobnicate --x 'a b' \"$y\""


@pytest.mark.parametrize(
    "args",
    [
        pytest.param([], id="no_args"),
        pytest.param(["-f", "file"], id="unary"),
        pytest.param(["a", "=", "b"], id="binary"),
        pytest.param(["!", "-d", "dir"], id="negated"),
        pytest.param(["-n", "$x", "-a", "-z", "$y"], id="combined"),
    ],
)
def test_bracket_alias_matches_test(converter, args):
    assert converter.resolve("[", args + ["]"]) == converter.resolve("test", args)


# --- Lists ---


def test_sequential_list(converter):
    assert convert_text(converter, "cd /tmp; ls") == "cd /tmp; ls"


def test_background_list(converter):
    assert convert_text(converter, "sleep 10 &") == "sleep 10 &"


def test_negated_pipeline(converter):
    assert convert_text(converter, "! a | b", ParserOptions(detect_negation=True)) == "not (a | b)"


# --- Compound commands ---


def test_for_loop(converter):
    expected = '[1, 2, 3] | each { |i|\n  print "$i"\n}'
    assert convert_text(converter, "for i in 1 2 3; do echo $i; done") == expected


def test_for_loop_over_variable(converter):
    expected = '[$files] | each { |f|\n  rm "$f"\n}'
    assert convert_text(converter, "for f in $files; do rm $f; done") == expected


def test_for_loop_without_words(converter):
    assert convert_text(converter, "for a; do echo $a; done") == '$in | each { |a|\n  print "$a"\n}'


def test_while_loop(converter):
    assert convert_text(converter, "while true; do echo x; done") == "while true {\n  print x\n}"


def test_until_loop(converter):
    assert convert_text(converter, "until false; do echo x; done") == "while not (false) {\n  print x\n}"


def test_if_else(converter):
    expected = 'if (("file" | path type) == "file") {\n  print yes\n} else {\n  print no\n}'
    assert convert_text(converter, "if [ -f file ]; then echo yes; else echo no; fi") == expected


def test_if_elif(converter):
    expected = "if a {\n  b\n} else if c {\n  d\n} else {\n}"
    assert convert_text(converter, "if a; then b; elif c; then d; fi") == expected


def test_case(converter):
    expected = 'match $x {\n  "a" | "b" => {\n    print ab\n  }\n  _ => {\n    print other\n  }\n}'
    assert convert_text(converter, "case $x in a|b) echo ab;; *) echo other;; esac") == expected


def test_function(converter):
    assert convert_text(converter, "greet() { echo hi; }") == "def greet [] {\n  print hi\n}"


def test_brace_group(converter):
    assert convert_text(converter, "{ echo a; echo b; }") == "{\n  print a\n  print b\n}"


def test_subshell(converter):
    assert convert_text(converter, "(cd /tmp; ls)") == "(cd /tmp; ls)"


def test_arithmetic(converter):
    assert convert_text(converter, "$((1 + 2))") == 'math eval "1 + 2"'


def test_nested_compound_indentation(converter):
    expected = 'if true {\n  [a] | each { |i|\n    print "$i"\n  }\n}'
    assert convert_text(converter, "if true; then for i in a; do echo $i; done; fi") == expected


# --- Redirections ---


@pytest.mark.parametrize(
    "code, expected",
    [
        pytest.param("echo hi > out.txt", "print hi out> out.txt", id="output"),
        pytest.param("echo hi >> log", "print hi out>> log", id="append"),
        pytest.param("sort < in.txt", "sort < in.txt", id="input"),
        pytest.param("cat <> data", "$in <> data", id="read_write"),
        pytest.param("make 2> err.log", "make err> err.log", id="stderr"),
        pytest.param("make >&out.log", "make out> out.log", id="dup_to_file"),
        pytest.param("make 2>&1", "make # unsupported: 2>&1", id="dup_to_descriptor"),
        pytest.param("cat <<< word", "echo word | $in", id="here_string"),
    ],
)
def test_redirections(converter, code, expected):
    assert convert_text(converter, code, ParserOptions(extract_redirections=True)) == expected


def test_compound_redirections_are_appended(converter):
    command = get_compound(BraceGroup(body=[get_simple("echo", ["a"])]), redirections=[get_redirection(">", "out")])
    assert converter.convert_command(command) == "{\n  print a\n} out> out"


def test_input_redirections_keep_their_operators(converter):
    command = get_simple("sort", redirections=[get_redirection("<", "in.txt"), get_redirection(">", "out.txt")])
    assert converter.convert_command(command) == "sort < in.txt out> out.txt"


def test_unknown_node_is_an_internal_error(converter):
    with pytest.raises(InternalConverterError):
        converter.convert_command(object())
