import pytest

from nuposix.config.config import PARSER_CONFIG
from nuposix.parser.core.classes import *
from nuposix.parser.core.options import ParserOptions
from nuposix.parser.core.parser import parse_posix

from ..utils.assertion_helper import assert_asts_equal
from ..utils.factory_helpers import *


def test_defaults_follow_parser_config():
    options = ParserOptions()
    for key, value in PARSER_CONFIG.items():
        assert getattr(options, key) == value


def test_options_are_frozen():
    options = ParserOptions()
    with pytest.raises(Exception):
        options.detect_negation = True


# --- Negation ---


def test_negated_single_command():
    script = parse_posix("! grep -q x file", ParserOptions(detect_negation=True))
    expected = get_pipeline([get_simple("grep", ["-q", "x", "file"])], negated=True)
    assert_asts_equal(script.commands[0], expected)


def test_negated_pipeline():
    script = parse_posix("! a | b", ParserOptions(detect_negation=True))
    assert_asts_equal(script.commands[0], get_pipeline([get_simple("a"), get_simple("b")], negated=True))


def test_bang_inside_word_is_not_negation():
    script = parse_posix("echo !x", ParserOptions(detect_negation=True))
    assert_asts_equal(script.commands[0], get_simple("echo", ["!x"]))


# --- Compound line joining ---


def test_joined_for_loop():
    code = "for i in 1 2\ndo\n  echo $i\ndone"
    script = parse_posix(code, ParserOptions(join_compound_lines=True))
    assert len(script.commands) == 1
    assert_asts_equal(script.commands[0], get_for("i", ["1", "2"], [get_simple("echo", ["$i"])]))


def test_joined_if_else():
    code = "if [ -d build ]\nthen\n  echo exists\nelse\n  mkdir build\nfi\necho done"
    script = parse_posix(code, ParserOptions(join_compound_lines=True))
    assert len(script.commands) == 2
    expected = get_if(
        condition=[get_simple("[", ["-d", "build", "]"])],
        then_body=[get_simple("echo", ["exists"])],
        else_body=[get_simple("mkdir", ["build"])],
    )
    assert_asts_equal(script.commands[0], expected)
    assert_asts_equal(script.commands[1], get_simple("echo", ["done"]))


def test_joined_nested_loops():
    code = "for a in x y; do\n  while true; do\n    echo $a\n  done\ndone"
    script = parse_posix(code, ParserOptions(join_compound_lines=True))
    assert len(script.commands) == 1
    inner = get_while([get_simple("true")], [get_simple("echo", ["$a"])])
    assert_asts_equal(script.commands[0], get_for("a", ["x", "y"], [inner]))


def test_joined_case():
    code = "case $1 in\n  start) run;;\n  *) usage;;\nesac"
    script = parse_posix(code, ParserOptions(join_compound_lines=True))
    assert len(script.commands) == 1
    expected = get_case("$1", [get_case_item(["start"], [get_simple("run")]), get_case_item(["*"], [get_simple("usage")])])
    assert_asts_equal(script.commands[0], expected)


def test_joined_function_body():
    code = "greet() {\n  echo hello\n  echo bye\n}"
    script = parse_posix(code, ParserOptions(join_compound_lines=True))
    assert len(script.commands) == 1
    assert_asts_equal(script.commands[0], get_function("greet", [get_simple("echo", ["hello"]), get_simple("echo", ["bye"])]))


# --- Redirections ---


@pytest.mark.parametrize(
    "code, expected",
    [
        pytest.param("echo hi > out.txt", get_simple("echo", ["hi"], redirections=[get_redirection(">", "out.txt")]), id="output"),
        pytest.param("echo hi >>log", get_simple("echo", ["hi"], redirections=[get_redirection(">>", "log")]), id="append_attached"),
        pytest.param("sort < in.txt", get_simple("sort", redirections=[get_redirection("<", "in.txt")]), id="input"),
        pytest.param("make 2> err.log", get_simple("make", redirections=[get_redirection(">", "err.log", fd=2)]), id="stderr"),
        pytest.param("make 2>&1", get_simple("make", redirections=[get_redirection(">&", "1", fd=2)]), id="dup"),
        pytest.param("cat <<< word", get_simple("cat", redirections=[get_redirection("<<<", "word")]), id="here_string"),
    ],
)
def test_extracted_redirections(code, expected):
    script = parse_posix(code, ParserOptions(extract_redirections=True))
    assert_asts_equal(script.commands[0], expected)


def test_quoted_redirection_operator_is_an_argument():
    script = parse_posix("echo '>' x", ParserOptions(extract_redirections=True))
    assert_asts_equal(script.commands[0], get_simple("echo", ["'>'", "x"]))
