import pytest

from nuposix.conversion.quoting import escape_regex, format_args, needs_quoting, quote_arg, regex_literal, string_literal


@pytest.mark.parametrize(
    "arg",
    [
        pytest.param("hello", id="word"),
        pytest.param("/usr/local/bin", id="path"),
        pytest.param("-la", id="flag"),
        pytest.param("a=b", id="assignment_like"),
        pytest.param("*.txt", id="glob_without_glob_quoting"),
    ],
)
def test_plain_arguments_are_unchanged(arg):
    assert quote_arg(arg) == arg


@pytest.mark.parametrize(
    "arg, expected",
    [
        pytest.param("hello world", '"hello world"', id="space"),
        pytest.param("$HOME", '"$HOME"', id="dollar"),
        pytest.param("it's", '"it\'s"', id="single_quote"),
        pytest.param('say "hi"', '"say \\"hi\\""', id="double_quotes_escaped"),
    ],
)
def test_arguments_needing_quotes(arg, expected):
    assert quote_arg(arg) == expected


@pytest.mark.parametrize("arg", ["*.txt", "file?.log"])
def test_glob_characters_quote_only_with_glob_quoting(arg):
    assert quote_arg(arg) == arg
    assert quote_arg(arg, glob=True) == f'"{arg}"'


@pytest.mark.parametrize(
    "literal",
    [
        pytest.param('"hello world"', id="double"),
        pytest.param("'hello world'", id="single"),
        pytest.param('"a \\"b\\" c"', id="escaped_inner"),
    ],
)
def test_quoted_literal_is_not_quoted_twice(literal):
    assert quote_arg(literal) == literal
    assert quote_arg(quote_arg(literal)) == literal


def test_requoting_is_idempotent():
    once = quote_arg("two words")
    assert quote_arg(once) == once


def test_empty_argument():
    assert quote_arg("") == '""'


def test_needs_quoting():
    assert needs_quoting("a b")
    assert not needs_quoting("a*b")
    assert needs_quoting("a*b", glob=True)


def test_format_args():
    assert format_args(["-n", "hello world", "x"]) == '-n "hello world" x'
    assert format_args([]) == ""


def test_string_literal_always_quotes():
    assert string_literal("abc") == '"abc"'
    assert string_literal("a\\b") == '"a\\\\b"'
    assert string_literal("'kept'") == "'kept'"


def test_regex_literal():
    assert regex_literal("^a\\d+$") == "'^a\\d+$'"
    assert regex_literal("it's") == '"it\'s"'


def test_escape_regex_leaves_spaces_alone():
    assert escape_regex("a.b c*") == "a\\.b c\\*"
