import random
import string

import pytest

from nuposix.builtins import BUILTIN_REGISTRY
from nuposix.conversion.dispatcher import ScriptConverter
from nuposix.parser.core.options import ParserOptions
from nuposix.parser.core.parser import parse_posix
from nuposix.utilities import UTILITY_REGISTRY

ALL_NAMES = [(BUILTIN_REGISTRY, name) for name in BUILTIN_REGISTRY.all_names()] + [
    (UTILITY_REGISTRY, name) for name in UTILITY_REGISTRY.all_names()
]

ARGUMENT_VECTORS = [
    pytest.param([], id="empty"),
    pytest.param([" ", "\t", ""], id="whitespace"),
    pytest.param(["x"] * 200, id="long"),
    pytest.param(["-"], id="dash"),
    pytest.param(["--"], id="double_dash"),
    pytest.param(["-n"], id="dangling_option"),
    pytest.param(["-e", "-f", "-d", "-k", "-o", "-s", "-t"], id="options_without_values"),
    pytest.param(["'", '"', "\\", "$", "`"], id="quote_characters"),
    pytest.param(["{", "}", "(", ")", "[", "]", "|", ";", "&"], id="punctuation"),
    pytest.param(["*", "?", "**/*", "%%", "%1"], id="globs_and_specs"),
    pytest.param(["-999999999999", "+0", "0", "1~2"], id="numbers"),
    pytest.param(["s/a", "/x/{", "y/ab/c/", "1,$!"], id="broken_scripts"),
    pytest.param(["ünïcödé", "日本語", "\x00"], id="unicode"),
]


@pytest.mark.parametrize("registry, name", [pytest.param(r, n, id=n) for r, n in ALL_NAMES])
@pytest.mark.parametrize("args", ARGUMENT_VECTORS)
def test_every_converter_is_total(registry, name, args):
    result = registry.convert(name, args)
    assert isinstance(result, str)
    assert result
    assert result == result.strip()


@pytest.mark.parametrize("registry, name", [pytest.param(r, n, id=n) for r, n in ALL_NAMES])
def test_conversion_is_deterministic(registry, name):
    args = ["-a", "b c", "$d"]
    assert registry.convert(name, args) == registry.convert(name, args)


ALPHABET = string.ascii_letters + string.digits + " \t\n'\"\\$|&;(){}[]<>!*?#=-~"


@pytest.mark.parametrize(
    "options",
    [
        pytest.param(ParserOptions(), id="defaults"),
        pytest.param(
            ParserOptions(strict_grammar=True, detect_negation=True, join_compound_lines=True, extract_redirections=True),
            id="all_enhancements",
        ),
    ],
)
def test_random_input_always_translates(options):
    rng = random.Random(1729)
    converter = ScriptConverter()
    for _ in range(300):
        text = "".join(rng.choice(ALPHABET) for _ in range(rng.randint(0, 60)))
        script = parse_posix(text, options)
        assert isinstance(converter.convert(script), str)


@pytest.mark.parametrize(
    "text",
    [
        "if", "for", "case", "while", "do done", "fi", "esac", "{", "}", "(", ")", "$((", "((",
        "for x in; do; done", "case in esac", "if then fi", "f() {", "function {", "&&", "||", "|", ";", "&",
        "a && ", "| b", "if a; then b; else", "case $x in a) ;; esac", "'unterminated", '"open',
    ],
)
def test_malformed_fragments_degrade_gracefully(text):
    script = parse_posix(text)
    assert isinstance(ScriptConverter().convert(script), str)
