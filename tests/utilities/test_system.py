import pytest

from nuposix.utilities import UTILITY_REGISTRY


def convert(name, args):
    return UTILITY_REGISTRY.convert(name, args)


@pytest.mark.parametrize(
    "args, expected",
    [
        pytest.param([], "date now", id="now"),
        pytest.param(["+%Y-%m-%d"], 'date now | format date "%Y-%m-%d"', id="format"),
        pytest.param(["-u"], "date now | date to-timezone UTC", id="utc"),
        pytest.param(["-d", "yesterday"], "(date now) - 1day", id="yesterday"),
        pytest.param(["-d", "'3 days ago'"], "(date now) - 3day", id="relative"),
        pytest.param(["-d", "@1700000000"], "1700000000 * 1_000_000_000 | into datetime", id="epoch"),
        pytest.param(["-d", "2024-01-01"], '"2024-01-01" | into datetime', id="date_string"),
        pytest.param(["-r", "file"], "ls file | get 0.modified", id="reference"),
        pytest.param(["-I"], 'date now | format date "%Y-%m-%d"', id="iso_date"),
        pytest.param(["-Iseconds"], 'date now | format date "%Y-%m-%dT%H:%M:%S%:z"', id="iso_seconds"),
        pytest.param(["-R"], 'date now | format date "%a, %d %b %Y %H:%M:%S %z"', id="rfc_2822"),
        pytest.param(["--rfc-3339", "seconds"], 'date now | format date "%Y-%m-%d %H:%M:%S%:z"', id="rfc_3339"),
        pytest.param(["-s", "x"], "date -s x # passthrough: not translated; setting the system clock is not supported", id="set_clock"),
        pytest.param(["-Ifoo"], "date -Ifoo # passthrough: not translated", id="bad_precision"),
        pytest.param(["whatever"], "date whatever # passthrough: not translated", id="unknown_operand"),
    ],
)
def test_date(args, expected):
    assert convert("date", args) == expected


@pytest.mark.parametrize(
    "args, expected",
    [
        pytest.param(["5"], "1..5", id="last"),
        pytest.param(["2", "8"], "2..8", id="first_last"),
        pytest.param(["1", "2", "9"], "1..3..9", id="step"),
        pytest.param(["5", "-1", "1"], "5..4..1", id="descending"),
        pytest.param(["5", "1"], "[]", id="empty"),
        pytest.param(["-s", ",", "3"], '1..3 | str join ","', id="separator"),
        pytest.param(["-w", "8", "10"], "8..10 | each { |n| $n | fill --alignment right --character '0' --width 2 }", id="equal_width"),
        pytest.param(["-f", "'n=%g'", "3"], '1..3 | each { |n| $"n=($n)" }', id="format"),
        pytest.param(["-f", "%g-%g", "3"], "1..3 # format %g-%g not supported", id="unsupported_format"),
        pytest.param(["1", "0", "5"], "seq 1 0 5 # passthrough: not translated", id="zero_step"),
        pytest.param(["1.5"], "seq 1.5 # passthrough: not translated", id="fractional"),
    ],
)
def test_seq(args, expected):
    assert convert("seq", args) == expected


@pytest.mark.parametrize(
    "name, args, expected",
    [
        pytest.param("which", ["git"], "which git", id="which"),
        pytest.param("which", ["-a", "python"], "which --all python", id="which_all"),
        pytest.param("which", ["-s", "x"], "which x | is-not-empty", id="which_silent"),
        pytest.param("which", [], "which # passthrough: not translated", id="which_nothing"),
        pytest.param("whoami", [], "$env.USER? | default (^whoami)", id="whoami"),
        pytest.param("whoami", ["--help"], "whoami --help # passthrough: not translated", id="whoami_option"),
        pytest.param("awk", ["-F:", "'{print $1}'", "f"], "^awk -F: '{print $1}' f", id="awk_external"),
    ],
)
def test_lookups(name, args, expected):
    assert convert(name, args) == expected


@pytest.mark.parametrize(
    "args, expected",
    [
        pytest.param([], "ps", id="plain"),
        pytest.param(["aux"], "ps --long # Note: user format not fully supported", id="bsd_cluster"),
        pytest.param(["-ef"], "ps --long # Note: full format not fully supported", id="full_format"),
        pytest.param(["-p", "123"], "ps | where pid == 123", id="pid"),
        pytest.param(["-p", "1,2"], "ps | where pid in [1 2]", id="pid_list"),
        pytest.param(["-u", "root"], 'ps --long | where user == "root"', id="user"),
        pytest.param(["-C", "nginx"], 'ps | where name == "nginx"', id="command_name"),
        pytest.param(["-o", "pid,comm"], "ps | select pid name", id="fields"),
        pytest.param(["-o", "pid,cmd"], "ps --long | select pid command", id="long_fields"),
        pytest.param(["-o", "pid,foo"], "ps | select pid # Note: custom fields: foo not fully supported", id="unknown_field"),
        pytest.param(["-H"], "ps # Note: tree format not fully supported", id="tree"),
        pytest.param(["42"], "ps | where pid == 42", id="bare_pid"),
    ],
)
def test_ps(args, expected):
    assert convert("ps", args) == expected


# --- Path names ---


@pytest.mark.parametrize(
    "name, args, expected",
    [
        pytest.param("basename", ["/a/b.txt"], "/a/b.txt | path basename", id="basename"),
        pytest.param(
            "basename",
            ["/a/b.txt", ".txt"],
            r"/a/b.txt | path basename | str replace --regex '\.txt$' ''",
            id="basename_suffix",
        ),
        pytest.param(
            "basename",
            ["-a", "x/y", "z/w"],
            "[x/y z/w] | each { |path| $path | path basename } | str join (char nl)",
            id="basename_multiple",
        ),
        pytest.param(
            "basename",
            ["-s", ".c", "a.c", "b.c"],
            r"[a.c b.c] | each { |path| $path | path basename | str replace --regex '\.c$' '' } | str join (char nl)",
            id="basename_suffix_option",
        ),
        pytest.param("basename", ["a", "b", "c"], "basename a b c # passthrough: not translated", id="basename_too_many"),
        pytest.param("basename", [], "basename # passthrough: not translated", id="basename_nothing"),
        pytest.param("dirname", ["/a/b"], "/a/b | path dirname", id="dirname"),
        pytest.param(
            "dirname",
            ["a/b", "c/d"],
            "[a/b c/d] | each { |path| $path | path dirname } | str join (char nl)",
            id="dirname_multiple",
        ),
        pytest.param(
            "dirname",
            ["-z", "a/b"],
            "[a/b] | each { |path| $path | path dirname } | str join (char nul)",
            id="dirname_zero",
        ),
        pytest.param("realpath", [], "pwd | path expand", id="realpath_cwd"),
        pytest.param("realpath", ["f"], "f | path expand", id="realpath"),
        pytest.param(
            "realpath",
            ["--relative-to", "/tmp", "f"],
            "f | path expand | path relative-to (/tmp | path expand)",
            id="realpath_relative",
        ),
        pytest.param(
            "realpath",
            ["a", "b"],
            "[a b] | each { |path| $path | path expand } | str join (char nl)",
            id="realpath_multiple",
        ),
    ],
)
def test_paths(name, args, expected):
    assert convert(name, args) == expected
