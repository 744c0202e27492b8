import pytest

from nuposix.utilities import UTILITY_REGISTRY
from nuposix.utilities.filesystem import glob_to_regex


def convert(name, args):
    return UTILITY_REGISTRY.convert(name, args)


@pytest.mark.parametrize(
    "args, expected",
    [
        pytest.param([], "ls", id="plain"),
        pytest.param(["-la"], "ls --long --all", id="cluster"),
        pytest.param(["-l", "dir"], "ls --long dir", id="path"),
        pytest.param(["-t"], "ls | sort-by modified --reverse", id="newest_first"),
        pytest.param(["-tr"], "ls | sort-by modified", id="oldest_first"),
        pytest.param(["-S", "-l"], "ls --long | sort-by size --reverse", id="largest_first"),
        pytest.param(["-r"], "ls | reverse", id="reverse"),
        pytest.param(["-R"], "ls **/*", id="recursive"),
        pytest.param(["-R", "src/"], "ls src/**/*", id="recursive_path"),
        pytest.param(["-R", "my dir"], "ls (\"my dir\" | path join '**/*' | into glob)", id="recursive_quoted_path"),
        pytest.param(["-1h", "--color=auto"], "ls", id="display_flags"),
        pytest.param(["-Z"], "ls # unknown flag -Z", id="unknown_flag"),
    ],
)
def test_ls(args, expected):
    assert convert("ls", args) == expected


@pytest.mark.parametrize(
    "pattern, expected",
    [
        pytest.param("*.py", r"^.*\.py$", id="star"),
        pytest.param("file?.[ch]", r"^file.\.[ch]$", id="question_and_class"),
        pytest.param("[!a]*", r"^[^a].*$", id="negated_class"),
        pytest.param(r"a\*b", r"^a\*b$", id="escaped"),
    ],
)
def test_glob_to_regex(pattern, expected):
    assert glob_to_regex(pattern) == expected


@pytest.mark.parametrize(
    "args, expected",
    [
        pytest.param([], "ls **/* | get name", id="no_args"),
        pytest.param(
            [".", "-name", "*.py"],
            r"ls **/* | where ($it.name | path basename) =~ '^.*\.py$' | get name",
            id="name",
        ),
        pytest.param(
            [".", "-iname", "*.md"],
            r"ls **/* | where ($it.name | path basename) =~ '(?i)^.*\.md$' | get name",
            id="iname",
        ),
        pytest.param(["src", "-type", "f"], 'ls src/**/* | where $it.type == "file" | get name', id="type"),
        pytest.param(
            [".", "-type", "f,d"],
            'ls **/* | where ($it.type == "file" or $it.type == "dir") | get name',
            id="type_list",
        ),
        pytest.param([".", "-size", "+1M"], "ls **/* | where $it.size > 1mib | get name", id="size_larger"),
        pytest.param([".", "-size", "10"], "ls **/* | where $it.size == 5120b | get name", id="size_blocks"),
        pytest.param([".", "-mtime", "-7"], "ls **/* | where $it.modified > ((date now) - 7day) | get name", id="mtime_recent"),
        pytest.param([".", "-mtime", "+7"], "ls **/* | where $it.modified < ((date now) - 8day) | get name", id="mtime_old"),
        pytest.param([".", "-mmin", "+5"], "ls **/* | where $it.modified < ((date now) - 5min) | get name", id="mmin"),
        pytest.param(
            [".", "-atime", "1"],
            "ls --long **/* | where $it.accessed <= ((date now) - 1day) and $it.accessed > ((date now) - 2day) | get name",
            id="atime_exact",
        ),
        pytest.param(
            [".", "-name", "*.c", "-o", "-name", "*.h"],
            r"ls **/* | where (($it.name | path basename) =~ '^.*\.c$') or (($it.name | path basename) =~ '^.*\.h$') | get name",
            id="alternatives",
        ),
        pytest.param(
            [".", "!", "-name", "*.o"],
            r"ls **/* | where not (($it.name | path basename) =~ '^.*\.o$') | get name",
            id="negation",
        ),
        pytest.param(
            [".", "-name", "*.tmp", "-delete"],
            r"ls **/* | where ($it.name | path basename) =~ '^.*\.tmp$' | each { |file| rm $file.name }",
            id="delete",
        ),
        pytest.param(
            [".", "-type", "f", "-exec", "chmod", "644", "{}", ";"],
            'ls **/* | where $it.type == "file" | each { |file| chmod 644 $file.name }',
            id="exec",
        ),
        pytest.param(
            [".", "-exec", "wc", "-l", "\\;"],
            "ls **/* | each { |file| wc -l $file.name }",
            id="exec_without_placeholder",
        ),
        pytest.param([".", "-maxdepth", "1"], "ls * | get name", id="maxdepth_one"),
        pytest.param([".", "-maxdepth", "0"], "ls --directory . | get name", id="maxdepth_zero"),
        pytest.param(
            [".", "-maxdepth", "3", "-empty"],
            "ls **/* | where $it.size == 0b | get name # max depth 3 not enforced",
            id="maxdepth_note",
        ),
        pytest.param([".", "-print0"], "ls **/* | get name | str join (char nul)", id="print0"),
        pytest.param([".", "-perm", "644"], "ls **/* | get name # permission filter 644 not supported", id="perm_note"),
        pytest.param(
            ["a", "b", "-type", "d"],
            "[a b] | each { |dir| ls ($dir | path join '**/*' | into glob) } | flatten | where $it.type == \"dir\" | get name",
            id="several_paths",
        ),
        pytest.param([".", "-fancy"], "find . -fancy # passthrough: not translated", id="unknown_predicate"),
        pytest.param([".", "-type", "q"], "find . -type q # passthrough: not translated", id="unknown_type"),
    ],
)
def test_find(args, expected):
    assert convert("find", args) == expected


@pytest.mark.parametrize(
    "args, expected",
    [
        pytest.param(["f"], "ls --long --directory f | first", id="one_file"),
        pytest.param(["a", "b"], "ls --long --directory a b", id="two_files"),
        pytest.param(["-c", "%s", "f"], "ls --long --directory f | first | get size", id="one_field"),
        pytest.param(["-c", "'%n %s'", "f"], "ls --long --directory f | first | select name size", id="two_fields"),
        pytest.param(["-c", "%Q", "f"], "ls --long --directory f | first # format %Q not supported", id="unknown_field"),
        pytest.param(["-t", "f"], "ls --long --directory f | first | select name size mode modified", id="terse"),
        pytest.param([], "stat # passthrough: not translated", id="no_file"),
    ],
)
def test_stat(args, expected):
    assert convert("stat", args) == expected


@pytest.mark.parametrize(
    "name, args, expected",
    [
        pytest.param("chmod", ["755", "f"], "^chmod 755 f", id="chmod_mode"),
        pytest.param("chmod", ["-R", "u+x", "dir"], "^chmod -R u+x dir", id="chmod_recursive"),
        pytest.param("chmod", ["-x", "f"], "^chmod -x f", id="chmod_symbolic_mode"),
        pytest.param("chmod", ["--recursive", "--verbose", "644", "f"], "^chmod -R -v 644 f", id="chmod_long_options"),
        pytest.param("chmod", ["--reference=ref", "f"], "^chmod --reference=ref f", id="chmod_reference"),
        pytest.param("chmod", ["755"], "chmod 755 # passthrough: not translated", id="chmod_missing_file"),
        pytest.param("chown", ["user:group", "f"], "^chown user:group f", id="chown"),
    ],
)
def test_ownership(name, args, expected):
    assert convert(name, args) == expected


@pytest.mark.parametrize(
    "name, args, expected",
    [
        pytest.param("cp", ["a", "b"], "cp a b", id="cp_plain"),
        pytest.param("cp", ["-r", "src", "dst"], "cp -r src dst", id="cp_recursive"),
        pytest.param("cp", ["-a", "src", "dst"], "cp -r --preserve [mode timestamps] src dst", id="cp_archive"),
        pytest.param("cp", ["-f", "a", "b"], "cp a b", id="cp_force_dropped"),
        pytest.param("cp", ["-x", "a", "b"], "cp a b # option -x not supported", id="cp_unknown_option"),
        pytest.param("cp", ["a"], "cp a # passthrough: not translated", id="cp_missing_target"),
        pytest.param("mv", ["-f", "a", "b"], "mv --force a b", id="mv_force"),
        pytest.param("mv", ["-nv", "a", "b"], "mv --no-clobber --verbose a b", id="mv_cluster"),
    ],
)
def test_transfer(name, args, expected):
    assert convert(name, args) == expected


@pytest.mark.parametrize(
    "name, args, expected",
    [
        pytest.param("rm", ["-rf", "dir"], "rm -r --force dir", id="rm_recursive_force"),
        pytest.param("rm", ["-i", "a", "b"], "rm --interactive a b", id="rm_interactive"),
        pytest.param("rm", ["*.o"], 'rm "*.o"', id="rm_glob_quoted"),
        pytest.param("rm", [], "rm # passthrough: not translated", id="rm_nothing"),
        pytest.param("rmdir", ["d"], "rm d # rmdir only removes empty directories", id="rmdir"),
        pytest.param(
            "rmdir",
            ["-p", "a/b"],
            "rm a/b # parent directories are not removed, rmdir only removes empty directories",
            id="rmdir_parents",
        ),
        pytest.param("rmdir", ["--ignore-fail-on-non-empty", "-v", "d"], "rm --verbose d", id="rmdir_ignore_non_empty"),
        pytest.param("mkdir", ["d"], "mkdir d", id="mkdir"),
        pytest.param("mkdir", ["-p", "a/b"], "mkdir a/b # creates parent directories automatically", id="mkdir_parents"),
        pytest.param("mkdir", ["-m", "700", "d"], "mkdir d # mode 700 not supported", id="mkdir_mode"),
        pytest.param("mkdir", ["-pv", "x"], "mkdir --verbose x # creates parent directories automatically", id="mkdir_cluster"),
    ],
)
def test_removal_and_creation(name, args, expected):
    assert convert(name, args) == expected
