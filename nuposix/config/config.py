"""
Static configuration data for the nuposix translator.
This includes parser switches, shell keyword tables, operator spellings and
the settings of the host-side formatting passes.
"""

# Defaults reproduce the documented line-oriented heuristic behaviour.
# Every switch opts into an enhancement.
PARSER_CONFIG = {
    # The strict lark grammar tier. When off it always fails and the
    # heuristic parser handles the input.
    "strict_grammar": False,
    # Leading `!` on a line produces a negated Pipeline.
    "detect_negation": False,
    # Join physical lines of an open if/for/while/until/case/brace construct.
    "join_compound_lines": False,
    # Pull `<`, `>`, `>>`, ... out of simple-command arguments.
    "extract_redirections": False,
}

FORMATTER_CONFIG = {
    "indent": "  ",
    "openers": ("{", "["),
    "closers": ("}", "]"),
}

# Applied in order by `roundtrip_reverse`.
REVERSE_REPLACEMENTS = [
    ("print ", "echo "),
    (" | where ", " | grep "),
    (" =~ ", " | grep "),
]

# --- Shell Vocabulary ---

COMPOUND_OPENERS = {"if": "fi", "for": "done", "while": "done", "until": "done", "case": "esac"}
COMPOUND_CLOSERS = {"fi", "done", "esac"}
# Keywords after which a joined line needs no `;` separator.
JOIN_WITHOUT_SEPARATOR = ("then", "do", "else", "in", "{", "(", ")", "|", "&&", "||", ";")

# Longest spellings first so that `>>` is never read as `>`.
REDIRECTION_TOKENS = ["<<<", "<<", "<>", ">>", ">|", ">&", "<&", "<", ">"]

QUOTE_CHARACTERS = (" ", '"', "'", "$")
GLOB_CHARACTERS = ("*", "?")

# Trailing comment on converter output that only repeats the command unchanged.
PASSTHROUGH_NOTE = "passthrough: not translated"

# --- Builtin Data ---

SIGNAL_NUMBERS = {
    "HUP": 1,
    "INT": 2,
    "QUIT": 3,
    "ILL": 4,
    "TRAP": 5,
    "ABRT": 6,
    "BUS": 7,
    "FPE": 8,
    "KILL": 9,
    "USR1": 10,
    "SEGV": 11,
    "USR2": 12,
    "PIPE": 13,
    "ALRM": 14,
    "TERM": 15,
}
SIGNAL_LIST = " ".join(SIGNAL_NUMBERS)

JOB_SPEC_NAMES = {"%%": "current", "%+": "current", "%-": "previous"}

# `test` unary file operators that map to a `path type` comparison.
TEST_FILE_TYPES = {
    "-f": "file",
    "-d": "dir",
    "-L": "symlink",
    "-h": "symlink",
    "-b": "block device",
    "-c": "char device",
    "-p": "pipe",
    "-S": "socket",
}

TEST_NUMERIC_OPERATORS = {"-eq": "==", "-ne": "!=", "-lt": "<", "-le": "<=", "-gt": ">", "-ge": ">="}

# --- External Utility Data ---

FIND_TYPE_NAMES = {
    "f": "file",
    "d": "dir",
    "l": "symlink",
    "b": "block device",
    "c": "char device",
    "p": "pipe",
    "s": "socket",
}

# find -size suffixes; find counts k, M, G and T in binary multiples.
SIZE_UNITS = {"c": "b", "k": "kib", "m": "mib", "g": "gib", "t": "tib"}
# Plain -size numbers and the `b` suffix count 512-byte blocks, `w` two-byte words.
SIZE_BLOCK_BYTES = {"": 512, "b": 512, "w": 2}

STAT_FORMAT_FIELDS = {
    "%n": "name",
    "%N": "name",
    "%s": "size",
    "%F": "type",
    "%a": "mode",
    "%A": "mode",
    "%f": "mode",
    "%u": "user",
    "%U": "user",
    "%g": "group",
    "%G": "group",
    "%h": "num_links",
    "%i": "inode",
    "%w": "created",
    "%W": "created",
    "%x": "accessed",
    "%X": "accessed",
    "%y": "modified",
    "%Y": "modified",
    "%z": "modified",
    "%Z": "modified",
}

DATE_ISO_FORMATS = {
    "date": "%Y-%m-%d",
    "hours": "%Y-%m-%dT%H%:z",
    "minutes": "%Y-%m-%dT%H:%M%:z",
    "seconds": "%Y-%m-%dT%H:%M:%S%:z",
    "ns": "%Y-%m-%dT%H:%M:%S,%f%:z",
}
DATE_RFC2822_FORMAT = "%a, %d %b %Y %H:%M:%S %z"
DATE_RFC3339_FORMATS = {
    "date": "%Y-%m-%d",
    "seconds": "%Y-%m-%d %H:%M:%S%:z",
    "ns": "%Y-%m-%d %H:%M:%S.%f%:z",
}

# sed letters that manipulate state the pipeline model has no equivalent for.
SED_COMMENT_COMMANDS = {
    "h": "hold space operation",
    "H": "hold space append operation",
    "g": "get from hold space",
    "G": "get append from hold space",
    "x": "exchange with hold space",
    "b": "branch",
    "t": "test",
    "T": "test not",
}
SED_COMMAND_LETTERS = set("sdpqnNhHgGxl=aicrwybtT")
