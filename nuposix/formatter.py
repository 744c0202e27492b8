"""
Post-processing passes over generated Nushell text: the brace-keyed
indentation pass and the experimental reverse translation.
"""

from typing import List

from .config.config import FORMATTER_CONFIG, REVERSE_REPLACEMENTS


def format_nu_script(text: str) -> str:
    """
    Re-indents Nushell text purely by its brace and bracket characters.

    A line whose trimmed text starts with a closer dedents before it is written.
    The lines after it are indented by the line's net count of openers over
    closers, so `} else {` keeps the depth and `each { |x|` opens a level.
    Every line, blank ones included, is terminated with a newline.
    """
    indent_unit = FORMATTER_CONFIG["indent"]
    openers = FORMATTER_CONFIG["openers"]
    closers = FORMATTER_CONFIG["closers"]

    depth = 0
    lines: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            lines.append("\n")
            continue
        net = sum(line.count(ch) for ch in openers) - sum(line.count(ch) for ch in closers)
        if line.startswith(closers):
            depth = max(depth - 1, 0)
            net += 1
        lines.append(f"{indent_unit * depth}{line}\n")
        depth = max(depth + net, 0)
    return "".join(lines)


def roundtrip_reverse(text: str) -> str:
    """
    Best-effort Nushell to POSIX rewrite made of literal substring replacements.

    This is experimental and lossy; it does not parse its input.
    """
    for old, new in REVERSE_REPLACEMENTS:
        text = text.replace(old, new)
    return text
