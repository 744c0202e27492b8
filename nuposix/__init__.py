"""
nuposix translates POSIX shell scripts into Nushell.
"""

from .conversion.dispatcher import ScriptConverter
from .exceptions import ErrorCode, NuPosixError
from .formatter import format_nu_script, roundtrip_reverse
from .parser.core.options import ParserOptions
from .translator import TranslationPipeline, convert, parse, parse_to_data, translate

__version__ = "0.1.0"

__all__ = [
    "ErrorCode",
    "NuPosixError",
    "ParserOptions",
    "ScriptConverter",
    "TranslationPipeline",
    "convert",
    "format_nu_script",
    "parse",
    "parse_to_data",
    "roundtrip_reverse",
    "translate",
]
