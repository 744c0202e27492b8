from .core.options import ParserOptions
from .core.parser import parse_posix

__all__ = ["ParserOptions", "parse_posix"]
