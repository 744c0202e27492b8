from .base import CommandConverter, ConverterRegistry, UtilityConverter
from .dispatcher import ScriptConverter
from .quoting import format_args, quote_arg

__all__ = ["CommandConverter", "ConverterRegistry", "UtilityConverter", "ScriptConverter", "format_args", "quote_arg"]
