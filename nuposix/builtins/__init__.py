from ..conversion.base import ConverterRegistry
from .core import CdConverter, ExitConverter, FalseConverter, PwdConverter, TrueConverter
from .jobs import JobsConverter, KillConverter
from .read import ReadConverter
from .test import TestConverter


def build_builtin_registry() -> ConverterRegistry:
    return ConverterRegistry(
        [
            CdConverter(),
            ExitConverter(),
            TrueConverter(),
            FalseConverter(),
            PwdConverter(),
            ReadConverter(),
            TestConverter(),
            JobsConverter(),
            KillConverter(),
        ]
    )


BUILTIN_REGISTRY = build_builtin_registry()
