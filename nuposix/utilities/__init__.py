from ..conversion.base import ConverterRegistry
from .filesystem import (
    ChmodConverter,
    ChownConverter,
    CpConverter,
    FindConverter,
    LsConverter,
    MkdirConverter,
    MvConverter,
    RmConverter,
    RmdirConverter,
    StatConverter,
)
from .paths import BasenameConverter, DirnameConverter, RealpathConverter
from .sed import SedConverter
from .system import AwkConverter, DateConverter, PsConverter, SeqConverter, WhichConverter, WhoamiConverter
from .text import (
    CatConverter,
    CutConverter,
    EchoConverter,
    GrepConverter,
    HeadConverter,
    SortConverter,
    TailConverter,
    TeeConverter,
    UniqConverter,
    WcConverter,
)


def build_utility_registry() -> ConverterRegistry:
    return ConverterRegistry(
        [
            LsConverter(),
            CatConverter(),
            EchoConverter(),
            GrepConverter(),
            FindConverter(),
            CutConverter(),
            SedConverter(),
            AwkConverter(),
            SortConverter(),
            UniqConverter(),
            WcConverter(),
            HeadConverter(),
            TailConverter(),
            DateConverter(),
            StatConverter(),
            SeqConverter(),
            TeeConverter(),
            ChmodConverter(),
            ChownConverter(),
            CpConverter(),
            MvConverter(),
            RmConverter(),
            RmdirConverter(),
            MkdirConverter(),
            BasenameConverter(),
            DirnameConverter(),
            RealpathConverter(),
            WhichConverter(),
            WhoamiConverter(),
            PsConverter(),
        ],
        glob_quoting=True,
    )


UTILITY_REGISTRY = build_utility_registry()
