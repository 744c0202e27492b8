import logging
from typing import Any, Dict, List, Optional

from .conversion.dispatcher import ScriptConverter
from .exceptions import ErrorCode, NuPosixError
from .formatter import format_nu_script
from .parser.core.classes import Script
from .parser.core.options import ParserOptions
from .parser.core.parser import parse_posix

logger = logging.getLogger(__name__)

_DEFAULT_CONVERTER: Optional[ScriptConverter] = None


def default_converter() -> ScriptConverter:
    """The process-wide converter, built on first use from the global registries."""
    global _DEFAULT_CONVERTER
    if _DEFAULT_CONVERTER is None:
        _DEFAULT_CONVERTER = ScriptConverter()
    return _DEFAULT_CONVERTER


def _require_text(text: Any) -> str:
    if not isinstance(text, str):
        raise NuPosixError(ErrorCode.INPUT_NOT_TEXT, type_name=type(text).__name__)
    return text


class TranslationPipeline:
    """
    Runs POSIX text through the translation stages in order: parsing to an
    AST, conversion to Nushell text and, when requested, the indentation pass.
    Every stage's product is kept in `artifacts` under the stage name.
    """

    def __init__(
        self,
        source_content: str,
        options: Optional[ParserOptions] = None,
        pretty: bool = False,
        stop_after_stage: Optional[str] = None,
        converter: Optional[ScriptConverter] = None,
    ):
        self.source_content = _require_text(source_content)
        self.options = options or ParserOptions()
        self.pretty = pretty
        self.stop_after_stage = stop_after_stage
        self.converter = converter or default_converter()
        self.artifacts: Dict[str, Any] = {}
        self.results: List[Any] = []

    def run(self) -> Any:
        # --- Stage 1: Parsing ---
        self._run_stage("ast", parse_posix, self.source_content, self.options)
        if self.stop_after_stage == "ast":
            return self.results[-1]

        # --- Stage 2: Conversion ---
        self._run_stage("nu", self.converter.convert, self.results[-1])
        if self.stop_after_stage == "nu" or not self.pretty:
            return self.results[-1]

        # --- Stage 3: Pretty-printing ---
        self._run_stage("pretty", format_nu_script, self.results[-1])
        return self.results[-1]

    def _run_stage(self, name: str, func, *args) -> Any:
        result = func(*args)
        logger.debug("Stage '%s' finished", name)
        self.artifacts[name] = result
        self.results.append(result)
        return result


def parse(text: str, options: Optional[ParserOptions] = None) -> Script:
    return TranslationPipeline(text, options, stop_after_stage="ast").run()


def convert(script: Script) -> str:
    return default_converter().convert(script)


def translate(text: str, pretty: bool = False, options: Optional[ParserOptions] = None) -> str:
    """Parses POSIX text and converts it to Nushell, optionally re-indented."""
    return TranslationPipeline(text, options, pretty=pretty).run()


def parse_to_data(text: str, options: Optional[ParserOptions] = None) -> Dict[str, Any]:
    """The structured-data form of a parse: `{"type": "script", "commands": [...]}`."""
    return parse(text, options).model_dump(mode="json")
